# SPDX-License-Identifier: GPL-3.0-only
"""Read Nkey resource handler."""

from src.operations import ReadResponse
from src.state import State


def Read(self, request):
    """Handles reading an nkey, the prior state is written back unchanged."""

    response = ReadResponse(state=State(self.schema))

    data, read_error_response = self.handle_model_read(
        request.state, response, "reading prior state"
    )
    if read_error_response:
        return read_error_response

    write_error_response = self.handle_model_write(data, response)
    if write_error_response:
        return write_error_response

    return response
