# SPDX-License-Identifier: GPL-3.0-only
"""Delete Nkey resource handler"""

from base_logger import get_logger
from src.operations import DeleteResponse
from src.state import State

logger = get_logger(__name__)


def Delete(self, request):
    """Handles deleting an nkey. Nothing exists outside the state to tear down."""

    response = DeleteResponse(state=State(self.schema))

    data, read_error_response = self.handle_model_read(
        request.state, response, "reading prior state"
    )
    if read_error_response:
        return read_error_response

    logger.info("Deleted %s nkey resource.", data.key_type)

    return response
