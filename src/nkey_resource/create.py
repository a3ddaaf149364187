# SPDX-License-Identifier: GPL-3.0-only
"""Create Nkey resource handler."""

from base_logger import get_logger
from src.nkey_resource.model import DEFAULT_KEY_TYPE
from src.operations import CreateResponse
from src.state import State

logger = get_logger(__name__)


def Create(self, request):
    """Handles generating a new nkey pair."""

    response = CreateResponse(state=State(self.schema))

    try:
        data, read_error_response = self.handle_model_read(
            request.plan, response, "reading plan"
        )
        if read_error_response:
            return read_error_response

        if data.key_type is None:
            data.key_type = DEFAULT_KEY_TYPE

        generation_error_response = self.handle_keypair_generation(data, response)
        if generation_error_response:
            return generation_error_response

        write_error_response = self.handle_model_write(data, response)
        if write_error_response:
            return write_error_response

        logger.info("Created %s nkey resource.", data.key_type)

        return response

    except Exception as e:
        return self.handle_diagnostic_error_response(
            response,
            e,
            "creating nkey",
            user_msg="An unexpected error occurred while creating the nkey.",
            error_type="UNKNOWN",
        )
