# SPDX-License-Identifier: GPL-3.0-only
"""Update Nkey resource handler."""

from base_logger import get_logger
from src.nkey_resource.model import DEFAULT_KEY_TYPE, same_key_type
from src.operations import UpdateResponse
from src.state import State

logger = get_logger(__name__)


def Update(self, request):
    """Handles updating an nkey.

    Keys are regenerated only when the planned type differs from the prior
    state type, otherwise the prior keys are carried over.
    """

    response = UpdateResponse(state=State(self.schema))

    try:
        data, read_error_response = self.handle_model_read(
            request.plan, response, "reading plan"
        )
        if read_error_response:
            return read_error_response

        prior, read_error_response = self.handle_model_read(
            request.state, response, "reading prior state"
        )
        if read_error_response:
            return read_error_response

        if data.key_type is None:
            data.key_type = DEFAULT_KEY_TYPE

        if same_key_type(data.key_type, prior.key_type):
            data.public_key = prior.public_key
            data.private_key = prior.private_key
            data.id = prior.id
        else:
            logger.info(
                "Nkey type changed from %s to %s, regenerating key pair.",
                prior.key_type,
                data.key_type,
            )
            generation_error_response = self.handle_keypair_generation(
                data, response
            )
            if generation_error_response:
                return generation_error_response

        write_error_response = self.handle_model_write(data, response)
        if write_error_response:
            return write_error_response

        return response

    except Exception as e:
        return self.handle_diagnostic_error_response(
            response,
            e,
            "updating nkey",
            user_msg="An unexpected error occurred while updating the nkey.",
            error_type="UNKNOWN",
        )
