# SPDX-License-Identifier: GPL-3.0-only
"""Import Nkey resource handler"""

from base_logger import get_logger
from src.operations import ImportStateResponse
from src.state import State

logger = get_logger(__name__)


def ImportState(self, request):
    """Handles importing an nkey by its identifier.

    The identifier is stored as is. No key material is derived from it.
    """

    response = ImportStateResponse(state=State(self.schema))

    if not request.id:
        return self.handle_diagnostic_error_response(
            response,
            "Import ID cannot be empty.",
            "importing nkey",
            attribute="id",
        )

    response.diagnostics.extend(response.state.set_attribute("id", request.id))
    if response.diagnostics.has_error():
        response.state.remove()
        return response

    logger.info("Imported nkey resource.")

    return response
