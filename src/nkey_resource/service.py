# SPDX-License-Identifier: GPL-3.0-only
"""Nkey Resource Service"""

import traceback

from base_logger import get_logger
from src.keypairs import NkeyError, UnsupportedKeyTypeError, create_keypair
from src.nkey_resource.create import Create
from src.nkey_resource.delete import Delete
from src.nkey_resource.import_state import ImportState
from src.nkey_resource.metadata import Configure, Metadata, Schema, ValidateConfig
from src.nkey_resource.model import NkeyModel, nkey_schema
from src.nkey_resource.read import Read
from src.nkey_resource.update import Update

logger = get_logger(__name__)


class NkeyResource:
    """Nkey Resource Descriptor"""

    def __init__(self):
        self.schema = nkey_schema()

    def handle_diagnostic_error_response(self, response, error, summary, **kwargs):
        """Records an error diagnostic and drops any pending state."""
        user_msg = kwargs.get("user_msg")
        error_type = kwargs.get("error_type")
        attribute = kwargs.get("attribute")

        if not user_msg:
            user_msg = str(error)

        if error_type == "UNKNOWN":
            traceback.print_exception(type(error), error, error.__traceback__)
        else:
            logger.error("%s: %s", summary, error)

        response.diagnostics.add_error(summary, user_msg, attribute=attribute)

        state = getattr(response, "state", None)
        if state is not None:
            state.remove()

        return response

    def handle_model_read(self, data, response, summary):
        """Reads plan or state values into a model.

        Returns:
            tuple: (model or None, error response or None)
        """
        if data is None:
            return None, self.handle_diagnostic_error_response(
                response, "No values were supplied.", summary
            )

        model, diagnostics = data.get(self.model_class)
        if diagnostics.has_error():
            for diagnostic in diagnostics.errors():
                logger.error("%s: %s", summary, diagnostic.detail)
            response.diagnostics.extend(diagnostics)
            state = getattr(response, "state", None)
            if state is not None:
                state.remove()
            return None, response

        response.diagnostics.extend(diagnostics)
        return model, None

    def handle_model_write(self, model, response):
        """Writes a model into the response state."""
        diagnostics = response.state.set(model)
        response.diagnostics.extend(diagnostics)
        if diagnostics.has_error():
            logger.error("writing state: %s", diagnostics.errors()[0].detail)
            response.state.remove()
            return response
        return None

    def handle_keypair_generation(self, model, response):
        """Generates a key pair for ``model.key_type`` and stores it on the model."""
        try:
            keypair = create_keypair(model.key_type)
        except UnsupportedKeyTypeError as e:
            return self.handle_diagnostic_error_response(
                response, e, "generating nkey", attribute="type"
            )
        except NkeyError as e:
            return self.handle_diagnostic_error_response(
                response, e, "generating nkey"
            )

        model.public_key = keypair.public_key
        model.private_key = keypair.private_key
        model.id = keypair.public_key
        return None

    model_class = NkeyModel

    Metadata = Metadata
    Schema = Schema
    Configure = Configure
    ValidateConfig = ValidateConfig
    Create = Create
    Read = Read
    Update = Update
    Delete = Delete
    ImportState = ImportState
