# SPDX-License-Identifier: GPL-3.0-only
"""Nkey resource metadata, schema and configuration handlers."""

from base_logger import get_logger
from src.nkey_resource.model import TYPE_NAME_SUFFIX
from src.operations import (
    ConfigureResponse,
    MetadataResponse,
    SchemaResponse,
    ValidateConfigResponse,
)

logger = get_logger(__name__)


def Metadata(self, request):
    """Returns the resource type name."""
    return MetadataResponse(type_name=request.provider_type_name + TYPE_NAME_SUFFIX)


def Schema(self, request):
    """Returns the resource schema."""
    return SchemaResponse(schema=self.schema)


def Configure(self, request):
    """Nothing to configure, nkeys are generated locally."""
    return ConfigureResponse()


def ValidateConfig(self, request):
    """Validates practitioner configuration against the schema."""
    response = ValidateConfigResponse()

    if request.config is None or request.config.is_null:
        return response

    response.diagnostics.extend(self.schema.validate(request.config.values))
    for diagnostic in response.diagnostics.errors():
        logger.error("Invalid nkey configuration: %s", diagnostic)

    return response
