# SPDX-License-Identifier: GPL-3.0-only
"""NATS provider.

Holds the provider type name and the resources it serves, and dispatches
host calls to resource handlers by operation name.
"""

from base_logger import get_logger
from src.nkey_resource.service import NkeyResource
from src.operations import MetadataRequest, SchemaRequest
from src.utils import get_configs

logger = get_logger(__name__)

OPERATIONS = (
    "Metadata",
    "Schema",
    "Configure",
    "ValidateConfig",
    "Create",
    "Read",
    "Update",
    "Delete",
    "ImportState",
)


class UnknownResourceTypeError(KeyError):
    """Raised when no resource is registered under a type name."""


class UnknownOperationError(Exception):
    """Raised when a resource is asked to run an operation it does not serve."""


class NatsProvider:
    """Provider serving NATS resources."""

    resource_factories = (NkeyResource,)

    def __init__(self, type_name: str = None):
        self.type_name = type_name or get_configs(
            "PROVIDER_TYPE_NAME", default_value="nats"
        )
        self._resources = {}
        for factory in self.resource_factories:
            resource = factory()
            metadata = resource.Metadata(MetadataRequest(self.type_name))
            self._resources[metadata.type_name] = resource
            logger.debug("Registered resource type %s.", metadata.type_name)

    def resource_type_names(self):
        """Return the registered resource type names."""
        return sorted(self._resources)

    def get_resource(self, type_name: str):
        """Return the resource handler registered under ``type_name``."""
        try:
            return self._resources[type_name]
        except KeyError:
            raise UnknownResourceTypeError(
                f"Resource type '{type_name}' is not supported by provider "
                f"'{self.type_name}'."
            ) from None

    def get_schema(self, type_name: str):
        """Return the schema of ``type_name``."""
        return self.call(type_name, "Schema", SchemaRequest()).schema

    def call(self, type_name: str, operation: str, request):
        """Invoke ``operation`` on the resource registered as ``type_name``.

        Raises:
            UnknownResourceTypeError: If the resource type is not registered.
            UnknownOperationError: If the operation is unknown.
        """
        resource = self.get_resource(type_name)
        if operation not in OPERATIONS:
            raise UnknownOperationError(
                f"The operation '{operation}' is not supported by {type_name}."
            )

        logger.debug("Calling %s.%s", type_name, operation)
        return getattr(resource, operation)(request)
