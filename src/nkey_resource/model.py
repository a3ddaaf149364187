# SPDX-License-Identifier: GPL-3.0-only
"""Nkey resource data model and schema."""

from dataclasses import dataclass, field
from typing import Optional

from src.schema import Attribute, Schema, one_of_ignore_case
from src.types import KeyType

TYPE_NAME_SUFFIX = "_nkey"
DEFAULT_KEY_TYPE = KeyType.ACCOUNT.value


@dataclass
class NkeyModel:
    """Nkey resource values."""

    id: Optional[str] = field(default=None, metadata={"tfsdk": "id"})
    key_type: Optional[str] = field(default=None, metadata={"tfsdk": "type"})
    public_key: Optional[str] = field(default=None, metadata={"tfsdk": "public_key"})
    private_key: Optional[str] = field(
        default=None, repr=False, metadata={"tfsdk": "private_key"}
    )


def nkey_schema() -> Schema:
    """Build the nkey resource schema."""
    return Schema.build(
        Attribute(
            "id",
            computed=True,
            description="Identifier of the nkey, the public key unless imported.",
        ),
        Attribute(
            "type",
            optional=True,
            computed=True,
            default=DEFAULT_KEY_TYPE,
            description=(
                "The type of nkey to generate. "
                f"Must be one of {'|'.join(KeyType.values())}"
            ),
            validators=(one_of_ignore_case(KeyType.values()),),
        ),
        Attribute(
            "public_key",
            computed=True,
            markdown_description=(
                "Public key of the nkey to be given in config to the nats server"
            ),
        ),
        Attribute(
            "private_key",
            computed=True,
            sensitive=True,
            markdown_description=(
                "Private key of the nkey to be given to the client for authentication"
            ),
        ),
        markdown_description=(
            "An nkey is an ed25519 key pair formatted for use with NATS."
        ),
    )


def same_key_type(planned: Optional[str], prior: Optional[str]) -> bool:
    """Return True if both values name the same nkey category."""
    if planned is None or prior is None:
        return planned is prior
    return planned.strip().lower() == prior.strip().lower()
