# SPDX-License-Identifier: GPL-3.0-only
"""Resource state persistence.

Plain attributes are stored as JSON. Sensitive attributes are stored
apart from them and encrypted with Fernet when STATE_ENCRYPTION_KEY_FILE
is configured.
"""

import datetime
import json
from typing import Optional

from cryptography.fernet import InvalidToken

from base_logger import get_logger
from src.crypto import FERNET_KEY_LENGTH, decrypt_fernet, encrypt_fernet
from src.db_models import ResourceState
from src.schema import Schema
from src.state import State
from src.utils import get_bool_config, get_configs, load_key

logger = get_logger(__name__)


class StateEncryptionRequiredError(RuntimeError):
    """Raised when sensitive values would be stored unencrypted."""


def load_state_encryption_key() -> Optional[bytes]:
    """Return the Fernet key from STATE_ENCRYPTION_KEY_FILE, if configured."""
    key_file = get_configs("STATE_ENCRYPTION_KEY_FILE")
    if not key_file:
        return None
    return load_key(key_file, FERNET_KEY_LENGTH)


def _dump_sensitive(values: dict):
    if all(value is None for value in values.values()):
        return None, False

    payload = json.dumps(values)
    key = load_state_encryption_key()
    if key:
        return encrypt_fernet(key, payload), True

    if get_bool_config("REQUIRE_STATE_ENCRYPTION"):
        logger.error(
            "REQUIRE_STATE_ENCRYPTION is set but STATE_ENCRYPTION_KEY_FILE "
            "is not configured."
        )
        raise StateEncryptionRequiredError(
            "Sensitive attributes cannot be stored: REQUIRE_STATE_ENCRYPTION is set "
            "but STATE_ENCRYPTION_KEY_FILE is not configured."
        )

    logger.warning(
        "STATE_ENCRYPTION_KEY_FILE is not configured, "
        "sensitive attributes are stored unencrypted."
    )
    return payload.encode("utf-8"), False


def _load_sensitive(record: ResourceState) -> dict:
    if record.sensitive_attributes is None:
        return {}

    payload = bytes(record.sensitive_attributes)
    if not record.encrypted:
        return json.loads(payload.decode("utf-8"))

    key = load_state_encryption_key()
    if not key:
        logger.error(
            "State for %s is encrypted but no state encryption key is configured.",
            record.address,
        )
        raise StateEncryptionRequiredError(
            f"State for {record.address} is encrypted but "
            "STATE_ENCRYPTION_KEY_FILE is not configured."
        )

    try:
        return json.loads(decrypt_fernet(key, payload))
    except InvalidToken:
        logger.error("Failed to decrypt sensitive state for %s.", record.address)
        raise


def find_state(address: str) -> Optional[ResourceState]:
    """Return the stored record for ``address``, or None."""
    return ResourceState.get_or_none(ResourceState.address == address)


def load_state(address: str, schema: Schema) -> Optional[State]:
    """Load the state stored for ``address``.

    Returns:
        State, or None if nothing is stored at ``address``.
    """
    record = find_state(address)
    if record is None:
        logger.debug("No state stored for %s.", address)
        return None

    values = schema.empty_values()
    values.update(json.loads(record.attributes))
    values.update(_load_sensitive(record))
    return State(schema, values)


def save_state(address: str, type_name: str, state: State) -> ResourceState:
    """Persist ``state`` at ``address``, replacing any previous record.

    Raises:
        ValueError: If ``state`` is null.
    """
    if state.is_null:
        raise ValueError(f"Cannot save null state for {address}.")

    plain, secret = state.schema.split_sensitive(state.values)
    sensitive_payload, encrypted = _dump_sensitive(secret)
    now = datetime.datetime.now()

    with ResourceState._meta.database.atomic():
        record = find_state(address)
        if record is None:
            record = ResourceState(address=address, date_created=now)
            force_insert = True
        else:
            force_insert = False

        record.type_name = type_name
        record.resource_id = plain.get("id")
        record.attributes = json.dumps(plain, sort_keys=True)
        record.sensitive_attributes = sensitive_payload
        record.encrypted = encrypted
        record.date_updated = now
        record.save(force_insert=force_insert)

    logger.info("State for %s saved.", address)
    return record


def delete_state(address: str) -> bool:
    """Delete the state stored at ``address``.

    Returns:
        True if a record was deleted.
    """
    with ResourceState._meta.database.atomic():
        deleted = (
            ResourceState.delete().where(ResourceState.address == address).execute()
        )

    if deleted:
        logger.info("State for %s deleted.", address)
    return bool(deleted)
