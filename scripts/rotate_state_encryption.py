# SPDX-License-Identifier: GPL-3.0-only
"""Rotate encryption of the sensitive attributes of all stored states.

Records encrypted with STATE_ENCRYPTION_KEY_SECONDARY_FILE (the previous
key) and unencrypted records are rewritten under STATE_ENCRYPTION_KEY_FILE.
"""

from peewee import chunked
from tqdm import tqdm

from base_logger import get_logger
from src.crypto import FERNET_KEY_LENGTH, decrypt_fernet, encrypt_fernet
from src.db_models import ResourceState
from src.utils import create_tables, get_configs, load_key

logger = get_logger("nkey.rotate_state_encryption")

BATCH_SIZE = 500


def load_keys():
    """Return (previous key or None, new key)."""
    new_key = load_key(
        get_configs("STATE_ENCRYPTION_KEY_FILE", strict=True), FERNET_KEY_LENGTH
    )
    previous_key_file = get_configs("STATE_ENCRYPTION_KEY_SECONDARY_FILE")
    previous_key = (
        load_key(previous_key_file, FERNET_KEY_LENGTH) if previous_key_file else None
    )
    return previous_key, new_key


def rotate_record(record, previous_key, new_key):
    """Re-encrypt the sensitive attributes of one record in place."""
    payload = bytes(record.sensitive_attributes)

    if record.encrypted:
        if previous_key is None:
            raise ValueError("STATE_ENCRYPTION_KEY_SECONDARY_FILE is not configured.")
        plaintext = decrypt_fernet(previous_key, payload)
    else:
        plaintext = payload.decode("utf-8")

    record.sensitive_attributes = encrypt_fernet(new_key, plaintext)
    record.encrypted = True
    record.save(only=[ResourceState.sensitive_attributes, ResourceState.encrypted])


def rotate_state_encryption():
    """Rotate encryption for every stored state.

    Returns:
        list: Addresses that failed to rotate, with the reason.
    """
    previous_key, new_key = load_keys()
    rotation_errors = []

    with ResourceState._meta.database.connection_context():
        query = ResourceState.select().where(
            ResourceState.sensitive_attributes.is_null(False)
        )
        addresses = [record.address for record in query]

        if not addresses:
            logger.info("No states with sensitive attributes found.")
            return rotation_errors

        logger.info("Found %d states to process.", len(addresses))

        with tqdm(
            total=len(addresses), desc="Rotating state encryption", unit="states"
        ) as pbar:
            for batch in chunked(addresses, BATCH_SIZE):
                with ResourceState._meta.database.atomic():
                    for record in ResourceState.select().where(
                        ResourceState.address.in_(batch)
                    ):
                        try:
                            rotate_record(record, previous_key, new_key)
                        except Exception as e:
                            logger.error("State %s - %s", record.address, e)
                            rotation_errors.append(
                                {"address": record.address, "reason": str(e)}
                            )
                        pbar.update(1)

    if rotation_errors:
        logger.error("%d states failed to rotate.", len(rotation_errors))
    else:
        logger.info("State encryption rotated successfully.")
    return rotation_errors


def main():
    """Entry function"""
    create_tables([ResourceState])
    errors = rotate_state_encryption()
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
