# SPDX-License-Identifier: GPL-3.0-only
"""State Encryption Key Generation."""

import os

from base_logger import get_logger
from src.crypto import generate_fernet_key
from src.utils import get_configs

logger = get_logger("nkey.state_keygen")


def main() -> None:
    """Generate the state encryption key if it doesn't exist."""
    key_path = get_configs("STATE_ENCRYPTION_KEY_FILE", strict=True)

    if os.path.exists(key_path):
        logger.info("State encryption key already exists. Skipping generation.")
        return

    key_dir = os.path.dirname(key_path)
    if key_dir:
        os.makedirs(key_dir, exist_ok=True)

    logger.info("Generating state encryption key...")
    fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(generate_fernet_key() + b"\n")

    logger.info("State encryption key stored at %s", key_path)


if __name__ == "__main__":
    main()
