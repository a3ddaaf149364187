# SPDX-License-Identifier: GPL-3.0-only
"""Cryptographic utilities."""

from cryptography.fernet import Fernet

from base_logger import get_logger

logger = get_logger(__name__)

FERNET_KEY_LENGTH = 44


def generate_fernet_key() -> bytes:
    """Generate a new Fernet key."""
    return Fernet.generate_key()


def encrypt_fernet(key, plaintext):
    """
    Encrypts a plaintext string using Fernet encryption.

    Args:
        key (bytes): The url-safe base64 encoded 32 byte encryption key.
        plaintext (str): The plaintext string to be encrypted.

    Returns:
        bytes: The encrypted ciphertext.
    """
    logger.debug("Encrypting plaintext using Fernet encryption...")
    fernet = Fernet(key)
    return fernet.encrypt(plaintext.encode("utf-8"))


def decrypt_fernet(key, ciphertext):
    """
    Decrypts a ciphertext string using Fernet encryption.

    Args:
        key (bytes): The url-safe base64 encoded 32 byte decryption key.
        ciphertext (bytes): The encrypted ciphertext.

    Returns:
        str: The decrypted plaintext string.
    """
    logger.debug("Decrypting ciphertext using Fernet encryption...")
    fernet = Fernet(key)
    return fernet.decrypt(ciphertext).decode("utf-8")
