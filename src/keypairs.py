# SPDX-License-Identifier: GPL-3.0-only
"""Nkey pair generation.

Key material for the ed25519 categories comes from the ``nkeys`` library:
a random seed is encoded with the category prefix and loaded back through
``nkeys.from_seed`` which derives the public key. Curve keys are x25519
keys, which ``nkeys`` does not produce, so the scalar and its public point
come from ``cryptography`` and only the nkey text framing is applied here.
"""

import base64
import os
from dataclasses import dataclass, field

import nkeys
from cryptography.hazmat.primitives.asymmetric import x25519

from base_logger import get_logger
from src.types import KeyType

logger = get_logger(__name__)

SEED_LENGTH = 32

PREFIX_BYTE_SEED = nkeys.PREFIX_BYTE_SEED
PREFIX_BYTE_CURVE = 23 << 3

PREFIX_BYTES = {
    KeyType.USER: nkeys.PREFIX_BYTE_USER,
    KeyType.ACCOUNT: nkeys.PREFIX_BYTE_ACCOUNT,
    KeyType.SERVER: nkeys.PREFIX_BYTE_SERVER,
    KeyType.CLUSTER: nkeys.PREFIX_BYTE_CLUSTER,
    KeyType.OPERATOR: nkeys.PREFIX_BYTE_OPERATOR,
    KeyType.CURVE: PREFIX_BYTE_CURVE,
}

PUBLIC_KEY_PREFIXES = {
    KeyType.USER: "U",
    KeyType.ACCOUNT: "A",
    KeyType.SERVER: "N",
    KeyType.CLUSTER: "C",
    KeyType.OPERATOR: "O",
    KeyType.CURVE: "X",
}


class NkeyError(Exception):
    """Base error for nkey generation."""


class UnsupportedKeyTypeError(NkeyError):
    """Raised when the requested nkey category is unknown."""

    def __init__(self, key_type):
        self.key_type = key_type
        super().__init__(
            f"Unsupported nkey type '{key_type}'. "
            f"Must be one of {'|'.join(KeyType.values())}."
        )


class KeyGenerationError(NkeyError):
    """Raised when key material cannot be produced or encoded."""


@dataclass(frozen=True)
class NkeyPair:
    """A generated nkey pair.

    ``private_key`` is the seed text, it is excluded from ``repr``.
    """

    key_type: KeyType
    public_key: str
    private_key: str = field(repr=False)


def _to_text(value) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("ascii")
    return str(value)


def _frame(payload: bytes) -> str:
    """Append the little-endian CRC16 and base32 encode without padding."""
    checksum = nkeys.crc16_checksum(payload)
    return base64.b32encode(payload + checksum).decode("ascii").rstrip("=")


def _create_curve_keypair() -> NkeyPair:
    raw_seed = os.urandom(SEED_LENGTH)
    public_raw = (
        x25519.X25519PrivateKey.from_private_bytes(raw_seed)
        .public_key()
        .public_bytes_raw()
    )
    seed_prefix = bytes(
        [
            PREFIX_BYTE_SEED | (PREFIX_BYTE_CURVE >> 5),
            (PREFIX_BYTE_CURVE & 31) << 3,
        ]
    )
    return NkeyPair(
        key_type=KeyType.CURVE,
        public_key=_frame(bytes([PREFIX_BYTE_CURVE]) + public_raw),
        private_key=_frame(seed_prefix + raw_seed),
    )


def _create_ed25519_keypair(key_type: KeyType) -> NkeyPair:
    seed = nkeys.encode_seed(os.urandom(SEED_LENGTH), PREFIX_BYTES[key_type])
    if isinstance(seed, str):
        seed = seed.encode("ascii")

    keys = nkeys.from_seed(bytearray(seed))
    try:
        return NkeyPair(
            key_type=key_type,
            public_key=_to_text(keys.public_key),
            private_key=_to_text(seed),
        )
    finally:
        keys.wipe()


def create_keypair(key_type) -> NkeyPair:
    """Generate a new nkey pair of the requested category.

    Args:
        key_type: Category name (case-insensitive) or ``KeyType`` member.

    Returns:
        NkeyPair holding the encoded public key and seed.

    Raises:
        UnsupportedKeyTypeError: If the category is unknown.
        KeyGenerationError: If the key material cannot be produced.
    """
    try:
        key_type = KeyType.parse(key_type)
    except ValueError as e:
        raise UnsupportedKeyTypeError(key_type) from e

    logger.debug("Generating %s nkey...", key_type.value)

    try:
        if key_type is KeyType.CURVE:
            keypair = _create_curve_keypair()
        else:
            keypair = _create_ed25519_keypair(key_type)
    except Exception as e:
        logger.error("Failed to generate %s nkey: %s", key_type.value, e)
        raise KeyGenerationError(str(e) or type(e).__name__) from e

    if not keypair.public_key or not keypair.private_key:
        raise KeyGenerationError(f"Empty key material for {key_type.value} nkey")

    return keypair


def public_key_prefix(key_type) -> str:
    """Return the leading character of public keys of ``key_type``."""
    return PUBLIC_KEY_PREFIXES[KeyType.parse(key_type)]
