"""Blake2s-256 hashing, leaf serialization and proof-of-work grinding."""

import hashlib
from typing import Iterable

from frieda.primitives.field import ELEMENT_BYTES

HASH_SIZE = 32
"""Digest size in bytes of every commitment and transcript hash."""

POW_PREFIX = b"frieda/pow"


def hash_bytes(data: bytes) -> bytes:
    """Blake2s-256 of ``data``."""
    return hashlib.blake2s(data, digest_size=HASH_SIZE).digest()


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Parent node digest: H(left || right)."""
    return hashlib.blake2s(left + right, digest_size=HASH_SIZE).digest()


def serialize_values(values: Iterable) -> bytes:
    """Canonical serialization: 8-byte little-endian per field element."""
    return b"".join(int(v).to_bytes(ELEMENT_BYTES, "little") for v in values)


def hash_values(values: Iterable) -> bytes:
    """Leaf digest of one or more field elements."""
    return hash_bytes(serialize_values(values))


def _pow_value(challenge: bytes, nonce: int) -> int:
    digest = hash_bytes(POW_PREFIX + challenge + nonce.to_bytes(8, "little"))
    return int.from_bytes(digest[:8], "big")


def grinding(challenge: bytes, pow_bits: int) -> int:
    """
    Find a proof-of-work nonce.

    Searches for the smallest nonce such that the first 8 bytes of
    H(POW_PREFIX || challenge || nonce), read big-endian, are less than
    2^(64 - pow_bits).

    Args:
        challenge: Transcript state the nonce is bound to
        pow_bits: Number of leading zero bits required

    Returns:
        Nonce value that satisfies the PoW requirement

    Raises:
        ValueError: If pow_bits is outside [0, 64]
        RuntimeError: If no valid nonce is found within the search space
    """
    if not 0 <= pow_bits <= 64:
        raise ValueError(f"pow_bits must be in [0, 64], got {pow_bits}")

    level = 1 << (64 - pow_bits)
    max_attempts = (1 << pow_bits) * 512

    for nonce in range(max_attempts):
        if _pow_value(challenge, nonce) < level:
            return nonce

    raise RuntimeError("grinding: could not find a valid nonce")


def verify_grinding(challenge: bytes, nonce: int, pow_bits: int) -> bool:
    """Check a proof-of-work nonce against ``challenge``."""
    if not 0 <= pow_bits <= 64 or not 0 <= nonce < (1 << 64):
        return False
    return _pow_value(challenge, nonce) < (1 << (64 - pow_bits))
