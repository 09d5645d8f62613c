"""Bytes <-> polynomial coefficients.

Bytes are read as one little-endian bit stream and cut into chunks of
BITS_PER_ELEMENT bits, least-significant bit first. Every chunk is below
2^63 < p, so it is a canonical field element. The coefficient vector is
zero-padded to the next power of two (at least MIN_COEFFICIENTS).

Padding is not self-describing: callers must carry the original byte length
to strip trailing zeros on decode.
"""

from typing import Optional

import numpy as np

from frieda.errors import DecodingError
from frieda.primitives.field import FF, GOLDILOCKS_PRIME

BITS_PER_ELEMENT = GOLDILOCKS_PRIME.bit_length() - 1
MIN_COEFFICIENTS = 4

_BIT_WEIGHTS = np.left_shift(np.uint64(1), np.arange(BITS_PER_ELEMENT, dtype=np.uint64))


def element_count(n_bytes: int) -> int:
    """Number of field elements needed to hold ``n_bytes`` bytes."""
    return -(-8 * n_bytes // BITS_PER_ELEMENT)


def coefficient_count(n_bytes: int) -> int:
    """Padded coefficient count for a blob of ``n_bytes`` bytes."""
    n = max(element_count(n_bytes), MIN_COEFFICIENTS)
    return 1 << (n - 1).bit_length()


def log_size_for(n_bytes: int) -> int:
    """log2 of the padded coefficient count."""
    return coefficient_count(n_bytes).bit_length() - 1


def encode(data: bytes) -> FF:
    """Pack ``data`` into a power-of-two vector of field elements."""
    n_coeffs = coefficient_count(len(data))
    bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8), bitorder="little")

    n_elements = element_count(len(data))
    padded = np.zeros(n_elements * BITS_PER_ELEMENT, dtype=np.uint64)
    padded[: len(bits)] = bits
    chunks = padded.reshape(n_elements, BITS_PER_ELEMENT) @ _BIT_WEIGHTS

    coeffs = FF.Zeros(n_coeffs)
    if n_elements:
        coeffs[:n_elements] = FF([int(c) for c in chunks])
    return coeffs


def decode(coeffs: FF, length: Optional[int] = None) -> bytes:
    """Unpack coefficients produced by :func:`encode`.

    Args:
        coeffs: Polynomial coefficients (ascending)
        length: Original byte length; output is truncated to it when given

    Raises:
        DecodingError: If a coefficient does not fit in BITS_PER_ELEMENT bits,
            or ``length`` exceeds what the coefficients can hold
    """
    values = [int(c) for c in coeffs]
    for i, v in enumerate(values):
        if v >> BITS_PER_ELEMENT:
            raise DecodingError(
                f"Coefficient {i} does not fit in {BITS_PER_ELEMENT} bits",
                data={"index": i},
            )

    words = np.array(values, dtype=np.uint64)
    bits = (words[:, None] >> np.arange(BITS_PER_ELEMENT, dtype=np.uint64)) & np.uint64(1)
    data = np.packbits(bits.astype(np.uint8).reshape(-1), bitorder="little").tobytes()

    if length is None:
        return data
    if length < 0 or length > len(data):
        raise DecodingError(
            f"Cannot extract {length} bytes from {len(coeffs)} coefficients",
            data={"length": length, "available": len(data)},
        )
    return data[:length]
