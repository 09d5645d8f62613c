"""Goldilocks prime field GF(p) and its two-adic roots of unity.

Uses galois library for all field arithmetic. FF is the field type; every
coefficient, evaluation and challenge in the protocol lives in FF.
"""

from functools import lru_cache

import galois

# --- Field Construction ---

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001

FF = galois.GF(GOLDILOCKS_PRIME)
"""Base field GF(p) - Goldilocks prime field."""

FIELD_DESCRIPTOR = "goldilocks"
"""Recorded in commitment metadata so verifiers rebuild the same domain."""

ELEMENT_BYTES = 8

TWO_ADICITY = 32

# Multiplicative generator, used as the coset shift of evaluation domains
SHIFT = FF(7)
SHIFT_INV = SHIFT ** -1


# --- Roots of Unity ---

@lru_cache(maxsize=None)
def get_omega(n_bits: int) -> int:
    """Return the primitive 2^n_bits-th root of unity used by ``galois.ntt``.

    galois derives every root from the field's fixed primitive element, so
    the roots form a tower: get_omega(n)^2 == get_omega(n - 1).
    """
    if not 0 <= n_bits <= TWO_ADICITY:
        raise ValueError(f"No 2^{n_bits}-th root of unity in the Goldilocks field")
    return int(FF.primitive_root_of_unity(1 << n_bits))


@lru_cache(maxsize=None)
def get_omega_inv(n_bits: int) -> int:
    """Return inverse of primitive 2^n_bits-th root of unity."""
    return int(FF(get_omega(n_bits)) ** -1)


def powers(base, count: int) -> FF:
    """Return [1, base, base^2, ..., base^(count-1)] as an FF array."""
    out = FF.Zeros(count)
    if count == 0:
        return out
    out[0] = FF(1)
    base_ff = FF(int(base))
    for i in range(1, count):
        out[i] = out[i - 1] * base_ff
    return out


# --- Montgomery Batch Inversion ---

def batch_inverse(values: FF) -> FF:
    """Montgomery batch inversion.

    Converts N field inversions into 3N-3 multiplications + 1 inversion.

    Algorithm:
    1. Forward pass: prefix products cumprods[i] = a[0] * ... * a[i]
    2. Single inversion of the total product
    3. Backward pass: peel off individual inverses

    Raises:
        ZeroDivisionError: If any element is zero
    """
    n = len(values)
    if n == 0:
        return values
    if n == 1:
        return values ** -1

    cumprods = FF.Zeros(n)
    cumprods[0] = values[0]
    for i in range(1, n):
        cumprods[i] = cumprods[i - 1] * values[i]

    inv_total = cumprods[n - 1] ** -1

    results = FF.Zeros(n)
    z = inv_total
    for i in range(n - 1, 0, -1):
        results[i] = z * cumprods[i - 1]
        z = z * values[i]
    results[0] = z

    return results
