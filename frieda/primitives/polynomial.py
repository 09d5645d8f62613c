"""Dense univariate polynomial arithmetic over FF.

Polynomials are FF arrays of coefficients in ascending degree order
([a0, a1, a2, ...]). Products go through the NTT engine so a multiplication
of two degree-n polynomials costs O(n log n); division uses Newton iteration
on the reversed divisor so it costs a constant number of products.
"""

import galois

from frieda.primitives.field import FF
from frieda.primitives.ntt import get_ntt


def trim(poly: FF) -> FF:
    """Drop trailing zero coefficients, keeping at least one."""
    nonzero = [i for i, c in enumerate(poly) if int(c) != 0]
    if not nonzero:
        return FF.Zeros(1)
    return poly[: nonzero[-1] + 1]


def degree(poly: FF) -> int:
    """Degree of ``poly``; the zero polynomial has degree -1."""
    trimmed = trim(poly)
    if len(trimmed) == 1 and int(trimmed[0]) == 0:
        return -1
    return len(trimmed) - 1


def pad(poly: FF, length: int) -> FF:
    """Zero-pad ``poly`` to ``length`` coefficients."""
    assert length >= len(poly), f"Cannot pad {len(poly)} coefficients down to {length}"
    out = FF.Zeros(length)
    out[: len(poly)] = poly
    return out


def poly_add(a: FF, b: FF) -> FF:
    """Sum of two polynomials of possibly different lengths."""
    n = max(len(a), len(b))
    return pad(a, n) + pad(b, n)


def poly_mul(a: FF, b: FF) -> FF:
    """Product of two polynomials via forward/inverse NTT.

    Returns:
        Coefficients of a*b, of length len(a) + len(b) - 1
    """
    n_out = len(a) + len(b) - 1
    if len(a) == 1:
        return b * a[0]
    if len(b) == 1:
        return a * b[0]

    size = 1
    while size < n_out:
        size <<= 1
    engine = get_ntt(size)
    evals = engine.ntt(pad(a, size)) * engine.ntt(pad(b, size))
    return engine.intt(evals)[:n_out]


def inverse_series(g: FF, n: int) -> FF:
    """Return h with g*h = 1 mod x^n, by Newton iteration.

    Each step doubles the precision: h <- h * (2 - g*h) mod x^(2k).

    Raises:
        ZeroDivisionError: If g has a zero constant term
    """
    h = FF([int(g[0] ** -1)])
    k = 1
    while k < n:
        k = min(2 * k, n)
        t = -poly_mul(g[:k], h)[:k]
        t = pad(t, k)
        t[0] = t[0] + FF(2)
        h = poly_mul(h, t)[:k]
    return h


def poly_divmod(f: FF, g: FF):
    """Quotient and remainder of f by g.

    The remainder always has len(g) - 1 coefficients (at least one).

    Raises:
        ZeroDivisionError: If g is the zero polynomial
    """
    g = trim(g)
    if len(g) == 1:
        if int(g[0]) == 0:
            raise ZeroDivisionError("Polynomial division by zero")
        return f * (g[0] ** -1), FF.Zeros(1)

    m = len(g)
    if len(f) < m:
        return FF.Zeros(1), pad(f, m - 1)

    q_len = len(f) - m + 1
    rev_inv = inverse_series(g[::-1], q_len)
    q = poly_mul(f[::-1][:q_len], rev_inv)[:q_len][::-1]

    r = f[: m - 1] - poly_mul(q, g)[: m - 1]
    return q, r


def poly_mod(f: FF, g: FF) -> FF:
    """Remainder of f by g."""
    return poly_divmod(f, g)[1]


def derivative(poly: FF) -> FF:
    """Formal derivative."""
    if len(poly) <= 1:
        return FF.Zeros(1)
    return poly[1:] * FF(list(range(1, len(poly))))


def evaluate(poly: FF, x) -> FF:
    """Evaluate ``poly`` at a single point."""
    # galois uses descending order
    return galois.Poly(poly[::-1], field=FF)(FF(int(x)))
