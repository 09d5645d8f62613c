"""Number Theoretic Transform for Goldilocks field."""

from typing import Dict

import galois

from frieda.primitives.field import FF, SHIFT, powers

# --- NTT Engine ---

class NTT:
    """NTT engine over FF for one power-of-two domain size.

    Inputs and outputs are in natural order: ``ntt(c)[i] = c(w^i)`` where w is
    ``get_omega(log2(domain_size))``, the root ``galois.ntt`` uses.
    """

    def __init__(self, domain_size: int) -> None:
        """Initialize NTT engine for given domain size."""
        assert domain_size > 0, "Domain size must be positive"
        assert (domain_size & (domain_size - 1)) == 0, "Domain size must be power of 2"

        self.n = domain_size
        self.n_bits = _log2(domain_size)

        # Coset shift array r[i] = SHIFT^i
        self.r = powers(SHIFT, domain_size)

    def ntt(self, coeffs: FF) -> FF:
        """Forward NTT: coefficients -> evaluations."""
        assert len(coeffs) == self.n, f"Expected {self.n} coefficients, got {len(coeffs)}"
        if self.n == 1:
            return FF(coeffs).copy()
        return galois.ntt(FF(coeffs))

    def intt(self, evals: FF) -> FF:
        """Inverse NTT: evaluations -> coefficients."""
        assert len(evals) == self.n, f"Expected {self.n} evaluations, got {len(evals)}"
        if self.n == 1:
            return FF(evals).copy()
        return galois.intt(FF(evals))

    def coset_ntt(self, coeffs: FF) -> FF:
        """Evaluate coefficients over the coset SHIFT * <w>."""
        return self.ntt(FF(coeffs) * self.r)


_ENGINES: Dict[int, NTT] = {}


def get_ntt(domain_size: int) -> NTT:
    """Return the shared NTT engine for ``domain_size``.

    Engines are immutable after construction, so sharing them across
    threads is safe.
    """
    engine = _ENGINES.get(domain_size)
    if engine is None:
        engine = _ENGINES.setdefault(domain_size, NTT(domain_size))
    return engine


def ntt(coeffs: FF) -> FF:
    """Forward NTT of a power-of-two length vector."""
    return get_ntt(len(coeffs)).ntt(coeffs)


def intt(evals: FF) -> FF:
    """Inverse NTT of a power-of-two length vector."""
    return get_ntt(len(evals)).intt(evals)


# --- Helpers ---

def _log2(size: int) -> int:
    """Compute log2 of size (must be power of 2)."""
    assert size != 0
    res = 0
    while size != 1:
        size >>= 1
        res += 1
    return res
