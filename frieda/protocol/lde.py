"""Low-degree extension (Reed-Solomon encoding) over coset domains."""

from frieda.errors import InvalidInputError
from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import FF, SHIFT
from frieda.primitives.ntt import get_ntt
from frieda.primitives.polynomial import pad


def domain_for(n_coeffs: int, blowup_log: int) -> EvaluationDomain:
    """Evaluation domain of size ``n_coeffs * 2^blowup_log``."""
    if n_coeffs < 1 or n_coeffs & (n_coeffs - 1):
        raise InvalidInputError(f"Coefficient count must be a power of two, got {n_coeffs}")
    if blowup_log < 0:
        raise InvalidInputError(f"blowup_log must be non-negative, got {blowup_log}")
    log_size = n_coeffs.bit_length() - 1 + blowup_log
    try:
        return EvaluationDomain(log_size, int(SHIFT))
    except ValueError as e:
        raise InvalidInputError(str(e)) from e


def extend(poly: FF, blowup_log: int) -> FF:
    """Evaluate ``poly`` over the coset domain expanded by 2^blowup_log.

    Args:
        poly: Coefficients (ascending), power-of-two length
        blowup_log: log2 of the expansion factor; 0 evaluates without redundancy

    Returns:
        Evaluations at ``domain_for(len(poly), blowup_log).elements()``
    """
    domain = domain_for(len(poly), blowup_log)
    return get_ntt(domain.size).coset_ntt(pad(FF(poly), domain.size))
