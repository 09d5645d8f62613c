"""Sample counts and aggregation of sampled positions.

The number of uniform samples needed to see ``degree`` distinct positions
of an ``n``-point domain, except with probability 2^-security_bits, follows
the generalized coupon-collector bound used by FRIDA.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from frieda.config import FriConfig
from frieda.errors import DecodingError, InvalidInputError
from frieda.protocol.proof import Proof
from frieda.protocol.verifier import verify_proof

logger = logging.getLogger(__name__)


def samples_needed(domain_size: int, degree: int, security_bits: int) -> int:
    """Minimum number of samples for ``degree`` distinct positions.

    Args:
        domain_size: Number of codeword positions n
        degree: Distinct positions required (the code dimension plus one
            for reconstruction)
        security_bits: Failure probability target s, as 2^-s

    Returns:
        1 if degree == 1; ceil((n / ln 2) * (log2 n + s)) if degree == n;
        otherwise ceil(-s / log2(c) + (1 - 1 / ln c) * delta) with
        delta = degree - 1 and c = delta / n.

    Raises:
        InvalidInputError: If degree is outside [1, domain_size] or
            security_bits is negative
    """
    if domain_size < 1:
        raise InvalidInputError(f"Domain size must be positive, got {domain_size}")
    if not 1 <= degree <= domain_size:
        raise InvalidInputError(f"Degree must be in [1, {domain_size}], got {degree}")
    if security_bits < 0:
        raise InvalidInputError(f"Security bits must be non-negative, got {security_bits}")

    if degree == 1:
        return 1

    if degree == domain_size:
        n = domain_size
        return math.ceil((n / math.log(2)) * (math.log2(n) + security_bits))

    delta = degree - 1
    c = delta / domain_size
    s = -security_bits / math.log2(c) + (1 - 1 / math.log(c)) * delta
    return math.ceil(s)


def proofs_needed(config: FriConfig, log_size_bound: int) -> int:
    """Seeded proofs expected to cover 2^log_size_bound + 1 distinct positions."""
    domain_size = 1 << config.domain_log_size(log_size_bound)
    degree = min((1 << log_size_bound) + 1, domain_size)
    samples = samples_needed(domain_size, degree, config.security_bits)
    return max(1, math.ceil(samples / config.num_queries))


@dataclass
class SampleResult:
    """Positions and values observed by one sampling round."""
    indices: List[int] = field(default_factory=list)
    values: List[int] = field(default_factory=list)
    success: bool = False


def sample_result_from_proof(
    proof: Proof,
    seed: Optional[int] = None,
    config: Optional[FriConfig] = None,
    column: Optional[int] = None,
) -> SampleResult:
    """Verify ``proof`` and expose its sampled positions.

    ``success`` is the verification verdict; the positions are reported either
    way so callers can log them, but only successful results are aggregated.
    ``config`` is passed on to the verifier.
    """
    ok = verify_proof(proof, seed if seed is not None else proof.seed, config=config)
    return samples_of(proof, column, success=ok)


def samples_of(proof: Proof, column: Optional[int] = None, success: bool = False) -> SampleResult:
    """Positions and values a proof opened, without verifying it.

    Batched proofs open one value per blob at each position; ``column``
    selects the blob.

    Raises:
        InvalidInputError: If ``column`` is missing or out of range for a
            batched proof, or nonzero for a single-blob proof
    """
    width = proof.config.batch_size
    if width == 1:
        if column not in (None, 0):
            raise InvalidInputError(f"Single-blob proof has no column {column}")
        values = [q.value for q in proof.query_info]
    else:
        if column is None or not 0 <= column < width:
            raise InvalidInputError(f"Batched proof needs a column in [0, {width}), got {column}")
        values = [q.columns[column] for q in proof.query_info]
    return SampleResult(indices=[q.index for q in proof.query_info], values=values, success=success)


def aggregate_sampling(results: Iterable[SampleResult]) -> SampleResult:
    """Merge sampling rounds, keeping the first value seen for each position.

    Unsuccessful rounds are skipped. Iteration order decides which
    occurrence of a position is kept, so the output is deterministic for a
    given input order.

    Raises:
        InvalidInputError: If there are no results at all
        DecodingError: If no round succeeded, or two rounds disagree on the
            value at the same position
    """
    results = list(results)
    if not results:
        raise InvalidInputError("No results to aggregate")

    seen: Dict[int, int] = {}
    merged = SampleResult(success=True)
    n_ok = 0
    for result in results:
        if not result.success:
            logger.warning("Skipping unsuccessful sampling round with %d samples", len(result.indices))
            continue
        n_ok += 1
        for index, value in zip(result.indices, result.values):
            if index in seen:
                if seen[index] != value:
                    raise DecodingError(
                        f"Conflicting values at position {index}",
                        data={"index": index, "values": [seen[index], value]},
                    )
                continue
            seen[index] = value
            merged.indices.append(index)
            merged.values.append(value)

    if n_ok == 0:
        raise DecodingError("No successful sampling rounds to aggregate")
    return merged
