"""Reconstruction of committed data from sampled positions.

Interpolation uses the subproduct tree over the sample points: leaves are
(x - x_i), parents are products of their children. With M the root:

    P(x) = sum_i v_i / M'(x_i) * M(x) / (x - x_i)

M' is evaluated at every x_i by sweeping remainders down the tree, and the
sum is assembled bottom-up by cross-multiplying siblings. Levels are stored
as flat lists (level 0 = leaves) and each level's independent products run
on a thread pool.

The tree needs a power-of-two point count, while reconstruction needs one
point more than the coefficient count; the first point is therefore held
out as a base point and restored afterwards by adding lambda * M(x), which
keeps the degree below the point count.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence

from frieda.config import FriConfig
from frieda.errors import DecodingError, InvalidInputError, VerificationFailedError
from frieda.primitives.codec import decode
from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import FF, batch_inverse
from frieda.primitives.polynomial import degree, derivative, evaluate, pad, poly_add, poly_mod, poly_mul
from frieda.protocol.lde import domain_for, extend
from frieda.protocol.proof import Proof
from frieda.protocol.sampling import aggregate_sampling, samples_of
from frieda.protocol.verifier import verify_proof

logger = logging.getLogger(__name__)

SubproductTree = List[List[FF]]


def _map(executor: Optional[Executor], fn: Callable, items: Iterable) -> List:
    if executor is None:
        return [fn(item) for item in items]
    return list(executor.map(fn, items))


# --- Subproduct Tree ---

def build_subproduct_tree(points: Sequence[int], executor: Optional[Executor] = None) -> SubproductTree:
    """Build the subproduct tree over a power-of-two number of points.

    Returns:
        levels[0][i] = x - points[i]; levels[l][j] = levels[l-1][2j] * levels[l-1][2j+1];
        levels[-1][0] = prod_i (x - points[i])
    """
    n = len(points)
    if n < 1 or n & (n - 1):
        raise InvalidInputError(f"Subproduct tree needs a power-of-two point count, got {n}")

    levels: SubproductTree = [[FF([int(-FF(int(x))), 1]) for x in points]]
    while len(levels[-1]) > 1:
        prev = levels[-1]
        pairs = [(prev[2 * j], prev[2 * j + 1]) for j in range(len(prev) // 2)]
        levels.append(_map(executor, lambda ab: poly_mul(ab[0], ab[1]), pairs))
    return levels


def evaluate_on_tree(poly: FF, tree: SubproductTree, executor: Optional[Executor] = None) -> FF:
    """Evaluate ``poly`` at every leaf point by a top-down remainder sweep."""
    remainders = [poly_mod(poly, tree[-1][0])]
    for level in range(len(tree) - 2, -1, -1):
        nodes = tree[level]
        tasks = [(remainders[j // 2], nodes[j]) for j in range(len(nodes))]
        remainders = _map(executor, lambda rm: poly_mod(rm[0], rm[1]), tasks)
    return FF([int(r[0]) for r in remainders])


def linear_combination(weights: FF, tree: SubproductTree, executor: Optional[Executor] = None) -> FF:
    """Return sum_i weights[i] * M(x) / (x - x_i), assembled bottom-up."""
    polys = [FF([int(w)]) for w in weights]
    for level in range(len(tree) - 1):
        nodes = tree[level]
        tasks = [(polys[2 * j], polys[2 * j + 1], nodes[2 * j], nodes[2 * j + 1]) for j in range(len(nodes) // 2)]
        polys = _map(executor, lambda t: poly_add(poly_mul(t[0], t[3]), poly_mul(t[1], t[2])), tasks)
    return polys[0]


def fast_interpolation(points: Sequence[int], values: Sequence[int], executor: Optional[Executor] = None) -> FF:
    """Interpolate 2^m + 1 distinct points.

    Args:
        points: Distinct evaluation points; points[0] is the base point
        values: Values at the points

    Returns:
        Coefficients of the unique polynomial of degree <= 2^m through all points
    """
    if len(points) != len(values):
        raise InvalidInputError(f"{len(points)} points but {len(values)} values")

    z0, v0 = FF(int(points[0])), FF(int(values[0]))
    rest = [int(x) for x in points[1:]]

    tree = build_subproduct_tree(rest, executor)
    m = tree[-1][0]

    # c_i = v_i / M'(u_i)
    dm = evaluate_on_tree(derivative(m), tree, executor)
    weights = FF([int(v) for v in values[1:]]) * batch_inverse(dm)
    poly = linear_combination(weights, tree, executor)

    # Restore the base point without disturbing the others: M vanishes on them
    lam = (v0 - evaluate(poly, z0)) * evaluate(m, z0) ** -1
    return poly_add(poly, m * lam)


# --- Reconstruction ---

def reconstruct_polynomial(
    positions: Sequence[int],
    values: Sequence[int],
    log_size_bound: int,
    domain: EvaluationDomain,
    executor: Optional[Executor] = None,
) -> FF:
    """Recover the 2^log_size_bound coefficients from distinct codeword samples.

    Raises:
        InvalidInputError: If positions repeat or fall outside the domain
        DecodingError: If there are not more than 2^log_size_bound samples,
            or the samples do not lie on one polynomial of that degree bound
    """
    n_coeffs = 1 << log_size_bound
    if len(set(positions)) != len(positions) or len(positions) != len(values):
        raise InvalidInputError("Samples must be deduplicated, one value per position")
    if any(not 0 <= p < domain.size for p in positions):
        raise InvalidInputError(f"Sample position outside the 2^{domain.log_size} domain")
    if len(positions) <= n_coeffs:
        raise DecodingError(
            f"Need more than {n_coeffs} distinct samples, got {len(positions)}",
            data={"have": len(positions), "need": n_coeffs + 1},
        )

    used = n_coeffs + 1
    points = [int(domain.element(p)) for p in positions[:used]]
    poly = fast_interpolation(points, values[:used], executor)

    if degree(poly) >= n_coeffs:
        raise DecodingError(
            f"Samples are not consistent with a polynomial of degree < {n_coeffs}",
            data={"degree": degree(poly)},
        )
    coeffs = pad(poly[:n_coeffs], n_coeffs)

    # Every remaining sample must agree with the interpolant
    if len(positions) > used:
        codeword = extend(coeffs, domain.log_size - log_size_bound)
        for p, v in zip(positions[used:], values[used:]):
            if int(codeword[p]) != int(v):
                raise DecodingError(f"Sample at position {p} disagrees with the interpolant", data={"index": p})

    return coeffs


def _check_proofs(proofs: List[Proof]) -> Proof:
    """Return the first proof after checking all of them open one commitment."""
    if not proofs:
        raise DecodingError("No proofs to reconstruct from")

    first = proofs[0]
    for proof in proofs[1:]:
        if (
            proof.root != first.root
            or proof.log_size_bound != first.log_size_bound
            or proof.config.blowup_log != first.config.blowup_log
            or proof.config.batch_size != first.config.batch_size
        ):
            raise InvalidInputError("Proofs do not open the same commitment")
    return first


def _verify_all(proofs: List[Proof], executor: Executor, config: Optional[FriConfig]) -> None:
    verdicts = list(executor.map(lambda p: verify_proof(p, p.seed, config=config), proofs))
    for i, ok in enumerate(verdicts):
        if not ok:
            raise VerificationFailedError(f"Proof {i} failed verification", data={"seed": proofs[i].seed})


def _reconstruct_column(
    proofs: List[Proof],
    column: Optional[int],
    length: Optional[int],
    executor: Executor,
) -> bytes:
    first = proofs[0]
    merged = aggregate_sampling(samples_of(p, column, success=True) for p in proofs)
    logger.debug("Reconstructing from %d distinct samples of %d proofs", len(merged.indices), len(proofs))

    domain = domain_for(1 << first.log_size_bound, first.config.blowup_log)
    coeffs = reconstruct_polynomial(merged.indices, merged.values, first.log_size_bound, domain, executor)
    return decode(coeffs, length)


def reconstruct(
    proofs: Iterable[Proof],
    length: Optional[int] = None,
    max_workers: Optional[int] = None,
    config: Optional[FriConfig] = None,
) -> bytes:
    """Recover the committed bytes from independently seeded proofs.

    Every proof is verified against its own seed. Samples are merged in proof
    order, first occurrence of a position winning.

    Args:
        proofs: Proofs over the same commitment
        length: Original byte length; output is truncated to it when given
        max_workers: Thread pool size for verification and interpolation
        config: Protocol parameters every proof must have been made with

    Raises:
        InvalidInputError: If the proofs do not share root and parameters,
            or are batched proofs
        VerificationFailedError: If a proof does not verify
        DecodingError: If samples are insufficient or inconsistent
    """
    proofs = list(proofs)
    first = _check_proofs(proofs)
    if first.config.batch_size != 1:
        raise InvalidInputError("Batched proofs are reconstructed with reconstruct_batch")

    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        _verify_all(proofs, ex, config)
        return _reconstruct_column(proofs, None, length, ex)


def reconstruct_batch(
    proofs: Iterable[Proof],
    lengths: Optional[Sequence[int]] = None,
    max_workers: Optional[int] = None,
    config: Optional[FriConfig] = None,
) -> List[bytes]:
    """Recover every blob of a batched commitment, in batch order.

    Each proof opens all blobs at its positions, so the same proofs serve
    every column.
    """
    proofs = list(proofs)
    first = _check_proofs(proofs)
    width = first.config.batch_size
    if lengths is not None and len(lengths) != width:
        raise InvalidInputError(f"Expected {width} lengths, got {len(lengths)}")

    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        _verify_all(proofs, ex, config)
        return [
            _reconstruct_column(proofs, j, None if lengths is None else lengths[j], ex)
            for j in range(width)
        ]
