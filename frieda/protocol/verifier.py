"""FRI verifier for data availability sampling.

Verification replays the prover's transcript from public proof fields only:

    1. Structure: proof shape matches its configuration (raises on mismatch)
    2. Parameters and commitment: the proof's configuration is the expected
       one, and root and domain match the caller's commitment, if given
    3. Transcript: challenges, proof-of-work and query positions
    4. Merkle: every opened value authenticates against its layer root
    5. Folding: each query folds consistently through every layer
    6. Final layer: the last folded layer has the claimed low degree

Cryptographic failures return False; the reason is logged.
"""

import logging
from typing import List, Optional

from frieda.config import FriConfig
from frieda.errors import InvalidInputError
from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import FF, FIELD_DESCRIPTOR
from frieda.primitives.merkle_tree import verify_values
from frieda.primitives.ntt import intt
from frieda.protocol.commitment import Commitment
from frieda.protocol.fri import FRI
from frieda.protocol.lde import domain_for
from frieda.protocol.proof import Proof, QueryInfo, validate_proof_structure
from frieda.protocol.prover import check_seed, start_transcript

logger = logging.getLogger(__name__)


def verify_proof(
    proof: Proof,
    seed: Optional[int] = None,
    commitment: Optional[Commitment] = None,
    config: Optional[FriConfig] = None,
) -> bool:
    """Verify a sampling proof.

    Args:
        proof: Proof to check
        seed: Seed the proof must have been generated with
        commitment: Commitment the proof must open; defaults to the root
            embedded in the proof
        config: Protocol parameters the verifier requires. When omitted the
            configuration embedded in the proof is trusted as is.

    Returns:
        True iff every check passes

    Raises:
        InvalidInputError: If the proof is structurally malformed (wrong
            number of queries, layers or openings for its configuration)
    """
    cfg = proof.config
    check_seed(seed)

    # --- Phase 1: Structure ---
    problems = validate_proof_structure(proof)
    if problems:
        raise InvalidInputError(f"Malformed proof: {problems[0]}", data={"problems": problems})

    n_rounds = cfg.num_rounds(proof.log_size_bound)
    domain = domain_for(1 << proof.log_size_bound, cfg.blowup_log)

    # --- Phase 2: Parameters and commitment ---
    if config is not None and cfg != config:
        logger.warning("Proof configuration %s does not match the required %s", cfg.to_dict(), config.to_dict())
        return False
    if commitment is not None and not _verify_commitment(proof, commitment, domain):
        return False

    # --- Phase 3: Transcript replay ---
    transcript = start_transcript(proof.root, seed)
    batching = transcript.get_field() if cfg.batch_size > 1 else None
    challenges: List[FF] = []
    for rnd in range(n_rounds):
        challenges.append(transcript.get_field())
        if rnd < n_rounds - 1:
            transcript.put(proof.inner_layers[rnd].root)
    transcript.put_elements(proof.final_layer)

    if not transcript.check_grinding(proof.proof_of_work, cfg.pow_bits):
        logger.warning("Proof-of-work verification failed (nonce %d)", proof.proof_of_work)
        return False
    transcript.put_u64(proof.proof_of_work)

    positions = transcript.sample_positions(cfg.num_queries, domain.size)
    for i, (q, query) in enumerate(zip(positions, proof.query_info)):
        if query.index != q:
            logger.warning("Query %d: index %d does not match derived position %d", i, query.index, q)
            return False

    # --- Phase 4 + 5: Merkle and folding, per query ---
    for i, q in enumerate(positions):
        if not _verify_query(proof, i, q, domain, challenges, n_rounds, batching):
            return False

    # --- Phase 6: Final layer degree ---
    if not _verify_final_layer(proof, n_rounds):
        return False

    return True


def _verify_commitment(proof: Proof, commitment: Commitment, domain: EvaluationDomain) -> bool:
    meta = commitment.metadata
    if commitment.root != proof.root:
        logger.warning("Proof root does not match commitment root")
        return False
    if meta.domain_size != domain.size or meta.expansion_factor != proof.config.expansion_factor:
        logger.warning(
            "Commitment domain %d (x%d) does not match proof domain %d (x%d)",
            meta.domain_size, meta.expansion_factor, domain.size, proof.config.expansion_factor,
        )
        return False
    if meta.batch_size != proof.config.batch_size:
        logger.warning("Commitment batches %d blobs, proof expects %d", meta.batch_size, proof.config.batch_size)
        return False
    if meta.field_descriptor != FIELD_DESCRIPTOR:
        logger.warning("Commitment field %r is not %r", meta.field_descriptor, FIELD_DESCRIPTOR)
        return False
    return True


def _verify_opening(entry: QueryInfo, position: int, root: bytes, batching: Optional[FF]) -> bool:
    """Authenticate one opened codeword leaf and, if batched, its combined value."""
    if not 0 <= entry.value < FF.order or any(not 0 <= v < FF.order for v in entry.columns):
        logger.warning("Position %d: value is not a canonical field element", position)
        return False
    leaf = entry.columns if batching is not None else [entry.value]
    if not verify_values(leaf, position, entry.auth_path, root):
        logger.warning("Position %d: Merkle inclusion failed", position)
        return False
    if batching is not None and int(FRI.combine(entry.columns, batching)) != entry.value:
        logger.warning("Position %d: value is not the batched combination of its columns", position)
        return False
    return True


def _verify_query(
    proof: Proof,
    i: int,
    position: int,
    domain: EvaluationDomain,
    challenges: List[FF],
    n_rounds: int,
    batching: Optional[FF] = None,
) -> bool:
    """Check one query from the codeword down to the final layer."""
    cfg = proof.config
    query = proof.query_info[i]

    if not _verify_opening(query, position, proof.root, batching):
        logger.warning("Query %d rejected at its codeword opening", i)
        return False

    if n_rounds == 0:
        if proof.final_layer[position] != query.value:
            logger.warning("Query %d: value disagrees with the final layer", i)
            return False
        return True

    # First layer group: the query plus its opened siblings
    group, slot = FRI.group_of(position, domain.size, cfg.fold_log)
    members = FRI.group_positions(group, domain.size, cfg.fold_log)
    siblings = proof.sibling_info[i]
    group_values = []
    sib_iter = iter(siblings)
    for member in members:
        if member == position:
            group_values.append(query.value)
            continue
        sib = next(sib_iter)
        if sib.index != member:
            logger.warning("Query %d: sibling at %d, expected %d", i, sib.index, member)
            return False
        if not _verify_opening(sib, member, proof.root, batching):
            logger.warning("Query %d: sibling %d rejected", i, member)
            return False
        group_values.append(sib.value)

    value = FRI.verify_fold(group_values, group, domain, cfg.fold_log, challenges[0])
    layer_pos, layer_domain = group, domain.fold(cfg.fold_log)

    # Inner layers
    for t, layer in enumerate(proof.inner_layers):
        opening = layer.openings[i]
        group, slot = FRI.group_of(layer_pos, layer_domain.size, cfg.fold_log)
        if opening.index != group:
            logger.warning("Query %d, layer %d: opened group %d, expected %d", i, t + 1, opening.index, group)
            return False
        if any(not 0 <= v < FF.order for v in opening.values):
            logger.warning("Query %d, layer %d: non-canonical field element", i, t + 1)
            return False
        if not verify_values(opening.values, group, opening.auth_path, layer.root):
            logger.warning("Query %d, layer %d: Merkle inclusion failed", i, t + 1)
            return False
        if opening.values[slot] != int(value):
            logger.warning("Query %d, layer %d: fold mismatch", i, t + 1)
            return False

        value = FRI.verify_fold(opening.values, group, layer_domain, cfg.fold_log, challenges[t + 1])
        layer_pos, layer_domain = group, layer_domain.fold(cfg.fold_log)

    if proof.final_layer[layer_pos] != int(value):
        logger.warning("Query %d: final layer mismatch at %d", i, layer_pos)
        return False
    return True


def _verify_final_layer(proof: Proof, n_rounds: int) -> bool:
    """Check the final layer is the evaluation of a low-degree polynomial.

    The final layer lives on a coset s*<w>; interpolating it over <w> yields
    the coefficients of P(s*X), whose zero pattern equals that of P.
    """
    cfg = proof.config
    final = proof.final_layer
    if any(not 0 <= v < FF.order for v in final):
        logger.warning("Final layer holds non-canonical field elements")
        return False

    # Degree bound left after folding 2^log_size_bound coefficients r times
    bound = max(1, (1 << proof.log_size_bound) >> (n_rounds * cfg.fold_log))
    if bound >= len(final):
        return True

    if bound == 1:
        if any(v != final[0] for v in final):
            logger.warning("Final layer is not constant")
            return False
        return True

    coeffs = intt(FF(final))
    for j in range(bound, len(final)):
        if int(coeffs[j]) != 0:
            logger.warning("Final polynomial degree exceeds %d: coefficient %d nonzero", bound - 1, j)
            return False
    return True
