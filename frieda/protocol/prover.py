"""FRI prover for data availability sampling."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from frieda.config import DEFAULT_CONFIG, FriConfig
from frieda.errors import InvalidInputError
from frieda.primitives.codec import log_size_for
from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import FF
from frieda.primitives.merkle_tree import MerkleTree, interleave
from frieda.primitives.transcript import Transcript
from frieda.protocol.commitment import (
    Commitment,
    CommitmentMetadata,
    commit_evaluations,
    encode_and_extend,
    encode_and_extend_batch,
)
from frieda.protocol.fri import FRI
from frieda.protocol.lde import domain_for
from frieda.protocol.proof import FriLayerProof, LayerOpening, Proof, QueryInfo

logger = logging.getLogger(__name__)


def check_seed(seed: Optional[int]) -> None:
    """Seeds are absorbed as unsigned 64-bit integers."""
    if seed is None:
        return
    if isinstance(seed, bool) or not isinstance(seed, int) or not 0 <= seed < (1 << 64):
        raise InvalidInputError(f"Seed must be an integer in [0, 2^64), got {seed!r}")


def start_transcript(root: bytes, seed: Optional[int]) -> Transcript:
    """Transcript after the absorbs shared by prover and verifier."""
    transcript = Transcript()
    transcript.put(root)
    if seed is not None:
        transcript.put_u64(seed)
    return transcript


class FriProver:
    """Commits to blobs and answers transcript-derived queries about them."""

    def __init__(self, config: FriConfig = DEFAULT_CONFIG) -> None:
        config.validate()
        self.config = config

    def prove(self, data: bytes, seed: Optional[int] = None) -> Tuple[Commitment, Proof]:
        """Generate the commitment and a sampling proof for ``data``."""
        cfg = self.config
        check_seed(seed)
        if cfg.batch_size != 1:
            raise InvalidInputError(f"Config has batch_size {cfg.batch_size}; use prove_batch")

        log_size_bound = log_size_for(len(data))
        domain = domain_for(1 << log_size_bound, cfg.blowup_log)

        # --- Commit ---
        _, evals = encode_and_extend(data, cfg.blowup_log)
        root, tree = commit_evaluations(evals, expected_size=domain.size)
        commitment = Commitment(
            root=root,
            metadata=CommitmentMetadata(
                domain_size=domain.size,
                expansion_factor=cfg.expansion_factor,
                batch_size=1,
            ),
        )
        logger.debug("Committed %d bytes over a 2^%d domain", len(data), domain.log_size)

        proof = self._prove_committed(tree, [evals], log_size_bound, domain, seed)
        return commitment, proof

    def prove_batch(self, blobs: Sequence[bytes], seed: Optional[int] = None) -> Tuple[Commitment, Proof]:
        """Generate the batched commitment and one sampling proof for ``blobs``.

        The codewords are combined with powers of a transcript challenge drawn
        right after the root and seed; FRI then runs on the combination while
        every query opens the full interleaved leaf.
        """
        cfg = self.config
        check_seed(seed)
        if len(blobs) != cfg.batch_size:
            raise InvalidInputError(f"Config expects {cfg.batch_size} blobs, got {len(blobs)}")

        n_coeffs, columns = encode_and_extend_batch(blobs, cfg.blowup_log)
        log_size_bound = n_coeffs.bit_length() - 1
        domain = domain_for(n_coeffs, cfg.blowup_log)

        # --- Commit ---
        root, tree = commit_evaluations(interleave(columns), expected_size=domain.size, width=len(blobs))
        commitment = Commitment(
            root=root,
            metadata=CommitmentMetadata(
                domain_size=domain.size,
                expansion_factor=cfg.expansion_factor,
                batch_size=len(blobs),
            ),
        )
        logger.debug("Committed %d blobs over a 2^%d domain", len(blobs), domain.log_size)

        proof = self._prove_committed(tree, columns, log_size_bound, domain, seed)
        return commitment, proof

    def _prove_committed(
        self,
        tree: MerkleTree,
        columns: List[FF],
        log_size_bound: int,
        domain: EvaluationDomain,
        seed: Optional[int],
    ) -> Proof:
        """FRI over committed codewords; ``tree`` leaves hold one value per column."""
        cfg = self.config
        root = tree.get_root()
        n_rounds = cfg.num_rounds(log_size_bound)
        batched = len(columns) > 1

        transcript = start_transcript(root, seed)
        if batched:
            evals = FRI.combine(columns, transcript.get_field())
        else:
            evals = columns[0]

        # --- Fold Loop ---
        # Each iteration: derive challenge -> fold -> commit all but the last layer
        layer_values: List[FF] = []
        layer_trees: List[MerkleTree] = []
        current, current_domain = evals, domain

        for rnd in range(n_rounds):
            challenge = transcript.get_field()
            current = FRI.fold(current, current_domain, cfg.fold_log, challenge)
            current_domain = current_domain.fold(cfg.fold_log)

            if rnd < n_rounds - 1:
                layer_tree = FRI.merkelize(current, cfg.fold_log)
                transcript.put(layer_tree.get_root())
                layer_values.append(current)
                layer_trees.append(layer_tree)

        # --- Finalize ---
        final_layer = [int(v) for v in current]
        transcript.put_elements(final_layer)

        # --- Grinding (proof-of-work) ---
        nonce = transcript.grind(cfg.pow_bits)
        transcript.put_u64(nonce)

        # --- Query Phase ---
        positions = transcript.sample_positions(cfg.num_queries, domain.size)
        query_info = [self._open_position(p, evals, tree, batched) for p in positions]
        sibling_info = [self._siblings(q, evals, tree, domain, n_rounds, batched) for q in positions]
        inner_layers = [
            FriLayerProof(
                root=layer_tree.get_root(),
                openings=[self._open_group(q, values, layer_tree) for q in positions],
            )
            for values, layer_tree in zip(layer_values, layer_trees)
        ]

        logger.debug(
            "Proof for seed %s: %d rounds, %d queries, nonce %d", seed, n_rounds, len(positions), nonce
        )
        return Proof(
            root=root,
            query_info=query_info,
            sibling_info=sibling_info,
            inner_layers=inner_layers,
            final_layer=final_layer,
            proof_of_work=nonce,
            log_size_bound=log_size_bound,
            config=cfg,
            seed=seed,
        )

    @staticmethod
    def _open_position(position: int, evals: FF, tree: MerkleTree, batched: bool) -> QueryInfo:
        """Open one codeword leaf; batched leaves also expose their columns."""
        columns = tree.get_leaf(position) if batched else []
        return QueryInfo(position, int(evals[position]), tree.get_auth_path(position), columns)

    def _siblings(
        self,
        position: int,
        evals: FF,
        tree: MerkleTree,
        domain: EvaluationDomain,
        n_rounds: int,
        batched: bool,
    ) -> List[QueryInfo]:
        """Open the rest of the first-layer fold group of ``position``."""
        if n_rounds == 0:
            return []
        group, _ = FRI.group_of(position, domain.size, self.config.fold_log)
        return [
            self._open_position(p, evals, tree, batched)
            for p in FRI.group_positions(group, domain.size, self.config.fold_log)
            if p != position
        ]

    def _open_group(self, position: int, values: FF, tree: MerkleTree) -> LayerOpening:
        """Open the fold group of ``position`` in a committed inner layer."""
        group, _ = FRI.group_of(position % len(values), len(values), self.config.fold_log)
        return LayerOpening(group, tree.get_leaf(group), tree.get_auth_path(group))


def commit_and_generate_proof(
    data: bytes,
    seed: Optional[int] = None,
    config: FriConfig = DEFAULT_CONFIG,
) -> Tuple[Commitment, Proof]:
    """Commitment and proof in one pass over the data."""
    return FriProver(config).prove(data, seed)


def generate_proof(data: bytes, seed: Optional[int] = None, config: FriConfig = DEFAULT_CONFIG) -> Proof:
    """Generate a sampling proof for ``data``."""
    return FriProver(config).prove(data, seed)[1]


def generate_proofs(
    data: bytes,
    seeds: Sequence[int],
    config: FriConfig = DEFAULT_CONFIG,
    max_workers: Optional[int] = None,
) -> List[Proof]:
    """Generate one proof per seed in a thread pool.

    Proofs are returned in the order of ``seeds``.
    """
    for seed in seeds:
        check_seed(seed)
    prover = FriProver(config)
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        return [proof for _, proof in ex.map(lambda s: prover.prove(data, s), seeds)]


def generate_batch_proof(
    blobs: Sequence[bytes],
    seed: Optional[int] = None,
    config: FriConfig = DEFAULT_CONFIG,
) -> Tuple[Commitment, Proof]:
    """Batched commitment to ``blobs`` and one sampling proof over all of them."""
    return FriProver(config).prove_batch(blobs, seed)
