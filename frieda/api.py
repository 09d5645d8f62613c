"""Caller-facing entry points: commit, generate_proof, verify, reconstruct."""

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from frieda.config import DEFAULT_CONFIG, FriConfig
from frieda.protocol import commitment as _commitment
from frieda.protocol.commitment import Commitment
from frieda.protocol.proof import Proof
from frieda.protocol.prover import commit_and_generate_proof, generate_batch_proof as _generate_batch_proof
from frieda.protocol.prover import generate_proof as _generate_proof
from frieda.protocol.reconstruct import reconstruct as _reconstruct, reconstruct_batch as _reconstruct_batch
from frieda.protocol.verifier import verify_proof


def _expected(config: Optional[FriConfig], batch_size: int) -> FriConfig:
    """The caller's parameters, or the defaults sized for ``batch_size`` blobs."""
    if config is not None:
        return config
    return replace(DEFAULT_CONFIG, batch_size=batch_size)


def commit(data: bytes, blowup_log: Optional[int] = None, config: Optional[FriConfig] = None) -> Commitment:
    """Commit to ``data`` with an expansion factor of 2^blowup_log.

    ``blowup_log`` overrides the one in ``config`` when both are given.
    """
    cfg = config or DEFAULT_CONFIG
    if blowup_log is not None and blowup_log != cfg.blowup_log:
        cfg = replace(cfg, blowup_log=blowup_log)
    return _commitment.commit(data, cfg)


def generate_proof(data: bytes, seed: Optional[int] = None, config: Optional[FriConfig] = None) -> Proof:
    """Sampling proof for ``data``; the seed diversifies the sampled positions."""
    return _generate_proof(data, seed, config or DEFAULT_CONFIG)


def generate_batch_proof(
    blobs: Sequence[bytes],
    seed: Optional[int] = None,
    config: Optional[FriConfig] = None,
) -> Tuple[Commitment, Proof]:
    """Batched commitment to ``blobs`` and one sampling proof covering all of them."""
    return _generate_batch_proof(blobs, seed, _expected(config, len(blobs)))


def verify(
    proof: Proof,
    seed: Optional[int] = None,
    commitment: Optional[Commitment] = None,
    config: Optional[FriConfig] = None,
) -> bool:
    """True iff ``proof`` verifies for ``seed`` (and ``commitment``, if given).

    The proof must have been made with ``config``; without one, the default
    parameters are required.
    """
    return verify_proof(proof, seed, commitment, _expected(config, proof.config.batch_size))


def reconstruct(proofs: Iterable[Proof], length: Optional[int] = None, config: Optional[FriConfig] = None) -> bytes:
    """Original bytes from enough verified, independently seeded proofs."""
    return _reconstruct(proofs, length, config=_expected(config, 1))


def reconstruct_batch(
    proofs: Iterable[Proof],
    lengths: Optional[Sequence[int]] = None,
    config: Optional[FriConfig] = None,
) -> List[bytes]:
    """Every blob of a batched commitment, from enough verified proofs."""
    proofs = list(proofs)
    batch_size = proofs[0].config.batch_size if proofs else 1
    return _reconstruct_batch(proofs, lengths, config=_expected(config, batch_size))


__all__ = [
    "commit",
    "generate_proof",
    "generate_batch_proof",
    "verify",
    "reconstruct",
    "reconstruct_batch",
    "commit_and_generate_proof",
]
