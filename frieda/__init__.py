"""FRI-based data availability sampling over the Goldilocks field."""

from frieda.api import (
    commit,
    commit_and_generate_proof,
    generate_batch_proof,
    generate_proof,
    reconstruct,
    reconstruct_batch,
    verify,
)
from frieda.config import DEFAULT_CONFIG, FriConfig
from frieda.errors import DecodingError, FriedaError, InvalidInputError, VerificationFailedError
from frieda.protocol.commitment import Commitment, CommitmentMetadata
from frieda.protocol.proof import Proof, QueryInfo

__version__ = "0.1.0"

__all__ = [
    "commit",
    "generate_proof",
    "generate_batch_proof",
    "verify",
    "reconstruct",
    "reconstruct_batch",
    "commit_and_generate_proof",
    "FriConfig",
    "DEFAULT_CONFIG",
    "Commitment",
    "CommitmentMetadata",
    "Proof",
    "QueryInfo",
    "FriedaError",
    "InvalidInputError",
    "VerificationFailedError",
    "DecodingError",
]
