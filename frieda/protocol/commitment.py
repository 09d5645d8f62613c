"""Commitments to extended codewords."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from frieda.config import DEFAULT_CONFIG, FriConfig
from frieda.errors import InvalidInputError
from frieda.primitives.codec import coefficient_count, encode
from frieda.primitives.field import FF, FIELD_DESCRIPTOR
from frieda.primitives.hashing import HASH_SIZE
from frieda.primitives.merkle_tree import MerkleRoot, MerkleTree, interleave
from frieda.primitives.polynomial import pad
from frieda.protocol.lde import extend


@dataclass(frozen=True)
class CommitmentMetadata:
    """Parameters a verifier needs to rebuild the committed domain."""
    domain_size: int
    expansion_factor: int
    batch_size: int = 1
    field_descriptor: str = FIELD_DESCRIPTOR

    def __post_init__(self) -> None:
        if self.domain_size < 1 or self.domain_size & (self.domain_size - 1):
            raise InvalidInputError(f"Domain size must be a power of two, got {self.domain_size}")
        if self.expansion_factor < 1:
            raise InvalidInputError(f"Expansion factor must be at least 1, got {self.expansion_factor}")
        if self.batch_size < 1:
            raise InvalidInputError(f"Batch size must be at least 1, got {self.batch_size}")

    @property
    def coefficient_count(self) -> int:
        return self.domain_size // self.expansion_factor


@dataclass(frozen=True)
class Commitment:
    """Published commitment: Merkle root plus domain metadata."""
    root: MerkleRoot
    metadata: CommitmentMetadata = field(default_factory=lambda: CommitmentMetadata(1, 1))

    def __post_init__(self) -> None:
        if len(self.root) != HASH_SIZE:
            raise InvalidInputError(f"Commitment root must be {HASH_SIZE} bytes, got {len(self.root)}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root.hex(),
            "metadata": {
                "domain_size": self.metadata.domain_size,
                "expansion_factor": self.metadata.expansion_factor,
                "batch_size": self.metadata.batch_size,
                "field_descriptor": self.metadata.field_descriptor,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Commitment":
        try:
            meta = data["metadata"]
            return cls(
                root=bytes.fromhex(data["root"]),
                metadata=CommitmentMetadata(
                    domain_size=int(meta["domain_size"]),
                    expansion_factor=int(meta["expansion_factor"]),
                    batch_size=int(meta.get("batch_size", 1)),
                    field_descriptor=str(meta.get("field_descriptor", FIELD_DESCRIPTOR)),
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"Malformed commitment: {e}") from e


def commit_evaluations(
    evaluations: Sequence[int],
    expected_size: Optional[int] = None,
    width: int = 1,
) -> Tuple[MerkleRoot, MerkleTree]:
    """Build the Merkle tree over an evaluation vector.

    Args:
        evaluations: Flattened leaves, ``width`` values per leaf
        expected_size: Number of leaves the caller's domain implies
        width: Values per leaf (the batch size for interleaved codewords)

    Raises:
        InvalidInputError: If the leaf count does not match ``expected_size``
    """
    n_leaves = len(evaluations) // width
    if expected_size is not None and (n_leaves != expected_size or len(evaluations) % width):
        raise InvalidInputError(
            f"Evaluation count {len(evaluations)} does not match domain size {expected_size}"
        )
    tree = MerkleTree()
    tree.merkelize(evaluations, n_leaves, width)
    return tree.get_root(), tree


def encode_and_extend(data: bytes, blowup_log: int) -> Tuple[FF, FF]:
    """Encode bytes and extend them; returns (coefficients, evaluations)."""
    coeffs = encode(data)
    return coeffs, extend(coeffs, blowup_log)


def commit(data: bytes, config: FriConfig = DEFAULT_CONFIG) -> Commitment:
    """Commit to a byte blob."""
    _, evals = encode_and_extend(data, config.blowup_log)
    root, _ = commit_evaluations(evals, expected_size=len(evals))
    return Commitment(
        root=root,
        metadata=CommitmentMetadata(
            domain_size=len(evals),
            expansion_factor=config.expansion_factor,
            batch_size=1,
        ),
    )


def encode_and_extend_batch(blobs: Sequence[bytes], blowup_log: int) -> Tuple[int, List[FF]]:
    """Encode blobs to a common coefficient count and extend each.

    Returns:
        (coefficient count, one extended codeword per blob)
    """
    if not blobs:
        raise InvalidInputError("Cannot commit to an empty batch")
    n_coeffs = max(coefficient_count(len(b)) for b in blobs)
    return n_coeffs, [extend(pad(encode(b), n_coeffs), blowup_log) for b in blobs]


def commit_batch(blobs: Sequence[bytes], config: FriConfig = DEFAULT_CONFIG) -> Tuple[Commitment, MerkleTree]:
    """Commit jointly to several blobs under one root.

    Every blob is padded to the longest blob's coefficient count, extended,
    and the codewords are interleaved position-wise: leaf i holds the i-th
    evaluation of every blob, in blob order.
    """
    _, columns = encode_and_extend_batch(blobs, config.blowup_log)
    domain_size = len(columns[0])

    root, tree = commit_evaluations(interleave(columns), expected_size=domain_size, width=len(blobs))
    commitment = Commitment(
        root=root,
        metadata=CommitmentMetadata(
            domain_size=domain_size,
            expansion_factor=config.expansion_factor,
            batch_size=len(blobs),
        ),
    )
    return commitment, tree
