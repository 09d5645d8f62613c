"""Binary Merkle tree commitment using Blake2s."""

from typing import List, Optional, Sequence

import numpy as np

from frieda.errors import InvalidInputError
from frieda.primitives.hashing import HASH_SIZE, hash_pair, hash_values

# --- Type Aliases ---

MerkleRoot = bytes
AuthPath = List[bytes]


# --- Data Layout ---

def transpose_for_merkle(data: Sequence[int], n_values: int, width: int) -> List[int]:
    """Reorder ``width`` strided runs of length ``n_values // width`` into rows.

    Element ``g + i * (n_values // width)`` lands at ``g * width + i``, so the
    values sharing a Merkle leaf become contiguous. Used both to group FRI
    fold cosets and to interleave batched columns.
    """
    h = n_values // width
    result = np.array([int(x) for x in data], dtype=object).reshape(width, h).transpose(1, 0).flatten()
    return list(result)


def interleave(columns: Sequence[Sequence[int]]) -> List[int]:
    """Interleave equal-length columns position-wise.

    ``interleave([a, b]) == [a[0], b[0], a[1], b[1], ...]``
    """
    if not columns:
        raise InvalidInputError("Nothing to interleave")
    length = len(columns[0])
    if any(len(col) != length for col in columns):
        raise InvalidInputError("Cannot interleave columns of different lengths")
    flat = [int(x) for col in columns for x in col]
    return transpose_for_merkle(flat, length * len(columns), len(columns))


def unbatch(values: Sequence[int], batch_size: int) -> List[List[int]]:
    """Left inverse of :func:`interleave`."""
    if batch_size < 1 or len(values) % batch_size:
        raise InvalidInputError(f"Cannot split {len(values)} values into {batch_size} columns")
    return [[int(x) for x in values[j::batch_size]] for j in range(batch_size)]


# --- Merkle Tree ---

class MerkleTree:
    """Binary Merkle tree over rows of field elements.

    Leaf i = H(serialize(row i)); parent = H(left || right). A level with an
    odd number of nodes pairs its last node with itself.

    Nodes live in one flat list, level by level from the leaves up;
    ``level_offsets[l]`` is where level l starts.
    """

    def __init__(self) -> None:
        self.height = 0
        self.width = 0
        self.nodes: List[bytes] = []
        self.level_offsets: List[int] = []
        self.level_sizes: List[int] = []

        # Source rows for opening leaf values
        self.source_data: Optional[List[int]] = None

    # --- Core Operations ---

    def merkelize(self, source: Sequence[int], height: int, width: int = 1) -> None:
        """Build Merkle tree from source data.

        Args:
            source: Flattened leaf data (height * width elements)
            height: Number of leaves (rows)
            width: Elements per leaf
        """
        if height < 1 or width < 1:
            raise InvalidInputError(f"Cannot build a Merkle tree of {height} leaves of width {width}")
        if len(source) != height * width:
            raise InvalidInputError(
                f"Expected {height * width} elements for {height} leaves of width {width}, got {len(source)}"
            )

        self.height = height
        self.width = width
        self.source_data = [int(x) for x in source]

        self.nodes = [hash_values(self.source_data[i * width:(i + 1) * width]) for i in range(height)]
        self.level_offsets = [0]
        self.level_sizes = [height]

        # Build internal nodes bottom-up
        offset, pending = 0, height
        while pending > 1:
            for i in range(0, pending, 2):
                left = self.nodes[offset + i]
                right = self.nodes[offset + i + 1] if i + 1 < pending else left
                self.nodes.append(hash_pair(left, right))
            offset += pending
            pending = (pending + 1) // 2
            self.level_offsets.append(offset)
            self.level_sizes.append(pending)

    @classmethod
    def from_values(cls, values: Sequence[int], width: int = 1) -> "MerkleTree":
        tree = cls()
        tree.merkelize(values, len(values) // width, width)
        return tree

    def get_root(self) -> MerkleRoot:
        """Return the Merkle root commitment."""
        if not self.nodes:
            return bytes(HASH_SIZE)
        return self.nodes[-1]

    @property
    def depth(self) -> int:
        """Authentication path length."""
        return len(self.level_sizes) - 1

    def get_leaf(self, idx: int) -> List[int]:
        """Return the values stored at leaf ``idx``."""
        self._check_index(idx)
        return self.source_data[idx * self.width:(idx + 1) * self.width]

    def get_auth_path(self, idx: int) -> AuthPath:
        """Sibling digests from leaf ``idx`` up to (excluding) the root."""
        self._check_index(idx)
        path: AuthPath = []
        for offset, size in zip(self.level_offsets[:-1], self.level_sizes[:-1]):
            sibling = idx ^ 1
            if sibling >= size:
                sibling = idx
            path.append(self.nodes[offset + sibling])
            idx >>= 1
        return path

    def _check_index(self, idx: int) -> None:
        if self.source_data is None:
            raise InvalidInputError("Merkle tree has not been built")
        if idx < 0 or idx >= self.height:
            raise InvalidInputError(f"Query index {idx} out of range [0, {self.height})")


# --- Verification ---

def verify_inclusion(leaf: bytes, idx: int, path: Sequence[bytes], root: MerkleRoot) -> bool:
    """Recompute the root from a leaf digest and its authentication path.

    At each level an even index means the running digest is the left child.
    The index must be fully consumed by the path, so one path cannot
    authenticate two different positions.
    """
    if idx < 0:
        return False
    node = leaf
    for sibling in path:
        if len(sibling) != HASH_SIZE:
            return False
        if idx & 1:
            node = hash_pair(sibling, node)
        else:
            node = hash_pair(node, sibling)
        idx >>= 1
    return idx == 0 and node == root


def verify_values(values: Sequence[int], idx: int, path: Sequence[bytes], root: MerkleRoot) -> bool:
    """:func:`verify_inclusion` for the leaf holding ``values``."""
    return verify_inclusion(hash_values(values), idx, path, root)
