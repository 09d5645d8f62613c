"""Primitives - Low-level cryptographic and mathematical building blocks."""

from frieda.primitives.codec import BITS_PER_ELEMENT, decode, encode
from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import (
    FF,
    FIELD_DESCRIPTOR,
    GOLDILOCKS_PRIME,
    SHIFT,
    SHIFT_INV,
    batch_inverse,
    get_omega,
    get_omega_inv,
)
from frieda.primitives.hashing import HASH_SIZE, grinding, hash_values, verify_grinding
from frieda.primitives.merkle_tree import (
    AuthPath,
    MerkleRoot,
    MerkleTree,
    interleave,
    transpose_for_merkle,
    unbatch,
    verify_inclusion,
    verify_values,
)
from frieda.primitives.ntt import NTT, intt, ntt
from frieda.primitives.transcript import Transcript

__all__ = [
    # Field
    "FF",
    "FIELD_DESCRIPTOR",
    "GOLDILOCKS_PRIME",
    "SHIFT",
    "SHIFT_INV",
    "get_omega",
    "get_omega_inv",
    "batch_inverse",
    # NTT
    "NTT",
    "ntt",
    "intt",
    "EvaluationDomain",
    # Codec
    "BITS_PER_ELEMENT",
    "encode",
    "decode",
    # Hashing
    "HASH_SIZE",
    "hash_values",
    "grinding",
    "verify_grinding",
    # Merkle Tree
    "MerkleTree",
    "MerkleRoot",
    "AuthPath",
    "transpose_for_merkle",
    "interleave",
    "unbatch",
    "verify_inclusion",
    "verify_values",
    # Transcript
    "Transcript",
]
