"""Protocol - Commitment, FRI proving/verification, sampling and reconstruction."""

from frieda.protocol.commitment import (
    Commitment,
    CommitmentMetadata,
    commit,
    commit_batch,
    commit_evaluations,
    encode_and_extend_batch,
)
from frieda.protocol.fri import FRI
from frieda.protocol.lde import domain_for, extend
from frieda.protocol.proof import (
    FriLayerProof,
    LayerOpening,
    Proof,
    QueryInfo,
    load_proof_from_json,
    proof_from_json,
    proof_to_json,
    save_proof_json,
)
from frieda.protocol.prover import (
    FriProver,
    commit_and_generate_proof,
    generate_batch_proof,
    generate_proof,
    generate_proofs,
)
from frieda.protocol.reconstruct import (
    build_subproduct_tree,
    evaluate_on_tree,
    fast_interpolation,
    reconstruct,
    reconstruct_batch,
    reconstruct_polynomial,
)
from frieda.protocol.sampling import (
    SampleResult,
    aggregate_sampling,
    proofs_needed,
    sample_result_from_proof,
    samples_of,
    samples_needed,
)
from frieda.protocol.verifier import verify_proof

__all__ = [
    # Commitment
    "Commitment",
    "CommitmentMetadata",
    "commit",
    "commit_batch",
    "commit_evaluations",
    "encode_and_extend_batch",
    # LDE
    "domain_for",
    "extend",
    # FRI
    "FRI",
    "FriProver",
    "generate_proof",
    "generate_proofs",
    "generate_batch_proof",
    "commit_and_generate_proof",
    "verify_proof",
    # Proof
    "Proof",
    "QueryInfo",
    "LayerOpening",
    "FriLayerProof",
    "proof_to_json",
    "proof_from_json",
    "save_proof_json",
    "load_proof_from_json",
    # Sampling
    "SampleResult",
    "samples_needed",
    "proofs_needed",
    "sample_result_from_proof",
    "samples_of",
    "aggregate_sampling",
    # Reconstruction
    "build_subproduct_tree",
    "evaluate_on_tree",
    "fast_interpolation",
    "reconstruct_polynomial",
    "reconstruct",
    "reconstruct_batch",
]
