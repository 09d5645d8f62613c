"""
Sampling Proof Tests
====================

Run: python -m pytest tests/test_proof.py -v

Generates proofs with FriProver and checks that verify_proof accepts them,
and rejects every single-field tampering of an otherwise valid proof.
"""

import copy
import json

import pytest

import frieda
from frieda.config import FriConfig
from frieda.errors import InvalidInputError
from frieda.primitives.field import GOLDILOCKS_PRIME
from frieda.protocol.commitment import commit_batch, encode_and_extend_batch
from frieda.protocol.prover import (
    FriProver,
    commit_and_generate_proof,
    generate_batch_proof,
    generate_proof,
    generate_proofs,
)
from frieda.protocol.proof import Proof, proof_from_json, proof_to_json, validate_proof_structure
from frieda.protocol.verifier import _verify_final_layer, verify_proof

SEED = 1


@pytest.fixture
def proof(blob: bytes, fast_config: FriConfig) -> Proof:
    return generate_proof(blob, SEED, fast_config)


class TestProveVerify:

    def test_valid_proof_verifies(self, proof: Proof) -> None:
        assert verify_proof(proof, SEED)

    def test_proof_shape(self, proof: Proof, fast_config: FriConfig) -> None:
        # 512 bytes -> 2^7 coefficients -> 2^9 domain, 7 rounds of 2
        assert proof.log_size_bound == 7
        assert proof.domain_log_size == 9
        assert len(proof.query_info) == fast_config.num_queries
        assert len(proof.inner_layers) == 6
        assert len(proof.final_layer) == 4
        assert all(len(s) == 1 for s in proof.sibling_info)
        assert validate_proof_structure(proof) == []

    def test_final_layer_constant(self, proof: Proof) -> None:
        assert len(set(proof.final_layer)) == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"fold_log": 2, "final_degree_bound": 4},
            {"fold_log": 3},
            {"final_degree_bound": 8},
            {"blowup_log": 1, "fold_log": 2},
            {"final_degree_bound": 256},
        ],
    )
    def test_other_configurations(self, blob: bytes, overrides: dict) -> None:
        config = FriConfig(**{"blowup_log": 2, "num_queries": 12, "pow_bits": 2, **overrides})
        proof = generate_proof(blob, 3, config)
        assert verify_proof(proof, 3)

    def test_no_seed(self, small_blob: bytes, fast_config: FriConfig) -> None:
        proof = generate_proof(small_blob, None, fast_config)
        assert verify_proof(proof)
        assert not verify_proof(proof, 0)

    def test_commitment_matches(self, blob: bytes, fast_config: FriConfig) -> None:
        commitment, proof = commit_and_generate_proof(blob, SEED, fast_config)
        assert commitment.root == proof.root
        assert commitment == frieda.commit(blob, config=fast_config)
        assert verify_proof(proof, SEED, commitment)

    def test_foreign_commitment_rejected(self, blob: bytes, fast_config: FriConfig) -> None:
        proof = generate_proof(blob, SEED, fast_config)
        other = frieda.commit(bytes(len(blob)), config=fast_config)
        assert not verify_proof(proof, SEED, other)

    def test_commitment_domain_mismatch_rejected(self, blob: bytes, fast_config: FriConfig) -> None:
        commitment, proof = commit_and_generate_proof(blob, SEED, fast_config)
        wider = frieda.commit(blob, 3)
        assert not verify_proof(proof, SEED, frieda.Commitment(commitment.root, wider.metadata))

    def test_invalid_seed(self, small_blob: bytes) -> None:
        with pytest.raises(InvalidInputError):
            generate_proof(small_blob, -1)
        with pytest.raises(InvalidInputError):
            generate_proof(small_blob, 1 << 64)


class TestVerifierStrictness:
    """Every tampering of a valid proof must be rejected."""

    def test_proof_of_work_incremented(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.proof_of_work += 1
        assert not verify_proof(tampered, SEED)

    def test_evaluations_reversed(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        for query, value in zip(tampered.query_info, reversed(proof.evaluations)):
            query.value = value
        assert tampered.evaluations != proof.evaluations
        assert not verify_proof(tampered, SEED)

    def test_query_order_reversed(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.query_info.reverse()
        tampered.sibling_info.reverse()
        assert not verify_proof(tampered, SEED)

    def test_evaluations_swapped(self, proof: Proof) -> None:
        values = proof.evaluations
        i, j = next((a, b) for a in range(len(values)) for b in range(a + 1, len(values)) if values[a] != values[b])
        tampered = copy.deepcopy(proof)
        tampered.query_info[i].value, tampered.query_info[j].value = values[j], values[i]
        assert not verify_proof(tampered, SEED)

    def test_evaluation_incremented(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.query_info[0].value = (tampered.query_info[0].value + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_evaluations_truncated(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.query_info = tampered.query_info[:-1]
        with pytest.raises(InvalidInputError):
            verify_proof(tampered, SEED)

    def test_wrong_seed(self, proof: Proof) -> None:
        assert not verify_proof(proof, SEED + 1)

    def test_sibling_tampered(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.sibling_info[3][0].value = (tampered.sibling_info[3][0].value + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_auth_path_tampered(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        path = tampered.query_info[2].auth_path
        path[1] = bytes(32)
        assert not verify_proof(tampered, SEED)

    def test_inner_layer_value_tampered(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        opening = tampered.inner_layers[2].openings[5]
        opening.values[0] = (opening.values[0] + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_inner_layer_root_tampered(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.inner_layers[0].root = bytes(32)
        assert not verify_proof(tampered, SEED)

    def test_final_layer_tampered(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.final_layer[0] = (tampered.final_layer[0] + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_root_tampered(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.root = bytes(32)
        assert not verify_proof(tampered, SEED)

    def test_missing_layer_is_malformed(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.inner_layers.pop()
        with pytest.raises(InvalidInputError):
            verify_proof(tampered, SEED)

    def test_final_layer_length_is_malformed(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.final_layer.append(0)
        with pytest.raises(InvalidInputError):
            verify_proof(tampered, SEED)

    def test_negative_log_size_bound_is_malformed(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.log_size_bound = -1
        assert validate_proof_structure(tampered)
        with pytest.raises(InvalidInputError):
            verify_proof(tampered, SEED)


class TestFinalLayerDegree:

    def test_constant_accepted(self, proof: Proof) -> None:
        assert _verify_final_layer(proof, 7)

    def test_non_constant_rejected(self, proof: Proof) -> None:
        tampered = copy.deepcopy(proof)
        tampered.final_layer = [1, 2, 3, 4]
        assert not _verify_final_layer(tampered, 7)

    def test_high_degree_rejected(self, blob: bytes) -> None:
        config = FriConfig(blowup_log=2, num_queries=4, pow_bits=0, fold_log=2, final_degree_bound=4)
        proof = generate_proof(blob, SEED, config)
        assert _verify_final_layer(proof, 3)

        tampered = copy.deepcopy(proof)
        tampered.final_layer = [(v + i * i) % GOLDILOCKS_PRIME for i, v in enumerate(proof.final_layer)]
        assert not _verify_final_layer(tampered, 3)


class TestSeeds:

    def test_seed_independence(self, blob: bytes, fast_config: FriConfig) -> None:
        proof_1 = generate_proof(blob, 1, fast_config)
        proof_2 = generate_proof(blob, 2, fast_config)

        assert proof_1.evaluations != proof_2.evaluations
        assert proof_1.root == proof_2.root
        assert verify_proof(proof_1, 1) and not verify_proof(proof_1, 2)
        assert verify_proof(proof_2, 2) and not verify_proof(proof_2, 1)

    def test_deterministic(self, blob: bytes, fast_config: FriConfig) -> None:
        assert generate_proof(blob, 7, fast_config) == generate_proof(blob, 7, fast_config)

    def test_parallel_generation(self, blob: bytes, fast_config: FriConfig) -> None:
        seeds = [4, 5, 6]
        proofs = generate_proofs(blob, seeds, fast_config, max_workers=3)

        assert [p.seed for p in proofs] == seeds
        for seed, proof in zip(seeds, proofs):
            assert proof == FriProver(fast_config).prove(blob, seed)[1]
            assert verify_proof(proof, seed)


class TestEndToEnd:

    def test_32_byte_scenario(self) -> None:
        data = bytes(range(32))
        config = FriConfig(blowup_log=4, num_queries=20, pow_bits=0)

        commitment = frieda.commit(data, 4)
        proof = frieda.generate_proof(data, 1, config)

        assert commitment.root == proof.root
        assert frieda.verify(proof, 1, config=config)
        assert frieda.verify(proof, 1, commitment, config)
        assert not frieda.verify(proof, 2, config=config)

    def test_default_parameters(self, small_blob: bytes) -> None:
        proof = frieda.generate_proof(small_blob, 1)
        assert frieda.verify(proof, 1)


class TestRequiredParameters:
    """A verifier holding its own parameters rejects proofs made with others."""

    def test_weakened_proof_rejected(self, blob: bytes) -> None:
        required = FriConfig(blowup_log=2, num_queries=40, pow_bits=8)
        weak = FriConfig(blowup_log=2, num_queries=1, pow_bits=0)

        commitment = frieda.commit(blob, config=required)
        proof = generate_proof(blob, SEED, weak)

        assert proof.root == commitment.root
        assert not verify_proof(proof, SEED, commitment, required)
        assert not frieda.verify(proof, SEED, commitment, required)

    def test_matching_parameters_accepted(self, proof: Proof, fast_config: FriConfig) -> None:
        assert verify_proof(proof, SEED, config=fast_config)
        assert verify_proof(proof, SEED, config=FriConfig(**fast_config.to_dict()))

    @pytest.mark.parametrize("field_name,value", [("num_queries", 21), ("pow_bits", 5), ("final_degree_bound", 2)])
    def test_any_difference_rejected(self, proof: Proof, fast_config: FriConfig, field_name: str, value: int) -> None:
        required = FriConfig(**{**fast_config.to_dict(), field_name: value})
        assert not verify_proof(proof, SEED, config=required)

    def test_api_defaults_required(self, small_blob: bytes, fast_config: FriConfig) -> None:
        proof = generate_proof(small_blob, SEED, fast_config)
        assert not frieda.verify(proof, SEED)
        assert frieda.verify(proof, SEED, config=fast_config)


BLOBS = [bytes(range(40)), bytes(range(100, 160)), b"frieda" * 5]


@pytest.fixture
def batch_config() -> FriConfig:
    return FriConfig(blowup_log=2, num_queries=12, pow_bits=2, batch_size=len(BLOBS))


class TestBatchedProofs:

    @pytest.fixture
    def batched(self, batch_config: FriConfig):
        return generate_batch_proof(BLOBS, SEED, batch_config)

    def test_verifies(self, batched, batch_config: FriConfig) -> None:
        commitment, proof = batched
        assert verify_proof(proof, SEED, commitment, batch_config)
        assert frieda.verify(proof, SEED, commitment, batch_config)
        assert not verify_proof(proof, SEED + 1, commitment, batch_config)

    def test_commitment_matches_commit_batch(self, batched, batch_config: FriConfig) -> None:
        commitment, _ = batched
        assert commitment == commit_batch(BLOBS, batch_config)[0]
        assert commitment.metadata.batch_size == len(BLOBS)

    def test_leaves_open_every_blob(self, batched, batch_config: FriConfig) -> None:
        _, proof = batched
        _, columns = encode_and_extend_batch(BLOBS, batch_config.blowup_log)
        for q in proof.query_info + [s for sib in proof.sibling_info for s in sib]:
            assert q.columns == [int(c[q.index]) for c in columns]

    @pytest.mark.parametrize("n_blobs,fold_log", [(2, 1), (4, 2)])
    def test_larger_batches(self, blob: bytes, n_blobs: int, fold_log: int) -> None:
        blobs = [bytes((b + j) % 256 for b in blob) for j in range(n_blobs)]
        config = FriConfig(blowup_log=2, num_queries=10, pow_bits=2, fold_log=fold_log, batch_size=n_blobs)

        commitment, proof = generate_batch_proof(blobs, 5, config)

        assert len(proof.inner_layers) > 0
        assert verify_proof(proof, 5, commitment, config)

    def test_column_tampered(self, batched) -> None:
        _, proof = batched
        tampered = copy.deepcopy(proof)
        tampered.query_info[0].columns[1] = (tampered.query_info[0].columns[1] + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_combined_value_tampered(self, batched) -> None:
        _, proof = batched
        tampered = copy.deepcopy(proof)
        tampered.query_info[0].value = (tampered.query_info[0].value + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_sibling_column_tampered(self, batched) -> None:
        _, proof = batched
        tampered = copy.deepcopy(proof)
        tampered.sibling_info[2][0].columns[0] = (tampered.sibling_info[2][0].columns[0] + 1) % GOLDILOCKS_PRIME
        assert not verify_proof(tampered, SEED)

    def test_missing_columns_is_malformed(self, batched) -> None:
        _, proof = batched
        tampered = copy.deepcopy(proof)
        tampered.query_info[3].columns = tampered.query_info[3].columns[:-1]
        with pytest.raises(InvalidInputError):
            verify_proof(tampered, SEED)

    def test_commitment_batch_size_mismatch(self, batched) -> None:
        commitment, proof = batched
        meta = commitment.metadata
        other = frieda.Commitment(
            commitment.root,
            frieda.CommitmentMetadata(meta.domain_size, meta.expansion_factor, batch_size=2),
        )
        assert not verify_proof(proof, SEED, other)

    def test_json_roundtrip(self, batched) -> None:
        _, proof = batched
        restored = proof_from_json(json.loads(json.dumps(proof_to_json(proof))))
        assert restored == proof
        assert verify_proof(restored, SEED)

    def test_blob_count_must_match(self, batch_config: FriConfig) -> None:
        with pytest.raises(InvalidInputError):
            FriProver(batch_config).prove_batch(BLOBS[:2], SEED)

    def test_single_prove_rejects_batch_config(self, batch_config: FriConfig) -> None:
        with pytest.raises(InvalidInputError):
            FriProver(batch_config).prove(BLOBS[0], SEED)

    def test_batch_of_one_is_a_single_proof(self, fast_config: FriConfig) -> None:
        commitment, proof = FriProver(fast_config).prove_batch([BLOBS[0]], SEED)
        assert (commitment, proof) == FriProver(fast_config).prove(BLOBS[0], SEED)


class TestSerialization:

    def test_json_roundtrip(self, proof: Proof) -> None:
        text = json.dumps(proof_to_json(proof))
        restored = proof_from_json(json.loads(text))

        assert restored == proof
        assert verify_proof(restored, SEED)

    def test_file_roundtrip(self, proof: Proof, tmp_path) -> None:
        from frieda.protocol.proof import load_proof_from_json, save_proof_json

        path = tmp_path / "proof.json"
        save_proof_json(proof, str(path))
        assert load_proof_from_json(str(path)) == proof

    def test_malformed_json(self, proof: Proof) -> None:
        j = proof_to_json(proof)
        del j["nonce"]
        with pytest.raises(InvalidInputError):
            proof_from_json(j)
