"""Sampling proof data structures and serialization."""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from frieda.config import FriConfig
from frieda.errors import InvalidInputError

# --- Type Aliases ---
Hash = bytes  # Blake2s-256 digest


# --- Proof Data Structures ---

@dataclass
class QueryInfo:
    """One opened codeword position: value and Merkle authentication path.

    For a batched commitment the leaf holds one value per blob; those are
    ``columns`` and ``value`` is their combination under the batching
    challenge. ``columns`` is empty for a single-blob commitment.
    """
    index: int
    value: int
    auth_path: list[Hash] = field(default_factory=list)
    columns: list[int] = field(default_factory=list)


@dataclass
class LayerOpening:
    """One opened leaf of an inner FRI layer: a whole fold group."""
    index: int  # Group index (leaf index in the layer tree)
    values: list[int] = field(default_factory=list)
    auth_path: list[Hash] = field(default_factory=list)


@dataclass
class FriLayerProof:
    """Committed inner FRI layer with one opening per query."""
    root: Hash = b""
    openings: list[LayerOpening] = field(default_factory=list)


@dataclass
class Proof:
    """Data availability sampling proof.

    Self-contained: the commitment root and the protocol configuration are
    embedded. The embedded configuration is chosen by the prover; a verifier
    that must enforce its own parameters passes them to ``verify_proof``.

    Attributes:
        root: Merkle root of the extended codeword
        query_info: One entry per sampled position, in transcript order
        sibling_info: For each query, the other fan_in - 1 members of its
            first-layer fold group, by slot order
        inner_layers: Committed folded layers 1..r-1 (empty when r <= 1)
        final_layer: Values of the last folded layer over its domain
        proof_of_work: Grinding nonce
        log_size_bound: log2 of the coefficient count of the encoded data
        config: Protocol configuration the proof was generated with
        seed: Caller seed absorbed into the transcript, if any
    """
    root: Hash = b""
    query_info: list[QueryInfo] = field(default_factory=list)
    sibling_info: list[list[QueryInfo]] = field(default_factory=list)
    inner_layers: list[FriLayerProof] = field(default_factory=list)
    final_layer: list[int] = field(default_factory=list)
    proof_of_work: int = 0
    log_size_bound: int = 0
    config: FriConfig = field(default_factory=FriConfig)
    seed: Optional[int] = None

    @property
    def evaluations(self) -> list[int]:
        """Sampled codeword values in transcript order."""
        return [q.value for q in self.query_info]

    @property
    def positions(self) -> list[int]:
        return [q.index for q in self.query_info]

    @property
    def domain_log_size(self) -> int:
        return self.config.domain_log_size(self.log_size_bound)


# --- JSON Serialization ---

def _query_to_json(q: QueryInfo) -> dict[str, Any]:
    j = {"index": q.index, "value": str(q.value), "path": [h.hex() for h in q.auth_path]}
    if q.columns:
        j["columns"] = [str(v) for v in q.columns]
    return j


def _query_from_json(j: dict[str, Any]) -> QueryInfo:
    return QueryInfo(
        index=int(j["index"]),
        value=int(j["value"]),
        auth_path=[bytes.fromhex(h) for h in j["path"]],
        columns=[int(v) for v in j.get("columns", [])],
    )


def proof_to_json(proof: Proof) -> dict[str, Any]:
    """Convert proof to JSON-serializable dictionary.

    Field elements are decimal strings, digests are hex.
    """
    j: dict[str, Any] = {}

    j["root"] = proof.root.hex()
    j["queries"] = [_query_to_json(q) for q in proof.query_info]
    j["siblings"] = [[_query_to_json(s) for s in sib] for sib in proof.sibling_info]

    j["layers"] = [
        {
            "root": layer.root.hex(),
            "openings": [
                {
                    "index": o.index,
                    "values": [str(v) for v in o.values],
                    "path": [h.hex() for h in o.auth_path],
                }
                for o in layer.openings
            ],
        }
        for layer in proof.inner_layers
    ]

    j["finalPol"] = [str(v) for v in proof.final_layer]
    j["nonce"] = str(proof.proof_of_work)
    j["logSizeBound"] = proof.log_size_bound
    j["config"] = proof.config.to_dict()
    j["seed"] = None if proof.seed is None else str(proof.seed)
    return j


def proof_from_json(j: dict[str, Any]) -> Proof:
    """Inverse of :func:`proof_to_json`.

    Raises:
        InvalidInputError: If a required field is missing or malformed
    """
    try:
        layers = [
            FriLayerProof(
                root=bytes.fromhex(layer["root"]),
                openings=[
                    LayerOpening(
                        index=int(o["index"]),
                        values=[int(v) for v in o["values"]],
                        auth_path=[bytes.fromhex(h) for h in o["path"]],
                    )
                    for o in layer["openings"]
                ],
            )
            for layer in j["layers"]
        ]
        return Proof(
            root=bytes.fromhex(j["root"]),
            query_info=[_query_from_json(q) for q in j["queries"]],
            sibling_info=[[_query_from_json(s) for s in sib] for sib in j["siblings"]],
            inner_layers=layers,
            final_layer=[int(v) for v in j["finalPol"]],
            proof_of_work=int(j["nonce"]),
            log_size_bound=int(j["logSizeBound"]),
            config=FriConfig.from_dict(j["config"]),
            seed=None if j.get("seed") is None else int(j["seed"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidInputError(f"Malformed proof JSON: {e}") from e


def save_proof_json(proof: Proof, path: str) -> None:
    """Write proof as JSON."""
    with open(path, "w") as f:
        json.dump(proof_to_json(proof), f, indent=2)


def load_proof_from_json(path: str) -> Proof:
    """Load proof from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    return proof_from_json(data)


# --- Validation ---

def validate_proof_structure(proof: Proof) -> list[str]:
    """Check that the proof's shape matches its configuration.

    Returns a list of problems; empty when the shape is consistent. Only
    sizes are checked here, never cryptographic content.
    """
    errors = []
    config = proof.config
    n_queries = config.num_queries
    fan_in = config.fan_in

    if proof.log_size_bound < 0:
        return [f"log_size_bound must be non-negative, got {proof.log_size_bound}"]

    try:
        n_rounds = config.num_rounds(proof.log_size_bound)
        domain_log = config.domain_log_size(proof.log_size_bound)
    except InvalidInputError as e:
        return [str(e)]

    if len(proof.query_info) != n_queries:
        errors.append(f"Expected {n_queries} queries, got {len(proof.query_info)}")

    if len(proof.sibling_info) != len(proof.query_info):
        errors.append(f"Expected {len(proof.query_info)} sibling sets, got {len(proof.sibling_info)}")

    if n_rounds > 0:
        for i, sib in enumerate(proof.sibling_info):
            if len(sib) != fan_in - 1:
                errors.append(f"Sibling set {i} has {len(sib)} entries, expected {fan_in - 1}")

    # Batched leaves carry one value per blob
    width = 0 if config.batch_size == 1 else config.batch_size
    opened = proof.query_info + [s for sib in proof.sibling_info for s in sib]
    if any(len(q.columns) != width for q in opened):
        errors.append(f"Opened codeword leaves must carry {width} column values")

    expected_layers = max(n_rounds - 1, 0)
    if len(proof.inner_layers) != expected_layers:
        errors.append(f"Expected {expected_layers} inner layers, got {len(proof.inner_layers)}")

    for t, layer in enumerate(proof.inner_layers):
        if len(layer.openings) != len(proof.query_info):
            errors.append(f"Layer {t + 1} has {len(layer.openings)} openings, expected {len(proof.query_info)}")
        for o in layer.openings:
            if len(o.values) != fan_in:
                errors.append(f"Layer {t + 1} opening has {len(o.values)} values, expected {fan_in}")
                break

    expected_final = 1 << (domain_log - n_rounds * config.fold_log)
    if len(proof.final_layer) != expected_final:
        errors.append(f"Final layer has {len(proof.final_layer)} values, expected {expected_final}")

    return errors
