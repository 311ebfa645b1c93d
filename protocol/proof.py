"""STARK proof data structures and JSON serialization.

Field elements are stored as canonical ints and extension elements as lists of
D ascending coefficients, so a proof is plain data: it can be compared with ==
and round-tripped through JSON without reference to any configuration.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from primitives.hash import Digest
from primitives.merkle_tree import QueryProof

# --- Type Aliases ---

ExtCoeffs = list[int]  # one extension element, ascending coefficients


# --- Proof Structures ---


@dataclass
class FriQueryProof:
    """Openings for one FRI query.

    Attributes:
        input_openings: One Merkle opening per committed input matrix, at the queried LDE index
        commit_phase_openings: One opening per FRI layer, each leaf holding the folding pair
    """
    input_openings: list[QueryProof] = field(default_factory=list)
    commit_phase_openings: list[QueryProof] = field(default_factory=list)


@dataclass
class FriProof:
    """FRI commit-phase roots, final constant, grinding witness and query openings."""
    commit_roots: list[Digest] = field(default_factory=list)
    final_value: ExtCoeffs = field(default_factory=list)
    pow_witness: int = 0
    query_proofs: list[FriQueryProof] = field(default_factory=list)


@dataclass
class OpeningProof:
    """PCS opening proof.

    Attributes:
        fri_proof: Low-degree proof of the combined DEEP quotient
        conjugate_values: Circle PCS only - column values at the conjugate of
            every opening point, laid out like the opened values
    """
    fri_proof: FriProof = field(default_factory=FriProof)
    conjugate_values: Optional[list[list[list[ExtCoeffs]]]] = None


@dataclass
class Commitments:
    trace: Digest = ()
    quotient: Digest = ()


@dataclass
class OpenedValues:
    """Column values at the out-of-domain point.

    Attributes:
        trace_local: Trace columns at zeta
        trace_next: Trace columns at next(zeta)
        quotient: The D base-coefficient columns of the quotient at zeta
    """
    trace_local: list[ExtCoeffs] = field(default_factory=list)
    trace_next: list[ExtCoeffs] = field(default_factory=list)
    quotient: list[ExtCoeffs] = field(default_factory=list)


@dataclass
class Proof:
    """Complete STARK proof.

    Attributes:
        degree_bits: log2 of the trace height
        config_fingerprint: Fingerprint of the configuration that produced the proof
        commitments: Trace and quotient Merkle roots
        opened_values: Out-of-domain openings
        opening_proof: PCS proof binding the openings to the commitments
    """
    degree_bits: int = 0
    config_fingerprint: str = ""
    commitments: Commitments = field(default_factory=Commitments)
    opened_values: OpenedValues = field(default_factory=OpenedValues)
    opening_proof: OpeningProof = field(default_factory=OpeningProof)


# --- JSON Serialization ---

def _digest_to_json(digest: Digest) -> Any:
    if isinstance(digest, (bytes, bytearray)):
        return bytes(digest).hex()
    return [int(v) for v in digest]


def _digest_from_json(data: Any) -> Digest:
    if isinstance(data, str):
        return bytes.fromhex(data)
    return tuple(int(v) for v in data)


def _query_to_json(query: QueryProof) -> dict[str, Any]:
    return {"v": [int(v) for v in query.v], "mp": [_digest_to_json(d) for d in query.mp]}


def _query_from_json(data: dict[str, Any]) -> QueryProof:
    return QueryProof(v=[int(v) for v in data["v"]], mp=[_digest_from_json(d) for d in data["mp"]])


def proof_to_json(proof: Proof) -> dict[str, Any]:
    """Convert a proof to a JSON-serializable dictionary.

    Field-native digests become lists of ints, byte digests hex strings.
    """
    fri = proof.opening_proof.fri_proof
    j: dict[str, Any] = {
        "degreeBits": proof.degree_bits,
        "config": proof.config_fingerprint,
        "traceRoot": _digest_to_json(proof.commitments.trace),
        "quotientRoot": _digest_to_json(proof.commitments.quotient),
        "openedValues": {
            "traceLocal": proof.opened_values.trace_local,
            "traceNext": proof.opened_values.trace_next,
            "quotient": proof.opened_values.quotient,
        },
        "fri": {
            "commitRoots": [_digest_to_json(r) for r in fri.commit_roots],
            "finalValue": fri.final_value,
            "nonce": fri.pow_witness,
            "queries": [
                {
                    "inputs": [_query_to_json(q) for q in query.input_openings],
                    "layers": [_query_to_json(q) for q in query.commit_phase_openings],
                }
                for query in fri.query_proofs
            ],
        },
    }

    if proof.opening_proof.conjugate_values is not None:
        j["conjugateValues"] = proof.opening_proof.conjugate_values

    return j


def proof_from_json(data: dict[str, Any]) -> Proof:
    """Rebuild a Proof from proof_to_json output (e.g. after json.loads)."""
    opened = data["openedValues"]
    fri = data["fri"]

    def ints(values: list) -> list:
        return [[int(c) for c in v] for v in values]

    fri_proof = FriProof(
        commit_roots=[_digest_from_json(r) for r in fri["commitRoots"]],
        final_value=[int(c) for c in fri["finalValue"]],
        pow_witness=int(fri["nonce"]),
        query_proofs=[
            FriQueryProof(
                input_openings=[_query_from_json(q) for q in query["inputs"]],
                commit_phase_openings=[_query_from_json(q) for q in query["layers"]],
            )
            for query in fri["queries"]
        ],
    )

    conjugate_values = None
    if "conjugateValues" in data:
        conjugate_values = [[ints(point) for point in matrix] for matrix in data["conjugateValues"]]

    return Proof(
        degree_bits=int(data["degreeBits"]),
        config_fingerprint=data["config"],
        commitments=Commitments(
            trace=_digest_from_json(data["traceRoot"]),
            quotient=_digest_from_json(data["quotientRoot"]),
        ),
        opened_values=OpenedValues(
            trace_local=ints(opened["traceLocal"]),
            trace_next=ints(opened["traceNext"]),
            quotient=ints(opened["quotient"]),
        ),
        opening_proof=OpeningProof(fri_proof=fri_proof, conjugate_values=conjugate_values),
    )
