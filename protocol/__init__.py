"""Protocol - STARK proving, verification and configuration."""

from protocol.errors import (
    ConfigMismatch,
    ConstraintViolation,
    MalformedProof,
    MalformedTrace,
    ProofInvalid,
    StarkError,
    TranscriptMismatch,
)
from protocol.fri import FriConfig
from protocol.pcs import CirclePcs, FriPcs, TwoAdicFriPcs
from protocol.proof import Proof, proof_from_json, proof_to_json
from protocol.config import StarkConfig, baby_bear_config, mersenne31_config
from protocol.prover import prove
from protocol.verifier import verify
from protocol.driver import run_fibonacci_proof

__all__ = [
    # Errors
    "StarkError",
    "MalformedTrace",
    "ProofInvalid",
    "ConfigMismatch",
    "ConstraintViolation",
    "TranscriptMismatch",
    "MalformedProof",
    # Commitments
    "FriConfig",
    "FriPcs",
    "TwoAdicFriPcs",
    "CirclePcs",
    # Proofs
    "Proof",
    "proof_to_json",
    "proof_from_json",
    # Configuration
    "StarkConfig",
    "baby_bear_config",
    "mersenne31_config",
    # Prove / verify
    "prove",
    "verify",
    "run_fibonacci_proof",
]
