"""STARK configurations: one object bundling every parameter of a proof system.

A configuration fixes the base field, the challenge (extension) field, the hash
and compression behind the Merkle commitments, the FRI parameters, the PCS and
the challenger construction. Prover and verifier must use equal
configurations; fingerprint() summarizes one so proofs can carry it.

Profiles:
    baby_bear_config    BabyBear, degree-4 extension, Poseidon2, two-adic FRI
    mersenne31_config   Mersenne31, degree-3 extension, SHA3-256, circle FRI
"""

import hashlib
from dataclasses import dataclass
from typing import Callable, Optional

import galois
import numpy as np

from primitives.extension import BabyBearExt4, Mersenne31Ext3
from primitives.field import BabyBear, Mersenne31, field_name
from primitives.hash import (
    CompressionFunctionFromHasher,
    PaddingFreeSponge,
    SerializingHasher32,
    Sha3_256Hash,
    TruncatedPermutation,
)
from primitives.merkle_tree import ExtensionMmcs, MerkleTreeMmcs
from primitives.poseidon2 import Poseidon2
from primitives.transcript import Challenger, DuplexChallenger, HashChallenger, SerializingChallenger32
from protocol.fri import FriConfig
from protocol.pcs import CirclePcs, FriPcs, TwoAdicFriPcs

# --- Defaults ---

LOG_BLOWUP = 1
NUM_QUERIES = 100
PROOF_OF_WORK_BITS = 16


@dataclass(frozen=True)
class StarkConfig:
    """Everything prover and verifier must agree on.

    Attributes:
        name: Profile name, used in logs
        field: Base field of traces and commitments
        ext: Challenge field
        hasher: Leaf hash of the Merkle commitments
        compressor: 2-to-1 node compression of the Merkle commitments
        val_mmcs: Commitment scheme for base field matrices
        challenge_mmcs: Commitment scheme for FRI layers
        fri_config: FRI parameters
        pcs: Polynomial commitment scheme
        challenger_factory: Builds a fresh, identically seeded challenger
        challenger_description: Challenger parameters, folded into the fingerprint
    """
    name: str
    field: type[galois.FieldArray]
    ext: type[galois.FieldArray]
    hasher: object
    compressor: object
    val_mmcs: MerkleTreeMmcs
    challenge_mmcs: ExtensionMmcs
    fri_config: FriConfig
    pcs: FriPcs
    challenger_factory: Callable[[], Challenger]
    challenger_description: str

    def new_challenger(self) -> Challenger:
        """A challenger in its initial state; never reuse one across proofs."""
        return self.challenger_factory()

    def fingerprint(self) -> str:
        """SHA-256 over every parameter; equal for identically built configurations."""
        parts = [
            f"field={field_name(self.field)}:{self.field.characteristic}",
            f"ext=D{self.ext.degree}:{self.ext.irreducible_poly}",
            f"pcs={self.pcs.fingerprint()}",
            f"challenger={self.challenger_description}",
        ]
        return hashlib.sha256("|".join(parts).encode()).hexdigest()

    def __repr__(self) -> str:
        return f"StarkConfig({self.name}, {field_name(self.field)}^{self.ext.degree}, {self.pcs.name})"


# --- Profiles ---


def baby_bear_config(
    rng: Optional[np.random.Generator] = None,
    log_blowup: int = LOG_BLOWUP,
    num_queries: int = NUM_QUERIES,
    proof_of_work_bits: int = PROOF_OF_WORK_BITS,
) -> StarkConfig:
    """BabyBear / Poseidon2 / two-adic FRI.

    Args:
        rng: Source of the Poseidon2 round constants. Defaults to a fresh
            OS-seeded generator; pass a seeded one for reproducible configurations.
        log_blowup: log2 of the LDE blowup factor
        num_queries: Number of FRI queries
        proof_of_work_bits: Grinding difficulty
    """
    if rng is None:
        rng = np.random.default_rng()

    perm = Poseidon2.new_from_rng(rng)
    hasher = PaddingFreeSponge(perm, rate=8, out=8)
    compressor = TruncatedPermutation(perm, n=2, chunk=8)
    val_mmcs = MerkleTreeMmcs(hasher, compressor)
    challenge_mmcs = ExtensionMmcs(val_mmcs, BabyBearExt4)

    fri_config = FriConfig(
        log_blowup=log_blowup,
        num_queries=num_queries,
        proof_of_work_bits=proof_of_work_bits,
        mmcs=challenge_mmcs,
    )
    pcs = TwoAdicFriPcs(BabyBear, BabyBearExt4, val_mmcs, fri_config)

    return StarkConfig(
        name="baby-bear",
        field=BabyBear,
        ext=BabyBearExt4,
        hasher=hasher,
        compressor=compressor,
        val_mmcs=val_mmcs,
        challenge_mmcs=challenge_mmcs,
        fri_config=fri_config,
        pcs=pcs,
        challenger_factory=lambda: DuplexChallenger(BabyBear, perm, rate=8),
        challenger_description=f"duplex(width=16,rate=8,{perm.fingerprint()})",
    )


def mersenne31_config(
    log_blowup: int = LOG_BLOWUP,
    num_queries: int = NUM_QUERIES,
    proof_of_work_bits: int = PROOF_OF_WORK_BITS,
    challenger_seed: bytes = b"",
) -> StarkConfig:
    """Mersenne31 / SHA3-256 / circle FRI.

    Args:
        log_blowup: log2 of the LDE blowup factor, at least 1
        num_queries: Number of FRI queries
        proof_of_work_bits: Grinding difficulty
        challenger_seed: Initial bytes of the hash challenger
    """
    byte_hash = Sha3_256Hash()
    hasher = SerializingHasher32(byte_hash)
    compressor = CompressionFunctionFromHasher(byte_hash, n=2)
    val_mmcs = MerkleTreeMmcs(hasher, compressor)
    challenge_mmcs = ExtensionMmcs(val_mmcs, Mersenne31Ext3)

    fri_config = FriConfig(
        log_blowup=log_blowup,
        num_queries=num_queries,
        proof_of_work_bits=proof_of_work_bits,
        mmcs=challenge_mmcs,
    )
    pcs = CirclePcs(Mersenne31, Mersenne31Ext3, val_mmcs, fri_config)

    return StarkConfig(
        name="mersenne31",
        field=Mersenne31,
        ext=Mersenne31Ext3,
        hasher=hasher,
        compressor=compressor,
        val_mmcs=val_mmcs,
        challenge_mmcs=challenge_mmcs,
        fri_config=fri_config,
        pcs=pcs,
        challenger_factory=lambda: SerializingChallenger32(
            Mersenne31, HashChallenger(byte_hash, challenger_seed)
        ),
        challenger_description=f"serializing32({byte_hash.fingerprint()},seed={challenger_seed.hex()})",
    )
