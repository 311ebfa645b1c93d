"""Primitives - Low-level cryptographic and mathematical building blocks."""

from primitives.field import (
    BABY_BEAR_PRIME,
    MERSENNE_31_PRIME,
    BabyBear,
    Mersenne31,
    lift,
    two_adic_generator,
)
from primitives.extension import (
    BabyBearExt4,
    Mersenne31Ext3,
    binomial_extension,
    coeff_list,
    from_coeffs,
    monomial,
    to_coeffs,
)
from primitives.matrix import RowMajorMatrix
from primitives.ntt import NTT, evaluate_at
from primitives.domain import CircleDomain, Selectors, TwoAdicCoset
from primitives.poseidon2 import Poseidon2
from primitives.hash import (
    CompressionFunctionFromHasher,
    PaddingFreeSponge,
    SerializingHasher32,
    Sha3_256Hash,
    TruncatedPermutation,
)
from primitives.merkle_tree import ExtensionMmcs, MerkleTree, MerkleTreeMmcs, QueryProof
from primitives.transcript import Challenger, DuplexChallenger, HashChallenger, SerializingChallenger32

__all__ = [
    # Fields
    "BABY_BEAR_PRIME",
    "MERSENNE_31_PRIME",
    "BabyBear",
    "Mersenne31",
    "lift",
    "two_adic_generator",
    "binomial_extension",
    "BabyBearExt4",
    "Mersenne31Ext3",
    "from_coeffs",
    "to_coeffs",
    "coeff_list",
    "monomial",
    # Matrices and domains
    "RowMajorMatrix",
    "NTT",
    "evaluate_at",
    "TwoAdicCoset",
    "CircleDomain",
    "Selectors",
    # Hashing and commitments
    "Poseidon2",
    "PaddingFreeSponge",
    "TruncatedPermutation",
    "Sha3_256Hash",
    "SerializingHasher32",
    "CompressionFunctionFromHasher",
    "MerkleTree",
    "MerkleTreeMmcs",
    "ExtensionMmcs",
    "QueryProof",
    # Challengers
    "Challenger",
    "DuplexChallenger",
    "HashChallenger",
    "SerializingChallenger32",
]
