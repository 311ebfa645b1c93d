"""BabyBear and Mersenne31 prime fields GF(p).

Uses galois library for all base field arithmetic. BabyBear and Mersenne31 are
the field types; extension fields over them live in primitives.extension.
"""

import galois
import numpy as np

# --- Field Construction ---

BABY_BEAR_PRIME = 2**31 - 2**27 + 1
MERSENNE_31_PRIME = 2**31 - 1

BabyBear = galois.GF(BABY_BEAR_PRIME, primitive_element=31)
"""BabyBear field, p = 15 * 2^27 + 1. Two-adicity 27."""

Mersenne31 = galois.GF(MERSENNE_31_PRIME, primitive_element=7)
"""Mersenne31 field, p = 2^31 - 1. Two-adicity 1, so FFTs run over the circle group."""

FIELD_NAMES = {
    BABY_BEAR_PRIME: "BabyBear",
    MERSENNE_31_PRIME: "Mersenne31",
}


def field_name(field: type[galois.FieldArray]) -> str:
    """Human readable name of a prime field (falls back to GF(p))."""
    return FIELD_NAMES.get(field.characteristic, f"GF({field.characteristic})")


# --- Element Conversion ---


def lift(field: type[galois.FieldArray], value) -> galois.FieldArray:
    """Lift an int (possibly negative or >= p) or a field array into `field`.

    Base field arrays lift into an extension field as constant polynomials: a
    value below p is the same integer in both representations.
    """
    if isinstance(value, galois.FieldArray):
        if type(value) is field:
            return value
        if value.ndim == 0:
            return field(int(value))
        return field(np.asarray(value.view(np.ndarray), dtype=np.uint64))
    return field(int(value) % field.characteristic)


def to_uint64(values: galois.FieldArray) -> np.ndarray:
    """Canonical integer representatives as a plain uint64 array (for hashing)."""
    return np.asarray(values.view(np.ndarray), dtype=np.uint64)


# --- Roots of Unity ---


def two_adicity(field: type[galois.FieldArray]) -> int:
    """Largest k such that 2^k divides p - 1."""
    n = field.characteristic - 1
    return (n & -n).bit_length() - 1


def two_adic_generator(field: type[galois.FieldArray], bits: int) -> galois.FieldArray:
    """Primitive 2^bits-th root of unity, derived from the multiplicative generator."""
    if bits > two_adicity(field):
        raise ValueError(
            f"{field_name(field)} has no subgroup of order 2^{bits} "
            f"(two-adicity {two_adicity(field)})"
        )
    p = field.characteristic
    return field.primitive_element ** ((p - 1) >> bits)
