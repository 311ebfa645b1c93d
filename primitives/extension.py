"""Binomial extension fields GF(p^D) = F[X] / (X^D - W) over BabyBear and Mersenne31.

Both challenge fields are galois extension classes. galois.GF() spends several
seconds on an extension field (it searches for a primitive element), so each
class is pickled next to this module the first time it is built and loaded
from there afterwards. Delete the .pkl files after a galois upgrade.

galois packs an element into one integer whose base-p digits are its
coefficients and whose .vector() lists them in descending order [a_{D-1}, ..., a0].
The helpers here use ascending order [a0, a1, ..., a_{D-1}] like the rest of the code.
"""

import logging
import pickle
from pathlib import Path
from typing import Sequence

import galois
import numpy as np

from primitives.field import BabyBear, Mersenne31, field_name

logger = logging.getLogger(__name__)

_CACHE_DIR = Path(__file__).parent

# --- Field Construction ---


def binomial_extension(base: type[galois.FieldArray], degree: int, w: int) -> type[galois.FieldArray]:
    """GF(p^degree) with irreducible polynomial X^degree - w.

    Raises:
        ValueError: If X^degree - w is reducible over base
    """
    p = base.characteristic
    if (p - 1) % degree:
        raise ValueError(f"degree {degree} does not divide p - 1 for {field_name(base)}")

    # X^D - W is irreducible iff W^((p-1)/D) has order exactly D (D a prime power, 4 | p - 1)
    z = base(w % p) ** ((p - 1) // degree)
    for q in _prime_factors(degree):
        if z ** (degree // q) == 1:
            raise ValueError(f"X^{degree} - {w} is reducible over {field_name(base)}")

    irreducible_poly = galois.Poly([1] + [0] * (degree - 1) + [(-w) % p], field=base)
    return galois.GF(p**degree, irreducible_poly=irreducible_poly)


def _load_or_build(base: type[galois.FieldArray], degree: int, w: int, cache_name: str) -> type[galois.FieldArray]:
    cache_path = _CACHE_DIR / cache_name
    if cache_path.exists():
        with open(cache_path, "rb") as f:
            return pickle.load(f)

    logger.info("Building %s^%d (X^%d - %d); caching at %s", field_name(base), degree, degree, w, cache_path)
    ext = binomial_extension(base, degree, w)
    try:
        with open(cache_path, "wb") as f:
            pickle.dump(ext, f)
    except OSError as e:
        logger.warning("Could not write %s: %s", cache_path, e)
    return ext


def _prime_factors(n: int) -> list[int]:
    factors, q = [], 2
    while q * q <= n:
        if n % q == 0:
            factors.append(q)
            while n % q == 0:
                n //= q
        q += 1
    if n > 1:
        factors.append(n)
    return factors


BabyBearExt4 = _load_or_build(BabyBear, 4, 11, "babybear_ext4_cache.pkl")
"""Quartic extension of BabyBear, X^4 - 11."""

Mersenne31Ext3 = _load_or_build(Mersenne31, 3, 5, "mersenne31_ext3_cache.pkl")
"""Cubic extension of Mersenne31, X^3 - 5."""


# --- Coefficient Order Conversion ---


def from_coeffs(ext: type[galois.FieldArray], coeffs: Sequence) -> galois.FieldArray:
    """Build elements from ascending coefficients; nested lists give arrays of elements.

    Raises:
        ValueError: If the innermost length is not the extension degree
    """
    arr = np.asarray(coeffs, dtype=np.int64) % ext.characteristic
    if arr.ndim == 0 or arr.shape[-1] != ext.degree:
        raise ValueError(f"expected {ext.degree} coefficients, got shape {arr.shape}")
    return ext.Vector(arr[..., ::-1].tolist())


def to_coeffs(x: galois.FieldArray) -> np.ndarray:
    """Ascending coefficients as a uint64 array of shape x.shape + (D,)."""
    return np.ascontiguousarray(np.asarray(x.vector().view(np.ndarray), dtype=np.uint64)[..., ::-1])


def coeff_list(x: galois.FieldArray) -> list:
    """Ascending coefficients as Python ints; nested for arrays."""
    return to_coeffs(x).tolist()


def monomial(ext: type[galois.FieldArray], i: int) -> galois.FieldArray:
    """Basis element X^i."""
    coeffs = [0] * ext.degree
    coeffs[i] = 1
    return from_coeffs(ext, coeffs)
