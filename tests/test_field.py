"""Tests for prime fields and binomial extension fields."""

import galois
import numpy as np
import pytest

from primitives.extension import (
    BabyBearExt4,
    Mersenne31Ext3,
    binomial_extension,
    coeff_list,
    from_coeffs,
    monomial,
    to_coeffs,
)
from primitives.field import (
    BABY_BEAR_PRIME,
    MERSENNE_31_PRIME,
    BabyBear,
    Mersenne31,
    field_name,
    lift,
    two_adic_generator,
    two_adicity,
)


class TestPrimeFields:
    """Base field constants and helpers."""

    def test_moduli(self) -> None:
        assert BabyBear.characteristic == BABY_BEAR_PRIME == 2013265921
        assert Mersenne31.characteristic == MERSENNE_31_PRIME == 2147483647

    def test_generators_are_not_squares(self) -> None:
        """A primitive element is a quadratic non-residue."""
        for field in (BabyBear, Mersenne31):
            p = field.characteristic
            assert field.primitive_element ** ((p - 1) // 2) == p - 1

    def test_two_adicity(self) -> None:
        assert two_adicity(BabyBear) == 27
        assert two_adicity(Mersenne31) == 1

    @pytest.mark.parametrize("bits", [1, 3, 10, 27])
    def test_two_adic_generator_order(self, bits: int) -> None:
        w = two_adic_generator(BabyBear, bits)
        assert w ** (1 << bits) == 1
        assert w ** (1 << (bits - 1)) != 1

    def test_two_adic_generator_too_large(self) -> None:
        with pytest.raises(ValueError):
            two_adic_generator(Mersenne31, 2)

    def test_lift_reduces(self) -> None:
        assert int(lift(BabyBear, -1)) == BABY_BEAR_PRIME - 1
        assert int(lift(Mersenne31, MERSENNE_31_PRIME + 5)) == 5
        x = BabyBear(7)
        assert lift(BabyBear, x) is x

    def test_field_name(self) -> None:
        assert field_name(BabyBear) == "BabyBear"
        assert field_name(Mersenne31) == "Mersenne31"


@pytest.mark.parametrize("ext", [BabyBearExt4, Mersenne31Ext3], ids=["bb4", "m31-3"])
class TestExtensionField:
    """Arithmetic in F[X] / (X^D - W)."""

    def test_generator_relation(self, ext: type[galois.FieldArray]) -> None:
        """X^D reduces to W."""
        w = -int(ext.irreducible_poly.coeffs[-1]) % ext.characteristic
        assert monomial(ext, 1) ** ext.degree == ext(w)
        assert monomial(ext, 1) ** (ext.degree - 1) == monomial(ext, ext.degree - 1)

    def test_multiplicative_inverse(self, ext: type[galois.FieldArray]) -> None:
        x = ext.Random(6, low=1, seed=11)
        assert np.all(x * x ** -1 == ext.Ones(6))
        assert ext(1) / x[2] == x[2] ** -1

    def test_inverse_of_zero_raises(self, ext: type[galois.FieldArray]) -> None:
        with pytest.raises(ZeroDivisionError):
            ext(0) ** -1

    def test_distributivity(self, ext: type[galois.FieldArray]) -> None:
        a, b, c = ext.Random(3, seed=1)
        assert a * (b + c) == a * b + a * c
        assert (a - b) + b == a

    def test_lifted_base_values_are_constants(self, ext: type[galois.FieldArray]) -> None:
        """A base value lifts to the constant polynomial with the same integer."""
        base = BabyBear if ext is BabyBearExt4 else Mersenne31
        lifted = lift(ext, base([1, 2, 3]))
        assert coeff_list(lifted) == [[v] + [0] * (ext.degree - 1) for v in (1, 2, 3)]
        x = ext.Random(seed=7)
        y = x * lifted
        assert y.shape == (3,)
        assert y[1] == x + x

    def test_coeff_order_is_ascending(self, ext: type[galois.FieldArray]) -> None:
        coeffs = list(range(1, ext.degree + 1))
        x = from_coeffs(ext, coeffs)
        assert coeff_list(x) == coeffs
        assert x == sum((monomial(ext, i) * (i + 1) for i in range(ext.degree)), ext(0))
        assert from_coeffs(ext, [coeffs, coeffs]).shape == (2,)
        assert to_coeffs(from_coeffs(ext, [coeffs, coeffs])).shape == (2, ext.degree)

    def test_from_coeffs_reduces(self, ext: type[galois.FieldArray]) -> None:
        coeffs = [ext.characteristic + 1] + [0] * (ext.degree - 1)
        assert from_coeffs(ext, coeffs) == ext(1)

    def test_from_coeffs_wrong_degree(self, ext: type[galois.FieldArray]) -> None:
        with pytest.raises(ValueError):
            from_coeffs(ext, [1] * (ext.degree + 1))

    def test_mixing_fields_rejected(self, ext: type[galois.FieldArray]) -> None:
        other = Mersenne31Ext3 if ext is BabyBearExt4 else BabyBearExt4
        with pytest.raises(TypeError):
            ext(1) + other(1)


class TestExtensionConstruction:
    """Irreducibility checks when building an extension."""

    def test_reducible_binomial_rejected(self) -> None:
        # 1 is a fourth power, so X^4 - 1 splits
        with pytest.raises(ValueError):
            binomial_extension(BabyBear, 4, 1)

    def test_degree_must_divide_p_minus_1(self) -> None:
        with pytest.raises(ValueError):
            binomial_extension(Mersenne31, 4, 5)

    def test_named_fields(self) -> None:
        assert BabyBearExt4.degree == 4
        assert BabyBearExt4.characteristic == BABY_BEAR_PRIME
        assert [int(c) for c in BabyBearExt4.irreducible_poly.coeffs] == [1, 0, 0, 0, BABY_BEAR_PRIME - 11]
        assert Mersenne31Ext3.degree == 3
        assert Mersenne31Ext3.characteristic == MERSENNE_31_PRIME
        assert [int(c) for c in Mersenne31Ext3.irreducible_poly.coeffs] == [1, 0, 0, MERSENNE_31_PRIME - 5]
