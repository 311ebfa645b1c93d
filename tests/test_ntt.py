"""Tests for the butterfly NTT over two-adic and circle domains.

Verifies interpolation / evaluation against direct polynomial evaluation and
the zero-padding low-degree extension.
"""

import numpy as np
import pytest

from primitives.domain import CircleDomain, TwoAdicCoset
from primitives.field import BabyBear, Mersenne31
from primitives.ntt import NTT, evaluate_at


def _domains(log_size: int) -> list:
    return [
        TwoAdicCoset(BabyBear, log_size),
        TwoAdicCoset(BabyBear, log_size, shift=BabyBear.primitive_element),
        CircleDomain(Mersenne31, log_size),
    ]


class TestNTT:
    """Test NTT operations."""

    @pytest.mark.parametrize("n_bits", [1, 3, 5])
    def test_intt_ntt_roundtrip(self, n_bits: int) -> None:
        """NTT(INTT(x)) == x on every domain."""
        for domain in _domains(n_bits):
            field = domain.field
            evals = field.Random(domain.size, seed=n_bits)
            engine = domain.ntt()
            assert np.array_equal(engine.ntt(engine.intt(evals)), evals)

    @pytest.mark.parametrize("n_cols", [1, 2, 4])
    def test_ntt_intt_roundtrip_multiple_columns(self, n_cols: int) -> None:
        """INTT(NTT(x)) == x for (N, n_cols) matrices."""
        for domain in _domains(4):
            coeffs = domain.field.Random((domain.size, n_cols), seed=n_cols)
            engine = domain.ntt()
            assert np.array_equal(engine.intt(engine.ntt(coeffs)), coeffs)

    def test_monomial_basis_on_coset(self) -> None:
        """Two-adic coefficients are ordinary polynomial coefficients in x."""
        domain = TwoAdicCoset(BabyBear, 3, shift=BabyBear(7))
        coeffs = BabyBear.Random(domain.size, seed=1)
        evals = domain.ntt().ntt(coeffs)
        points = domain.points()
        for j in range(domain.size):
            expected = BabyBear(0)
            for i in range(domain.size):
                expected = expected + coeffs[i] * points[j] ** i
            assert evals[j] == expected

    @pytest.mark.parametrize("log_size", [2, 4])
    def test_evaluate_at_domain_points(self, log_size: int) -> None:
        """evaluate_at with a point's basis reproduces the NTT output."""
        for domain in _domains(log_size):
            coeffs = domain.field.Random(domain.size, seed=log_size)
            evals = domain.ntt().ntt(coeffs)
            for j in range(domain.size):
                point = domain.point(j) if isinstance(domain, CircleDomain) else domain.points()[j]
                assert evaluate_at(coeffs, domain.basis_at(point)) == evals[j]

    def test_extend_pol_zero_pads(self) -> None:
        """The LDE carries the same coefficients, padded with zeros."""
        for domain in _domains(3):
            lde = domain.create_lde(2)
            evals = domain.field.Random((domain.size, 2), seed=9)
            extended = domain.ntt().extend_pol(evals, lde.ntt())
            coeffs = lde.ntt().intt(extended)
            assert np.array_equal(coeffs[: domain.size], domain.ntt().intt(evals))
            assert not np.any(coeffs[domain.size:].view(np.ndarray))

    def test_twiddle_lengths_checked(self) -> None:
        with pytest.raises(AssertionError):
            NTT([BabyBear([1, 2, 3])])

    def test_wrong_input_length(self) -> None:
        engine = TwoAdicCoset(BabyBear, 3).ntt()
        with pytest.raises(AssertionError):
            engine.ntt(BabyBear.Zeros(4))
