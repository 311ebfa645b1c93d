"""Tests for AIR evaluation: debug checker, prover folder and verifier folder."""

import numpy as np
import pytest

from constraints.base import ProverConstraintFolder, VerifierConstraintFolder, WindowView, fold_constraints
from constraints.debug import check_constraints
from constraints.fibonacci import FibonacciAir
from primitives.extension import from_coeffs, to_coeffs
from primitives.field import BabyBear, Mersenne31, lift
from primitives.matrix import RowMajorMatrix
from protocol.errors import ConstraintViolation, MalformedTrace
from protocol.prover import quotient_values
from witness.fibonacci import generate_fibonacci_trace


class TestFibonacciAir:

    def test_width(self) -> None:
        assert FibonacciAir(8, 21).width() == 2

    def test_num_steps_precondition(self) -> None:
        with pytest.raises(ValueError):
            FibonacciAir(1, 1)

    def test_window_offsets(self) -> None:
        view = WindowView([1, 2], [3, 4])
        assert view.row_slice(1) == [3, 4]
        with pytest.raises(ValueError):
            view.row_slice(2)


class TestDebugChecker:
    """Row-by-row evaluation on concrete traces."""

    @pytest.mark.parametrize("field", [BabyBear, Mersenne31])
    def test_valid_trace(self, field) -> None:
        check_constraints(FibonacciAir(8, 21), generate_fibonacci_trace(8, field))

    def test_boundary_trace(self) -> None:
        check_constraints(FibonacciAir(2, 1), generate_fibonacci_trace(2, BabyBear))

    def test_wrong_final_value(self) -> None:
        with pytest.raises(ConstraintViolation) as exc_info:
            check_constraints(FibonacciAir(8, 99), generate_fibonacci_trace(8, BabyBear))
        assert exc_info.value.row == 7
        assert exc_info.value.kind == "last_row"

    def test_broken_transition(self) -> None:
        trace = generate_fibonacci_trace(8, BabyBear)
        trace.set(3, 1, 100)
        with pytest.raises(ConstraintViolation) as exc_info:
            check_constraints(FibonacciAir(8, 21), trace)
        assert exc_info.value.row == 2
        assert exc_info.value.kind == "transition"

    def test_broken_first_row(self) -> None:
        trace = generate_fibonacci_trace(8, Mersenne31)
        trace.set(0, 0, 5)
        with pytest.raises(ConstraintViolation) as exc_info:
            check_constraints(FibonacciAir(8, 21), trace)
        assert exc_info.value.row == 0
        assert exc_info.value.kind == "first_row"

    def test_wrong_width(self) -> None:
        trace = RowMajorMatrix.from_rows(BabyBear, [[0, 1, 0], [1, 1, 0]])
        with pytest.raises(MalformedTrace):
            check_constraints(FibonacciAir(2, 1), trace)


class TestQuotient:
    """The folded constraints divide the vanishing polynomial exactly for valid traces."""

    def _quotient_coeffs(self, config, final_value: int):
        pcs = config.pcs
        trace = generate_fibonacci_trace(8, config.field)
        domain = pcs.natural_domain(3)
        _, trace_data = pcs.commit(domain, trace.to_2d())
        alpha = from_coeffs(config.ext, list(range(2, 2 + config.ext.degree)))
        quotient = quotient_values(FibonacciAir(8, final_value), domain, trace_data, alpha, (),
                                   config.fri_config.blowup)
        return trace_data.domain.ntt().intt(config.field(to_coeffs(quotient))), pcs.quotient_bound(3)

    def test_valid_trace_has_low_degree_quotient(self, config) -> None:
        coeffs, bound = self._quotient_coeffs(config, 21)
        assert not np.any(coeffs[bound:].view(np.ndarray))
        assert np.any(coeffs[:bound].view(np.ndarray))

    def test_invalid_trace_quotient_exceeds_bound(self, config) -> None:
        coeffs, bound = self._quotient_coeffs(config, 99)
        assert np.any(coeffs[bound:].view(np.ndarray))


class TestFolders:
    """Prover and verifier folders agree point by point."""

    def test_prover_and_verifier_folders_agree(self, bb_config) -> None:
        pcs = bb_config.pcs
        ext = bb_config.ext
        air = FibonacciAir(8, 21)
        trace = generate_fibonacci_trace(8, BabyBear)
        domain = pcs.natural_domain(3)
        _, trace_data = pcs.commit(domain, trace.to_2d())
        lde = trace_data.domain
        blowup = bb_config.fri_config.blowup
        alpha = from_coeffs(ext, [3, 1, 4, 1])

        prover = ProverConstraintFolder(trace_data.lde, blowup, domain.selectors_on(lde), alpha)
        folded = fold_constraints(air, prover)
        assert prover.constraint_count == 5

        points = lde.points()
        for j in (0, 5, lde.size - 1):
            local = lift(ext, trace_data.lde[j])
            nxt = lift(ext, trace_data.lde[(j + blowup) % lde.size])
            verifier = VerifierConstraintFolder(local, nxt, domain.selectors_at(lift(ext, points[j])), alpha)
            assert fold_constraints(air, verifier) == folded[j]

    def test_constraints_vanish_on_trace_rows(self, bb_config) -> None:
        """On the trace domain itself every selected constraint is zero."""
        ext = bb_config.ext
        air = FibonacciAir(8, 21)
        trace = generate_fibonacci_trace(8, BabyBear).to_2d()
        alpha = from_coeffs(ext, [1, 2, 3, 4])

        class RowSelectors:
            def __init__(self, row: int):
                self.is_first_row = ext(int(row == 0))
                self.is_last_row = ext(int(row == 7))
                self.is_transition = ext(int(row != 7))
                self.inv_vanishing = None

        for row in range(8):
            local = lift(ext, trace[row])
            nxt = lift(ext, trace[(row + 1) % 8])
            folder = VerifierConstraintFolder(local, nxt, RowSelectors(row), alpha)
            assert fold_constraints(air, folder) == 0
