"""Row-by-row constraint checking on a concrete trace.

Evaluates an AIR directly on trace rows instead of folded polynomials, so a
failure can name the row and the constraint class. Useful before proving: the
prover itself happily commits to a trace that violates the AIR and only the
verifier notices.
"""

from typing import Sequence

from constraints.base import Air, WindowView
from primitives.field import lift
from primitives.matrix import RowMajorMatrix
from protocol.errors import ConstraintViolation, MalformedTrace


class _DebugFilter:
    """Filtered view of a DebugConstraintBuilder; checks only when active."""

    def __init__(self, builder: "DebugConstraintBuilder", active: bool, kind: str):
        self.builder = builder
        self.active = active
        self.kind = kind

    def main(self) -> WindowView:
        return self.builder.main()

    def public_values(self) -> list:
        return self.builder.public_values()

    def when_first_row(self) -> "_DebugFilter":
        return _DebugFilter(self.builder, self.active and self.builder.is_first_row, "first_row")

    def when_transition(self) -> "_DebugFilter":
        return _DebugFilter(self.builder, self.active and self.builder.is_transition, "transition")

    def when_last_row(self) -> "_DebugFilter":
        return _DebugFilter(self.builder, self.active and self.builder.is_last_row, "last_row")

    def assert_zero(self, x) -> None:
        if self.active:
            self.builder.check(x, self.kind)

    def assert_eq(self, x, y) -> None:
        if self.active:
            self.builder.check(self.builder.lift(x) - self.builder.lift(y), self.kind)


class DebugConstraintBuilder:
    """Builder over one concrete row and its successor (wrapping at the end)."""

    def __init__(self, trace: RowMajorMatrix, row: int, public_values: Sequence[int] = ()):
        height = trace.height
        self.field = trace.field
        self.row = row
        self.is_first_row = row == 0
        self.is_last_row = row == height - 1
        self.is_transition = row != height - 1
        self._view = WindowView(list(trace.row(row)), list(trace.row((row + 1) % height)))
        self._public_values = [lift(self.field, v) for v in public_values]

    def main(self) -> WindowView:
        return self._view

    def public_values(self) -> list:
        return self._public_values

    def when_first_row(self) -> _DebugFilter:
        return _DebugFilter(self, self.is_first_row, "first_row")

    def when_transition(self) -> _DebugFilter:
        return _DebugFilter(self, self.is_transition, "transition")

    def when_last_row(self) -> _DebugFilter:
        return _DebugFilter(self, self.is_last_row, "last_row")

    def lift(self, x):
        return lift(self.field, x)

    def check(self, x, kind: str) -> None:
        if int(self.lift(x)) != 0:
            raise ConstraintViolation(
                f"{kind} constraint fails at row {self.row}", row=self.row, kind=kind
            )

    def assert_zero(self, x) -> None:
        self.check(x, "every_row")

    def assert_eq(self, x, y) -> None:
        self.check(self.lift(x) - self.lift(y), "every_row")


def check_constraints(air: Air, trace: RowMajorMatrix, public_values: Sequence[int] = ()) -> None:
    """Evaluate every constraint on every row; raise on the first failure.

    Raises:
        MalformedTrace: If the trace width differs from the AIR's
        ConstraintViolation: With .row and .kind of the first failing constraint
    """
    if trace.width != air.width():
        raise MalformedTrace(f"trace width {trace.width} != AIR width {air.width()}")
    for row in range(trace.height):
        air.eval(DebugConstraintBuilder(trace, row, public_values))
