"""Constraint evaluation interfaces and folders.

An Air states its constraints once, against an AirBuilder. The same eval()
runs under every builder thanks to galois broadcasting:

- ProverConstraintFolder: columns are base field arrays over the LDE domain,
  the accumulator is the folded constraint polynomial at every point;
- VerifierConstraintFolder: columns are extension scalars at the
  out-of-domain point;
- DebugConstraintBuilder (constraints.debug): one concrete trace row.

Example:
    class SquaringAir:
        num_steps = 8

        def width(self) -> int:
            return 1

        def eval(self, builder: AirBuilder) -> None:
            main = builder.main()
            local, nxt = main.row_slice(0), main.row_slice(1)
            builder.when_transition().assert_eq(nxt[0], local[0] * local[0])

Folding: each asserted expression c_i updates acc <- acc * alpha + c_i, so
the result is sum_i alpha^(k-1-i) c_i over the k asserted constraints.
"""

from typing import Any, Protocol, Sequence, runtime_checkable

import galois
import numpy as np

from primitives.domain import Selectors
from primitives.field import lift

# --- Type Aliases ---

Expr = Any  # galois array or scalar, base or extension depending on the builder


# --- Interfaces ---


@runtime_checkable
class Air(Protocol):
    """Constraint system over a fixed-width trace of num_steps rows."""

    num_steps: int

    def width(self) -> int:
        ...

    def eval(self, builder: "AirBuilder") -> None:
        ...


class TraceView(Protocol):
    def row_slice(self, offset: int) -> Sequence[Expr]:
        ...


class AirBuilder(Protocol):
    """What an Air may ask of the builder it is evaluated against."""

    def main(self) -> TraceView:
        ...

    def public_values(self) -> Sequence[Expr]:
        ...

    def when_first_row(self) -> "AirBuilder":
        ...

    def when_transition(self) -> "AirBuilder":
        ...

    def when_last_row(self) -> "AirBuilder":
        ...

    def assert_zero(self, x: Expr) -> None:
        ...

    def assert_eq(self, x: Expr, y: Expr) -> None:
        ...


# --- Row Windows ---


class WindowView:
    """Two-row window: row_slice(0) is the local row, row_slice(1) the next."""

    def __init__(self, local: Sequence[Expr], nxt: Sequence[Expr]):
        self._rows = (list(local), list(nxt))

    def row_slice(self, offset: int) -> list[Expr]:
        if offset not in (0, 1):
            raise ValueError(f"only offsets 0 (local) and 1 (next) are available, got {offset}")
        return self._rows[offset]


class FilteredAirBuilder:
    """Builder that multiplies every asserted expression by a selector."""

    def __init__(self, inner, condition: Expr):
        self.inner = inner
        self.condition = condition

    def main(self) -> WindowView:
        return self.inner.main()

    def public_values(self) -> list[Expr]:
        return self.inner.public_values()

    def selector(self, name: str) -> Expr:
        return self.inner.selector(name)

    def when_first_row(self) -> "FilteredAirBuilder":
        return FilteredAirBuilder(self, self.selector("is_first_row"))

    def when_transition(self) -> "FilteredAirBuilder":
        return FilteredAirBuilder(self, self.selector("is_transition"))

    def when_last_row(self) -> "FilteredAirBuilder":
        return FilteredAirBuilder(self, self.selector("is_last_row"))

    def assert_zero(self, x: Expr) -> None:
        self.inner.assert_zero(self.condition * self.inner.lift(x))

    def assert_eq(self, x: Expr, y: Expr) -> None:
        self.assert_zero(self.inner.lift(x) - self.inner.lift(y))

    def lift(self, x: Expr) -> Expr:
        return self.inner.lift(x)


# --- Folders ---


class ConstraintFolder:
    """Random linear combination of every asserted constraint."""

    def __init__(
        self,
        field: type[galois.FieldArray],
        ext: type[galois.FieldArray],
        local: Sequence[Expr],
        nxt: Sequence[Expr],
        selectors: Selectors,
        alpha: galois.FieldArray,
        public_values: Sequence[int],
        shape: tuple = (),
    ):
        self.field = field
        self.ext = ext
        self._view = WindowView(local, nxt)
        self.selectors = selectors
        self.alpha = alpha
        self._public_values = [lift(field, v) for v in public_values]
        self.accumulator = ext.Zeros(shape)
        self.constraint_count = 0

    def main(self) -> WindowView:
        return self._view

    def public_values(self) -> list[Expr]:
        return self._public_values

    def selector(self, name: str) -> Expr:
        return getattr(self.selectors, name)

    def when_first_row(self) -> FilteredAirBuilder:
        return FilteredAirBuilder(self, self.selectors.is_first_row)

    def when_transition(self) -> FilteredAirBuilder:
        return FilteredAirBuilder(self, self.selectors.is_transition)

    def when_last_row(self) -> FilteredAirBuilder:
        return FilteredAirBuilder(self, self.selectors.is_last_row)

    def lift(self, x: Expr) -> Expr:
        if isinstance(x, (int, np.integer)):
            return lift(self.field, x)
        return x

    def assert_zero(self, x: Expr) -> None:
        self.accumulator = self.accumulator * self.alpha + lift(self.ext, self.lift(x))
        self.constraint_count += 1

    def assert_eq(self, x: Expr, y: Expr) -> None:
        self.assert_zero(self.lift(x) - self.lift(y))


class ProverConstraintFolder(ConstraintFolder):
    """Prover folder - columns are arrays over the LDE domain.

    The trace LDE is stored in domain order, so the next row of point j is
    point j + blowup (circularly).
    """

    def __init__(self, trace_lde: galois.FieldArray, blowup: int, selectors: Selectors,
                 alpha: galois.FieldArray, public_values: Sequence[int] = ()):
        n_points, width = trace_lde.shape
        local = [trace_lde[:, c] for c in range(width)]
        nxt = [np.roll(col, -blowup) for col in local]
        super().__init__(type(trace_lde), type(alpha), local, nxt, selectors, alpha,
                         public_values, shape=(n_points,))


class VerifierConstraintFolder(ConstraintFolder):
    """Verifier folder - columns are extension scalars at the out-of-domain point."""

    def __init__(self, local: galois.FieldArray, nxt: galois.FieldArray, selectors: Selectors,
                 alpha: galois.FieldArray, public_values: Sequence[int] = ()):
        super().__init__(type(alpha), type(alpha), list(local), list(nxt), selectors,
                         alpha, public_values)


def fold_constraints(air: Air, folder: ConstraintFolder) -> galois.FieldArray:
    """Run air.eval against a folder and return the folded accumulator."""
    air.eval(folder)
    return folder.accumulator
