"""Evaluation domains: two-adic multiplicative cosets and circle-group cosets.

Both domain types expose the same surface so the PCS and the constraint
folders never branch on the field:

    points()          all points, in the order evaluations are stored
    ntt()             butterfly engine for interpolation / evaluation
    basis_at(z)       basis twiddles at an arbitrary (possibly extension) point
    next_point(z)     z shifted by one trace row
    selectors_at(z)   row-class selectors and the inverse vanishing polynomial
    create_lde(bits)  the disjoint, larger domain used for low-degree extension
    fold_pair(q)      FRI leaf index and side of position q

Row i of a trace lives at point i of its domain; moving one row forward on the
LDE of blowup B moves B positions.
"""

from dataclasses import dataclass
from typing import Any

import galois
import numpy as np

from primitives.field import lift, two_adic_generator
from primitives.ntt import NTT

# --- Type Aliases ---

CirclePoint = tuple[Any, Any]  # (x, y), base arrays or extension scalars


@dataclass
class Selectors:
    """Row-class selectors evaluated at one or more points.

    Each selector vanishes on every trace row outside its class and is
    non-zero inside it.
    """
    is_first_row: Any
    is_last_row: Any
    is_transition: Any
    inv_vanishing: Any


# --- Two-Adic Cosets ---


class TwoAdicCoset:
    """The coset shift * <omega> of size 2^log_size."""

    mirrored = False

    def __init__(self, field: type[galois.FieldArray], log_size: int, shift=None):
        self.field = field
        self.log_size = log_size
        self.size = 1 << log_size
        self.shift = field(1) if shift is None else field(int(shift))
        self.generator = two_adic_generator(field, log_size)

    def __repr__(self) -> str:
        return f"TwoAdicCoset(size={self.size}, shift={int(self.shift)})"

    def points(self) -> galois.FieldArray:
        """shift * [1, w, w^2, ...] via cumulative product."""
        powers = self.field.Ones(self.size)
        powers[1:] = self.generator
        return self.shift * np.cumprod(powers)

    def fold_twiddles(self) -> list[galois.FieldArray]:
        """Level k twiddle is x^(2^k) over the first size/2^(k+1) points."""
        if self.log_size == 0:
            return []
        level = self.points()[: self.size // 2]
        twiddles = [level]
        while len(level) > 1:
            level = level[: len(level) // 2] ** 2
            twiddles.append(level)
        return twiddles

    def ntt(self) -> NTT:
        return NTT(self.fold_twiddles(), mirrored=False)

    def basis_at(self, z) -> list:
        basis = []
        for _ in range(self.log_size):
            basis.append(z)
            z = z * z
        return basis

    def next_point(self, z):
        return z * lift(type(z), self.generator)

    def vanishing_at(self, z):
        """Z(z) = (z / shift)^n - 1."""
        F = type(z)
        return (z * lift(F, self.shift ** -1)) ** self.size - F(1)

    def selectors_at(self, z) -> Selectors:
        """Selectors of the (unshifted) trace domain at z."""
        assert int(self.shift) == 1, "selectors are defined on the trace subgroup"
        F = type(z)
        one = F(1)
        last = lift(F, self.generator ** -1)
        zerofier = self.vanishing_at(z)
        return Selectors(
            is_first_row=zerofier / (z - one),
            is_last_row=zerofier / (z - last),
            is_transition=z - last,
            inv_vanishing=zerofier ** -1,
        )

    def selectors_on(self, other: "TwoAdicCoset") -> Selectors:
        return self.selectors_at(other.points())

    def create_lde(self, log_blowup: int) -> "TwoAdicCoset":
        """Coset shifted by the multiplicative generator, disjoint from the subgroup."""
        return TwoAdicCoset(self.field, self.log_size + log_blowup, shift=self.field.primitive_element)

    def fold_pair(self, q: int, size: int) -> tuple[int, bool]:
        """FRI pairs j <-> j + size/2; returns (leaf index, is high half)."""
        half = size // 2
        return q % half, q >= half


# --- Circle Group ---

CIRCLE_LOG_ORDER = 31


def circle_mul(a: CirclePoint, b: CirclePoint) -> CirclePoint:
    """Group law on x^2 + y^2 = 1. Put extension operands first."""
    ax, ay = a
    bx, by = b
    return ax * bx - ay * by, ax * by + ay * bx


def circle_double(a: CirclePoint, field: type[galois.FieldArray]) -> CirclePoint:
    x, y = a
    two = field(2)
    return x * x * two - field(1), x * y * two


def circle_conjugate(a: CirclePoint) -> CirclePoint:
    """Inverse of a point: (x, -y)."""
    x, y = a
    return x, -y


def circle_generator(field: type[galois.FieldArray], log_order: int) -> CirclePoint:
    """Generator of the circle subgroup of order 2^log_order.

    (2, sqrt(-3)) generates the full group of order p + 1 = 2^31 for Mersenne31;
    smaller subgroups are reached by doubling.
    """
    p = field.characteristic
    if p + 1 != 1 << CIRCLE_LOG_ORDER:
        raise ValueError(f"circle group of GF({p}) is not of order 2^{CIRCLE_LOG_ORDER}")
    if log_order > CIRCLE_LOG_ORDER:
        raise ValueError(f"no circle subgroup of order 2^{log_order}")

    y = field(p - 3) ** ((p + 1) // 4)
    point = (field(2), y)
    for _ in range(CIRCLE_LOG_ORDER - log_order):
        point = circle_double(point, field)
    return point


class CircleDomain:
    """Standard-position circle coset of size 2^log_size.

    Points are Q^(2i+1) for i < N, with Q of order 2N. The coset is closed under
    conjugation (i <-> N-1-i) and its x-coordinates under negation, which is
    what lets evaluations fold first by y and then repeatedly by x.
    """

    mirrored = True

    def __init__(self, field: type[galois.FieldArray], log_size: int):
        assert log_size >= 1, "circle domains have at least two points"
        self.field = field
        self.log_size = log_size
        self.size = 1 << log_size
        self.half_generator = circle_generator(field, log_size + 1)
        self.generator = circle_double(self.half_generator, field)

    def __repr__(self) -> str:
        return f"CircleDomain(size={self.size})"

    def point(self, i: int) -> CirclePoint:
        """Q^(2i+1), by square-and-multiply on the circle."""
        e = (2 * i + 1) % (2 * self.size)
        result = (self.field(1), self.field(0))
        base = self.half_generator
        while e:
            if e & 1:
                result = circle_mul(result, base)
            base = circle_double(base, self.field)
            e >>= 1
        return result

    def points(self) -> CirclePoint:
        xs = self.field.Zeros(self.size)
        ys = self.field.Zeros(self.size)
        current = self.half_generator
        for i in range(self.size):
            xs[i], ys[i] = current
            current = circle_mul(current, self.generator)
        return xs, ys

    def fold_twiddles(self) -> list[galois.FieldArray]:
        """Level 0 twiddle is y; level 1 is x; then x <- 2x^2 - 1."""
        xs, ys = self.points()
        twiddles = [ys[: self.size // 2]]
        level = xs[: self.size // 4]
        one, two = self.field(1), self.field(2)
        while len(level) > 0:
            twiddles.append(level)
            level = level[: len(level) // 2]
            level = level * level * two - one
        return twiddles

    def ntt(self) -> NTT:
        return NTT(self.fold_twiddles(), mirrored=True)

    def basis_at(self, z: CirclePoint) -> list:
        x, y = z
        F = type(x)
        basis = [y]
        for _ in range(self.log_size - 1):
            basis.append(x)
            x = x * x * F(2) - F(1)
        return basis

    def first_point(self) -> CirclePoint:
        return self.half_generator

    def last_point(self) -> CirclePoint:
        return circle_conjugate(self.half_generator)

    def next_point(self, z: CirclePoint) -> CirclePoint:
        F = type(z[0])
        gx, gy = self.generator
        return circle_mul(z, (lift(F, gx), lift(F, gy)))

    def vanishing_at(self, z: CirclePoint):
        """pi^(log n - 1)(x), zero exactly on the coset."""
        x, _ = z
        F = type(x)
        for _ in range(self.log_size - 1):
            x = x * x * F(2) - F(1)
        return x

    def selectors_at(self, z: CirclePoint) -> Selectors:
        x, y = z
        F = type(x)
        one = F(1)
        zerofier = self.vanishing_at(z)
        first = tuple(lift(F, c) for c in self.first_point())
        last = tuple(lift(F, c) for c in self.last_point())
        lx, ly = last
        return Selectors(
            is_first_row=zerofier * _v_tilde_inverse(z, first, one),
            is_last_row=zerofier * _v_tilde_inverse(z, last, one),
            # tangent line at the last point meets the circle only there
            is_transition=x * lx + y * ly - one,
            inv_vanishing=zerofier ** -1,
        )

    def selectors_on(self, other: "CircleDomain") -> Selectors:
        return self.selectors_at(other.points())

    def create_lde(self, log_blowup: int) -> "CircleDomain":
        """Standard coset of the larger size; disjoint from this one for blowup >= 1."""
        assert log_blowup >= 1, "circle LDE needs a blowup of at least 2"
        return CircleDomain(self.field, self.log_size + log_blowup)

    def fold_pair(self, q: int, size: int) -> tuple[int, bool]:
        """FRI pairs j <-> size-1-j; returns (leaf index, is high half)."""
        half = size // 2
        return min(q, size - 1 - q), q >= half


def _v_tilde_inverse(z: CirclePoint, at: CirclePoint, one):
    """1 / v_tilde_at(z) with v_tilde_at(z) = d.y / (1 + d.x), d = z * at^-1.

    v_tilde has a simple zero at `at` and a pole at -at.
    """
    x, y = z
    ax, ay = at
    dx = x * ax + y * ay
    dy = y * ax - x * ay
    return (dx + one) / dy
