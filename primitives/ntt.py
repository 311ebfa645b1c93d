"""Butterfly NTT over 2-to-1 folding domains.

Both evaluation domains (two-adic cosets and circle cosets) fold 2-to-1: at
level k the current point set splits into pairs (P, P') with a twiddle
t_k(P) = -t_k(P'), and level k + 1 holds one representative of each pair.
Pairs are either 'half' (j <-> j + M/2, two-adic) or 'mirrored'
(j <-> M - 1 - j, circle).

A polynomial is written in the basis prod_k t_k^(bit k of i), so coefficient
i pairs with basis element i. For two-adic domains t_k = x^(2^k) (the monomial
basis); for circle domains t_0 = y, t_1 = x, t_k = pi(t_{k-1}) with
pi(x) = 2x^2 - 1. The basis does not depend on the domain size, which makes
low-degree extension a zero-pad between two engines.
"""

from typing import Sequence

import galois

from primitives.field import lift

# --- NTT Engine ---


class NTT:
    """Interpolation / evaluation engine for one folding domain."""

    def __init__(self, twiddles: Sequence[galois.FieldArray], mirrored: bool = False) -> None:
        """Initialize from per-level twiddles.

        Args:
            twiddles: twiddles[k] holds t_k at the first M/2^(k+1) points of level k
            mirrored: True for circle-style j <-> M-1-j pairing
        """
        self.n_bits = len(twiddles)
        self.n = 1 << self.n_bits
        for k, tw in enumerate(twiddles):
            assert len(tw) == self.n >> (k + 1), f"level {k}: expected {self.n >> (k + 1)} twiddles"

        self.twiddles = list(twiddles)
        self.mirrored = mirrored
        self.field = type(twiddles[0]) if twiddles else None

        if self.twiddles:
            inv2 = self.field(2) ** -1
            self.twiddles_inv = [(tw ** -1) * inv2 for tw in self.twiddles]
            self.inv2 = inv2

    def ntt(self, coeffs: galois.FieldArray) -> galois.FieldArray:
        """Forward transform: coefficients (M, ...) -> evaluations (M, ...)."""
        assert coeffs.shape[0] == self.n, f"expected {self.n} rows, got {coeffs.shape[0]}"
        rest = coeffs.shape[1:]
        v = coeffs.reshape((1, self.n) + rest)

        for k in reversed(range(self.n_bits)):
            h, b = v.shape[0], v.shape[1] // 2
            t = _broadcast(self.twiddles[k], v.ndim)
            even, odd = v[:, :b], v[:, b:]
            todd = odd * t
            out = self.field.Zeros((2 * h, b) + rest)
            out[:h] = even + todd
            out[h:] = (even - todd)[::-1] if self.mirrored else even - todd
            v = out

        return v.reshape(coeffs.shape)

    def intt(self, evals: galois.FieldArray) -> galois.FieldArray:
        """Inverse transform: evaluations (M, ...) -> coefficients (M, ...)."""
        assert evals.shape[0] == self.n, f"expected {self.n} rows, got {evals.shape[0]}"
        rest = evals.shape[1:]
        v = evals.reshape((self.n, 1) + rest)

        for k in range(self.n_bits):
            m, b = v.shape[0], v.shape[1]
            h = m // 2
            lo = v[:h]
            hi = v[::-1][:h] if self.mirrored else v[h:]
            out = self.field.Zeros((h, 2 * b) + rest)
            out[:, :b] = (lo + hi) * self.inv2
            out[:, b:] = (lo - hi) * _broadcast(self.twiddles_inv[k], v.ndim)
            v = out

        return v.reshape(evals.shape)

    def extend_pol(self, evals: galois.FieldArray, target: "NTT") -> galois.FieldArray:
        """Low-degree extend evaluations on this domain to the target domain."""
        assert target.n >= self.n, "Extended size must be >= original size"
        coeffs = self.intt(evals)
        padded = self.field.Zeros((target.n,) + evals.shape[1:])
        padded[:self.n] = coeffs
        return target.ntt(padded)


# --- Point Evaluation ---


def evaluate_at(coeffs, basis: Sequence):
    """Evaluate coefficients (M, ...) at a point given its basis twiddles.

    Args:
        coeffs: Base field array of shape (M, ...)
        basis: [t_0(z), t_1(z), ...], log2(M) values, base or extension scalars

    Returns:
        Values of shape (...) in the field of the basis
    """
    assert len(coeffs) == 1 << len(basis), "basis length must be log2 of coefficient count"
    acc = lift(type(basis[0]), coeffs) if basis else coeffs
    for t in reversed(basis):
        h = len(acc) // 2
        acc = t * acc[h:] + acc[:h]
    return acc[0]


# --- Helpers ---


def _broadcast(tw: galois.FieldArray, ndim: int) -> galois.FieldArray:
    """Reshape a length-h twiddle vector to broadcast along axis 0 of an ndim array."""
    return tw.reshape((len(tw),) + (1,) * (ndim - 1))
