"""Poseidon2 permutation over BabyBear (width 16, x^7 S-box).

State arrays have shape (16,) or (16, batch); the batch axis lets grinding try
many nonces in one call. Values stay below p < 2^31, so every product fits in
uint64 before reduction.

Round structure:
    external layer
    ROUNDS_F / 2 full rounds:   add constants, S-box on every lane, external layer
    ROUNDS_P partial rounds:    add constant to lane 0, S-box on lane 0, internal layer
    ROUNDS_F / 2 full rounds
"""

import hashlib

import numpy as np

from primitives.field import BABY_BEAR_PRIME

# --- Parameters ---

WIDTH = 16
ROUNDS_F = 8
ROUNDS_P = 13

P = np.uint64(BABY_BEAR_PRIME)


def _inv_pow2(k: int) -> int:
    return pow(2, -k, BABY_BEAR_PRIME)


# Internal layer is 1 + diag(V): x[i] <- x[i] * V[i] + sum(x)
BABY_BEAR_DIAG_16 = np.array(
    [
        BABY_BEAR_PRIME - 2,
        1,
        2,
        _inv_pow2(1),
        3,
        4,
        BABY_BEAR_PRIME - _inv_pow2(1),
        BABY_BEAR_PRIME - 3,
        BABY_BEAR_PRIME - 4,
        _inv_pow2(8),
        _inv_pow2(2),
        _inv_pow2(3),
        _inv_pow2(27),
        BABY_BEAR_PRIME - _inv_pow2(8),
        BABY_BEAR_PRIME - _inv_pow2(4),
        BABY_BEAR_PRIME - _inv_pow2(27),
    ],
    dtype=np.uint64,
)


# --- Round Functions ---


def _pow7(x: np.ndarray) -> np.ndarray:
    """x^7 = x^3 * x^4."""
    x2 = (x * x) % P
    x3 = (x * x2) % P
    x4 = (x2 * x2) % P
    return (x3 * x4) % P


def _matmul_m4(x: np.ndarray) -> np.ndarray:
    """Apply the 4x4 MDS block to axis 1 of a (blocks, 4, ...) array."""
    x0, x1, x2, x3 = x[:, 0], x[:, 1], x[:, 2], x[:, 3]
    t0 = (x0 + x1) % P
    t1 = (x2 + x3) % P
    t2 = (x1 + x1 + t1) % P
    t3 = (x3 + x3 + t0) % P
    t1_2 = (t1 + t1) % P
    t0_2 = (t0 + t0) % P
    t4 = (t1_2 + t1_2 + t3) % P
    t5 = (t0_2 + t0_2 + t2) % P
    t6 = (t3 + t5) % P
    t7 = (t2 + t4) % P
    return np.stack([t6, t5, t7, t4], axis=1)


def _matmul_external(state: np.ndarray) -> np.ndarray:
    """M4 on each 4-lane block, then add the per-position column sums."""
    rest = state.shape[1:]
    blocks = _matmul_m4(state.reshape((WIDTH // 4, 4) + rest))
    sums = blocks.sum(axis=0) % P
    return ((blocks + sums) % P).reshape(state.shape)


def _matmul_internal(state: np.ndarray, diag: np.ndarray) -> np.ndarray:
    total = state.sum(axis=0) % P
    return (state * diag + total) % P


def _broadcast(v: np.ndarray, ndim: int) -> np.ndarray:
    return v.reshape(v.shape + (1,) * (ndim - 1))


# --- Permutation ---


class Poseidon2:
    """Poseidon2 permutation with explicit round constants."""

    def __init__(self, external_constants: np.ndarray, internal_constants: np.ndarray,
                 diag: np.ndarray = BABY_BEAR_DIAG_16):
        external_constants = np.asarray(external_constants, dtype=np.uint64)
        internal_constants = np.asarray(internal_constants, dtype=np.uint64)
        if external_constants.shape != (ROUNDS_F, WIDTH):
            raise ValueError(f"expected external constants of shape {(ROUNDS_F, WIDTH)}")
        if internal_constants.shape != (ROUNDS_P,):
            raise ValueError(f"expected {ROUNDS_P} internal constants")

        self.width = WIDTH
        self.external_constants = external_constants % P
        self.internal_constants = internal_constants % P
        self.diag = np.asarray(diag, dtype=np.uint64)

    @classmethod
    def new_from_rng(cls, rng: np.random.Generator) -> "Poseidon2":
        """Draw round constants uniformly from an explicitly seeded generator."""
        external = rng.integers(0, BABY_BEAR_PRIME, size=(ROUNDS_F, WIDTH), dtype=np.uint64)
        internal = rng.integers(0, BABY_BEAR_PRIME, size=ROUNDS_P, dtype=np.uint64)
        return cls(external, internal)

    def permute(self, state) -> np.ndarray:
        """Permute a (16,) state or a (16, batch) stack of states."""
        state = np.asarray(state, dtype=np.uint64) % P
        if state.shape[0] != WIDTH:
            raise ValueError(f"state must have {WIDTH} lanes, got {state.shape[0]}")
        diag = _broadcast(self.diag, state.ndim)
        half = ROUNDS_F // 2

        state = _matmul_external(state)

        for r in range(half):
            rc = _broadcast(self.external_constants[r], state.ndim)
            state = _matmul_external(_pow7((state + rc) % P))

        for r in range(ROUNDS_P):
            state[0] = _pow7((state[0] + self.internal_constants[r]) % P)
            state = _matmul_internal(state, diag)

        for r in range(half, ROUNDS_F):
            rc = _broadcast(self.external_constants[r], state.ndim)
            state = _matmul_external(_pow7((state + rc) % P))

        return state

    def fingerprint(self) -> str:
        """Digest of the round constants, used to tell configurations apart."""
        h = hashlib.sha256()
        h.update(self.external_constants.tobytes())
        h.update(self.internal_constants.tobytes())
        h.update(self.diag.tobytes())
        return h.hexdigest()
