"""Hashers and 2-to-1 compression functions for Merkle commitments.

Two families:

- field-native: PaddingFreeSponge / TruncatedPermutation over Poseidon2,
  digests are tuples of 8 BabyBear elements;
- byte-oriented: SerializingHasher32 / CompressionFunctionFromHasher over
  SHA3-256 (Keccak-f[1600]), digests are 32-byte strings.

Every hasher exposes hash_iter(values) and hash_rows(matrix); every
compressor exposes compress(left, right) and compress_many(lefts, rights).
"""

import hashlib
from typing import Iterable, Sequence, Union

import numpy as np

from primitives.poseidon2 import Poseidon2

# --- Type Aliases ---

FieldDigest = tuple[int, ...]
ByteDigest = bytes
Digest = Union[FieldDigest, ByteDigest]


# --- Field-Native (Poseidon2) ---


class PaddingFreeSponge:
    """Overwrite-mode sponge without padding.

    Inputs are absorbed `rate` lanes at a time by overwriting the state, each
    chunk followed by a permutation. The first `out` lanes are the digest.
    Hashing the empty input returns the all-zero digest.
    """

    name = "poseidon2-sponge"

    def __init__(self, permutation: Poseidon2, rate: int = 8, out: int = 8):
        assert rate < permutation.width and out <= permutation.width
        self.permutation = permutation
        self.rate = rate
        self.out = out

    def hash_iter(self, values: Iterable[int]) -> FieldDigest:
        row = np.asarray(list(values), dtype=np.uint64).reshape(1, -1)
        return self.hash_rows(row)[0]

    def hash_rows(self, rows: np.ndarray) -> list[FieldDigest]:
        """Hash every row of a (height, width) uint64 matrix in one batch."""
        rows = np.asarray(rows, dtype=np.uint64)
        height, width = rows.shape
        state = np.zeros((self.permutation.width, height), dtype=np.uint64)
        for start in range(0, width, self.rate):
            chunk = rows[:, start:start + self.rate].T
            state[: chunk.shape[0]] = chunk
            state = self.permutation.permute(state)
        return [tuple(int(v) for v in state[: self.out, i]) for i in range(height)]

    def fingerprint(self) -> str:
        return f"{self.name}(rate={self.rate},out={self.out},{self.permutation.fingerprint()})"


class TruncatedPermutation:
    """Compress N chunks by permuting their concatenation and keeping the first chunk."""

    name = "poseidon2-truncated"

    def __init__(self, permutation: Poseidon2, n: int = 2, chunk: int = 8):
        assert n * chunk == permutation.width
        self.permutation = permutation
        self.n = n
        self.chunk = chunk

    def compress(self, left: FieldDigest, right: FieldDigest) -> FieldDigest:
        return self.compress_many([left], [right])[0]

    def compress_many(self, lefts: Sequence[FieldDigest], rights: Sequence[FieldDigest]) -> list[FieldDigest]:
        state = np.concatenate(
            [np.asarray(lefts, dtype=np.uint64).T, np.asarray(rights, dtype=np.uint64).T]
        )
        state = self.permutation.permute(state)
        return [tuple(int(v) for v in state[: self.chunk, i]) for i in range(state.shape[1])]

    def fingerprint(self) -> str:
        return f"{self.name}(n={self.n},chunk={self.chunk},{self.permutation.fingerprint()})"


# --- Byte-Oriented (SHA3-256) ---


class Sha3_256Hash:
    """32-byte hash of a byte string (Keccak-f[1600] sponge, SHA-3 padding)."""

    name = "sha3-256"
    digest_size = 32

    def __call__(self, data: bytes) -> ByteDigest:
        return hashlib.sha3_256(data).digest()

    def fingerprint(self) -> str:
        return self.name


class SerializingHasher32:
    """Field hasher that feeds each element as 4 little-endian bytes to a byte hash."""

    name = "serializing-32"

    def __init__(self, inner: Sha3_256Hash):
        self.inner = inner

    def hash_iter(self, values: Iterable[int]) -> ByteDigest:
        return self.inner(np.asarray(list(values), dtype="<u4").tobytes())

    def hash_rows(self, rows: np.ndarray) -> list[ByteDigest]:
        rows = np.asarray(rows, dtype="<u4")
        return [self.inner(row.tobytes()) for row in rows]

    def fingerprint(self) -> str:
        return f"{self.name}({self.inner.fingerprint()})"


class CompressionFunctionFromHasher:
    """2-to-1 compression by hashing left || right."""

    name = "hash-compression"

    def __init__(self, inner: Sha3_256Hash, n: int = 2):
        self.inner = inner
        self.n = n

    def compress(self, left: ByteDigest, right: ByteDigest) -> ByteDigest:
        return self.inner(left + right)

    def compress_many(self, lefts: Sequence[ByteDigest], rights: Sequence[ByteDigest]) -> list[ByteDigest]:
        return [self.inner(left + right) for left, right in zip(lefts, rights)]

    def fingerprint(self) -> str:
        return f"{self.name}(n={self.n},{self.inner.fingerprint()})"
