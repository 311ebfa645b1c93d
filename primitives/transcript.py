"""Fiat-Shamir challengers.

A challenger absorbs prover messages (field elements and commitment digests)
and squeezes verifier challenges. Prover and verifier drive identical
challengers through identical observe/sample sequences; any divergence in
seed, configuration or message order changes every later challenge.

DuplexChallenger runs a duplex sponge over the Poseidon2 permutation.
SerializingChallenger32 feeds field elements as little-endian u32 bytes into a
HashChallenger over a byte hash and samples field elements by rejection.
"""

from abc import ABC, abstractmethod
from typing import Iterable

import galois
import numpy as np

from primitives.extension import from_coeffs, to_coeffs
from primitives.hash import Digest, Sha3_256Hash
from primitives.poseidon2 import Poseidon2

# Nonces tried per batched permutation call while grinding
GRINDING_BATCH = 1 << 12


class Challenger(ABC):
    """observe / sample plus the derived helpers every challenger shares."""

    field: type[galois.FieldArray]

    @abstractmethod
    def observe(self, value: int) -> None:
        """Absorb one base field element."""

    @abstractmethod
    def observe_digest(self, digest: Digest) -> None:
        """Absorb a Merkle commitment."""

    @abstractmethod
    def sample(self) -> int:
        """Squeeze one base field element (canonical int)."""

    @abstractmethod
    def copy(self) -> "Challenger":
        """Independent challenger in the same state."""

    # --- Derived Operations ---

    def observe_many(self, values: Iterable[int]) -> None:
        for value in values:
            self.observe(int(value))

    def observe_ext(self, value: galois.FieldArray) -> None:
        """Absorb extension values coefficient by coefficient."""
        self.observe_many(to_coeffs(value).reshape(-1))

    def sample_ext(self, ext: type[galois.FieldArray]) -> galois.FieldArray:
        return from_coeffs(ext, [self.sample() for _ in range(ext.degree)])

    def sample_bits(self, bits: int) -> int:
        """Uniform-ish integer below 2^bits."""
        assert bits < self.field.characteristic.bit_length(), "too many bits for the field"
        return self.sample() & ((1 << bits) - 1)

    def check_witness(self, bits: int, witness: int) -> bool:
        """Absorb a proof-of-work witness and test the next sample_bits for zero."""
        self.observe(witness)
        return self.sample_bits(bits) == 0

    def grind(self, bits: int) -> int:
        """Find a proof-of-work witness and absorb it."""
        for witness in range(self.field.characteristic):
            if self.copy().check_witness(bits, witness):
                break
        else:
            raise RuntimeError(f"no proof-of-work witness for {bits} bits")
        assert self.check_witness(bits, witness)
        return witness


# --- Duplex Sponge over Poseidon2 ---


class DuplexChallenger(Challenger):
    """Duplex sponge challenger.

    Observed elements queue in an input buffer; when it reaches `rate` the
    sponge duplexes (input overwrites the first lanes, then permute) and the
    first `rate` lanes become the output buffer. Sampling pops from the end of
    the output buffer, duplexing first if input is pending or output is empty.
    """

    def __init__(self, field: type[galois.FieldArray], permutation: Poseidon2, rate: int = 8):
        assert rate < permutation.width
        self.field = field
        self.permutation = permutation
        self.rate = rate
        self.sponge_state = np.zeros(permutation.width, dtype=np.uint64)
        self.input_buffer: list[int] = []
        self.output_buffer: list[int] = []

    def copy(self) -> "DuplexChallenger":
        other = DuplexChallenger(self.field, self.permutation, self.rate)
        other.sponge_state = self.sponge_state.copy()
        other.input_buffer = list(self.input_buffer)
        other.output_buffer = list(self.output_buffer)
        return other

    def _duplexing(self) -> None:
        assert len(self.input_buffer) <= self.rate
        self.sponge_state[: len(self.input_buffer)] = self.input_buffer
        self.input_buffer.clear()
        self.sponge_state = self.permutation.permute(self.sponge_state)
        self.output_buffer = [int(v) for v in self.sponge_state[: self.rate]]

    def observe(self, value: int) -> None:
        self.output_buffer.clear()
        self.input_buffer.append(int(value) % self.field.characteristic)
        if len(self.input_buffer) == self.rate:
            self._duplexing()

    def observe_digest(self, digest: Digest) -> None:
        self.observe_many(digest)

    def sample(self) -> int:
        if self.input_buffer or not self.output_buffer:
            self._duplexing()
        return self.output_buffer.pop()

    def grind(self, bits: int) -> int:
        """Batched search: a witness w lands in the next input lane, the
        duplex that follows is permuted for many candidates at once and the
        last output lane (the one sample() pops) is tested."""
        p = self.field.characteristic
        lane = len(self.input_buffer)
        base = self.sponge_state.copy()
        base[:lane] = self.input_buffer
        mask = np.uint64((1 << bits) - 1)

        for start in range(0, p, GRINDING_BATCH):
            candidates = np.arange(start, min(start + GRINDING_BATCH, p), dtype=np.uint64)
            states = np.repeat(base[:, np.newaxis], len(candidates), axis=1)
            states[lane] = candidates
            out = self.permutation.permute(states)[self.rate - 1]
            hits = np.flatnonzero((out & mask) == 0)
            if len(hits):
                witness = int(candidates[hits[0]])
                assert self.check_witness(bits, witness)
                return witness
        raise RuntimeError(f"no proof-of-work witness for {bits} bits")


# --- Byte Hash Challengers ---


class HashChallenger:
    """Byte-level challenger: squeezes by hashing everything observed so far.

    On an empty output buffer the input buffer is hashed, the digest becomes
    the output buffer and is also fed back as the new input. Bytes are popped
    from the end of the output buffer.
    """

    def __init__(self, hasher: Sha3_256Hash, initial_state: bytes = b""):
        self.hasher = hasher
        self.input_buffer = bytearray(initial_state)
        self.output_buffer = bytearray()

    def copy(self) -> "HashChallenger":
        other = HashChallenger(self.hasher)
        other.input_buffer = bytearray(self.input_buffer)
        other.output_buffer = bytearray(self.output_buffer)
        return other

    def observe_bytes(self, data: bytes) -> None:
        self.output_buffer.clear()
        self.input_buffer.extend(data)

    def _flush(self) -> None:
        output = self.hasher(bytes(self.input_buffer))
        self.input_buffer = bytearray(output)
        self.output_buffer = bytearray(output)

    def sample_byte(self) -> int:
        if not self.output_buffer:
            self._flush()
        return self.output_buffer.pop()

    def sample_bytes(self, n: int) -> bytes:
        return bytes(self.sample_byte() for _ in range(n))


class SerializingChallenger32(Challenger):
    """Field challenger over a byte HashChallenger.

    Elements are observed as 4 little-endian bytes. Samples take 4 bytes as a
    little-endian u32, mask to the field's bit length and reject values >= p.
    """

    def __init__(self, field: type[galois.FieldArray], inner: HashChallenger):
        assert field.characteristic < 1 << 32
        self.field = field
        self.inner = inner
        self._mask = (1 << field.characteristic.bit_length()) - 1

    def copy(self) -> "SerializingChallenger32":
        return SerializingChallenger32(self.field, self.inner.copy())

    def observe(self, value: int) -> None:
        self.inner.observe_bytes((int(value) % self.field.characteristic).to_bytes(4, "little"))

    def observe_digest(self, digest: Digest) -> None:
        self.inner.observe_bytes(bytes(digest))

    def _sample_u32(self) -> int:
        return int.from_bytes(self.inner.sample_bytes(4), "little")

    def sample(self) -> int:
        while True:
            value = self._sample_u32() & self._mask
            if value < self.field.characteristic:
                return value

    def sample_bits(self, bits: int) -> int:
        assert bits < 32
        return self._sample_u32() & ((1 << bits) - 1)
