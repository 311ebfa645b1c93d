"""Tests for hashers, compression functions and Merkle commitments."""

import hashlib

import numpy as np
import pytest

from primitives.extension import BabyBearExt4
from primitives.field import BabyBear, Mersenne31
from primitives.hash import (
    CompressionFunctionFromHasher,
    PaddingFreeSponge,
    SerializingHasher32,
    Sha3_256Hash,
    TruncatedPermutation,
)
from primitives.merkle_tree import ExtensionMmcs, MerkleTree, MerkleTreeMmcs
from primitives.poseidon2 import Poseidon2


@pytest.fixture(scope="module")
def perm() -> Poseidon2:
    return Poseidon2.new_from_rng(np.random.default_rng(7))


@pytest.fixture(scope="module")
def poseidon_mmcs(perm: Poseidon2) -> MerkleTreeMmcs:
    return MerkleTreeMmcs(PaddingFreeSponge(perm), TruncatedPermutation(perm))


@pytest.fixture(scope="module")
def sha3_mmcs() -> MerkleTreeMmcs:
    byte_hash = Sha3_256Hash()
    return MerkleTreeMmcs(SerializingHasher32(byte_hash), CompressionFunctionFromHasher(byte_hash))


class TestHashers:
    """Leaf hashes and node compressions."""

    def test_sponge_digest_shape(self, perm: Poseidon2) -> None:
        digest = PaddingFreeSponge(perm).hash_iter(range(20))
        assert isinstance(digest, tuple)
        assert len(digest) == 8

    def test_sponge_empty_input(self, perm: Poseidon2) -> None:
        assert PaddingFreeSponge(perm).hash_iter([]) == (0,) * 8

    def test_sponge_rows_match_iter(self, perm: Poseidon2) -> None:
        sponge = PaddingFreeSponge(perm)
        rows = np.arange(3 * 11, dtype=np.uint64).reshape(3, 11)
        digests = sponge.hash_rows(rows)
        for row, digest in zip(rows, digests):
            assert sponge.hash_iter(row.tolist()) == digest

    def test_sponge_input_sensitive(self, perm: Poseidon2) -> None:
        sponge = PaddingFreeSponge(perm)
        assert sponge.hash_iter([1, 2, 3]) != sponge.hash_iter([1, 2, 4])

    def test_truncated_permutation(self, perm: Poseidon2) -> None:
        compress = TruncatedPermutation(perm)
        left, right = tuple(range(8)), tuple(range(8, 16))
        expected = tuple(int(v) for v in perm.permute(np.arange(16, dtype=np.uint64))[:8])
        assert compress.compress(left, right) == expected
        assert compress.compress_many([left, right], [right, left])[0] == expected
        assert compress.compress(right, left) != expected

    def test_serializing_hasher_little_endian(self) -> None:
        hasher = SerializingHasher32(Sha3_256Hash())
        expected = hashlib.sha3_256(b"\x01\x00\x00\x00\x02\x00\x00\x00").digest()
        assert hasher.hash_iter([1, 2]) == expected
        assert hasher.hash_rows(np.array([[1, 2]], dtype=np.uint64)) == [expected]

    def test_hash_compression(self) -> None:
        compress = CompressionFunctionFromHasher(Sha3_256Hash())
        left, right = b"\x00" * 32, b"\x01" * 32
        assert compress.compress(left, right) == hashlib.sha3_256(left + right).digest()

    def test_fingerprints_name_parameters(self, perm: Poseidon2) -> None:
        assert perm.fingerprint() in PaddingFreeSponge(perm).fingerprint()
        assert "sha3-256" in SerializingHasher32(Sha3_256Hash()).fingerprint()


@pytest.mark.parametrize("mmcs_name", ["poseidon_mmcs", "sha3_mmcs"])
class TestMerkleTreeMmcs:
    """Commit / open / verify round trips on both hash families."""

    def _matrix(self, field, height: int = 8, width: int = 3):
        return field.Random((height, width), seed=height * width)

    def test_open_and_verify(self, mmcs_name: str, request) -> None:
        mmcs = request.getfixturevalue(mmcs_name)
        matrix = self._matrix(BabyBear)
        root, tree = mmcs.commit_matrix(matrix)
        for idx in range(8):
            proof = mmcs.open(idx, tree)
            assert proof.v == [int(v) for v in matrix[idx]]
            assert len(proof.mp) == 3
            assert mmcs.verify(root, idx, proof, 8, 3)

    def test_tampered_row_rejected(self, mmcs_name: str, request) -> None:
        mmcs = request.getfixturevalue(mmcs_name)
        root, tree = mmcs.commit_matrix(self._matrix(Mersenne31))
        proof = mmcs.open(5, tree)
        proof.v[0] = (proof.v[0] + 1) % Mersenne31.characteristic
        assert not mmcs.verify(root, 5, proof, 8, 3)

    def test_wrong_index_rejected(self, mmcs_name: str, request) -> None:
        mmcs = request.getfixturevalue(mmcs_name)
        root, tree = mmcs.commit_matrix(self._matrix(BabyBear))
        proof = mmcs.open(2, tree)
        assert not mmcs.verify(root, 3, proof, 8, 3)
        assert not mmcs.verify(root, 2, proof, 8, 4)
        assert not mmcs.verify(root, 2, proof, 16, 3)

    def test_wrong_root_rejected(self, mmcs_name: str, request) -> None:
        mmcs = request.getfixturevalue(mmcs_name)
        root, tree = mmcs.commit_matrix(self._matrix(BabyBear))
        other_root, _ = mmcs.commit_matrix(self._matrix(BabyBear, width=2))
        assert not mmcs.verify(other_root, 1, mmcs.open(1, tree), 8, 3)

    def test_single_row(self, mmcs_name: str, request) -> None:
        mmcs = request.getfixturevalue(mmcs_name)
        matrix = self._matrix(BabyBear, height=1)
        root, tree = mmcs.commit_matrix(matrix)
        proof = mmcs.open(0, tree)
        assert proof.mp == []
        assert mmcs.verify(root, 0, proof, 1, 3)


class TestMerkleTree:

    def test_height_must_be_power_of_two(self, poseidon_mmcs: MerkleTreeMmcs) -> None:
        tree = MerkleTree(poseidon_mmcs.hasher, poseidon_mmcs.compressor)
        with pytest.raises(ValueError):
            tree.merkelize(np.zeros((6, 2), dtype=np.uint64))

    def test_out_of_range_query(self, poseidon_mmcs: MerkleTreeMmcs) -> None:
        _, tree = poseidon_mmcs.commit_matrix(BabyBear.Zeros((4, 2)))
        with pytest.raises(IndexError):
            tree.get_query_proof(4)


class TestExtensionMmcs:

    def test_values_round_trip(self, sha3_mmcs: MerkleTreeMmcs) -> None:
        mmcs = ExtensionMmcs(sha3_mmcs, BabyBearExt4)
        matrix = BabyBearExt4.Random((4, 2), seed=3)
        root, tree = mmcs.commit_matrix(matrix)
        proof = mmcs.open(1, tree)
        assert mmcs.verify(root, 1, proof, 4, 2)
        assert np.all(mmcs.values(proof) == matrix[1])
        assert "ext4" in mmcs.fingerprint()
