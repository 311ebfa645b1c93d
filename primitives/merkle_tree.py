"""Binary Merkle tree commitments over matrix rows (MMCS)."""

from dataclasses import dataclass, field

import galois
import numpy as np

from primitives.extension import from_coeffs, to_coeffs
from primitives.field import to_uint64
from primitives.hash import Digest

# --- Data Classes ---


@dataclass
class QueryProof:
    """Opened row and Merkle authentication path.

    Attributes:
        v: Row values at the queried leaf, base field ints
        mp: Sibling digests from leaf level to just below the root
    """
    v: list[int] = field(default_factory=list)
    mp: list[Digest] = field(default_factory=list)


# --- Merkle Tree ---


class MerkleTree:
    """Binary Merkle tree: leaf = hash(row), node = compress(left, right)."""

    def __init__(self, hasher, compressor):
        self.hasher = hasher
        self.compressor = compressor
        self.height = 0
        self.width = 0
        self.source: np.ndarray | None = None
        self.levels: list[list[Digest]] = []

    # --- Core Operations ---

    def merkelize(self, source: np.ndarray) -> None:
        """Build the tree over the rows of a (height, width) integer matrix."""
        source = np.asarray(source, dtype=np.uint64)
        height, width = source.shape
        if height == 0 or height & (height - 1):
            raise ValueError(f"Merkle tree height must be a power of two, got {height}")

        self.height = height
        self.width = width
        self.source = source

        level = self.hasher.hash_rows(source)
        self.levels = [level]
        while len(level) > 1:
            level = self.compressor.compress_many(level[0::2], level[1::2])
            self.levels.append(level)

    def get_root(self) -> Digest:
        return self.levels[-1][0]

    def get_query_proof(self, idx: int) -> QueryProof:
        """Row at idx and its authentication path."""
        if not 0 <= idx < self.height:
            raise IndexError(f"leaf {idx} out of range for height {self.height}")
        row = [int(x) for x in self.source[idx]]
        path = []
        for level in self.levels[:-1]:
            path.append(level[idx ^ 1])
            idx >>= 1
        return QueryProof(v=row, mp=path)


def verify_merkle_path(hasher, compressor, root: Digest, idx: int, proof: QueryProof, height: int) -> bool:
    """Recompute the root from an opened row and its path."""
    if height == 0 or height & (height - 1) or not 0 <= idx < height:
        return False
    if len(proof.mp) != height.bit_length() - 1:
        return False

    node = hasher.hash_iter(proof.v)
    for sibling in proof.mp:
        node = compressor.compress(sibling, node) if idx & 1 else compressor.compress(node, sibling)
        idx >>= 1
    return node == root


# --- Commitment Schemes ---


class MerkleTreeMmcs:
    """Mixed-matrix commitment scheme over base field matrices (one matrix per tree)."""

    def __init__(self, hasher, compressor):
        self.hasher = hasher
        self.compressor = compressor

    def commit_matrix(self, matrix: galois.FieldArray) -> tuple[Digest, MerkleTree]:
        """Commit to the rows of a (height, width) field matrix or its integer representatives."""
        tree = MerkleTree(self.hasher, self.compressor)
        tree.merkelize(to_uint64(matrix))
        return tree.get_root(), tree

    def open(self, idx: int, tree: MerkleTree) -> QueryProof:
        return tree.get_query_proof(idx)

    def verify(self, root: Digest, idx: int, proof: QueryProof, height: int, width: int) -> bool:
        if len(proof.v) != width:
            return False
        return verify_merkle_path(self.hasher, self.compressor, root, idx, proof, height)

    def fingerprint(self) -> str:
        return f"merkle({self.hasher.fingerprint()},{self.compressor.fingerprint()})"


class ExtensionMmcs:
    """Commits extension field matrices by flattening each element to D base coefficients."""

    def __init__(self, inner: MerkleTreeMmcs, ext: type[galois.FieldArray]):
        self.inner = inner
        self.ext = ext

    def commit_matrix(self, matrix: galois.FieldArray) -> tuple[Digest, MerkleTree]:
        height, cols = matrix.shape
        return self.inner.commit_matrix(to_coeffs(matrix).reshape(height, cols * self.ext.degree))

    def open(self, idx: int, tree: MerkleTree) -> QueryProof:
        return self.inner.open(idx, tree)

    def verify(self, root: Digest, idx: int, proof: QueryProof, height: int, cols: int) -> bool:
        return self.inner.verify(root, idx, proof, height, cols * self.ext.degree)

    def values(self, proof: QueryProof) -> galois.FieldArray:
        """Opened row as an extension array of shape (cols,)."""
        return from_coeffs(self.ext, np.asarray(proof.v, dtype=np.int64).reshape(-1, self.ext.degree))

    def fingerprint(self) -> str:
        return f"ext{self.ext.degree}({self.inner.fingerprint()})"
