"""FRI-based polynomial commitment schemes.

A committed matrix is the low-degree extension of its columns onto the LDE
domain, Merkle-committed row by row. Opening at out-of-domain points works the
DEEP way: every column f, opened at z with claimed value v, contributes the
quotient (f - v) / (x - z), which is a polynomial of the committed degree only
if the claim is true. All quotients are folded into one extension-valued
function with powers of a random alpha and handed to FRI.

    TwoAdicFriPcs  multiplicative cosets, monomial basis
    CirclePcs      circle cosets over Mersenne31; each opening also reveals the
                   value at the conjugate point so the quotient can divide by
                   the line x - x_z through both
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import galois
import numpy as np

from primitives.domain import CIRCLE_LOG_ORDER, CircleDomain, TwoAdicCoset, circle_conjugate
from primitives.extension import coeff_list, from_coeffs
from primitives.field import lift, two_adicity
from primitives.hash import Digest
from primitives.merkle_tree import MerkleTree, MerkleTreeMmcs
from primitives.ntt import evaluate_at
from primitives.transcript import Challenger
from protocol.errors import MalformedProof, TranscriptMismatch
from protocol.fri import FriConfig, prove_fri, verify_fri
from protocol.proof import FriQueryProof, OpeningProof

logger = logging.getLogger(__name__)

# --- Type Aliases ---

Point = Any  # extension scalar (two-adic) or (x, y) pair of extension scalars (circle)


@dataclass
class CommittedMatrix:
    """Prover data kept for a committed matrix.

    Attributes:
        domain: LDE domain the rows are evaluated on
        coeffs: Column coefficients, zero-padded to the LDE size, shape (M, width)
        lde: Column evaluations over the LDE domain, shape (M, width)
        tree: Merkle tree over the LDE rows
    """
    domain: Any
    coeffs: galois.FieldArray
    lde: galois.FieldArray
    tree: MerkleTree

    @property
    def width(self) -> int:
        return self.lde.shape[1]


@dataclass
class VerifierRound:
    """What the verifier knows about one committed matrix."""
    root: Digest
    width: int
    points: list[Point]
    values: list[galois.FieldArray]  # one (width,) extension array per point


class FriPcs:
    """Shared commit / open / verify logic; subclasses fix the domain geometry."""

    name = "fri-pcs"
    domain_class: type = TwoAdicCoset

    def __init__(self, field: type[galois.FieldArray], ext: type[galois.FieldArray],
                 val_mmcs: MerkleTreeMmcs, fri_config: FriConfig):
        self.field = field
        self.ext = ext
        self.val_mmcs = val_mmcs
        self.fri_config = fri_config

    def fingerprint(self) -> str:
        return f"{self.name}({self.val_mmcs.fingerprint()},{self.fri_config.fingerprint()})"

    # --- Domains ---

    def natural_domain(self, log_size: int):
        """Domain a trace of height 2^log_size is interpolated over."""
        return self.domain_class(self.field, log_size)

    def lde_domain(self, log_size: int):
        return self.natural_domain(log_size).create_lde(self.fri_config.log_blowup)

    def max_log_size(self) -> int:
        """Largest log2 trace height whose LDE domain exists in the field."""
        return two_adicity(self.field) - self.fri_config.log_blowup

    def quotient_bound(self, log_size: int) -> int:
        """Number of leading coefficients a quotient of a degree-2^log_size trace may use."""
        return 1 << log_size

    # --- Commitment ---

    def commit(self, domain, evals: galois.FieldArray) -> tuple[Digest, CommittedMatrix]:
        """Interpolate (n, width) evaluations over `domain` and commit their LDE."""
        coeffs = domain.ntt().intt(evals)
        return self._commit_coeffs(domain.log_size, coeffs)

    def commit_quotient(self, log_size: int, lde_evals: galois.FieldArray) -> tuple[Digest, CommittedMatrix]:
        """Commit quotient columns given over the LDE domain.

        The columns are projected onto the first quotient_bound coefficients
        before committing. For a trace that satisfies the AIR the projection is
        the identity; otherwise the opened quotient no longer agrees with the
        constraints at the out-of-domain point.
        """
        lde_domain = self.lde_domain(log_size)
        coeffs = lde_domain.ntt().intt(lde_evals)
        bound = self.quotient_bound(log_size)
        if np.any(coeffs[bound:].view(np.ndarray)):
            logger.debug("Quotient exceeds its degree bound; projecting")
        return self._commit_coeffs(log_size, coeffs[:bound], lde_domain)

    def _commit_coeffs(self, log_size: int, coeffs: galois.FieldArray, lde_domain=None):
        if lde_domain is None:
            lde_domain = self.lde_domain(log_size)
        padded = self.field.Zeros((lde_domain.size,) + coeffs.shape[1:])
        padded[: len(coeffs)] = coeffs
        lde = lde_domain.ntt().ntt(padded)
        root, tree = self.val_mmcs.commit_matrix(lde)
        return root, CommittedMatrix(domain=lde_domain, coeffs=padded, lde=lde, tree=tree)

    # --- Geometry Hooks ---

    def sample_point(self, challenger: Challenger) -> Point:
        return challenger.sample_ext(self.ext)

    def _points_array(self, domain, indices=None):
        """Domain points (or the queried ones) lifted into the extension."""
        points = domain.points()
        if indices is not None:
            points = points[indices]
        return lift(self.ext, points)

    def _deep_terms(self, points, columns: galois.FieldArray, z: Point, values: galois.FieldArray,
                    conjugates: galois.FieldArray | None) -> list[galois.FieldArray]:
        """(f - v) / (x - z) for each column."""
        inv_denom = (points - z) ** -1
        return [(columns[:, c] - values[c]) * inv_denom for c in range(columns.shape[1])]

    def _open_conjugates(self, rounds, challenger: Challenger):
        return None

    def _observe_conjugates(self, verifier_rounds: list[VerifierRound], conjugate_values, challenger: Challenger):
        if conjugate_values is not None:
            raise MalformedProof(f"{self.name} proofs carry no conjugate values")
        return None

    # --- DEEP Combination ---

    def _reduce_openings(self, points, columns: Sequence[galois.FieldArray], opening_points: Sequence[list],
                         values: Sequence[list[galois.FieldArray]], conjugates,
                         alpha: galois.FieldArray) -> galois.FieldArray:
        """Horner-fold every DEEP quotient over (matrix, point, column) with alpha."""
        acc = self.ext.Zeros(len(columns[0]))
        for m, (cols, zs) in enumerate(zip(columns, opening_points)):
            cols = lift(self.ext, cols)
            for p, z in enumerate(zs):
                conj = None if conjugates is None else conjugates[m][p]
                for term in self._deep_terms(points, cols, z, values[m][p], conj):
                    acc = acc * alpha + term
        return acc

    # --- Prover ---

    def open(self, rounds: list[tuple[CommittedMatrix, list[Point]]],
             challenger: Challenger) -> tuple[list[list[galois.FieldArray]], OpeningProof]:
        """Evaluate each matrix at its points and prove the evaluations.

        Args:
            rounds: (committed matrix, opening points) pairs, all on one LDE domain
            challenger: Prover transcript, advanced in place

        Returns:
            values[m][p], the (width,) column values of matrix m at point p,
            and the opening proof
        """
        domain = rounds[0][0].domain
        assert all(matrix.domain.size == domain.size for matrix, _ in rounds), "mixed LDE heights"

        values = []
        for matrix, points in rounds:
            matrix_values = [evaluate_at(matrix.coeffs, domain.basis_at(z)) for z in points]
            for v in matrix_values:
                challenger.observe_ext(v)
            values.append(matrix_values)

        conjugates = self._open_conjugates(rounds, challenger)
        alpha = challenger.sample_ext(self.ext)

        logger.debug("Combining DEEP quotients over %d points", domain.size)
        deep = self._reduce_openings(
            self._points_array(domain),
            [matrix.lde for matrix, _ in rounds],
            [points for _, points in rounds],
            values,
            conjugates,
            alpha,
        )

        num_rounds = domain.log_size - self.fri_config.log_blowup

        def open_input(index: int) -> list:
            return [self.val_mmcs.open(index, matrix.tree) for matrix, _ in rounds]

        fri_proof = prove_fri(self.fri_config, domain, num_rounds, deep, challenger, open_input)

        conjugate_values = None
        if conjugates is not None:
            conjugate_values = [[coeff_list(v) for v in matrix] for matrix in conjugates]
        return values, OpeningProof(fri_proof=fri_proof, conjugate_values=conjugate_values)

    # --- Verifier ---

    def verify(self, log_size: int, rounds: list[VerifierRound], proof: OpeningProof,
               challenger: Challenger) -> None:
        """Check that every committed matrix takes the claimed values.

        Raises:
            MalformedProof: Opening proof shape disagrees with the rounds
            TranscriptMismatch: Merkle, DEEP or FRI check failed
        """
        for r in rounds:
            for v in r.values:
                challenger.observe_ext(v)

        conjugates = self._observe_conjugates(rounds, proof.conjugate_values, challenger)
        alpha = challenger.sample_ext(self.ext)

        domain = self.lde_domain(log_size)

        def initial_values(indices: list[int], queries: list[FriQueryProof]) -> galois.FieldArray:
            columns = [[] for _ in rounds]
            for qi, (index, query) in enumerate(zip(indices, queries)):
                if len(query.input_openings) != len(rounds):
                    raise MalformedProof(f"query {qi}: expected {len(rounds)} input openings")
                for m, (r, opening) in enumerate(zip(rounds, query.input_openings)):
                    if not self.val_mmcs.verify(r.root, index, opening, domain.size, r.width):
                        raise TranscriptMismatch(f"query {qi}: Merkle path of input matrix {m} rejected")
                    columns[m].append(opening.v)

            p = self.field.characteristic
            matrices = [self.field(np.asarray(cols, dtype=np.int64) % p) for cols in columns]
            return self._reduce_openings(
                self._points_array(domain, np.asarray(indices)),
                matrices,
                [r.points for r in rounds],
                [r.values for r in rounds],
                conjugates,
                alpha,
            )

        verify_fri(self.fri_config, domain, log_size, proof.fri_proof, challenger, initial_values)


# --- Two-Adic ---


class TwoAdicFriPcs(FriPcs):
    """PCS over multiplicative cosets; quotients have degree below n."""

    name = "two-adic-fri-pcs"
    domain_class = TwoAdicCoset


# --- Circle ---


class CirclePcs(FriPcs):
    """PCS over circle cosets.

    Circle polynomials attached to a size-n domain span coefficients 0..n-1;
    the quotient may also use coefficient n, the top-degree basis element.
    """

    name = "circle-pcs"
    domain_class = CircleDomain

    def max_log_size(self) -> int:
        return CIRCLE_LOG_ORDER - 1 - self.fri_config.log_blowup

    def quotient_bound(self, log_size: int) -> int:
        return (1 << log_size) + 1

    def sample_point(self, challenger: Challenger) -> Point:
        """Stereographic map t -> ((1 - t^2) / (1 + t^2), 2t / (1 + t^2))."""
        t = challenger.sample_ext(self.ext)
        t2 = t * t
        one = self.ext(1)
        inv = (t2 + one) ** -1
        return (one - t2) * inv, (t + t) * inv

    def _points_array(self, domain, indices=None):
        xs, ys = domain.points()
        if indices is not None:
            xs, ys = xs[indices], ys[indices]
        return lift(self.ext, xs), lift(self.ext, ys)

    def _deep_terms(self, points, columns, z, values, conjugates):
        """(f - a - b y) / (x - x_z), where a + b y is the line through both openings."""
        xs, ys = points
        x_z, y_z = z
        inv2 = self.ext(int(self.field(2) ** -1))
        inv_denom = (xs - x_z) ** -1
        a = (values + conjugates) * inv2
        b = (values - conjugates) / (y_z + y_z)
        return [
            (columns[:, c] - a[c] - b[c] * ys) * inv_denom
            for c in range(columns.shape[1])
        ]

    def _open_conjugates(self, rounds, challenger: Challenger) -> list[list[galois.FieldArray]]:
        domain = rounds[0][0].domain
        conjugates = []
        for matrix, points in rounds:
            matrix_values = [
                evaluate_at(matrix.coeffs, domain.basis_at(circle_conjugate(z))) for z in points
            ]
            for v in matrix_values:
                challenger.observe_ext(v)
            conjugates.append(matrix_values)
        return conjugates

    def _observe_conjugates(self, rounds: list[VerifierRound], conjugate_values, challenger: Challenger):
        if conjugate_values is None or len(conjugate_values) != len(rounds):
            raise MalformedProof("circle proofs carry one list of conjugate values per matrix")
        conjugates = []
        for r, matrix in zip(rounds, conjugate_values):
            if len(matrix) != len(r.points):
                raise MalformedProof("conjugate values do not match the opening points")
            matrix_values = []
            for v in matrix:
                if len(v) != r.width or any(len(c) != self.ext.degree for c in v):
                    raise MalformedProof("conjugate value has the wrong shape")
                value = from_coeffs(self.ext, v)
                challenger.observe_ext(value)
                matrix_values.append(value)
            conjugates.append(matrix_values)
        return conjugates
