"""FRI low-degree test over 2-to-1 folding domains.

Layer k holds M_k = M / 2^k extension values. Its Merkle leaf j is the pair
(lo_j, hi_j) that folds into position j of layer k + 1:

    f_even = (lo + hi) / 2,   f_odd = (lo - hi) / (2 t_j),   next_j = f_even + beta_k * f_odd

where t_j is the level-k twiddle of the domain. After log2(n) folds a
polynomial of the committed degree is constant on the remaining 2^log_blowup
points; that constant is sent in the clear.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import galois

from primitives.extension import coeff_list, from_coeffs
from primitives.field import lift
from primitives.merkle_tree import ExtensionMmcs, MerkleTree
from primitives.transcript import Challenger
from protocol.errors import MalformedProof, TranscriptMismatch
from protocol.proof import FriProof, FriQueryProof

logger = logging.getLogger(__name__)


# --- Configuration ---


@dataclass(frozen=True)
class FriConfig:
    """FRI parameters and the commitment scheme for folded layers."""
    log_blowup: int
    num_queries: int
    proof_of_work_bits: int
    mmcs: ExtensionMmcs

    @property
    def blowup(self) -> int:
        return 1 << self.log_blowup

    def conjectured_soundness_bits(self) -> int:
        """log_blowup bits per query plus the grinding bits."""
        return self.log_blowup * self.num_queries + self.proof_of_work_bits

    def fingerprint(self) -> str:
        return (
            f"fri(log_blowup={self.log_blowup},num_queries={self.num_queries},"
            f"pow_bits={self.proof_of_work_bits},{self.mmcs.fingerprint()})"
        )


# --- Folding ---


def split_layer(values: galois.FieldArray, mirrored: bool) -> tuple[galois.FieldArray, galois.FieldArray]:
    """Pair up a layer: (v[j], v[j + M/2]) or, mirrored, (v[j], v[M-1-j])."""
    half = len(values) // 2
    lo = values[:half]
    hi = values[::-1][:half] if mirrored else values[half:]
    return lo, hi


def fold_pairs(lo: galois.FieldArray, hi: galois.FieldArray, beta: galois.FieldArray,
               twiddles: galois.FieldArray) -> galois.FieldArray:
    """f_even + beta * f_odd for each pair; twiddles are base field values, an array or a scalar."""
    ext = type(lo)
    inv2 = type(twiddles)(2) ** -1
    return (lo + hi) * lift(ext, inv2) + (lo - hi) * beta * lift(ext, inv2 / twiddles)


# --- Prover ---


def prove_fri(
    config: FriConfig,
    domain,
    num_rounds: int,
    values: galois.FieldArray,
    challenger: Challenger,
    open_input: Callable[[int], list],
) -> FriProof:
    """Commit-fold, finalize, grind, query.

    Args:
        config: FRI parameters
        domain: LDE domain the values live on
        num_rounds: Number of folds, log2 of the trace height
        values: Combined DEEP quotient over the domain
        challenger: Prover transcript, advanced in place
        open_input: Callback opening every input matrix at an LDE index
    """
    mmcs = config.mmcs
    twiddles = domain.fold_twiddles()

    # --- Commit-Fold Loop ---
    roots = []
    trees: list[MerkleTree] = []
    current = values
    for k in range(num_rounds):
        lo, hi = split_layer(current, domain.mirrored)
        leaves = type(lo).Zeros((len(lo), 2))
        leaves[:, 0] = lo
        leaves[:, 1] = hi
        root, tree = mmcs.commit_matrix(leaves)
        roots.append(root)
        trees.append(tree)
        challenger.observe_digest(root)

        beta = challenger.sample_ext(type(lo))
        current = fold_pairs(lo, hi, beta, twiddles[k])
        logger.debug("FRI round %d: folded %d -> %d", k, 2 * len(lo), len(current))

    # --- Finalize ---
    final_value = current[0]
    challenger.observe_ext(final_value)

    # --- Grinding ---
    pow_witness = challenger.grind(config.proof_of_work_bits)

    # --- Query Phase ---
    log_size = domain.log_size
    query_proofs = []
    for _ in range(config.num_queries):
        index = challenger.sample_bits(log_size)
        steps = []
        position, size = index, domain.size
        for tree in trees:
            leaf, _ = domain.fold_pair(position, size)
            steps.append(mmcs.open(leaf, tree))
            position, size = leaf, size // 2
        query_proofs.append(FriQueryProof(input_openings=open_input(index), commit_phase_openings=steps))

    return FriProof(
        commit_roots=roots,
        final_value=coeff_list(final_value),
        pow_witness=pow_witness,
        query_proofs=query_proofs,
    )


# --- Verifier ---


def verify_fri(
    config: FriConfig,
    domain,
    num_rounds: int,
    proof: FriProof,
    challenger: Challenger,
    initial_values: Callable[[list[int], list[FriQueryProof]], galois.FieldArray],
) -> None:
    """Replay the FRI transcript and check every query.

    Args:
        initial_values: Callback returning the combined DEEP quotient at the
            queried LDE indices after checking the input openings

    Raises:
        MalformedProof: Wrong number of layers or queries
        TranscriptMismatch: PoW, Merkle or folding failure
    """
    ext = config.mmcs.ext
    if len(proof.commit_roots) != num_rounds:
        raise MalformedProof(f"expected {num_rounds} FRI layers, got {len(proof.commit_roots)}")
    if len(proof.query_proofs) != config.num_queries:
        raise MalformedProof(f"expected {config.num_queries} queries, got {len(proof.query_proofs)}")
    if len(proof.final_value) != ext.degree:
        raise MalformedProof("final value has the wrong extension degree")

    betas = []
    for root in proof.commit_roots:
        challenger.observe_digest(root)
        betas.append(challenger.sample_ext(ext))

    final_value = from_coeffs(ext, proof.final_value)
    challenger.observe_ext(final_value)

    if not challenger.check_witness(config.proof_of_work_bits, proof.pow_witness):
        raise TranscriptMismatch("proof-of-work witness rejected")

    indices = [challenger.sample_bits(domain.log_size) for _ in range(config.num_queries)]
    values = initial_values(indices, proof.query_proofs)

    logger.debug("Verifying FRI folds")
    twiddles = domain.fold_twiddles()
    for qi, (index, query) in enumerate(zip(indices, proof.query_proofs)):
        if len(query.commit_phase_openings) != num_rounds:
            raise MalformedProof(f"query {qi}: expected {num_rounds} layer openings")

        value = values[qi]
        position, size = index, domain.size
        for k, (root, step) in enumerate(zip(proof.commit_roots, query.commit_phase_openings)):
            leaf, high = domain.fold_pair(position, size)
            if not config.mmcs.verify(root, leaf, step, size // 2, 2):
                raise TranscriptMismatch(f"query {qi}: Merkle path of FRI layer {k} rejected")
            lo, hi = config.mmcs.values(step)
            if (hi if high else lo) != value:
                raise TranscriptMismatch(f"query {qi}: FRI layer {k} disagrees with the previous fold")
            value = fold_pairs(lo, hi, betas[k], twiddles[k][leaf])
            position, size = leaf, size // 2

        if value != final_value:
            raise TranscriptMismatch(f"query {qi}: folding does not reach the final value")
