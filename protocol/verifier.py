"""STARK proof verification.

Checks run in a fixed order, each failure raising its own ProofInvalid
subclass:

    1. configuration fingerprint          ConfigMismatch
    2. proof shape                        MalformedProof
    3. transcript replay and PCS / FRI    TranscriptMismatch
    4. constraints at the OOD point       ConstraintViolation
"""

import logging
from typing import Sequence

import galois

from constraints.base import Air, VerifierConstraintFolder, fold_constraints
from primitives.extension import from_coeffs, monomial
from primitives.transcript import Challenger
from protocol.config import StarkConfig
from protocol.errors import ConfigMismatch, ConstraintViolation, MalformedProof
from protocol.pcs import VerifierRound
from protocol.proof import Proof

logger = logging.getLogger(__name__)


def _parse_ext_values(ext: type[galois.FieldArray], values: list, count: int, what: str) -> galois.FieldArray:
    """Opened values as an extension array of shape (count,)."""
    if len(values) != count:
        raise MalformedProof(f"{what}: expected {count} values, got {len(values)}")
    for v in values:
        if len(v) != ext.degree:
            raise MalformedProof(f"{what}: expected {ext.degree} coefficients per value")
    return from_coeffs(ext, values)


def verify(
    config: StarkConfig,
    air: Air,
    challenger: Challenger,
    proof: Proof,
    public_values: Sequence[int] = (),
) -> None:
    """Verify a STARK proof; returns None or raises.

    Args:
        config: Proof system configuration, must match the prover's
        air: Constraint system
        challenger: Fresh challenger, seeded as the prover's was
        proof: Proof to check
        public_values: Public inputs the prover absorbed

    Raises:
        ConfigMismatch: Proof produced under a different configuration
        MalformedProof: Proof shape does not fit the configuration or the AIR
        TranscriptMismatch: PoW, Merkle or FRI verification failed
        ConstraintViolation: Constraints do not hold at the out-of-domain point
    """
    ext = config.ext
    pcs = config.pcs

    # --- Configuration ---
    if proof.config_fingerprint != config.fingerprint():
        raise ConfigMismatch(f"proof was produced under a different configuration than {config!r}")

    # --- Shape ---
    degree_bits = proof.degree_bits
    if not 1 <= degree_bits <= pcs.max_log_size():
        raise MalformedProof(f"degree_bits {degree_bits} out of range")
    if 1 << degree_bits != air.num_steps:
        raise MalformedProof(f"proof covers 2^{degree_bits} rows, AIR has {air.num_steps} steps")

    width = air.width()
    opened = proof.opened_values
    trace_local = _parse_ext_values(ext, opened.trace_local, width, "trace at zeta")
    trace_next = _parse_ext_values(ext, opened.trace_next, width, "trace at next(zeta)")
    quotient = _parse_ext_values(ext, opened.quotient, ext.degree, "quotient at zeta")

    # --- Transcript Replay ---
    challenger.observe(degree_bits)
    challenger.observe_digest(proof.commitments.trace)
    challenger.observe_many(public_values)
    alpha = challenger.sample_ext(ext)

    challenger.observe_digest(proof.commitments.quotient)
    trace_domain = pcs.natural_domain(degree_bits)
    zeta = pcs.sample_point(challenger)
    zeta_next = trace_domain.next_point(zeta)

    # --- PCS ---
    logger.info("Verifying openings")
    pcs.verify(
        degree_bits,
        [
            VerifierRound(proof.commitments.trace, width, [zeta, zeta_next], [trace_local, trace_next]),
            VerifierRound(proof.commitments.quotient, ext.degree, [zeta], [quotient]),
        ],
        proof.opening_proof,
        challenger,
    )

    # --- Out-of-Domain Check ---
    logger.info("Verifying constraints at the out-of-domain point")
    selectors = trace_domain.selectors_at(zeta)
    folder = VerifierConstraintFolder(trace_local, trace_next, selectors, alpha, public_values)
    folded = fold_constraints(air, folder)

    # Quotient columns are the base coefficients of an extension-valued polynomial
    quotient_at_zeta = ext(0)
    for i in range(ext.degree):
        quotient_at_zeta = quotient_at_zeta + quotient[i] * monomial(ext, i)

    if folded * selectors.inv_vanishing != quotient_at_zeta:
        raise ConstraintViolation("constraints do not match the quotient at the out-of-domain point")
    logger.info("Proof verified")
