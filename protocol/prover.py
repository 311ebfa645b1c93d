"""Top-level STARK proof generation."""

import logging
from typing import Sequence

import galois

from constraints.base import Air, ProverConstraintFolder, fold_constraints
from primitives.extension import coeff_list, to_coeffs
from primitives.field import lift
from primitives.matrix import RowMajorMatrix
from primitives.transcript import Challenger
from protocol.config import StarkConfig
from protocol.errors import MalformedTrace
from protocol.pcs import CommittedMatrix
from protocol.proof import Commitments, OpenedValues, Proof

logger = logging.getLogger(__name__)


# --- Helper Functions ---

def check_trace_shape(config: StarkConfig, air: Air, trace: RowMajorMatrix) -> int:
    """Validate the trace against the AIR and the PCS; return log2 of its height.

    Raises:
        MalformedTrace: Wrong field, wrong width, a height other than the AIR step
            count, or a height the PCS cannot use
    """
    if trace.field is not config.field:
        raise MalformedTrace(
            f"trace is over GF({trace.field.characteristic}), "
            f"configuration expects GF({config.field.characteristic})"
        )
    if trace.width != air.width():
        raise MalformedTrace(f"trace width {trace.width} != AIR width {air.width()}")
    if trace.height != air.num_steps:
        raise MalformedTrace(f"trace height {trace.height} != AIR step count {air.num_steps}")

    height = trace.height
    if height < 2 or height & (height - 1):
        raise MalformedTrace(f"trace height must be a power of two >= 2, got {height}")

    degree_bits = height.bit_length() - 1
    if degree_bits > config.pcs.max_log_size():
        raise MalformedTrace(f"trace height 2^{degree_bits} exceeds the largest supported domain")
    return degree_bits


def quotient_values(air: Air, trace_domain, trace_data: CommittedMatrix, alpha: galois.FieldArray,
                    public_values: Sequence[int], blowup: int) -> galois.FieldArray:
    """Folded constraints divided by the vanishing polynomial, over the LDE domain."""
    selectors = trace_domain.selectors_on(trace_data.domain)
    folder = ProverConstraintFolder(trace_data.lde, blowup, selectors, alpha, public_values)
    folded = fold_constraints(air, folder)
    logger.debug("Folded %d constraints", folder.constraint_count)
    return folded * lift(type(folded), selectors.inv_vanishing)


# --- Main Entry Point ---

def prove(
    config: StarkConfig,
    air: Air,
    challenger: Challenger,
    trace: RowMajorMatrix,
    public_values: Sequence[int] = (),
) -> Proof:
    """Generate a STARK proof that `trace` satisfies `air`.

    The prover does not check the constraints: an invalid trace yields a proof
    the verifier rejects. Use constraints.check_constraints to debug traces.

    Args:
        config: Proof system configuration
        air: Constraint system
        challenger: Fresh challenger, seeded as the verifier's will be
        trace: Execution trace over config.field
        public_values: Public inputs absorbed into the transcript

    Raises:
        MalformedTrace: Before any commitment, if the trace shape is unusable
    """
    degree_bits = check_trace_shape(config, air, trace)
    pcs = config.pcs
    trace_domain = pcs.natural_domain(degree_bits)

    # --- Stage 1: Trace ---
    logger.info("Committing trace (%d rows x %d columns)", trace.height, trace.width)
    trace_root, trace_data = pcs.commit(trace_domain, trace.to_2d())

    challenger.observe(degree_bits)
    challenger.observe_digest(trace_root)
    challenger.observe_many(public_values)
    alpha = challenger.sample_ext(config.ext)

    # --- Stage 2: Quotient ---
    logger.info("Computing quotient")
    quotient = quotient_values(air, trace_domain, trace_data, alpha, public_values,
                               config.fri_config.blowup)
    quotient_root, quotient_data = pcs.commit_quotient(degree_bits, config.field(to_coeffs(quotient)))
    challenger.observe_digest(quotient_root)

    # --- Stage 3: Openings ---
    zeta = pcs.sample_point(challenger)
    zeta_next = trace_domain.next_point(zeta)

    logger.info("Opening at the out-of-domain point")
    values, opening_proof = pcs.open(
        [(trace_data, [zeta, zeta_next]), (quotient_data, [zeta])],
        challenger,
    )
    (trace_local, trace_next), (quotient_at_zeta,) = values

    return Proof(
        degree_bits=degree_bits,
        config_fingerprint=config.fingerprint(),
        commitments=Commitments(trace=trace_root, quotient=quotient_root),
        opened_values=OpenedValues(
            trace_local=coeff_list(trace_local),
            trace_next=coeff_list(trace_next),
            quotient=coeff_list(quotient_at_zeta),
        ),
        opening_proof=opening_proof,
    )
