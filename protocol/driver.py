"""End-to-end Fibonacci proof: build AIR and trace, prove, verify."""

import logging
from typing import Sequence

from constraints.fibonacci import FibonacciAir
from protocol.config import StarkConfig
from protocol.proof import Proof
from protocol.prover import prove
from protocol.verifier import verify
from witness.fibonacci import generate_fibonacci_trace

logger = logging.getLogger(__name__)


def run_fibonacci_proof(
    config: StarkConfig,
    num_steps: int,
    final_value: int,
    public_values: Sequence[int] = (),
) -> Proof:
    """Prove and verify that num_steps Fibonacci steps end in final_value.

    Prover and verifier each get a fresh challenger from the configuration,
    so both start from the same seed.

    Returns:
        The verified proof

    Raises:
        ValueError: num_steps < 2
        MalformedTrace: Trace shape unusable by the configuration
        ProofInvalid: Verification failed (e.g. a wrong final_value)
    """
    air = FibonacciAir(num_steps, final_value)
    trace = generate_fibonacci_trace(num_steps, config.field)

    logger.info("%s: proving %d Fibonacci steps", config.name, num_steps)
    proof = prove(config, air, config.new_challenger(), trace, public_values)

    logger.info("%s: verifying", config.name)
    verify(config, air, config.new_challenger(), proof, public_values)
    return proof
