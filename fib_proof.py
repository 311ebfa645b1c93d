#!/usr/bin/env python3
"""Prove and verify a Fibonacci computation under both STARK profiles.

Usage:
    python fib_proof.py
    python fib_proof.py --num-steps 16 --final-value 987 --profile baby-bear --seed 7
    python fib_proof.py --num-steps 8 --final-value 99 --check
"""

import argparse
import logging
import sys

import numpy as np

from constraints.debug import check_constraints
from constraints.fibonacci import FibonacciAir
from protocol.config import baby_bear_config, mersenne31_config
from protocol.driver import run_fibonacci_proof
from protocol.errors import StarkError
from witness.fibonacci import generate_fibonacci_trace

logger = logging.getLogger("fib_proof")

# Banner printed after a successful run of each profile
VERIFIED_BANNERS = {
    "mersenne31": "M31 Verified!",
    "baby-bear": "BabyBear Verified!",
}


def build_configs(profile: str, seed: int | None, num_queries: int, proof_of_work_bits: int) -> list:
    configs = []
    if profile in ("mersenne31", "all"):
        configs.append(mersenne31_config(num_queries=num_queries, proof_of_work_bits=proof_of_work_bits))
    if profile in ("baby-bear", "all"):
        rng = np.random.default_rng(seed)
        configs.append(baby_bear_config(rng, num_queries=num_queries, proof_of_work_bits=proof_of_work_bits))
    return configs


def main() -> None:
    parser = argparse.ArgumentParser(description="Fibonacci STARK prover and verifier")
    parser.add_argument("--num-steps", type=int, default=8, help="Trace height (power of two)")
    parser.add_argument("--final-value", type=int, default=21, help="Claimed value of the last step")
    parser.add_argument(
        "--profile",
        choices=["baby-bear", "mersenne31", "all"],
        default="all",
        help="Configuration profile to run",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the Poseidon2 round constants")
    parser.add_argument("--num-queries", type=int, default=100, help="FRI queries")
    parser.add_argument("--pow-bits", type=int, default=16, help="FRI proof-of-work bits")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check the constraints row by row before proving",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every protocol stage")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    failed = False
    for config in build_configs(args.profile, args.seed, args.num_queries, args.pow_bits):
        try:
            if args.check:
                air = FibonacciAir(args.num_steps, args.final_value)
                check_constraints(air, generate_fibonacci_trace(args.num_steps, config.field))
            run_fibonacci_proof(config, args.num_steps, args.final_value)
        except (StarkError, ValueError) as e:
            logger.error("%s: %s: %s", config.name, type(e).__name__, e)
            failed = True
            continue
        print(VERIFIED_BANNERS[config.name])

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
