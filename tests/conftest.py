"""Pytest fixtures shared by the test suite.

Configurations here use few FRI queries and little grinding so that proofs
stay fast; tests of the full-strength profiles build their own.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the repository root to the path so absolute imports work
# (tests/ is inside the repository root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from protocol.config import baby_bear_config, mersenne31_config  # noqa: E402

FAST_QUERIES = 8
FAST_POW_BITS = 2


@pytest.fixture(scope="session")
def bb_config():
    """BabyBear profile with Poseidon2 constants from seed 1."""
    return baby_bear_config(
        np.random.default_rng(1), num_queries=FAST_QUERIES, proof_of_work_bits=FAST_POW_BITS
    )


@pytest.fixture(scope="session")
def m31_config():
    """Mersenne31 profile."""
    return mersenne31_config(num_queries=FAST_QUERIES, proof_of_work_bits=FAST_POW_BITS)


@pytest.fixture(params=["baby-bear", "mersenne31"])
def config(request, bb_config, m31_config):
    """Each profile in turn."""
    return bb_config if request.param == "baby-bear" else m31_config
