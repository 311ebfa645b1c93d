"""AIR definitions and constraint evaluation.

Each AIR states its constraints once in eval(builder); the prover folder, the
verifier folder and the debug checker all run that same code.
"""

from .base import (
    Air,
    AirBuilder,
    ConstraintFolder,
    FilteredAirBuilder,
    ProverConstraintFolder,
    VerifierConstraintFolder,
    WindowView,
    fold_constraints,
)
from .debug import DebugConstraintBuilder, check_constraints
from .fibonacci import NUM_FIBONACCI_COLS, FibonacciAir

__all__ = [
    "Air",
    "AirBuilder",
    "ConstraintFolder",
    "FilteredAirBuilder",
    "ProverConstraintFolder",
    "VerifierConstraintFolder",
    "WindowView",
    "fold_constraints",
    "DebugConstraintBuilder",
    "check_constraints",
    "NUM_FIBONACCI_COLS",
    "FibonacciAir",
]
