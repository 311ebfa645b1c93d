"""Trace (witness) generation modules.

Each AIR has a generator that fills its execution trace row by row in plain
Python. Generators are prover-only: the verifier never sees the trace.
"""

from .fibonacci import fibonacci_value, generate_fibonacci_trace

__all__ = [
    "fibonacci_value",
    "generate_fibonacci_trace",
]
