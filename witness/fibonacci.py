"""Fibonacci trace generation."""

import galois

from constraints.fibonacci import NUM_FIBONACCI_COLS
from primitives.matrix import RowMajorMatrix


def generate_fibonacci_trace(num_steps: int, field: type[galois.FieldArray]) -> RowMajorMatrix:
    """Rows (F_i, F_{i+1}) for i < num_steps, in `field` arithmetic.

    Pure and deterministic. The last row's second cell is the value a
    FibonacciAir over the same num_steps expects as final_value (modulo p).

    Args:
        num_steps: Number of rows, at least 2
        field: galois prime field class of the trace

    Returns:
        RowMajorMatrix of width 2 and height num_steps
    """
    if num_steps < 2:
        raise ValueError(f"num_steps must be at least 2, got {num_steps}")

    values = field.Zeros(num_steps * NUM_FIBONACCI_COLS)
    a, b = field(0), field(1)
    for i in range(num_steps):
        values[NUM_FIBONACCI_COLS * i] = a
        values[NUM_FIBONACCI_COLS * i + 1] = b
        a, b = b, a + b
    return RowMajorMatrix(values, NUM_FIBONACCI_COLS)


def fibonacci_value(num_steps: int, field: type[galois.FieldArray]) -> int:
    """F_num_steps reduced mod p, i.e. the final_value that makes the trace valid."""
    a, b = 0, 1
    for _ in range(num_steps):
        a, b = b, (a + b) % field.characteristic
    return a
