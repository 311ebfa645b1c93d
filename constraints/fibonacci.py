"""Fibonacci AIR.

Two columns (a, b); row i holds (F_i, F_{i+1}).

Constraints:
    first row:   a = 0, b = 1
    transition:  a' = b, b' = a + b
    last row:    b = final_value
"""

from dataclasses import dataclass

NUM_FIBONACCI_COLS = 2


@dataclass(frozen=True)
class FibonacciAir:
    """Fibonacci recurrence over num_steps rows ending in final_value.

    num_steps >= 2 is required: with a single row the first-row and last-row
    constraints collapse onto the same row.
    """
    num_steps: int
    final_value: int

    def __post_init__(self):
        if self.num_steps < 2:
            raise ValueError(f"num_steps must be at least 2, got {self.num_steps}")

    def width(self) -> int:
        return NUM_FIBONACCI_COLS

    def eval(self, builder) -> None:
        main = builder.main()
        local = main.row_slice(0)
        nxt = main.row_slice(1)

        when_first_row = builder.when_first_row()
        when_first_row.assert_eq(local[0], 0)
        when_first_row.assert_eq(local[1], 1)

        when_transition = builder.when_transition()
        when_transition.assert_eq(nxt[0], local[1])
        when_transition.assert_eq(nxt[1], local[0] + local[1])

        builder.when_last_row().assert_eq(local[1], self.final_value)
