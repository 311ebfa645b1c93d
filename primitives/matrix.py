"""Dense row-major matrix of field elements."""

from dataclasses import dataclass
from typing import Sequence

import galois
import numpy as np


@dataclass(eq=False)
class RowMajorMatrix:
    """Row-major matrix with an explicit width.

    Attributes:
        values: Flat field array of length height * width, rows laid out consecutively
        width: Number of columns
    """
    values: galois.FieldArray
    width: int

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"width must be positive, got {self.width}")
        if self.values.ndim != 1 or len(self.values) % self.width:
            raise ValueError(
                f"{self.values.size} values do not fill whole rows of width {self.width}"
            )

    @classmethod
    def from_rows(cls, field: type[galois.FieldArray], rows: Sequence[Sequence[int]]) -> "RowMajorMatrix":
        width = len(rows[0]) if rows else 0
        flat = [int(v) % field.characteristic for row in rows for v in row]
        return cls(field(flat), width)

    @property
    def height(self) -> int:
        return len(self.values) // self.width

    @property
    def field(self) -> type[galois.FieldArray]:
        return type(self.values)

    def row(self, r: int) -> galois.FieldArray:
        return self.values[r * self.width:(r + 1) * self.width]

    def column(self, c: int) -> galois.FieldArray:
        return self.values[c::self.width]

    def to_2d(self) -> galois.FieldArray:
        """View as (height, width)."""
        return self.values.reshape(self.height, self.width)

    def set(self, r: int, c: int, value: int) -> None:
        self.values[r * self.width + c] = int(value) % self.field.characteristic

    def copy(self) -> "RowMajorMatrix":
        return RowMajorMatrix(self.values.copy(), self.width)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RowMajorMatrix):
            return NotImplemented
        return (
            self.field is other.field
            and self.width == other.width
            and bool(np.array_equal(self.values, other.values))
        )
