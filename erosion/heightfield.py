"""Dense elevation grid with gradient estimation and bilinear deposition."""

from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from erosion.config import EPSILON


@dataclass(frozen=True)
class Point2D:
    """Continuous-space position or direction."""

    x: float
    y: float

    def __add__(self, other: "Point2D") -> "Point2D":
        return Point2D(self.x + other.x, self.y + other.y)

    def scaled(self, factor: float) -> "Point2D":
        return Point2D(self.x * factor, self.y * factor)

    def norm(self) -> float:
        return math.hypot(self.x, self.y)


ORIGIN = Point2D(0.0, 0.0)


class HeightField:
    """Row-major elevation grid of shape (height, width), indexed as (x, y).

    The grid is mutated in place by the generator and by droplets; its
    dimensions never change after construction.
    """

    def __init__(self, data: np.ndarray) -> None:
        # float64 arrays are adopted as-is; anything else is converted.
        data = np.asarray(data, dtype=np.float64)
        if data.ndim != 2:
            raise ValueError("heightfield data must be 2D")
        if data.shape[0] < 1 or data.shape[1] < 1:
            raise ValueError("width and height must be positive")
        self._data = data
        self.height, self.width = data.shape

    @classmethod
    def zeros(cls, width: int, height: int) -> "HeightField":
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be positive")
        return cls(np.zeros((height, width), dtype=np.float64))

    @classmethod
    def from_array(cls, values: np.ndarray) -> "HeightField":
        return cls(np.array(values, dtype=np.float64, copy=True))

    @property
    def data(self) -> np.ndarray:
        """Live view of the backing array."""

        return self._data

    def copy(self) -> "HeightField":
        return HeightField(self._data.copy())

    def to_array(self) -> np.ndarray:
        return self._data.copy()

    def total(self) -> float:
        return float(self._data.sum())

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} grid")

    def get(self, x: int, y: int) -> float:
        self._check(x, y)
        return float(self._data[y, x])

    def set(self, x: int, y: int, value: float) -> None:
        self._check(x, y)
        self._data[y, x] = value

    def add_at(self, x: int, y: int, delta: float) -> None:
        self._check(x, y)
        self._data[y, x] += delta

    def cell_of(self, pos: Point2D) -> tuple[int, int]:
        return math.floor(pos.x), math.floor(pos.y)

    def in_interior(self, pos: Point2D) -> bool:
        """True when `pos` lies in a cell at least one cell away from every border."""

        x, y = self.cell_of(pos)
        return 0 < x < self.width - 1 and 0 < y < self.height - 1

    def cell_value(self, pos: Point2D) -> float:
        x, y = self.cell_of(pos)
        return self.get(x, y)

    def gradient_at(self, pos: Point2D) -> Point2D:
        """Bilinear-weighted forward difference over the cell containing `pos`.

        The fractional offsets are fixed at the cell centre (u = v = 0.5).
        Cells on the outer ring have no forward neighbours and report a flat
        gradient.
        """

        if not self.in_interior(pos):
            return ORIGIN
        x, y = self.cell_of(pos)
        h = self._data
        u = 0.5
        v = 0.5
        gx = (h[y, x + 1] - h[y, x]) * (1.0 - v) + (h[y + 1, x + 1] - h[y + 1, x]) * v
        gy = (h[y + 1, x] - h[y, x]) * (1.0 - u) + (h[y + 1, x + 1] - h[y, x + 1]) * u
        return Point2D(float(gx), float(gy))

    def deposit(self, pos: Point2D, amount: float) -> float:
        """Spread `amount` over the four cells around `pos`; return what was added."""

        x1, y1 = self.cell_of(pos)
        self._check(x1, y1)
        x2 = min(x1 + 1, self.width - 1)
        y2 = min(y1 + 1, self.height - 1)
        dx = pos.x - x1
        dy = pos.y - y1

        w11 = (1.0 - dx) * (1.0 - dy)
        w12 = (1.0 - dx) * dy
        w21 = dx * (1.0 - dy)
        w22 = dx * dy
        total_w = w11 + w12 + w21 + w22
        if total_w <= EPSILON:
            return 0.0

        dropped_total = 0.0
        for cx, cy, weight in ((x1, y1, w11), (x1, y2, w12), (x2, y1, w21), (x2, y2, w22)):
            dropped = amount * (weight / total_w)
            if dropped > 0.0:
                self._data[cy, cx] += dropped
                dropped_total += dropped
        return dropped_total

    def __repr__(self) -> str:
        return f"HeightField(width={self.width}, height={self.height})"
