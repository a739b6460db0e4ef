"""Particle-based hydraulic erosion: the lifecycle of a single droplet."""

from __future__ import annotations

from dataclasses import dataclass, field
import math

import numpy as np

from erosion.config import EPSILON, ErosionParameters
from erosion.heightfield import ORIGIN, HeightField, Point2D
from erosion.rng import RandomSource

MAX_DIRECTION_RETRIES = 10_000
MAX_REDEPOSIT_ITERATIONS = 10_000

ALIVE = "alive"
LIFETIME = "lifetime"
OUT_OF_BOUNDS = "out_of_bounds"
EVAPORATED = "evaporated"
UPHILL = "uphill"


class SimulationError(RuntimeError):
    """Raised when a recovery loop exceeds its iteration cap."""


@dataclass
class Droplet:
    """Transient state of one water particle."""

    position: Point2D
    direction: Point2D = ORIGIN
    velocity: float = 1.0
    water: float = 1.0
    sediment: float = 0.0
    lifetime: int = 1000


@dataclass
class DropletOutcome:
    """What one droplet did before it terminated."""

    steps: int = 0
    reason: str = ALIVE
    eroded: float = 0.0
    deposited: float = 0.0


@dataclass(frozen=True)
class ErosionKernel:
    """Disk of cell offsets with raw weights `radius - distance`."""

    radius: int
    dx: np.ndarray = field(repr=False)
    dy: np.ndarray = field(repr=False)
    weights: np.ndarray = field(repr=False)

    @classmethod
    def for_radius(cls, radius: int) -> "ErosionKernel":
        if radius < 0:
            raise ValueError("radius must be non-negative")
        span = np.arange(-radius, radius + 1)
        dx, dy = np.meshgrid(span, span, indexing="ij")
        dist = np.sqrt(dx * dx + dy * dy)
        inside = dist <= radius
        return cls(
            radius=radius,
            dx=dx[inside].astype(np.int64),
            dy=dy[inside].astype(np.int64),
            weights=(radius - dist[inside]).astype(np.float64),
        )

    def cells(self, cx: int, cy: int, width: int, height: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """In-grid cells around (cx, cy) and their normalized weights.

        Returns empty arrays when no positive weight falls inside the grid.
        """

        xs = cx + self.dx
        ys = cy + self.dy
        keep = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
        weights = self.weights[keep]
        total = float(weights.sum())
        if total <= 0.0:
            empty = np.empty(0, dtype=np.int64)
            return empty, empty, np.empty(0, dtype=np.float64)
        return xs[keep], ys[keep], weights / total


class DropletSimulator:
    """Advances droplets over a shared heightfield, eroding and depositing in place."""

    def __init__(self, field: HeightField, params: ErosionParameters, rng: RandomSource) -> None:
        self.field = field
        self.params = params
        self.rng = rng
        self.kernel = ErosionKernel.for_radius(params.radius)

    def simulate(self, drop: Droplet) -> DropletOutcome:
        """Run `drop` until it terminates."""

        outcome = DropletOutcome()
        while outcome.reason == ALIVE:
            if drop.lifetime <= 0:
                outcome.reason = LIFETIME
            elif not self.field.in_interior(drop.position):
                outcome.reason = OUT_OF_BOUNDS
            elif drop.water <= EPSILON:
                outcome.reason = EVAPORATED
            else:
                self.step(drop, outcome)
        return outcome

    def step(self, drop: Droplet, outcome: DropletOutcome) -> None:
        """Advance `drop` by one cell-length step, recording into `outcome`."""

        p = self.params
        drop.lifetime -= 1
        outcome.steps += 1

        gradient = self.field.gradient_at(drop.position)
        drop.direction = self._next_direction(drop.direction, gradient)

        old_pos = drop.position
        drop.position = old_pos + drop.direction
        if not self.field.in_interior(drop.position):
            outcome.reason = OUT_OF_BOUNDS
            return

        h_diff = self.field.cell_value(drop.position) - self.field.cell_value(old_pos)

        if h_diff > 0.0:
            # Climbing out of a pit: fill it behind us and stop.
            if drop.sediment >= h_diff:
                outcome.deposited += self._fill_pit(old_pos, h_diff, drop.sediment)
            else:
                dropped = self._drain(old_pos, drop.sediment)
                drop.sediment -= dropped
                outcome.deposited += dropped
            outcome.reason = UPHILL
            return

        capacity = max(-h_diff, p.min_slope) * drop.velocity * drop.water * p.capacity
        if drop.sediment >= capacity:
            dropped = self.field.deposit(old_pos, (drop.sediment - capacity) * p.deposition_rate)
            drop.sediment -= dropped
            outcome.deposited += dropped
        else:
            gain = min((capacity - drop.sediment) * p.erosion_rate, -h_diff)
            taken = self.erode(old_pos, gain)
            drop.sediment += taken
            outcome.eroded += taken

        drop.velocity = math.sqrt(drop.velocity * drop.velocity + abs(h_diff) * p.gravity)
        drop.water *= 1.0 - p.evaporation_rate

    def erode(self, center: Point2D, amount: float) -> float:
        """Remove `amount` from the disk around `center`; return what was removed."""

        cx, cy = self.field.cell_of(center)
        xs, ys, weights = self.kernel.cells(cx, cy, self.field.width, self.field.height)
        if weights.size == 0:
            return 0.0
        quantities = amount * weights
        self.field.data[ys, xs] -= quantities
        return float(quantities.sum())

    def _next_direction(self, direction: Point2D, gradient: Point2D) -> Point2D:
        inertia = self.params.inertia
        new_dir = Point2D(
            direction.x * inertia - gradient.x * (1.0 - inertia),
            direction.y * inertia - gradient.y * (1.0 - inertia),
        )
        norm = new_dir.norm()
        retries = 0
        while norm <= EPSILON:
            if retries >= MAX_DIRECTION_RETRIES:
                raise SimulationError(f"no usable direction after {retries} random draws")
            new_dir = Point2D(self.rng.draw01(), self.rng.draw01())
            norm = new_dir.norm()
            retries += 1
        return new_dir.scaled(1.0 / norm)

    def _fill_pit(self, pos: Point2D, h_diff: float, sediment: float) -> float:
        remaining = h_diff
        total = self.field.deposit(pos, remaining)
        remaining -= total
        iterations = 0
        while remaining > EPSILON:
            if iterations >= MAX_REDEPOSIT_ITERATIONS:
                raise SimulationError(f"pit fill left {remaining} undeposited at {pos}")
            dropped = self.field.deposit(pos, sediment)
            remaining -= dropped
            total += dropped
            iterations += 1
        return total

    def _drain(self, pos: Point2D, sediment: float) -> float:
        remaining = sediment
        remaining -= self.field.deposit(pos, remaining)
        iterations = 0
        while remaining > EPSILON:
            if iterations >= MAX_REDEPOSIT_ITERATIONS:
                raise SimulationError(f"sediment drain left {remaining} undeposited at {pos}")
            remaining -= self.field.deposit(pos, remaining)
            iterations += 1
        return sediment - remaining
