"""Configuration models for terrain generation and droplet erosion."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any


DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
EPSILON = 1e-5


@dataclass(frozen=True)
class ErosionParameters:
    """Physical constants of the droplet model. Never mutated by a run."""

    inertia: float = 0.1
    min_slope: float = 0.001
    capacity: float = 32.0
    deposition_rate: float = 0.001
    erosion_rate: float = 0.1
    gravity: float = 9.81
    evaporation_rate: float = 0.002
    radius: int = 4

    def __post_init__(self) -> None:
        if not 0.0 <= self.inertia <= 1.0:
            raise ValueError("inertia must be in [0, 1]")
        if self.min_slope <= EPSILON:
            raise ValueError(f"min_slope must be greater than {EPSILON}")
        if self.capacity <= 0.0:
            raise ValueError("capacity must be positive")
        if not 0.0 <= self.deposition_rate <= 1.0:
            raise ValueError("deposition_rate must be in [0, 1]")
        if not 0.0 <= self.erosion_rate <= 1.0:
            raise ValueError("erosion_rate must be in [0, 1]")
        if self.gravity <= 0.0:
            raise ValueError("gravity must be positive")
        if not 0.0 <= self.evaporation_rate <= 0.5:
            raise ValueError("evaporation_rate must be in [0, 0.5]")
        if isinstance(self.radius, bool) or int(self.radius) != self.radius or self.radius < 0:
            raise ValueError("radius must be a non-negative integer")
        object.__setattr__(self, "radius", int(self.radius))

    def with_value(self, name: str, value: float) -> "ErosionParameters":
        """Return a copy with a single parameter replaced."""

        if name not in {f.name for f in fields(self)}:
            raise ValueError(f"unknown erosion parameter: {name}")
        return replace(self, **{name: value})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BumpConfig:
    """Controls the Gaussian bump superposition of the initial terrain."""

    bump_count: int = 500
    scale: float = 10.0
    width_range: tuple[float, float] = (5.0, 20.0)
    amplitude_range: tuple[float, float] = (1.0, 15.0)

    def __post_init__(self) -> None:
        if self.bump_count < 0:
            raise ValueError("bump_count must be non-negative")
        _check_range("width_range", self.width_range)
        _check_range("amplitude_range", self.amplitude_range)
        if self.width_range[0] <= 0.0:
            raise ValueError("width_range values must be positive")


@dataclass(frozen=True)
class RunConfig:
    """Controls how many droplets are spawned and how often snapshots are taken.

    `snapshot_every=None` disables intermediate snapshots.
    """

    droplet_count: int = 100_000
    snapshot_every: int | None = 1_000
    lifetime: int = 1_000
    initial_velocity: float = 1.0
    initial_water: float = 1.0

    def __post_init__(self) -> None:
        if self.droplet_count < 0:
            raise ValueError("droplet_count must be non-negative")
        if self.snapshot_every is not None and self.snapshot_every <= 0:
            raise ValueError("snapshot_every must be positive or None")
        if self.lifetime < 0:
            raise ValueError("lifetime must be non-negative")


@dataclass(frozen=True)
class GeneratorConfig:
    """Primary configuration of one generate-then-erode run."""

    bumps: BumpConfig = field(default_factory=BumpConfig)
    erosion: ErosionParameters = field(default_factory=ErosionParameters)
    run: RunConfig = field(default_factory=RunConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_SWEEP: dict[str, tuple[float, ...]] = {
    "inertia": (0.001, 0.01, 0.1, 0.5),
    "min_slope": (0.001, 0.01, 0.1),
    "capacity": (4.0, 6.0, 32.0),
    "deposition_rate": (0.001, 0.01, 0.1, 0.5),
    "erosion_rate": (0.001, 0.01, 0.1, 0.5),
    "gravity": (9.81, 1.0),
    "evaporation_rate": (0.001, 0.01, 0.1, 0.2, 0.5),
    "radius": (1, 2, 4, 8),
}


def _check_range(name: str, value: tuple[float, float]) -> None:
    if len(value) != 2:
        raise ValueError(f"{name} must be a (min, max) pair")
    if value[0] > value[1]:
        raise ValueError(f"{name} must be ordered as (min, max)")
