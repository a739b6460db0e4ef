"""Repeated droplet spawning against one shared heightfield."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from erosion.config import ErosionParameters
from erosion.droplet import Droplet, DropletSimulator
from erosion.heightfield import ORIGIN, HeightField
from erosion.rng import RandomSource

logger = structlog.get_logger()


class SnapshotSink(Protocol):
    """Receives the live field at the configured snapshot cadence."""

    def __call__(self, field: HeightField, identifier: str) -> None: ...


@dataclass
class ErosionStats:
    """Aggregate summary of one erosion run."""

    droplets: int = 0
    steps: int = 0
    eroded: float = 0.0
    deposited: float = 0.0
    snapshots: int = 0
    terminations: Counter = field(default_factory=Counter)

    def to_dict(self) -> dict[str, object]:
        return {
            "droplets": self.droplets,
            "steps": self.steps,
            "eroded": self.eroded,
            "deposited": self.deposited,
            "snapshots": self.snapshots,
            "terminations": dict(sorted(self.terminations.items())),
        }


def run_erosion(
    field: HeightField,
    params: ErosionParameters,
    rng: RandomSource,
    droplet_count: int,
    *,
    snapshot_every: int | None = None,
    sink: SnapshotSink | None = None,
    snapshot_prefix: str = "",
    lifetime: int = 1000,
    initial_velocity: float = 1.0,
    initial_water: float = 1.0,
) -> ErosionStats:
    """Spawn `droplet_count` droplets at random positions and erode `field` in place.

    Droplets are numbered from 1. When a sink and a cadence are supplied, the
    sink receives the field before every droplet whose number is a multiple of
    `snapshot_every`, under the identifier `f"{snapshot_prefix}{number}"`.
    """

    if droplet_count < 0:
        raise ValueError("droplet_count must be non-negative")
    if snapshot_every is not None and snapshot_every <= 0:
        raise ValueError("snapshot_every must be positive")

    simulator = DropletSimulator(field, params, rng)
    stats = ErosionStats()
    logger.info(
        "Starting erosion run",
        droplets=droplet_count,
        width=field.width,
        height=field.height,
        radius=params.radius,
    )

    for number in range(1, droplet_count + 1):
        if sink is not None and snapshot_every and number % snapshot_every == 0:
            identifier = f"{snapshot_prefix}{number}"
            sink(field, identifier)
            stats.snapshots += 1
            logger.debug("Snapshot taken", identifier=identifier)

        drop = Droplet(
            position=rng.random_point(field.width, field.height),
            direction=ORIGIN,
            velocity=initial_velocity,
            water=initial_water,
            sediment=0.0,
            lifetime=lifetime,
        )
        outcome = simulator.simulate(drop)
        stats.droplets += 1
        stats.steps += outcome.steps
        stats.eroded += outcome.eroded
        stats.deposited += outcome.deposited
        stats.terminations[outcome.reason] += 1

    logger.info(
        "Erosion run complete",
        droplets=stats.droplets,
        steps=stats.steps,
        eroded=round(stats.eroded, 6),
        deposited=round(stats.deposited, 6),
    )
    return stats
