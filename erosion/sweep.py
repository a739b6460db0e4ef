"""Erode one initial terrain repeatedly, varying one parameter at a time."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

import structlog

from erosion.config import DEFAULT_SWEEP, ErosionParameters, RunConfig
from erosion.heightfield import HeightField
from erosion.io import PngSnapshotSink, save_heightfield_png
from erosion.rng import RandomSource
from erosion.runner import ErosionStats, run_erosion

logger = structlog.get_logger()


@dataclass(frozen=True)
class SweepRun:
    """One erosion run of a sweep and where its images went."""

    parameter: str
    index: int
    value: float
    directory: Path
    stats: ErosionStats


def run_parameter_sweep(
    out_root: str | Path,
    original: HeightField,
    base_params: ErosionParameters,
    rng: RandomSource,
    *,
    variations: Mapping[str, Sequence[float]] | None = None,
    run: RunConfig | None = None,
) -> list[SweepRun]:
    """Run erosion once per (parameter, value) pair starting from `original`.

    Every other parameter keeps its `base_params` value. Snapshots of run
    `i` of parameter `name` land in `out_root/<name>_<i>/<name><k>.png` (none
    when `run.snapshot_every` is None) and the final field in
    `out_root/<name>_<i>/final.png`. `original` is not modified.
    """

    sweep = DEFAULT_SWEEP if variations is None else variations
    run_cfg = run or RunConfig()
    root = Path(out_root)

    # Validate every combination before writing anything.
    planned = [
        (name, index, value, base_params.with_value(name, value))
        for name, values in sweep.items()
        for index, value in enumerate(values)
    ]

    save_heightfield_png(original, root / "original.png")

    results: list[SweepRun] = []
    for name, index, value, params in planned:
        directory = root / f"{name}_{index}"
        field = original.copy()
        logger.info("Sweep run", parameter=name, index=index, value=value)
        stats = run_erosion(
            field,
            params,
            rng.fork(f"{name}-{index}"),
            run_cfg.droplet_count,
            snapshot_every=run_cfg.snapshot_every,
            sink=PngSnapshotSink(directory) if run_cfg.snapshot_every else None,
            snapshot_prefix=name,
            lifetime=run_cfg.lifetime,
            initial_velocity=run_cfg.initial_velocity,
            initial_water=run_cfg.initial_water,
        )
        save_heightfield_png(field, directory / "final.png")
        results.append(SweepRun(name, index, value, directory, stats))
    return results
