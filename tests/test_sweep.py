from __future__ import annotations

import numpy as np
import pytest

from erosion.config import BumpConfig, ErosionParameters, RunConfig
from erosion.generator import generate_heightfield
from erosion.rng import RandomSource
from erosion.sweep import run_parameter_sweep


def test_sweep_layout_and_original_preserved(tmp_path) -> None:
    original = generate_heightfield(16, 16, RandomSource(2), config=BumpConfig(bump_count=4, width_range=(3.0, 6.0)))
    before = original.to_array()

    runs = run_parameter_sweep(
        tmp_path,
        original,
        ErosionParameters(),
        RandomSource(5),
        variations={"inertia": (0.1, 0.5), "radius": (1,)},
        run=RunConfig(droplet_count=4, snapshot_every=2),
    )

    assert [(r.parameter, r.index, r.value) for r in runs] == [("inertia", 0, 0.1), ("inertia", 1, 0.5), ("radius", 0, 1)]
    assert np.array_equal(original.data, before)
    assert (tmp_path / "original.png").exists()
    for name in ("inertia_0", "inertia_1"):
        for image in ("inertia2.png", "inertia4.png", "final.png"):
            assert (tmp_path / name / image).exists(), f"{name}/{image}"
    assert (tmp_path / "radius_0" / "radius2.png").exists()
    assert all(r.stats.droplets == 4 for r in runs)


def test_sweep_rejects_unknown_parameter_before_running(tmp_path) -> None:
    original = generate_heightfield(8, 8, RandomSource(2), config=BumpConfig(bump_count=2, width_range=(2.0, 4.0)))

    with pytest.raises(ValueError):
        run_parameter_sweep(
            tmp_path,
            original,
            ErosionParameters(),
            RandomSource(5),
            variations={"inertia": (0.1,), "viscosity": (1.0,)},
            run=RunConfig(droplet_count=2, snapshot_every=1),
        )
    assert not (tmp_path / "inertia_0").exists()


def test_sweep_without_snapshot_cadence_writes_only_final_images(tmp_path) -> None:
    original = generate_heightfield(12, 12, RandomSource(2), config=BumpConfig(bump_count=3, width_range=(2.0, 5.0)))

    runs = run_parameter_sweep(
        tmp_path,
        original,
        ErosionParameters(),
        RandomSource(5),
        variations={"gravity": (9.81, 1.0)},
        run=RunConfig(droplet_count=3, snapshot_every=None),
    )

    assert all(r.stats.snapshots == 0 for r in runs)
    images = sorted(p.relative_to(tmp_path).as_posix() for p in tmp_path.rglob("*.png"))
    assert images == ["gravity_0/final.png", "gravity_1/final.png", "original.png"]


def test_run_config_snapshot_cadence_validation() -> None:
    assert RunConfig(snapshot_every=None).snapshot_every is None
    with pytest.raises(ValueError):
        RunConfig(snapshot_every=0)
