from __future__ import annotations

import numpy as np
import pytest

from erosion.config import BumpConfig
from erosion.generator import Bump, generate_heightfield, normalize_to_byte_range, superpose_bumps
from erosion.heightfield import Point2D
from erosion.rng import RandomSource


def test_generated_field_spans_byte_range() -> None:
    config = BumpConfig(bump_count=20, scale=10.0, width_range=(3.0, 8.0), amplitude_range=(1.0, 15.0))

    field = generate_heightfield(48, 32, RandomSource(11), config=config)

    assert (field.width, field.height) == (48, 32)
    assert float(field.data.min()) == 0.0
    assert float(field.data.max()) == 255.0
    assert np.isfinite(field.data).all()


def test_generation_is_deterministic_per_seed() -> None:
    config = BumpConfig(bump_count=10)

    a = generate_heightfield(32, 32, RandomSource(5), config=config)
    b = generate_heightfield(32, 32, RandomSource(5), config=config)
    c = generate_heightfield(32, 32, RandomSource(6), config=config)

    assert np.array_equal(a.data, b.data)
    assert not np.array_equal(a.data, c.data)


def test_no_bumps_gives_flat_zero_field() -> None:
    field = generate_heightfield(16, 16, RandomSource(1), config=BumpConfig(bump_count=0))

    assert not field.data.any()


def test_single_centered_bump_peaks_at_center_and_decays() -> None:
    raw = superpose_bumps(64, 64, [Bump(Point2D(32.0, 32.0), 6.0, 5.0)])

    assert np.unravel_index(np.argmax(raw), raw.shape) == (32, 32)
    assert raw[32, 32] == pytest.approx(5.0)
    row = raw[32, 32:]
    assert np.all(np.diff(row) < 0.0)
    column = raw[32:, 32]
    assert np.all(np.diff(column) < 0.0)

    normalized = normalize_to_byte_range(raw)
    assert normalized[32, 32] == 255.0


def test_bump_falloff_is_base_two() -> None:
    raw = superpose_bumps(64, 64, [Bump(Point2D(32.0, 32.0), 6.0, 5.0)])

    # One width away: 2^(-1/2), not e^(-1/2).
    assert raw[32, 38] == pytest.approx(5.0 * 2.0 ** -0.5)
    assert raw[38, 32] == pytest.approx(raw[32, 38])


def test_constant_input_normalizes_to_zero() -> None:
    values = np.full((4, 5), 3.5)

    assert not normalize_to_byte_range(values).any()


def test_bump_config_validation() -> None:
    with pytest.raises(ValueError):
        BumpConfig(width_range=(10.0, 5.0))
    with pytest.raises(ValueError):
        BumpConfig(width_range=(0.0, 5.0))
    with pytest.raises(ValueError):
        BumpConfig(bump_count=-1)
