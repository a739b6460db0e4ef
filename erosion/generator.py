"""Initial terrain synthesis from superposed Gaussian bumps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
import structlog

from erosion.config import BumpConfig
from erosion.heightfield import HeightField, Point2D
from erosion.rng import RandomSource

logger = structlog.get_logger()

OUTPUT_MAX = 255.0


@dataclass(frozen=True)
class Bump:
    """One Gaussian elevation contribution."""

    center: Point2D
    width: float
    amplitude: float


def draw_bumps(width: int, height: int, count: int, rng: RandomSource, *, config: BumpConfig) -> list[Bump]:
    """Draw `count` bumps with centres in the grid and sizes from the configured ranges."""

    bumps: list[Bump] = []
    for _ in range(count):
        center = rng.random_point(width, height)
        bump_width = rng.draw_range(*config.width_range)
        amplitude = rng.draw_range(*config.amplitude_range)
        bumps.append(Bump(center, bump_width, amplitude))
    return bumps


def superpose_bumps(width: int, height: int, bumps: Iterable[Bump]) -> np.ndarray:
    """Sum `amplitude * 2^(-d^2 / (2 w^2))` over every bump for every cell."""

    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")

    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    out = np.zeros((height, width), dtype=np.float64)
    for bump in bumps:
        dist_sq = (xx - bump.center.x) ** 2 + (yy - bump.center.y) ** 2
        out += bump.amplitude * np.exp2(-dist_sq / (2.0 * bump.width * bump.width))
    return out


def normalize_to_byte_range(values: np.ndarray) -> np.ndarray:
    """Linearly rescale `values` into [0, 255]; a constant input maps to zeros."""

    lo = float(values.min())
    hi = float(values.max())
    if hi == lo:
        return np.zeros_like(values, dtype=np.float64)
    return (values - lo) / (hi - lo) * OUTPUT_MAX


def generate_heightfield(
    width: int,
    height: int,
    rng: RandomSource,
    *,
    config: BumpConfig | None = None,
) -> HeightField:
    """Generate an initial heightfield with elevations in [0, 255]."""

    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")

    cfg = config or BumpConfig()
    logger.info("Generating heightfield", width=width, height=height, bumps=cfg.bump_count)

    bumps = draw_bumps(width, height, cfg.bump_count, rng, config=cfg)
    raw = superpose_bumps(width, height, bumps) * cfg.scale
    field = HeightField(normalize_to_byte_range(raw))

    logger.debug("Heightfield generated", total=field.total())
    return field
