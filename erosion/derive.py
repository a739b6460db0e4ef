"""Derived raster products from heightfields."""

from __future__ import annotations

import numpy as np


def heightmap_u8(values: np.ndarray) -> np.ndarray:
    """Encode elevations as 8-bit grey by clipping to [0, 255] and truncating."""

    return np.clip(values, 0.0, 255.0).astype(np.uint8)


def hillshade(
    values: np.ndarray,
    *,
    cell_size: float = 1.0,
    azimuth_deg: float = 315.0,
    altitude_deg: float = 45.0,
    z_factor: float = 1.0,
) -> np.ndarray:
    """Compute an 8-bit grayscale hillshade from an elevation grid."""

    if values.ndim != 2:
        raise ValueError("values must be a 2D array")
    if cell_size <= 0:
        raise ValueError("cell_size must be positive")
    if min(values.shape) < 2:
        return np.zeros(values.shape, dtype=np.uint8)

    dz_dy, dz_dx = np.gradient(values.astype(np.float64), cell_size, cell_size)
    dz_dx = dz_dx * float(z_factor)
    dz_dy = dz_dy * float(z_factor)

    slope = np.pi / 2.0 - np.arctan(np.hypot(dz_dx, dz_dy))
    aspect = np.arctan2(-dz_dx, dz_dy)
    azimuth = np.deg2rad(azimuth_deg)
    altitude = np.deg2rad(altitude_deg)

    shaded = np.sin(altitude) * np.sin(slope) + np.cos(altitude) * np.cos(slope) * np.cos(azimuth - aspect)
    return np.round(np.clip(shaded, 0.0, 1.0) * 255.0).astype(np.uint8)


def erosion_delta_u8(before: np.ndarray, after: np.ndarray) -> np.ndarray:
    """Map signed elevation change to grey: 128 is unchanged, darker is eroded."""

    delta = after.astype(np.float64) - before.astype(np.float64)
    peak = float(np.abs(delta).max()) if delta.size else 0.0
    if peak <= 0.0:
        return np.full(delta.shape, 128, dtype=np.uint8)
    encoded = np.clip(delta / peak, -1.0, 1.0) * 0.5 + 0.5
    return np.round(encoded * 255.0).astype(np.uint8)
