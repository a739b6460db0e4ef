"""Summary statistics of a heightfield."""

from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np

from erosion.heightfield import HeightField


@dataclass(frozen=True)
class TerrainMetrics:
    """Elevation and roughness summary for one heightfield."""

    min_height: float
    max_height: float
    mean_height: float
    std_height: float
    total_mass: float
    mean_slope: float
    hypsometric_integral: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def terrain_metrics(field: HeightField) -> TerrainMetrics:
    """Compute elevation statistics and the mean slope magnitude of `field`."""

    values = field.data
    lo = float(values.min())
    hi = float(values.max())
    mean = float(values.mean())

    if values.shape[0] > 1 and values.shape[1] > 1:
        dz_dy, dz_dx = np.gradient(values)
        mean_slope = float(np.hypot(dz_dx, dz_dy).mean())
    else:
        mean_slope = 0.0

    relief = hi - lo
    hypsometric = (mean - lo) / relief if relief > 0.0 else 0.0
    return TerrainMetrics(
        min_height=lo,
        max_height=hi,
        mean_height=mean,
        std_height=float(values.std()),
        total_mass=float(values.sum()),
        mean_slope=mean_slope,
        hypsometric_integral=float(hypsometric),
    )


def mass_difference(before: HeightField, after: HeightField) -> float:
    """Signed change of total elevation between two fields of equal shape."""

    if before.data.shape != after.data.shape:
        raise ValueError("fields must have the same shape")
    return after.total() - before.total()
