"""Procedural terrain generation and droplet-based hydraulic erosion."""

from .config import DEFAULT_HEIGHT, DEFAULT_WIDTH, BumpConfig, ErosionParameters, GeneratorConfig, RunConfig
from .heightfield import HeightField, Point2D

__all__ = [
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "BumpConfig",
    "ErosionParameters",
    "GeneratorConfig",
    "RunConfig",
    "HeightField",
    "Point2D",
]
