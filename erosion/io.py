"""Output serialization for generated and eroded terrain."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image
import structlog

from erosion.derive import heightmap_u8
from erosion.heightfield import HeightField

logger = structlog.get_logger()


class PersistenceError(RuntimeError):
    """Raised when an output directory or file cannot be written."""


def ensure_parent_dir(path: str | Path) -> Path:
    """Create the parent directory of `path` if needed and return `path`."""

    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"Cannot create directory {target.parent}: {exc}") from exc
    return target


def resolve_output_dir(out_root: str | Path, name: str, *, overwrite: bool) -> Path:
    """Create and return the output directory for one run."""

    target = Path(out_root) / name
    if target.exists() and not target.is_dir():
        raise PersistenceError(f"Output path exists and is not a directory: {target}")
    if target.exists() and any(target.iterdir()) and not overwrite:
        raise FileExistsError(
            f"Output directory already exists and is not empty: {target}. Use --overwrite to replace files."
        )
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"Cannot create directory {target}: {exc}") from exc
    return target


def write_png_u8(path: str | Path, raster_u8: np.ndarray) -> None:
    target = ensure_parent_dir(path)
    try:
        Image.fromarray(raster_u8.astype(np.uint8)).save(target)
    except (OSError, ValueError) as exc:
        raise PersistenceError(f"Cannot write image {target}: {exc}") from exc


def write_height_npy(path: str | Path, values: np.ndarray) -> None:
    target = ensure_parent_dir(path)
    try:
        np.save(target, values.astype(np.float64), allow_pickle=False)
    except OSError as exc:
        raise PersistenceError(f"Cannot write array {target}: {exc}") from exc


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    target = ensure_parent_dir(path)
    text = json.dumps(payload, indent=2, sort_keys=True)
    try:
        target.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Cannot write {target}: {exc}") from exc


def save_heightfield_png(field: HeightField, path: str | Path) -> Path:
    """Write `field` as an 8-bit greyscale PNG, leaving the field untouched."""

    target = Path(path)
    write_png_u8(target, heightmap_u8(field.data))
    logger.debug("Heightfield image saved", path=str(target))
    return target


class PngSnapshotSink:
    """Snapshot sink writing `<root>/<identifier>.png` for each call."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.written: list[Path] = []

    def __call__(self, field: HeightField, identifier: str) -> None:
        self.written.append(save_heightfield_png(field, self.root / f"{identifier}.png"))
