from __future__ import annotations

from PIL import Image
import numpy as np
import pytest

from erosion.heightfield import HeightField
from erosion.io import PersistenceError, PngSnapshotSink, resolve_output_dir, save_heightfield_png


def test_snapshot_sink_writes_truncated_grey_png(tmp_path) -> None:
    field = HeightField.from_array(np.array([[12.9, 300.0, -5.0], [0.0, 254.99, 128.5]]))
    before = field.to_array()
    sink = PngSnapshotSink(tmp_path / "nested" / "run")

    sink(field, "drop10")

    target = tmp_path / "nested" / "run" / "drop10.png"
    assert sink.written == [target]
    with Image.open(target) as image:
        assert image.mode == "L"
        assert image.size == (3, 2)
        pixels = np.array(image)
    assert pixels.tolist() == [[12, 255, 0], [0, 254, 128]]
    assert np.array_equal(field.data, before)


def test_unwritable_target_raises_persistence_error(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    field = HeightField.zeros(4, 4)

    with pytest.raises(PersistenceError):
        save_heightfield_png(field, blocker / "sub" / "image.png")


def test_resolve_output_dir_guards_existing_files(tmp_path) -> None:
    target = resolve_output_dir(tmp_path, "run", overwrite=False)
    (target / "old.png").write_bytes(b"")

    with pytest.raises(FileExistsError):
        resolve_output_dir(tmp_path, "run", overwrite=False)
    assert resolve_output_dir(tmp_path, "run", overwrite=True) == target
