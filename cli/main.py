"""CLI entry point for terrain generation and droplet erosion."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import platform
import sys
import time

import numpy as np

from erosion.config import (
    DEFAULT_HEIGHT,
    DEFAULT_SWEEP,
    DEFAULT_WIDTH,
    BumpConfig,
    ErosionParameters,
    GeneratorConfig,
    RunConfig,
)
from erosion.derive import erosion_delta_u8, hillshade
from erosion.generator import generate_heightfield
from erosion.heightfield import HeightField
from erosion.io import (
    PersistenceError,
    PngSnapshotSink,
    resolve_output_dir,
    save_heightfield_png,
    write_height_npy,
    write_json,
    write_png_u8,
)
from erosion.log import configure_logging
from erosion.metrics import mass_difference, terrain_metrics
from erosion.rng import RandomSource
from erosion.runner import run_erosion
from erosion.sweep import run_parameter_sweep


def build_parser() -> argparse.ArgumentParser:
    defaults = ErosionParameters()
    bump_defaults = BumpConfig()
    run_defaults = RunConfig()

    parser = argparse.ArgumentParser(description="Gaussian-bump terrain generator with droplet hydraulic erosion")
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument("--w", type=int, default=DEFAULT_WIDTH, help="Grid width in cells")
    parser.add_argument("--h", type=int, default=DEFAULT_HEIGHT, help="Grid height in cells")
    parser.add_argument("--seed", type=int, default=None, help="Integer seed (default: derived from the clock)")

    terrain = parser.add_argument_group("initial terrain")
    terrain.add_argument("--bumps", type=int, default=bump_defaults.bump_count, help="Number of Gaussian bumps")
    terrain.add_argument("--scale", type=float, default=bump_defaults.scale, help="Scale applied before normalization")
    terrain.add_argument("--bump-width", type=float, nargs=2, metavar=("MIN", "MAX"), default=bump_defaults.width_range)
    terrain.add_argument(
        "--bump-amplitude",
        type=float,
        nargs=2,
        metavar=("MIN", "MAX"),
        default=bump_defaults.amplitude_range,
    )

    physics = parser.add_argument_group("erosion parameters")
    physics.add_argument("--inertia", type=float, default=defaults.inertia)
    physics.add_argument("--min-slope", type=float, default=defaults.min_slope)
    physics.add_argument("--capacity", type=float, default=defaults.capacity)
    physics.add_argument("--deposition", type=float, default=defaults.deposition_rate)
    physics.add_argument("--erosion", type=float, default=defaults.erosion_rate)
    physics.add_argument("--gravity", type=float, default=defaults.gravity)
    physics.add_argument("--evaporation", type=float, default=defaults.evaporation_rate)
    physics.add_argument("--radius", type=int, default=defaults.radius)

    run = parser.add_argument_group("run")
    run.add_argument("--droplets", type=int, default=run_defaults.droplet_count, help="Droplets to simulate")
    run.add_argument(
        "--snapshot-every",
        type=int,
        default=0,
        help="Save an intermediate image every N droplets (0 disables snapshots)",
    )
    run.add_argument("--lifetime", type=int, default=run_defaults.lifetime, help="Maximum steps per droplet")
    run.add_argument(
        "--sweep",
        action="store_true",
        help="Vary each erosion parameter in turn instead of running a single erosion",
    )

    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument("--verbose", action="store_true", help="Emit debug logs on stderr")
    parser.add_argument("--json-logs", action="store_true", help="Render logs as JSON lines")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, json_logs=args.json_logs)

    if args.w < 3 or args.h < 3:
        parser.error("--w and --h must be at least 3")
    if args.snapshot_every < 0:
        parser.error("--snapshot-every must be non-negative")

    try:
        config = GeneratorConfig(
            bumps=BumpConfig(
                bump_count=args.bumps,
                scale=args.scale,
                width_range=tuple(args.bump_width),
                amplitude_range=tuple(args.bump_amplitude),
            ),
            erosion=ErosionParameters(
                inertia=args.inertia,
                min_slope=args.min_slope,
                capacity=args.capacity,
                deposition_rate=args.deposition,
                erosion_rate=args.erosion,
                gravity=args.gravity,
                evaporation_rate=args.evaporation,
                radius=args.radius,
            ),
            run=RunConfig(
                droplet_count=args.droplets,
                snapshot_every=args.snapshot_every or None,
                lifetime=args.lifetime,
            ),
        )
    except ValueError as exc:
        parser.error(str(exc))

    rng = RandomSource(args.seed) if args.seed is not None else RandomSource.from_time()
    seed = rng.seed

    try:
        out_dir = resolve_output_dir(args.out, f"seed-{seed}_{args.w}x{args.h}", overwrite=args.overwrite)
    except (FileExistsError, PersistenceError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    generation_start = time.perf_counter()
    original = generate_heightfield(args.w, args.h, rng.fork("terrain"), config=config.bumps)
    generation_seconds = time.perf_counter() - generation_start

    try:
        if args.sweep:
            return _run_sweep(args, config, original, rng, out_dir)

        field = original.copy()
        sink = PngSnapshotSink(out_dir / "snapshots") if config.run.snapshot_every else None
        erosion_start = time.perf_counter()
        stats = run_erosion(
            field,
            config.erosion,
            rng.fork("erosion"),
            config.run.droplet_count,
            snapshot_every=config.run.snapshot_every,
            sink=sink,
            snapshot_prefix="drop",
            lifetime=config.run.lifetime,
        )
        erosion_seconds = time.perf_counter() - erosion_start

        save_heightfield_png(original, out_dir / "original.png")
        save_heightfield_png(field, out_dir / "eroded.png")
        write_png_u8(out_dir / "hillshade.png", hillshade(field.data))
        write_png_u8(out_dir / "erosion_delta.png", erosion_delta_u8(original.data, field.data))
        write_height_npy(out_dir / "height.npy", field.data)

        before = terrain_metrics(original)
        after = terrain_metrics(field)
        if args.json:
            deterministic_meta = {
                "seed": seed,
                "width": args.w,
                "height": args.h,
                "config": config.to_dict(),
                "erosion": stats.to_dict(),
                "metrics": {
                    "original": before.to_dict(),
                    "eroded": after.to_dict(),
                },
            }
            meta = {
                **deterministic_meta,
                "generated_at_utc": datetime.now(timezone.utc).isoformat(),
                "generation_seconds": generation_seconds,
                "erosion_seconds": erosion_seconds,
                "python_version": platform.python_version(),
                "numpy_version": np.__version__,
            }
            write_json(out_dir / "deterministic_meta.json", deterministic_meta)
            write_json(out_dir / "meta.json", meta)
    except PersistenceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Eroded terrain: {out_dir}")
    print(f"Seed {seed}; grid {args.w}x{args.h}; generation time {generation_seconds:.3f} s")
    print(
        "Erosion: "
        f"droplets={stats.droplets}, "
        f"steps={stats.steps}, "
        f"eroded={stats.eroded:.3f}, "
        f"deposited={stats.deposited:.3f}, "
        f"runtime={erosion_seconds:.3f}s"
    )
    print(
        "Relief: "
        f"mean slope {before.mean_slope:.3f} -> {after.mean_slope:.3f}, "
        f"mass change {mass_difference(original, field):+.3f}"
    )
    return 0


def _run_sweep(
    args: argparse.Namespace,
    config: GeneratorConfig,
    original: HeightField,
    rng: RandomSource,
    out_dir: Path,
) -> int:
    sweep_start = time.perf_counter()
    runs = run_parameter_sweep(
        out_dir,
        original,
        config.erosion,
        rng.fork("sweep"),
        variations=DEFAULT_SWEEP,
        run=config.run,
    )
    sweep_seconds = time.perf_counter() - sweep_start

    if args.json:
        write_json(
            out_dir / "sweep.json",
            {
                "config": config.to_dict(),
                "runs": [
                    {
                        "parameter": run.parameter,
                        "index": run.index,
                        "value": run.value,
                        "directory": run.directory.name,
                        "erosion": run.stats.to_dict(),
                    }
                    for run in runs
                ],
            },
        )

    print(f"Parameter sweep: {out_dir}")
    print(f"Runs: {len(runs)}; runtime {sweep_seconds:.3f} s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
