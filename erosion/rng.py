"""Deterministic hash-based random draws with explicitly owned state."""

from __future__ import annotations

import hashlib
import time

import numpy as np

from erosion.heightfield import Point2D

_U32 = 0xFFFFFFFF
_U32_RANGE = float(1 << 32)


def _normalize_seed(seed: int) -> int:
    return int(seed) & ((1 << 64) - 1)


def pcg_hash(value: int) -> int:
    """32-bit PCG output permutation of `value`."""

    state = (int(value) * 747796405 + 2891336453) & _U32
    word = (((state >> ((state >> 28) + 4)) ^ state) * 277803737) & _U32
    return (word >> 22) ^ word


def uniform01(seed: int) -> float:
    """Hash `seed` to a double in [0, 1)."""

    return pcg_hash(seed) / _U32_RANGE


def uniform_range(seed: int, lo: float, hi: float) -> float:
    """Hash `seed` to a double in [lo, hi)."""

    return lo + uniform01(seed) * (hi - lo)


def derive_seed(parent_seed: int, key: str, *, namespace: str = "erosion-v1") -> int:
    """Derive a deterministic child seed from a parent seed and label."""

    payload = f"{namespace}:{_normalize_seed(parent_seed)}:{key}".encode("utf-8")
    digest = hashlib.blake2b(payload, digest_size=8, person=b"rngfork01").digest()
    return int.from_bytes(digest, byteorder="big", signed=False)


def time_seed() -> int:
    return _normalize_seed(time.time_ns())


class RandomSource:
    """Seed minting counter plus hash-based uniform draws.

    Seeds are minted from a numpy PCG64 stream and fed through `pcg_hash`, so a
    source built from the same seed replays the same sequence of draws. Each
    component needing randomness receives its own source, typically a `fork`
    of a root source.
    """

    def __init__(self, seed: int, *, namespace: str = "erosion-v1") -> None:
        self.seed = _normalize_seed(seed)
        self.namespace = namespace
        self._generator = np.random.Generator(np.random.PCG64(np.uint64(self.seed)))

    @classmethod
    def from_time(cls) -> "RandomSource":
        """Initialize from the wall clock, for non-reproducible runs."""

        return cls(time_seed())

    def fork(self, key: str) -> "RandomSource":
        if not key:
            raise ValueError("fork key must be non-empty")
        return RandomSource(derive_seed(self.seed, key, namespace=self.namespace), namespace=self.namespace)

    def next_seed(self) -> int:
        return int(self._generator.integers(0, 1 << 32, dtype=np.uint64))

    def draw01(self) -> float:
        return uniform01(self.next_seed())

    def draw_range(self, lo: float, hi: float) -> float:
        return uniform_range(self.next_seed(), lo, hi)

    def random_point(self, width: int, height: int) -> Point2D:
        """Uniform point with x in [0, width) and y in [0, height)."""

        x = uniform_range(self.next_seed(), 0.0, float(width))
        y = uniform_range(self.next_seed(), 0.0, float(height))
        return Point2D(x, y)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
