"""
Candidate point strategies.

Every strategy is a generator over (x, z) positions inside the area
``center ± size/2``. Generators draw from the caller's RNG lazily, so a
sequence can only be consumed once.
"""
from __future__ import annotations

import math
import random
from typing import Iterator, Optional, Tuple

import numpy as np

from .settings import GenerationMode, GenerationSettings
from ..misc.math_utils import Position2D, is_position_in_rect

MIN_GRID_SPACING = 0.1
MIN_POISSON_RADIUS = 0.1


def _bounds(center: Position2D, size: Position2D) -> Tuple[float, float, float, float]:
    min_x = center[0] - size[0] * 0.5
    min_z = center[1] - size[1] * 0.5
    return min_x, min_z, min_x + size[0], min_z + size[1]


def grid_points(center: Position2D, size: Position2D, spacing: float, jitter: float,
                rng: random.Random) -> Iterator[Position2D]:
    """Regular lattice from the area minimum, each vertex jittered by up to ``spacing*jitter`` per axis."""
    min_x, min_z, max_x, max_z = _bounds(center, size)
    spacing = max(MIN_GRID_SPACING, spacing)
    offset = spacing * jitter
    cols = int(math.floor((max_x - min_x) / spacing + 1e-9)) + 1
    rows = int(math.floor((max_z - min_z) / spacing + 1e-9)) + 1

    for i in range(cols):
        x = min_x + i * spacing
        for j in range(rows):
            z = min_z + j * spacing
            point = (x + (rng.random() * 2 - 1) * offset,
                     z + (rng.random() * 2 - 1) * offset)
            if is_position_in_rect(point, center, size):
                yield point


def random_points(center: Position2D, size: Position2D, count: int,
                  rng: random.Random) -> Iterator[Position2D]:
    """``count`` independent uniform points."""
    min_x, min_z, max_x, max_z = _bounds(center, size)
    width = max_x - min_x
    depth = max_z - min_z
    for _ in range(max(0, count)):
        yield (min_x + rng.random() * width, min_z + rng.random() * depth)


def poisson_budget(size: Position2D, radius: float) -> int:
    """Upper bound on points at spacing ``radius``: disjoint discs of radius r/2."""
    return int(math.ceil(size[0] * size[1] / (math.pi * (radius * 0.5) ** 2)))


def poisson_disc_points(center: Position2D, size: Position2D, radius: float, sample_attempts: int,
                        rng: random.Random, max_points: Optional[int] = None) -> Iterator[Position2D]:
    """
    Bridson Poisson-disc sampling.

    Every yielded pair of points is at least ``radius`` apart. Sampling ends
    when the active list empties or ``max_points`` (default: area budget)
    points were produced.
    """
    min_x, min_z, max_x, max_z = _bounds(center, size)
    width = max_x - min_x
    depth = max_z - min_z
    if width <= 0 or depth <= 0:
        return

    radius = max(MIN_POISSON_RADIUS, radius)
    cell = radius / math.sqrt(2)
    cols = max(1, int(math.ceil(width / cell)))
    rows = max(1, int(math.ceil(depth / cell)))
    grid = np.full((cols, rows), -1, dtype=np.int64)
    budget = max_points if max_points is not None else poisson_budget(size, radius)
    radius_sq = radius * radius

    points = []
    active = []

    def cell_of(p: Position2D) -> Tuple[int, int]:
        gx = min(cols - 1, max(0, int((p[0] - min_x) / cell)))
        gz = min(rows - 1, max(0, int((p[1] - min_z) / cell)))
        return gx, gz

    def fits(p: Position2D) -> bool:
        gx, gz = cell_of(p)
        for ix in range(max(0, gx - 2), min(cols, gx + 3)):
            for iz in range(max(0, gz - 2), min(rows, gz + 3)):
                idx = grid[ix, iz]
                if idx >= 0:
                    ox, oz = points[idx]
                    if (ox - p[0]) ** 2 + (oz - p[1]) ** 2 < radius_sq:
                        return False
        return True

    def accept(p: Position2D) -> None:
        points.append(p)
        active.append(p)
        grid[cell_of(p)] = len(points) - 1

    if budget <= 0:
        return

    first = (min_x + rng.random() * width, min_z + rng.random() * depth)
    accept(first)
    yield first

    while active and len(points) < budget:
        index = rng.randrange(len(active))
        ax, az = active[index]
        found = False

        for _ in range(sample_attempts):
            angle = rng.random() * 2 * math.pi
            dist = radius + rng.random() * radius
            candidate = (ax + math.cos(angle) * dist, az + math.sin(angle) * dist)
            if not is_position_in_rect(candidate, center, size):
                continue
            if fits(candidate):
                accept(candidate)
                yield candidate
                found = True
                break

        if not found:
            active[index] = active[-1]
            active.pop()


class CandidatePointGenerator:
    """Dispatches to the strategy named by a GenerationMode."""

    def generate(self, center: Position2D, size: Position2D, mode: GenerationMode,
                 settings: GenerationSettings, rng: random.Random) -> Iterator[Position2D]:
        area = size[0] * size[1]
        if mode == GenerationMode.GRID:
            return grid_points(center, size, settings.grid.spacing, settings.grid.jitter, rng)
        if mode == GenerationMode.POISSON:
            return poisson_disc_points(center, size, settings.poisson.radius,
                                       settings.poisson.sample_attempts, rng)
        if mode == GenerationMode.RANDOM_GRID:
            count = int(math.ceil(area * settings.density.base_density))
            return random_points(center, size, count, rng)
        if mode == GenerationMode.UNIFORM:
            count = int(math.ceil(area * settings.uniform.points_per_100_square_meters / 100.0))
            return random_points(center, size, count, rng)
        raise ValueError(f"Unsupported generation mode: {mode}")
