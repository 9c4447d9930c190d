"""
Mathematical utility functions for pyflora.

Positions on the ground plane are (x, z) tuples; world positions are
(x, y, z) with Y up. Every random helper takes an explicit ``random.Random``
so callers keep control of the generation seed.
"""
import math
import random
import numpy as np
from typing import Tuple, Sequence, Union

# Type definitions for positions
Position2D = Tuple[float, float]
Position3D = Tuple[float, float, float]
PositionType = Union[Position2D, Position3D]


def calculate_2d_distance(pos1: Position2D, pos2: Position2D) -> float:
    """
    Calculate 2D Euclidean distance between two points.

    Examples:
        >>> calculate_2d_distance((0, 0), (3, 4))
        5.0
    """
    x1, z1 = pos1
    x2, z2 = pos2
    return math.sqrt((x2 - x1)**2 + (z2 - z1)**2)


def clamp01(value: float) -> float:
    """Clamp ``value`` to the [0, 1] range."""
    return max(0.0, min(1.0, value))


def lerp(a: float, b: float, t: float) -> float:
    """
    Linear interpolation with ``t`` clamped to [0, 1].

    Examples:
        >>> lerp(0.0, 10.0, 0.25)
        2.5
        >>> lerp(0.0, 10.0, 3.0)
        10.0
    """
    t = clamp01(t)
    return a + (b - a) * t


def generate_random_angle(rng: random.Random, degrees: bool = False) -> float:
    """Random angle in [0, 2π), or [0, 360) when ``degrees`` is set."""
    if degrees:
        return rng.random() * 360.0
    return rng.random() * 2 * math.pi


def generate_random_position_in_ring(
    center: Position2D,
    inner_radius: float,
    outer_radius: float,
    rng: random.Random
) -> Position2D:
    """
    Random position in a ring (donut) around ``center``.

    The radius is drawn linearly between the two bounds (not area-uniform).

    Args:
        center: Center of ring (x, z)
        inner_radius: Inner radius (exclusion zone)
        outer_radius: Outer radius
        rng: Random source

    Returns:
        Random position (x, z)
    """
    cx, cz = center
    angle = generate_random_angle(rng)
    distance = inner_radius + rng.random() * (outer_radius - inner_radius)
    return (cx + math.cos(angle) * distance, cz + math.sin(angle) * distance)


def random_point_in_rect(center: Position2D, size: Position2D, rng: random.Random) -> Position2D:
    """Uniform random point inside the axis-aligned rectangle ``center`` ± ``size``/2."""
    min_x = center[0] - size[0] * 0.5
    min_z = center[1] - size[1] * 0.5
    return (min_x + rng.random() * size[0], min_z + rng.random() * size[1])


def is_position_in_rect(position: Position2D, center: Position2D, size: Position2D) -> bool:
    """
    Check if position lies within the axis-aligned rectangle (edges inclusive).

    Examples:
        >>> is_position_in_rect((5, 5), (0, 0), (10, 10))
        True
        >>> is_position_in_rect((5.1, 0), (0, 0), (10, 10))
        False
    """
    half_x = size[0] * 0.5
    half_z = size[1] * 0.5
    return (center[0] - half_x <= position[0] <= center[0] + half_x and
            center[1] - half_z <= position[1] <= center[1] + half_z)


def is_too_close(position: Position2D, existing: Sequence[Position2D], min_distance: float) -> bool:
    """
    True if any of ``existing`` lies strictly closer than ``min_distance``.
    """
    if not existing or min_distance <= 0:
        return False
    pts = np.asarray(existing, dtype=float)
    dx = pts[:, 0] - position[0]
    dz = pts[:, 1] - position[1]
    return bool(np.any(dx * dx + dz * dz < min_distance * min_distance))


def calculate_slope_from_normal(normal: Tuple[float, float, float], degrees: bool = True) -> float:
    """
    Calculate terrain slope angle from surface normal vector.

    The normal vector is assumed to have Y as the up axis.

    Examples:
        >>> calculate_slope_from_normal((0, 1, 0))
        0.0
        >>> round(calculate_slope_from_normal((0.7071, 0.7071, 0)))
        45
        >>> calculate_slope_from_normal((1, 0, 0))
        90.0

    Notes:
        - The normal is normalized first; the Y component is clamped to
          [-1, 1] to avoid math domain errors
    """
    length = math.sqrt(sum(float(c) * float(c) for c in normal))
    if length < 1e-9:
        return 0.0
    y_component = max(-1.0, min(1.0, float(normal[1]) / length))
    angle_rad = math.acos(y_component)
    return math.degrees(angle_rad) if degrees else angle_rad
