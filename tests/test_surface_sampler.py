from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from pyflora.terrain.orientation import normal_to_euler_angles, up_vector, yaw_only
from pyflora.terrain.surface_sampler import (
    FlatSurfaceSampler,
    HeightFunctionSurfaceSampler,
    HeightmapSurfaceSampler,
    slope_plane,
)


def test_flat_ground_is_level() -> None:
    sample = FlatSurfaceSampler(height=12.0).sample(3.0, -4.0)
    assert sample.position == (3.0, 12.0, -4.0)
    assert sample.slope_degrees == pytest.approx(0.0)


def test_probe_misses_outside_its_segment() -> None:
    sampler = FlatSurfaceSampler(height=150.0, probe_height=100.0, probe_distance=200.0)
    assert sampler.sample(0.0, 0.0) is None

    sampler.configure(probe_height=500.0, probe_distance=1000.0, ground_layers=["ground"])
    assert sampler.sample(0.0, 0.0) is not None


def test_probe_ignores_non_ground_layers() -> None:
    water = FlatSurfaceSampler(height=0.0, layer="water")
    assert water.sample(0.0, 0.0) is None
    water.configure(100.0, 200.0, ["ground", "water"])
    assert water.sample(0.0, 0.0).layer == "water"


@pytest.mark.parametrize("angle", [0.0, 15.0, 30.0, 45.0])
def test_sloped_plane_reports_its_angle(angle: float) -> None:
    sampler = HeightFunctionSurfaceSampler(slope_plane(angle))
    sample = sampler.sample(2.0, 7.0)
    assert sample.slope_degrees == pytest.approx(angle, abs=1e-6)


def test_bounds_limit_where_ground_exists() -> None:
    sampler = HeightFunctionSurfaceSampler(lambda x, z: 0.0, bounds=(0.0, 0.0, 10.0, 10.0))
    assert sampler.sample(5.0, 5.0) is not None
    assert sampler.sample(-1.0, 5.0) is None


def test_heightmap_is_bilinear_between_pixels() -> None:
    heightmap = np.array([[0.0, 255.0], [0.0, 255.0]])
    sampler = HeightmapSurfaceSampler(heightmap, origin=(0.0, 0.0), size=(10.0, 10.0),
                                      min_height=0.0, max_height=20.0)
    assert sampler.sample(0.0, 5.0).height == pytest.approx(0.0)
    assert sampler.sample(5.0, 5.0).height == pytest.approx(10.0)
    assert sampler.sample(10.0, 5.0).height == pytest.approx(20.0)
    assert sampler.sample(11.0, 5.0) is None


def test_heightmap_loads_from_image(tmp_path) -> None:
    pixels = np.tile(np.linspace(0, 255, 16).astype(np.uint8), (16, 1))
    path = tmp_path / "ramp.png"
    Image.fromarray(pixels).save(path)

    sampler = HeightmapSurfaceSampler.from_image(str(path), origin=(0.0, 0.0), size=(100.0, 100.0),
                                                 min_height=0.0, max_height=50.0)
    assert sampler.sample(0.0, 50.0).height == pytest.approx(0.0, abs=1e-3)
    assert sampler.sample(100.0, 50.0).height == pytest.approx(50.0, abs=1e-3)
    assert sampler.sample(50.0, 50.0).slope_degrees > 0.0


def test_heightmap_missing_image_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        HeightmapSurfaceSampler.from_image(str(tmp_path / "missing.png"), (0.0, 0.0), (10.0, 10.0))


def test_aligned_orientation_points_up_along_normal() -> None:
    sample = HeightFunctionSurfaceSampler(slope_plane(30.0)).sample(0.0, 0.0)
    for yaw in (0.0, 90.0, 217.0):
        up = up_vector(normal_to_euler_angles(sample.normal, yaw))
        assert np.dot(up, sample.normal) == pytest.approx(1.0, abs=1e-6)

    assert up_vector(yaw_only(45.0)) == pytest.approx((0.0, 1.0, 0.0), abs=1e-9)
