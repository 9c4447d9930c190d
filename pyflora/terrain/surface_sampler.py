# -*- coding: utf-8 -*-
"""
Ground probing for scatter placement.

A surface sampler answers one question for the placement engine: "if I drop
a probe at (x, z), where does it hit the ground?". The game's collision
service is the real implementation; the samplers here cover tests, tools and
offline generation from a height function or a heightmap image.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

import numpy as np
from PIL import Image
from scipy.ndimage import map_coordinates

from ..misc.math_utils import calculate_slope_from_normal
from ..misc.logger import create_logger

DEFAULT_GROUND_LAYER = "ground"

HeightFunction = Callable[[float, float], float]
LayerFunction = Callable[[float, float], str]


@dataclass(frozen=True)
class SurfaceSample:
    """Result of a successful ground probe."""
    position: Tuple[float, float, float]
    normal: Tuple[float, float, float]
    slope_degrees: float
    layer: str = DEFAULT_GROUND_LAYER

    @property
    def height(self) -> float:
        return self.position[1]


class SurfaceSampler(ABC):
    """
    Downward probe restricted to a set of ground layers.

    The probe starts at ``probe_height`` and travels ``probe_distance``
    downwards; surfaces outside that segment, or whose layer is not in
    ``ground_layers``, are misses.
    """

    def __init__(self,
                 probe_height: float = 100.0,
                 probe_distance: float = 200.0,
                 ground_layers: Optional[Iterable[str]] = None):
        self.probe_height = float(probe_height)
        self.probe_distance = float(probe_distance)
        self.ground_layers = frozenset(ground_layers) if ground_layers is not None else frozenset({DEFAULT_GROUND_LAYER})

    def configure(self, probe_height: float, probe_distance: float, ground_layers: Iterable[str]) -> None:
        """Apply the probe parameters from a TerrainSettings block."""
        self.probe_height = float(probe_height)
        self.probe_distance = float(probe_distance)
        self.ground_layers = frozenset(ground_layers)

    @abstractmethod
    def surface_at(self, x: float, z: float) -> Optional[Tuple[float, Tuple[float, float, float], str]]:
        """Return (height, normal, layer) of the topmost surface, or None."""

    def sample(self, x: float, z: float) -> Optional[SurfaceSample]:
        hit = self.surface_at(x, z)
        if hit is None:
            return None
        height, normal, layer = hit
        if layer not in self.ground_layers:
            return None
        if height > self.probe_height or height < self.probe_height - self.probe_distance:
            return None
        return SurfaceSample(
            position=(x, float(height), z),
            normal=normal,
            slope_degrees=calculate_slope_from_normal(normal),
            layer=layer,
        )


class FlatSurfaceSampler(SurfaceSampler):
    """Infinite horizontal plane at ``height``."""

    def __init__(self, height: float = 0.0, layer: str = DEFAULT_GROUND_LAYER, **kwargs):
        super().__init__(**kwargs)
        self.height = float(height)
        self.layer = layer

    def surface_at(self, x, z):
        return self.height, (0.0, 1.0, 0.0), self.layer


class HeightFunctionSurfaceSampler(SurfaceSampler):
    """
    Ground defined by a height function ``f(x, z) -> y``.

    Normals come from forward differences over ``delta`` meters. An optional
    ``layer_fn(x, z)`` classifies the surface; ``bounds`` (min_x, min_z,
    max_x, max_z) limits where ground exists at all.
    """

    def __init__(self,
                 height_fn: HeightFunction,
                 layer_fn: Optional[LayerFunction] = None,
                 bounds: Optional[Tuple[float, float, float, float]] = None,
                 delta: float = 0.5,
                 **kwargs):
        super().__init__(**kwargs)
        self.height_fn = height_fn
        self.layer_fn = layer_fn
        self.bounds = bounds
        self.delta = delta

    def _normal(self, x: float, z: float, h0: float) -> Tuple[float, float, float]:
        d = self.delta
        hx = self.height_fn(x + d, z)
        hz = self.height_fn(x, z + d)
        vx = np.array([d, hx - h0, 0.0])
        vz = np.array([0.0, hz - h0, d])
        normal = np.cross(vz, vx)
        norm_mag = np.linalg.norm(normal)
        if norm_mag <= 0:
            return (0.0, 1.0, 0.0)
        normal = normal / norm_mag
        return (float(normal[0]), float(normal[1]), float(normal[2]))

    def surface_at(self, x, z):
        if self.bounds is not None:
            min_x, min_z, max_x, max_z = self.bounds
            if not (min_x <= x <= max_x and min_z <= z <= max_z):
                return None
        h0 = float(self.height_fn(x, z))
        layer = self.layer_fn(x, z) if self.layer_fn else DEFAULT_GROUND_LAYER
        return h0, self._normal(x, z, h0), layer


class HeightmapSurfaceSampler(HeightFunctionSurfaceSampler):
    """
    Ground from a greyscale heightmap image covering a rectangle of the world.

    Pixel values 0..255 map linearly onto ``[min_height, max_height]``;
    heights between pixels are bilinear. Row 0 of the image is the far (+Z)
    edge unless ``flip_vertical`` is False.
    """

    def __init__(self,
                 heightmap: np.ndarray,
                 origin: Tuple[float, float],
                 size: Tuple[float, float],
                 min_height: float = 0.0,
                 max_height: float = 100.0,
                 flip_vertical: bool = True,
                 **kwargs):
        data = np.asarray(heightmap, dtype=np.float32)
        if data.ndim != 2 or data.shape[0] < 2 or data.shape[1] < 2:
            raise ValueError("heightmap must be a 2D array of at least 2x2 samples")
        self.data = np.flipud(data) if flip_vertical else data
        self.origin = (float(origin[0]), float(origin[1]))
        self.size = (float(size[0]), float(size[1]))
        self.min_height = float(min_height)
        self.max_height = float(max_height)
        self.rows, self.cols = self.data.shape
        self._value_scale = 255.0 if float(self.data.max()) > 1.0 else 1.0
        bounds = (self.origin[0], self.origin[1],
                  self.origin[0] + self.size[0], self.origin[1] + self.size[1])
        delta = kwargs.pop("delta", min(self.size[0] / (self.cols - 1), self.size[1] / (self.rows - 1)))
        super().__init__(height_fn=self._height, bounds=bounds, delta=delta, **kwargs)
        self.logger = create_logger(verbose=False, name="Heightmap")
        self.logger.info(f"Heightmap {self.cols}x{self.rows} over {self.size[0]:.0f}x{self.size[1]:.0f}m")

    @classmethod
    def from_image(cls, path: str, origin: Tuple[float, float], size: Tuple[float, float], **kwargs) -> "HeightmapSurfaceSampler":
        """Load a heightmap from an image file (converted to 8-bit greyscale)."""
        try:
            with Image.open(path) as image:
                data = np.array(image.convert("L"), dtype=np.float32) / 255.0
        except FileNotFoundError as e:
            raise FileNotFoundError(f"Heightmap image not found: '{path}'") from e
        return cls(data, origin, size, **kwargs)

    def _height(self, x: float, z: float) -> float:
        u = (x - self.origin[0]) / self.size[0]
        v = (z - self.origin[1]) / self.size[1]
        px = np.clip(u * (self.cols - 1), 0.0, float(self.cols - 1))
        py = np.clip(v * (self.rows - 1), 0.0, float(self.rows - 1))
        value = map_coordinates(self.data, [[py], [px]], order=1, mode='nearest')[0]
        return self.min_height + (float(value) / self._value_scale) * (self.max_height - self.min_height)


def slope_plane(angle_degrees: float, base_height: float = 0.0) -> HeightFunction:
    """Height function of a plane tilted ``angle_degrees`` along +X."""
    gradient = math.tan(math.radians(angle_degrees))
    return lambda x, z: base_height + gradient * x
