from __future__ import annotations

import json
import math
import os
import random
from dataclasses import dataclass, field, fields, asdict, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


class GenerationMode(Enum):
    """Candidate point strategies."""
    GRID = "grid"
    POISSON = "poisson"
    RANDOM_GRID = "random_grid"
    UNIFORM = "uniform"


class DensityPreset(Enum):
    """Quick presets; CUSTOM leaves every value as configured."""
    SPARSE = "sparse"
    MEDIUM = "medium"
    DENSE = "dense"
    VERY_DENSE = "very_dense"
    CUSTOM = "custom"


# base_density, grid_spacing, poisson_radius, points_per_100m2, min_threshold, max_threshold
DENSITY_PRESETS: Dict[DensityPreset, Tuple[float, float, float, int, float, float]] = {
    DensityPreset.SPARSE: (0.1, 5.0, 3.0, 20, 0.6, 1.0),
    DensityPreset.MEDIUM: (0.3, 3.0, 2.0, 50, 0.4, 0.9),
    DensityPreset.DENSE: (0.6, 1.5, 1.2, 100, 0.2, 0.8),
    DensityPreset.VERY_DENSE: (0.9, 1.0, 0.8, 200, 0.0, 0.6),
}


@dataclass
class DensityCurve:
    """
    Piecewise-linear response curve mapping raw noise onto density.

    Keys are (time, value) pairs; evaluation outside the key range holds the
    first/last value.
    """
    keys: List[Tuple[float, float]] = field(default_factory=lambda: [(0.0, 0.0), (1.0, 1.0)])

    def __post_init__(self):
        if not self.keys:
            self.keys = [(0.0, 0.0), (1.0, 1.0)]
        self.keys = sorted((float(t), float(v)) for t, v in self.keys)
        self._times = np.array([k[0] for k in self.keys])
        self._values = np.array([k[1] for k in self.keys])
        self._identity = (len(self.keys) >= 2 and self.keys[0][0] <= 0.0 and self.keys[-1][0] >= 1.0
                          and all(math.isclose(t, v) for t, v in self.keys))

    @classmethod
    def linear(cls) -> "DensityCurve":
        return cls()

    def evaluate(self, t: float) -> float:
        return float(np.interp(t, self._times, self._values))

    def is_identity(self) -> bool:
        """True when the curve maps every value in [0, 1] onto itself."""
        return self._identity


@dataclass(eq=False)
class SpeciesDefinition:
    """
    One spawnable plant type and its placement constraints.

    ``prefab`` is opaque to the generator and handed to the host on spawn;
    ``name`` must be unique within a settings object and keys population
    counts.
    """
    name: str
    prefab: Any = None

    spawn_probability: float = 0.5
    min_scale: float = 0.8
    max_scale: float = 1.2
    height_range: Tuple[float, float] = (-1000.0, 1000.0)
    max_ground_angle: float = 60.0

    # Noise window this species prefers
    preferred_noise_min: float = 0.0
    preferred_noise_max: float = 1.0

    allow_clustering: bool = False
    cluster_min: int = 1
    cluster_max: int = 3

    allow_regeneration: bool = True
    regeneration_probability_multiplier: float = 1.0
    regeneration_target_count: int = 0  # 0 = unconstrained

    def __post_init__(self):
        if self.prefab is None:
            self.prefab = self.name
        self.height_range = (float(self.height_range[0]), float(self.height_range[1]))

    @property
    def key(self) -> str:
        return self.name

    def accepts_height(self, height: float) -> bool:
        return self.height_range[0] <= height <= self.height_range[1]

    def accepts_slope(self, slope_degrees: float) -> bool:
        return slope_degrees <= self.max_ground_angle

    def accepts_noise(self, noise_value: float) -> bool:
        return self.preferred_noise_min <= noise_value <= self.preferred_noise_max

    def accepts_ground(self, height: float, slope_degrees: float) -> bool:
        return self.accepts_height(height) and self.accepts_slope(slope_degrees)


@dataclass
class NoiseSettings:
    scale: float = 0.1                      # smaller = larger features
    offset: Tuple[float, float] = (0.0, 0.0)
    octaves: int = 3
    persistence: float = 0.5
    lacunarity: float = 2.0
    regeneration_offset: Tuple[float, float] = (1000.0, 1000.0)


@dataclass
class DensitySettings:
    base_density: float = 0.3
    curve: DensityCurve = field(default_factory=DensityCurve)
    noise_influence: float = 1.0            # 0..2, 0 ignores noise entirely
    min_noise_threshold: float = 0.0
    max_noise_threshold: float = 1.0


@dataclass
class GridSettings:
    spacing: float = 2.0
    jitter: float = 0.5                     # fraction of spacing


@dataclass
class PoissonSettings:
    radius: float = 1.5
    sample_attempts: int = 30


@dataclass
class UniformSettings:
    points_per_100_square_meters: int = 100


@dataclass
class TerrainSettings:
    ground_layers: List[str] = field(default_factory=lambda: ["ground"])
    probe_height: float = 100.0
    probe_distance: float = 200.0
    align_to_ground_normal: bool = True


@dataclass
class RegenerationSettings:
    enabled: bool = True
    check_interval: float = 1.0             # seconds
    attempts_per_cycle: int = 20
    density_multiplier: float = 0.5
    min_distance: float = 1.0


@dataclass
class ClusterSettings:
    min_radius: float = 0.3
    max_radius: float = 1.8
    spacing_factor: float = 0.5             # of regeneration.min_distance


_SECTIONS = {
    "noise": NoiseSettings,
    "density": DensitySettings,
    "grid": GridSettings,
    "poisson": PoissonSettings,
    "uniform": UniformSettings,
    "terrain": TerrainSettings,
    "regeneration": RegenerationSettings,
    "cluster": ClusterSettings,
}


def _build_section(cls, data: Optional[Dict[str, Any]]):
    data = dict(data or {})
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    if cls is DensitySettings and "curve" in data and not isinstance(data["curve"], DensityCurve):
        data["curve"] = DensityCurve(keys=[tuple(k) for k in data["curve"]])
    for key in ("offset", "regeneration_offset"):
        if key in data:
            data[key] = tuple(data[key])
    return cls(**data)


@dataclass
class GenerationSettings:
    """
    Everything one scatter run needs, loaded once per level.

    The settings object is treated as read-only while a run is active;
    ``with_area`` returns an updated copy instead of mutating.
    """
    name: str = "default"
    species: List[SpeciesDefinition] = field(default_factory=list)

    # Generation area on the ground plane (x, z)
    area_center: Tuple[float, float] = (0.0, 0.0)
    area_size: Tuple[float, float] = (100.0, 100.0)

    mode: GenerationMode = GenerationMode.POISSON
    noise: NoiseSettings = field(default_factory=NoiseSettings)
    density: DensitySettings = field(default_factory=DensitySettings)
    grid: GridSettings = field(default_factory=GridSettings)
    poisson: PoissonSettings = field(default_factory=PoissonSettings)
    uniform: UniformSettings = field(default_factory=UniformSettings)
    terrain: TerrainSettings = field(default_factory=TerrainSettings)
    regeneration: RegenerationSettings = field(default_factory=RegenerationSettings)
    cluster: ClusterSettings = field(default_factory=ClusterSettings)

    seed: int = 12345
    use_random_seed: bool = True
    max_plants_per_frame: int = 100
    density_preset: DensityPreset = DensityPreset.CUSTOM

    def __post_init__(self):
        self.area_center = (float(self.area_center[0]), float(self.area_center[1]))
        self.area_size = (float(self.area_size[0]), float(self.area_size[1]))
        self.apply_density_preset()

    # --- Area ---

    @property
    def area_min(self) -> Tuple[float, float]:
        return (self.area_center[0] - self.area_size[0] * 0.5,
                self.area_center[1] - self.area_size[1] * 0.5)

    @property
    def area_max(self) -> Tuple[float, float]:
        return (self.area_center[0] + self.area_size[0] * 0.5,
                self.area_center[1] + self.area_size[1] * 0.5)

    @property
    def area(self) -> float:
        return self.area_size[0] * self.area_size[1]

    def with_area(self, center: Tuple[float, float], size: Tuple[float, float]) -> "GenerationSettings":
        return replace(self, area_center=tuple(center), area_size=tuple(size),
                       density_preset=DensityPreset.CUSTOM)

    # --- Presets and seeds ---

    def apply_density_preset(self) -> None:
        """Overwrite density-related values from ``density_preset`` (no-op for CUSTOM)."""
        preset = DENSITY_PRESETS.get(self.density_preset)
        if preset is None:
            return
        base, spacing, radius, points, lo, hi = preset
        self.density.base_density = base
        self.grid.spacing = spacing
        self.poisson.radius = radius
        self.uniform.points_per_100_square_meters = points
        self.density.min_noise_threshold = lo
        self.density.max_noise_threshold = hi

    def resolve_seed(self, rng: Optional[random.Random] = None) -> int:
        """
        Seed for the next run.

        PYFLORA_SEED overrides everything; otherwise a random seed in
        [1, 99999] when ``use_random_seed`` is set, else ``seed``.
        """
        forced = os.getenv("PYFLORA_SEED")
        if forced:
            try:
                return int(forced)
            except ValueError:
                pass
        if self.use_random_seed:
            return (rng or random).randint(1, 99999)
        return int(self.seed)

    # --- Species lookup ---

    def species_by_name(self, name: str) -> Optional[SpeciesDefinition]:
        for species in self.species:
            if species.name == name:
                return species
        return None

    # --- Serialization ---

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationSettings":
        """
        Build settings from a nested dict (e.g. parsed JSON).

        Species prefabs are whatever the dict holds (usually a name); enums
        accept their string values case-insensitively.
        """
        data = dict(data)
        kwargs: Dict[str, Any] = {}
        for key, section_cls in _SECTIONS.items():
            if key in data:
                kwargs[key] = _build_section(section_cls, data.pop(key))
        species_data = data.pop("species", [])
        kwargs["species"] = [s if isinstance(s, SpeciesDefinition) else SpeciesDefinition(**s)
                             for s in species_data]
        if "mode" in data:
            kwargs["mode"] = GenerationMode(str(data.pop("mode")).lower())
        if "density_preset" in data:
            kwargs["density_preset"] = DensityPreset(str(data.pop("density_preset")).lower())
        for key in ("area_center", "area_size"):
            if key in data:
                kwargs[key] = tuple(data.pop(key))
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown GenerationSettings keys: {sorted(unknown)}")
        kwargs.update(data)
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: str) -> "GenerationSettings":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "area_center": list(self.area_center),
            "area_size": list(self.area_size),
            "mode": self.mode.value,
            "seed": self.seed,
            "use_random_seed": self.use_random_seed,
            "max_plants_per_frame": self.max_plants_per_frame,
            "density_preset": self.density_preset.value,
        }
        for key in _SECTIONS:
            section = asdict(getattr(self, key))
            if key == "density":
                section["curve"] = [list(k) for k in self.density.curve.keys]
            out[key] = section
        out["species"] = []
        for species in self.species:
            entry = {f.name: getattr(species, f.name) for f in fields(SpeciesDefinition)}
            entry["height_range"] = list(species.height_range)
            out["species"].append(entry)
        return out
