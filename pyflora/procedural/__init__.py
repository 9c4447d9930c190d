"""
Procedural vegetation scatter for pyflora.

The pieces are small and swappable: a noise field, candidate point
strategies, a species selector and a placement pipeline, wired together by
``ScatterEngine`` and kept alive by a target-driven regeneration scheduler.
"""

from .settings import (
    GenerationSettings,
    GenerationMode,
    DensityPreset,
    DensityCurve,
    SpeciesDefinition,
    NoiseSettings,
    DensitySettings,
    GridSettings,
    PoissonSettings,
    UniformSettings,
    TerrainSettings,
    RegenerationSettings,
    ClusterSettings,
)
from .context import GenerationContext
from .noise_field import NoiseField
from .point_generators import CandidatePointGenerator, grid_points, poisson_disc_points, random_points
from .species_selector import SpeciesSelector, triangular_falloff
from .host import SpawnHost, InMemoryWorld, SpawnedObject, MapDensityTable
from .population import PopulationTracker, PlacedIndividual, IndividualHandle, HandleRegistry, PassType
from .placement import PlacementEngine, PlacementResult, PlacementStats
from .jobs import StepResult, GenerationJob, ForcedRegenerationJob
from .regeneration import RegenerationCycle, RegenerationScheduler
from .engine import ScatterEngine
from .validation import (
    ScatterGenerationError,
    ScatterConfigurationError,
    UnknownSpeciesError,
    SettingsValidator,
    ValidationResult,
)

__all__ = [
    "GenerationSettings",
    "GenerationMode",
    "DensityPreset",
    "DensityCurve",
    "SpeciesDefinition",
    "NoiseSettings",
    "DensitySettings",
    "GridSettings",
    "PoissonSettings",
    "UniformSettings",
    "TerrainSettings",
    "RegenerationSettings",
    "ClusterSettings",
    "GenerationContext",
    "NoiseField",
    "CandidatePointGenerator",
    "grid_points",
    "poisson_disc_points",
    "random_points",
    "SpeciesSelector",
    "triangular_falloff",
    "SpawnHost",
    "InMemoryWorld",
    "SpawnedObject",
    "MapDensityTable",
    "PopulationTracker",
    "PlacedIndividual",
    "IndividualHandle",
    "HandleRegistry",
    "PassType",
    "PlacementEngine",
    "PlacementResult",
    "PlacementStats",
    "StepResult",
    "GenerationJob",
    "ForcedRegenerationJob",
    "RegenerationCycle",
    "RegenerationScheduler",
    "ScatterEngine",
    "ScatterGenerationError",
    "ScatterConfigurationError",
    "UnknownSpeciesError",
    "SettingsValidator",
    "ValidationResult",
]
