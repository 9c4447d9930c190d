__version__ = "0.1.0"

# --- Engine ---
from .procedural import ScatterEngine

# --- Configuration ---
from .procedural import (
    GenerationSettings,
    GenerationMode,
    DensityPreset,
    DensityCurve,
    SpeciesDefinition,
    SettingsValidator,
    ScatterGenerationError,
    ScatterConfigurationError,
    UnknownSpeciesError,
)

# --- Host Integration ---
from .procedural import SpawnHost, InMemoryWorld, MapDensityTable, PlacementStats

# --- Terrain Helpers ---
from .terrain.surface_sampler import (
    SurfaceSampler,
    SurfaceSample,
    FlatSurfaceSampler,
    HeightFunctionSurfaceSampler,
    HeightmapSurfaceSampler,
    slope_plane,
)

from .misc.logger import create_logger
_logger = create_logger(verbose=False, name="pyflora")
_logger.info(f"pyflora {__version__} loaded.")

# --- Visualization (Optional) ---
# Debug maps need matplotlib (pip install pyflora[viz])
try:
    from .visualization import ScatterMapVisualizer, save_scatter_map
    _viz_available = True
except ImportError:
    _viz_available = False
    ScatterMapVisualizer = None
    save_scatter_map = None

if _viz_available:
    _logger.info("  -> Scatter map visualization available (matplotlib detected)")
