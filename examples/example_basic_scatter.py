"""
Example: scatter a meadow over rolling hills and save a debug map.

Builds settings in code, generates the initial pass over an analytic height
field and, when matplotlib is installed, writes a top-down scatter map.
"""
import math
import os
import sys

# Add pyflora to path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pyflora import (
    ScatterEngine,
    GenerationSettings,
    GenerationMode,
    SpeciesDefinition,
    HeightFunctionSurfaceSampler,
    save_scatter_map,
)
from pyflora.misc.logging_config import setup_logger


def rolling_hills(x, z):
    return 8.0 * math.sin(x * 0.04) * math.cos(z * 0.05) + 0.02 * x


def main():
    setup_logger(log_file="meadow_scatter.log")

    settings = GenerationSettings(
        name="meadow",
        species=[
            SpeciesDefinition("grass", spawn_probability=0.9, preferred_noise_min=0.0, preferred_noise_max=0.7),
            SpeciesDefinition("fern", spawn_probability=0.4, max_ground_angle=25.0,
                              preferred_noise_min=0.4, preferred_noise_max=1.0),
            SpeciesDefinition("clover", spawn_probability=0.2, allow_clustering=True,
                              cluster_min=2, cluster_max=5, height_range=(-10.0, 4.0)),
        ],
        area_center=(0.0, 0.0),
        area_size=(120.0, 120.0),
        mode=GenerationMode.POISSON,
        seed=2024,
        use_random_seed=False,
    )

    engine = ScatterEngine(settings, HeightFunctionSurfaceSampler(rolling_hills), verbose=True)
    total = engine.generate_all()

    print("=" * 60)
    print(f"Placed {total} plants")
    for name, count in engine.plant_counts().items():
        print(f"  {name:<8} {count}")
    print(f"Funnel: {engine.stats.as_dict()}")
    print("=" * 60)

    if save_scatter_map is not None:
        path = save_scatter_map(engine, "meadow_scatter.png")
        print(f"✓ Scatter map saved: {path}")
    else:
        print("matplotlib not installed; skipping scatter map (pip install pyflora[viz])")


if __name__ == "__main__":
    main()
