from __future__ import annotations

import pytest

from pyflora.procedural import (
    DensitySettings,
    GenerationMode,
    GenerationSettings,
    InMemoryWorld,
    NoiseSettings,
    ScatterEngine,
    SpeciesDefinition,
)
from pyflora.terrain.surface_sampler import FlatSurfaceSampler


@pytest.fixture(autouse=True)
def _no_seed_override(monkeypatch):
    monkeypatch.delenv("PYFLORA_SEED", raising=False)


@pytest.fixture
def make_settings():
    """Fixed-seed settings that accept every candidate unless overridden."""
    def _make(species=None, **overrides) -> GenerationSettings:
        settings = GenerationSettings(
            name="meadow",
            species=species if species is not None else [SpeciesDefinition("grass")],
            area_center=(0.0, 0.0),
            area_size=(20.0, 20.0),
            mode=GenerationMode.GRID,
            noise=NoiseSettings(octaves=1),
            density=DensitySettings(base_density=1.0, noise_influence=0.0),
            seed=7,
            use_random_seed=False,
        )
        for key, value in overrides.items():
            setattr(settings, key, value)
        return settings
    return _make


@pytest.fixture
def make_engine():
    def _make(settings, sampler=None, host=None, **kwargs) -> ScatterEngine:
        return ScatterEngine(
            settings,
            sampler if sampler is not None else FlatSurfaceSampler(height=0.0),
            host=host if host is not None else InMemoryWorld(),
            verbose=False,
            **kwargs,
        )
    return _make
