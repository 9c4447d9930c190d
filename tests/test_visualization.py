from __future__ import annotations

import pytest

pytest.importorskip("matplotlib")

import matplotlib
matplotlib.use("Agg")

from pyflora.procedural import SpeciesDefinition
from pyflora.visualization import ScatterMapVisualizer, save_scatter_map


def test_scatter_map_is_written(make_settings, make_engine, tmp_path) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=200)
    settings = make_settings([grass])
    settings.regeneration.density_multiplier = 1.0
    engine = make_engine(settings)
    engine.generate_all()
    engine.force_regenerate(5)

    path = save_scatter_map(engine, str(tmp_path / "scatter.png"), resolution=16, verbose=False)
    assert (tmp_path / "scatter.png").stat().st_size > 0
    assert path.endswith("scatter.png")


def test_scatter_map_bytes_for_regeneration_pass(make_settings, make_engine) -> None:
    engine = make_engine(make_settings())
    engine.generate_all()
    data = ScatterMapVisualizer(engine, resolution=16, verbose=False).get_scatter_overview_bytes(
        is_regeneration=True)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"


def test_map_without_run_skips_noise_layer(make_settings, make_engine) -> None:
    engine = make_engine(make_settings())
    data = ScatterMapVisualizer(engine, verbose=False).get_scatter_overview_bytes()
    assert len(data) > 0
