from __future__ import annotations

import random

import pytest

from pyflora.procedural import SpeciesDefinition, SpeciesSelector, triangular_falloff
from pyflora.procedural.species_selector import WEIGHT_FLOOR


def _partitioned_pair():
    low = SpeciesDefinition("moss", spawn_probability=0.8, preferred_noise_min=0.0, preferred_noise_max=0.45)
    high = SpeciesDefinition("fern", spawn_probability=0.8, preferred_noise_min=0.55, preferred_noise_max=1.0)
    return low, high


def test_disjoint_noise_windows_partition_selection() -> None:
    low, high = _partitioned_pair()
    selector = SpeciesSelector([low, high])
    rng = random.Random(1)

    for i in range(101):
        noise = i / 100.0
        chosen = selector.select(rng, noise, height=0.0, slope_degrees=0.0)
        if noise <= 0.45:
            assert chosen is low
        elif noise >= 0.55:
            assert chosen is high
        else:
            assert chosen is None


def test_height_and_slope_filter_species() -> None:
    valley = SpeciesDefinition("reed", height_range=(-10.0, 5.0), max_ground_angle=10.0)
    selector = SpeciesSelector([valley])
    rng = random.Random(0)

    assert selector.select(rng, 0.5, height=0.0, slope_degrees=5.0) is valley
    assert selector.select(rng, 0.5, height=6.0, slope_degrees=5.0) is None
    assert selector.select(rng, 0.5, height=0.0, slope_degrees=15.0) is None


def test_regeneration_skips_non_regenerating_species() -> None:
    oak = SpeciesDefinition("oak", allow_regeneration=False)
    selector = SpeciesSelector([oak])
    rng = random.Random(0)

    assert selector.select(rng, 0.5, 0.0, 0.0, is_regeneration=False) is oak
    assert selector.select(rng, 0.5, 0.0, 0.0, is_regeneration=True) is None


def test_restrict_to_limits_the_pool() -> None:
    low, high = _partitioned_pair()
    selector = SpeciesSelector([low, high])
    assert selector.select(random.Random(0), 0.2, 0.0, 0.0, restrict_to=high) is None
    assert selector.select(random.Random(0), 0.8, 0.0, 0.0, restrict_to=high) is high


def test_weighted_draw_follows_spawn_probability() -> None:
    common = SpeciesDefinition("grass", spawn_probability=0.9)
    rare = SpeciesDefinition("orchid", spawn_probability=0.1)
    selector = SpeciesSelector([common, rare])
    rng = random.Random(5)

    picks = [selector.select(rng, 0.5, 0.0, 0.0) for _ in range(4000)]
    share = sum(1 for p in picks if p is common) / len(picks)
    assert share == pytest.approx(0.9, abs=0.03)


def test_falloff_and_weight_floor() -> None:
    assert triangular_falloff(0.5, 0.0, 1.0) == pytest.approx(1.0)
    assert triangular_falloff(0.0, 0.0, 1.0) == pytest.approx(0.0)
    assert triangular_falloff(0.75, 0.5, 1.0) == pytest.approx(1.0)
    assert triangular_falloff(0.3, 0.3, 0.3) == 1.0

    edge = SpeciesDefinition("thistle", spawn_probability=1.0)
    selector = SpeciesSelector([edge])
    assert selector.weight(edge, 0.0, False) == WEIGHT_FLOOR

    boosted = SpeciesDefinition("clover", spawn_probability=0.4, regeneration_probability_multiplier=2.0)
    assert selector.weight(boosted, 0.5, True) == pytest.approx(0.8)
