from __future__ import annotations

import random

import pytest

from pyflora.procedural import (
    HandleRegistry,
    InMemoryWorld,
    PlacedIndividual,
    PopulationTracker,
    SpeciesDefinition,
    UnknownSpeciesError,
)


def _plant(world: InMemoryWorld, species: SpeciesDefinition, x: float = 0.0, z: float = 0.0) -> PlacedIndividual:
    position = (x, 0.0, z)
    handle = world.spawn(species, position, (0.0, 0.0, 0.0), 1.0)
    return PlacedIndividual(species, handle, position, (0.0, 0.0, 0.0), 1.0)


def test_registry_handles_go_stale_when_slot_is_reused() -> None:
    registry = HandleRegistry()
    first = registry.insert("a")
    assert registry.get(first) == "a"

    assert registry.remove(first)
    assert registry.get(first) is None
    assert not registry.remove(first)

    second = registry.insert("b")
    assert second.index == first.index
    assert second.generation != first.generation
    assert registry.get(first) is None
    assert registry.get(second) == "b"


def test_registry_clear_invalidates_every_handle() -> None:
    registry = HandleRegistry()
    handles = [registry.insert(i) for i in range(5)]
    registry.clear()
    assert len(registry) == 0
    assert all(registry.get(h) is None for h in handles)
    assert list(registry.items()) == []


def test_counts_prune_objects_destroyed_by_the_host() -> None:
    grass = SpeciesDefinition("grass")
    world = InMemoryWorld()
    tracker = PopulationTracker(world, [grass])
    individuals = [_plant(world, grass, x=i) for i in range(6)]
    handles = [tracker.register(ind) for ind in individuals]
    assert tracker.count_for(grass) == 6

    # Destroyed outside the generator, never reported
    world.destroy(individuals[1].host_handle)
    world.destroy(individuals[4].host_handle)

    assert tracker.count_for("grass") == 4
    assert tracker.total_count() == 4
    assert tracker.get(handles[1]) is None
    assert tracker.get(handles[0]) is individuals[0]
    assert len(tracker.positions()) == 4


def test_needs_regeneration_and_deficits() -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=3)
    oak = SpeciesDefinition("oak", regeneration_target_count=3, allow_regeneration=False)
    untargeted = SpeciesDefinition("fern")
    world = InMemoryWorld()
    tracker = PopulationTracker(world, [grass, oak, untargeted])

    assert tracker.needs_regeneration(grass)
    assert not tracker.needs_regeneration(oak)
    assert not tracker.needs_regeneration(untargeted)
    assert tracker.deficits() == [(grass, 3)]

    for _ in range(3):
        tracker.register(_plant(world, grass))
    assert not tracker.needs_regeneration(grass)
    assert tracker.target_met(grass)

    world.destroy_random(2, random.Random(0), species_name="grass")
    assert tracker.deficits() == [(grass, 2)]


def test_targets_can_be_changed_by_name() -> None:
    grass = SpeciesDefinition("grass")
    tracker = PopulationTracker(InMemoryWorld(), [grass])
    tracker.set_target("grass", 12)
    assert tracker.target_for(grass) == 12

    with pytest.raises(UnknownSpeciesError):
        tracker.set_target("cactus", 4)
    with pytest.raises(ValueError):
        tracker.set_target(grass, -1)


def test_clear_forgets_without_destroying() -> None:
    grass = SpeciesDefinition("grass")
    world = InMemoryWorld()
    tracker = PopulationTracker(world, [grass])
    for i in range(3):
        tracker.register(_plant(world, grass, x=i))

    tracker.clear()
    assert tracker.total_count() == 0
    assert len(world) == 3
