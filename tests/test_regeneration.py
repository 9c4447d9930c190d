from __future__ import annotations

import random

from pyflora.procedural import GenerationMode, InMemoryWorld, SpeciesDefinition, StepResult


def _regrowing(make_settings, species, **overrides):
    params = {"mode": GenerationMode.UNIFORM, "area_size": (10.0, 10.0)}
    params.update(overrides)
    settings = make_settings(species, **params)
    settings.uniform.points_per_100_square_meters = 10
    settings.regeneration.density_multiplier = 1.0
    settings.regeneration.min_distance = 0.1
    settings.regeneration.attempts_per_cycle = 50
    return settings


def test_cycle_refills_destroyed_plants(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=10)
    engine = make_engine(_regrowing(make_settings, [grass]))
    assert engine.generate_all() == 10

    engine.host.destroy_random(5, random.Random(3))
    assert engine.get_plant_count(grass) == 5

    started, generated = engine.scheduler.run_cycle_blocking()
    assert started
    count = engine.get_plant_count(grass)
    assert 8 <= count <= 10 + grass.cluster_max - 1
    assert generated == count - 5
    assert engine.get_regeneration_count() == generated


def test_clustered_regeneration_overshoot_is_bounded(make_settings, make_engine) -> None:
    clover = SpeciesDefinition("clover", regeneration_target_count=10,
                               allow_clustering=True, cluster_min=3, cluster_max=3)
    engine = make_engine(_regrowing(make_settings, [clover], area_size=(30.0, 30.0)))

    engine.scheduler.run_cycle_blocking()
    count = engine.get_plant_count(clover)
    assert 10 <= count <= 10 + clover.cluster_max - 1


def test_cycle_without_deficit_finishes_immediately(make_settings, make_engine) -> None:
    engine = make_engine(_regrowing(make_settings, [SpeciesDefinition("grass")]))
    cycle = engine._new_cycle()
    assert cycle.run_step(100) == StepResult.DONE
    assert cycle.generated == 0
    assert cycle.attempts == 0


def test_non_regenerating_species_is_left_alone(make_settings, make_engine) -> None:
    oak = SpeciesDefinition("oak", regeneration_target_count=5, allow_regeneration=False)
    engine = make_engine(_regrowing(make_settings, [oak]))
    engine.scheduler.run_cycle_blocking()
    assert engine.get_plant_count(oak) == 0


def test_interval_starts_cycles_and_budget_limits_each_frame(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=10)
    settings = _regrowing(make_settings, [grass], max_plants_per_frame=2)
    settings.regeneration.check_interval = 1.0
    engine = make_engine(settings)

    assert engine.start_regeneration()
    engine.update(0.5)
    assert engine.get_plant_count() == 0
    assert not engine.is_regenerating()

    engine.update(0.6)
    assert engine.get_plant_count() == 2
    assert engine.is_regenerating()

    for _ in range(20):
        if not engine.is_regenerating():
            break
        engine.update(0.016)
    assert not engine.is_regenerating()
    assert engine.get_plant_count() == 10


def test_reentrant_start_is_ignored(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=10)
    engine = make_engine(_regrowing(make_settings, [grass], max_plants_per_frame=1))

    assert engine.regenerate_now()
    first = engine.scheduler.cycle
    assert not engine.regenerate_now()
    assert engine.scheduler.cycle is first


def test_stop_is_observed_at_the_next_step(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=10)
    engine = make_engine(_regrowing(make_settings, [grass], max_plants_per_frame=1))
    engine.start_regeneration()
    engine.regenerate_now()
    engine.update(0.0)
    assert engine.get_plant_count() == 1

    engine.stop_regeneration()
    engine.update(0.0)
    assert not engine.is_regenerating()
    for _ in range(5):
        engine.update(5.0)
    assert engine.get_plant_count() == 1


def test_fresh_generation_cancels_running_cycle(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=50)
    engine = make_engine(_regrowing(make_settings, [grass], max_plants_per_frame=1))
    engine.regenerate_now()
    cycle = engine.scheduler.cycle

    engine.generate_all()
    assert cycle.cancelled
    engine.update(0.0)
    assert not engine.is_regenerating()
    assert engine.get_plant_count() == 10


def test_disabled_regeneration(make_settings, make_engine) -> None:
    engine = make_engine(_regrowing(make_settings, [SpeciesDefinition("grass")]))
    engine.set_regeneration_enabled(False)
    assert not engine.start_regeneration()
    assert not engine.regenerate_now()
    assert engine.force_regenerate(10) == 0


def test_force_regenerate_places_without_targets(make_settings, make_engine) -> None:
    engine = make_engine(_regrowing(make_settings, [SpeciesDefinition("grass")]))
    generated = engine.force_regenerate(15)
    assert generated > 0
    assert engine.get_plant_count() == generated
    assert all(ind.is_regenerated for ind in engine.tracker.individuals())


def test_force_regenerate_can_be_spread_over_frames(make_settings, make_engine) -> None:
    engine = make_engine(_regrowing(make_settings, [SpeciesDefinition("grass")], max_plants_per_frame=5))
    assert engine.force_regenerate(12, blocking=False) == 0
    assert engine.is_regenerating()
    for _ in range(3):
        engine.update(0.0)
    assert not engine.is_regenerating()
    assert engine.get_plant_count() > 0


def test_fresh_generation_leaves_scheduler_idle(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=50)
    engine = make_engine(_regrowing(make_settings, [grass], max_plants_per_frame=1))
    engine.start_regeneration()
    engine.regenerate_now()
    engine.update(0.0)

    engine.generate_all()
    assert not engine.is_regenerating()
    engine.host.destroy_random(5, random.Random(3))
    assert engine.regenerate_now()
    assert engine.is_regenerating()


class FailingWorld(InMemoryWorld):
    def __init__(self):
        super().__init__()
        self.failing = False

    def is_alive(self, obj) -> bool:
        if self.failing:
            raise RuntimeError("host query failed")
        return super().is_alive(obj)


def test_host_errors_end_the_cycle_without_escaping(make_settings, make_engine) -> None:
    grass = SpeciesDefinition("grass", regeneration_target_count=20)
    settings = _regrowing(make_settings, [grass])
    settings.regeneration.check_interval = 1.0
    world = FailingWorld()
    engine = make_engine(settings, host=world)
    engine.generate_all()
    engine.start_regeneration()

    world.failing = True
    engine.update(5.0)
    assert not engine.is_regenerating()
    assert engine.scheduler.cycles_completed == 0

    world.failing = False
    started, generated = engine.scheduler.run_cycle_blocking()
    assert started
    assert generated > 0
