"""
Example: a simulated game loop with harvesting and regrowth.

Loads settings from JSON, generates the initial population, then runs a
fixed-timestep loop where the "player" harvests plants every few seconds
and the regeneration scheduler grows them back toward their targets.
"""
import os
import random
import sys

# Add pyflora to path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pyflora import ScatterEngine, GenerationSettings, InMemoryWorld, FlatSurfaceSampler

HERE = os.path.dirname(os.path.abspath(__file__))
FRAME_TIME = 1.0 / 30.0


def main():
    settings = GenerationSettings.from_json(os.path.join(HERE, "forest_settings.json"))
    world = InMemoryWorld()
    engine = ScatterEngine(settings, FlatSurfaceSampler(height=0.0), host=world, verbose=True)

    engine.generate_all()
    engine.start_regeneration()
    print(f"Initial population: {engine.plant_counts()}")

    harvester = random.Random(7)
    elapsed = 0.0
    next_harvest = 3.0
    for frame in range(30 * 20):
        elapsed += FRAME_TIME
        if elapsed >= next_harvest:
            taken = world.destroy_random(15, harvester, species_name="berry_bush")
            print(f"[{elapsed:5.1f}s] harvested {len(taken)} berry bushes -> {engine.plant_counts()}")
            next_harvest += 5.0

        engine.update(FRAME_TIME)

    engine.stop_regeneration()
    print(f"Final population: {engine.plant_counts()}")
    print(f"Regenerated plants: {engine.get_regeneration_count()}")


if __name__ == "__main__":
    main()
