from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Tuple

from .settings import NoiseSettings

# Range of the per-run random noise offset on each axis
RUN_OFFSET_RANGE = 1000.0


@dataclass
class GenerationContext:
    """
    Per-run randomness, passed explicitly to every generation call.

    ``rng`` is single-owner: one context belongs to one engine and must not
    be shared between concurrent runs.
    """
    seed: int
    rng: random.Random
    initial_offset: Tuple[float, float]
    regeneration_offset: Tuple[float, float]

    @classmethod
    def create(cls, seed: int, noise: NoiseSettings) -> "GenerationContext":
        """Seed a fresh RNG and draw the run's noise offset from it."""
        rng = random.Random(seed)
        run_x = rng.random() * RUN_OFFSET_RANGE
        run_z = rng.random() * RUN_OFFSET_RANGE
        return cls(
            seed=seed,
            rng=rng,
            initial_offset=(run_x + noise.offset[0], run_z + noise.offset[1]),
            regeneration_offset=(float(noise.regeneration_offset[0]), float(noise.regeneration_offset[1])),
        )

    def offset_for(self, is_regeneration: bool) -> Tuple[float, float]:
        """Total domain offset for the requested pass."""
        if not is_regeneration:
            return self.initial_offset
        return (self.initial_offset[0] + self.regeneration_offset[0],
                self.initial_offset[1] + self.regeneration_offset[1])

    def with_regeneration_offset(self, offset: Tuple[float, float]) -> "GenerationContext":
        """Copy sharing the same RNG but sampling regeneration noise elsewhere."""
        return replace(self, regeneration_offset=(float(offset[0]), float(offset[1])))
