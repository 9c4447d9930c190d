from __future__ import annotations

import random
from typing import List, Optional, Sequence

from .settings import SpeciesDefinition

# Minimum weight of any eligible species
WEIGHT_FLOOR = 0.1


def triangular_falloff(noise_value: float, window_min: float, window_max: float) -> float:
    """
    1 at the window midpoint, 0 at either edge.

    A zero-width window returns 1 so point windows stay selectable.
    """
    width = window_max - window_min
    if width <= 0:
        return 1.0
    normalized = (noise_value - window_min) / width
    return max(0.0, 1.0 - abs(normalized - 0.5) * 2.0)


class SpeciesSelector:
    """Weighted pick among the species whose constraints accept a candidate."""

    def __init__(self, species: Sequence[SpeciesDefinition]):
        self.species = list(species)

    def eligible(self, noise_value: float, height: float, slope_degrees: float,
                 is_regeneration: bool = False,
                 restrict_to: Optional[SpeciesDefinition] = None) -> List[SpeciesDefinition]:
        pool = [restrict_to] if restrict_to is not None else self.species
        survivors = []
        for species in pool:
            if is_regeneration and not species.allow_regeneration:
                continue
            if not species.accepts_height(height):
                continue
            if not species.accepts_slope(slope_degrees):
                continue
            if not species.accepts_noise(noise_value):
                continue
            survivors.append(species)
        return survivors

    def weight(self, species: SpeciesDefinition, noise_value: float, is_regeneration: bool) -> float:
        w = species.spawn_probability
        if is_regeneration:
            w *= species.regeneration_probability_multiplier
        w *= triangular_falloff(noise_value, species.preferred_noise_min, species.preferred_noise_max)
        return max(WEIGHT_FLOOR, w)

    def select(self, rng: random.Random, noise_value: float, height: float, slope_degrees: float,
               is_regeneration: bool = False,
               restrict_to: Optional[SpeciesDefinition] = None) -> Optional[SpeciesDefinition]:
        survivors = self.eligible(noise_value, height, slope_degrees, is_regeneration, restrict_to)
        if not survivors:
            return None
        if len(survivors) == 1:
            return survivors[0]

        weights = [self.weight(s, noise_value, is_regeneration) for s in survivors]
        total = sum(weights)
        pick = rng.random() * total
        running = 0.0
        for species, w in zip(survivors, weights):
            running += w
            if pick <= running:
                return species
        return survivors[-1]
