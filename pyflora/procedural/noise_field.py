from __future__ import annotations

from typing import Dict, Sequence, Tuple

import numpy as np
from opensimplex import OpenSimplex

from .context import GenerationContext
from .settings import NoiseSettings
from ..misc.math_utils import clamp01


class NoiseField:
    """
    Fractal OpenSimplex density field in [0, 1].

    Sample coordinates are ``(position + pass offset) * scale``; each octave
    then multiplies them by the running frequency. Results depend only on
    the context seed, the position and the pass, never on call order.
    """

    def __init__(self, settings: NoiseSettings):
        self.settings = settings
        self._generators: Dict[int, OpenSimplex] = {}

    def _generator(self, seed: int) -> OpenSimplex:
        key = seed & 0x7FFFFFFF
        gen = self._generators.get(key)
        if gen is None:
            gen = OpenSimplex(seed=key)
            self._generators[key] = gen
        return gen

    @staticmethod
    def _unit(gen: OpenSimplex, x: float, z: float) -> float:
        return (gen.noise2(x, z) + 1.0) * 0.5

    def evaluate(self, context: GenerationContext, position: Tuple[float, float], is_regeneration: bool = False) -> float:
        s = self.settings
        ox, oz = context.offset_for(is_regeneration)
        x = (position[0] + ox) * s.scale
        z = (position[1] + oz) * s.scale
        gen = self._generator(context.seed)

        if s.octaves <= 1:
            return clamp01(self._unit(gen, x, z))

        total = 0.0
        amplitude = 1.0
        frequency = 1.0
        max_value = 0.0
        for _ in range(s.octaves):
            total += self._unit(gen, x * frequency, z * frequency) * amplitude
            max_value += amplitude
            amplitude *= s.persistence
            frequency *= s.lacunarity

        return clamp01(total / max_value) if max_value > 0 else 0.0

    def sample_grid(self, context: GenerationContext, xs: Sequence[float], zs: Sequence[float],
                    is_regeneration: bool = False) -> np.ndarray:
        """Evaluate over a grid; result has shape (len(zs), len(xs))."""
        out = np.empty((len(zs), len(xs)), dtype=np.float32)
        for j, z in enumerate(zs):
            for i, x in enumerate(xs):
                out[j, i] = self.evaluate(context, (x, z), is_regeneration)
        return out
