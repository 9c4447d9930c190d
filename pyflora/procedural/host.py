"""
Host-side collaborators of the scatter engine.

The engine never owns spawned objects. It asks a ``SpawnHost`` to create
them, later asks whether they are still alive, and only destroys them on an
explicit reset. ``InMemoryWorld`` is a complete host for tests, offline
tools and headless simulation.
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .settings import GenerationSettings, SpeciesDefinition
from ..misc.math_utils import Position3D
from ..terrain.orientation import EulerAngles

DensityMultiplierProvider = Callable[[GenerationSettings], float]


def default_density_multiplier(settings: GenerationSettings) -> float:
    return 1.0


class MapDensityTable:
    """
    Density multipliers keyed by settings name.

    Callable, so an instance can be passed directly as a
    ``DensityMultiplierProvider``; unknown settings get ``default``.
    """

    def __init__(self, multipliers: Optional[Dict[str, float]] = None, default: float = 1.0):
        self.multipliers: Dict[str, float] = dict(multipliers or {})
        self.default = default

    def set(self, settings_name: str, multiplier: float) -> None:
        self.multipliers[settings_name] = float(multiplier)

    def __call__(self, settings: GenerationSettings) -> float:
        return self.multipliers.get(settings.name, self.default)


class SpawnHost(ABC):
    """Spawn/destroy primitives of the game world."""

    @abstractmethod
    def spawn(self, species: SpeciesDefinition, position: Position3D, rotation: EulerAngles,
              scale: float, parent: Any = None) -> Any:
        """Create an instance of ``species.prefab`` and return an opaque handle."""

    @abstractmethod
    def is_alive(self, handle: Any) -> bool:
        """Whether the object behind ``handle`` still exists."""

    @abstractmethod
    def destroy(self, handle: Any) -> None:
        """Remove the object behind ``handle``; destroying twice is a no-op."""


@dataclass(eq=False)
class SpawnedObject:
    """An object living in an InMemoryWorld."""
    object_id: int
    prefab: Any
    species_name: str
    position: Position3D
    rotation: EulerAngles
    scale: float
    parent: Any = None
    alive: bool = True


class InMemoryWorld(SpawnHost):
    """Dictionary-backed world; handles are the SpawnedObject records."""

    def __init__(self):
        self.objects: Dict[int, SpawnedObject] = {}
        self._next_id = 1

    def spawn(self, species, position, rotation, scale, parent=None) -> SpawnedObject:
        obj = SpawnedObject(
            object_id=self._next_id,
            prefab=species.prefab,
            species_name=species.name,
            position=position,
            rotation=rotation,
            scale=scale,
            parent=parent,
        )
        self._next_id += 1
        self.objects[obj.object_id] = obj
        return obj

    def is_alive(self, handle) -> bool:
        return handle is not None and handle.alive and handle.object_id in self.objects

    def destroy(self, handle) -> None:
        if handle is None:
            return
        handle.alive = False
        self.objects.pop(handle.object_id, None)

    def alive_objects(self, species_name: Optional[str] = None) -> List[SpawnedObject]:
        return [o for o in self.objects.values()
                if species_name is None or o.species_name == species_name]

    def destroy_random(self, count: int, rng: random.Random,
                       species_name: Optional[str] = None) -> List[SpawnedObject]:
        """Destroy up to ``count`` random objects, e.g. to simulate harvesting."""
        pool = self.alive_objects(species_name)
        victims = rng.sample(pool, min(count, len(pool)))
        for obj in victims:
            self.destroy(obj)
        return victims

    def __len__(self) -> int:
        return len(self.objects)
