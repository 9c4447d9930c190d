from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from .host import SpawnHost
from .settings import SpeciesDefinition
from .validation import UnknownSpeciesError
from ..misc.math_utils import Position2D, Position3D
from ..terrain.orientation import EulerAngles

T = TypeVar("T")
SpeciesRef = Union[SpeciesDefinition, str]


class PassType(Enum):
    INITIAL = "initial"
    REGENERATED = "regenerated"


@dataclass(eq=False)
class PlacedIndividual:
    """Back-reference from the generator to one spawned plant."""
    species: SpeciesDefinition
    host_handle: Any
    position: Position3D
    rotation: EulerAngles
    scale: float
    pass_type: PassType = PassType.INITIAL

    @property
    def ground_position(self) -> Position2D:
        return (self.position[0], self.position[2])

    @property
    def is_regenerated(self) -> bool:
        return self.pass_type == PassType.REGENERATED


@dataclass(frozen=True)
class IndividualHandle:
    """Index into a HandleRegistry, valid only while its generation matches."""
    index: int
    generation: int


class HandleRegistry(Generic[T]):
    """
    Arena of slots with generation counters.

    Releasing a slot bumps its generation, so handles held elsewhere go
    stale instead of pointing at whatever reuses the slot.
    """

    def __init__(self):
        self._values: List[Optional[T]] = []
        self._generations: List[int] = []
        self._free: List[int] = []
        self._count = 0

    def insert(self, value: T) -> IndividualHandle:
        if self._free:
            index = self._free.pop()
            self._values[index] = value
        else:
            index = len(self._values)
            self._values.append(value)
            self._generations.append(0)
        self._count += 1
        return IndividualHandle(index, self._generations[index])

    def get(self, handle: IndividualHandle) -> Optional[T]:
        if not (0 <= handle.index < len(self._values)):
            return None
        if self._generations[handle.index] != handle.generation:
            return None
        return self._values[handle.index]

    def remove(self, handle: IndividualHandle) -> bool:
        if self.get(handle) is None:
            return False
        self._values[handle.index] = None
        self._generations[handle.index] += 1
        self._free.append(handle.index)
        self._count -= 1
        return True

    def items(self) -> Iterator[Tuple[IndividualHandle, T]]:
        for index, value in enumerate(self._values):
            if value is not None:
                yield IndividualHandle(index, self._generations[index]), value

    def clear(self) -> None:
        for index, value in enumerate(self._values):
            if value is not None:
                self._values[index] = None
                self._generations[index] += 1
                self._free.append(index)
        self._count = 0

    def __len__(self) -> int:
        return self._count


class PopulationTracker:
    """
    Live per-species counts over individuals the host may destroy at any time.

    Destruction is never reported; every counting query first prunes entries
    whose host handle is no longer alive.
    """

    def __init__(self, host: SpawnHost, species: Sequence[SpeciesDefinition]):
        self.host = host
        self._registry: HandleRegistry[PlacedIndividual] = HandleRegistry()
        self._species: Dict[str, SpeciesDefinition] = {s.key: s for s in species}
        self._targets: Dict[str, int] = {s.key: s.regeneration_target_count for s in species}
        self._counts: Dict[str, int] = {s.key: 0 for s in species}

    def _key(self, species: SpeciesRef) -> str:
        key = species if isinstance(species, str) else species.key
        if key not in self._species:
            raise UnknownSpeciesError(f"Unknown species '{key}'")
        return key

    def species(self, species: SpeciesRef) -> SpeciesDefinition:
        return self._species[self._key(species)]

    # --- Mutation ---

    def register(self, individual: PlacedIndividual) -> IndividualHandle:
        key = self._key(individual.species)
        self._counts[key] += 1
        return self._registry.insert(individual)

    def prune(self) -> int:
        """Drop individuals the host destroyed; returns how many were dropped."""
        removed = 0
        for handle, individual in list(self._registry.items()):
            if not self.host.is_alive(individual.host_handle):
                self._registry.remove(handle)
                self._counts[individual.species.key] -= 1
                removed += 1
        return removed

    def clear(self) -> None:
        """Forget every individual without touching the host."""
        self._registry.clear()
        for key in self._counts:
            self._counts[key] = 0

    # --- Queries ---

    def get(self, handle: IndividualHandle) -> Optional[PlacedIndividual]:
        individual = self._registry.get(handle)
        if individual is not None and not self.host.is_alive(individual.host_handle):
            self._registry.remove(handle)
            self._counts[individual.species.key] -= 1
            return None
        return individual

    def count_for(self, species: SpeciesRef) -> int:
        key = self._key(species)
        self.prune()
        return self._counts[key]

    def total_count(self) -> int:
        self.prune()
        return len(self._registry)

    def individuals(self, species: Optional[SpeciesRef] = None) -> List[PlacedIndividual]:
        self.prune()
        key = self._key(species) if species is not None else None
        return [ind for _, ind in self._registry.items() if key is None or ind.species.key == key]

    def positions(self) -> List[Position2D]:
        return [ind.ground_position for ind in self.individuals()]

    # --- Targets ---

    def target_for(self, species: SpeciesRef) -> int:
        return self._targets[self._key(species)]

    def set_target(self, species: SpeciesRef, target: int) -> None:
        if target < 0:
            raise ValueError("target count cannot be negative")
        self._targets[self._key(species)] = int(target)

    def target_met(self, species: SpeciesRef) -> bool:
        target = self.target_for(species)
        return target > 0 and self.count_for(species) >= target

    def needs_regeneration(self, species: SpeciesRef) -> bool:
        definition = self.species(species)
        target = self._targets[definition.key]
        return (target > 0 and definition.allow_regeneration
                and self.count_for(definition) < target)

    def deficits(self) -> List[Tuple[SpeciesDefinition, int]]:
        """(species, missing count) for every species under its target, in config order."""
        self.prune()
        out = []
        for key, definition in self._species.items():
            target = self._targets[key]
            if target > 0 and definition.allow_regeneration and self._counts[key] < target:
                out.append((definition, target - self._counts[key]))
        return out
