"""
Per-candidate placement pipeline.

A candidate (x, z) goes through noise, thresholds, density, the ground
probe and species selection before it becomes a spawned plant. Rejections
are normal outcomes and only show up in ``PlacementStats``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from .context import GenerationContext
from .host import SpawnHost
from .noise_field import NoiseField
from .population import PassType, PlacedIndividual, PopulationTracker, IndividualHandle
from .settings import GenerationSettings, SpeciesDefinition
from .species_selector import SpeciesSelector
from ..misc.logger import create_logger
from ..misc.math_utils import (
    Position2D,
    generate_random_position_in_ring,
    is_position_in_rect,
    is_too_close,
    lerp,
)
from ..terrain.orientation import normal_to_euler_angles, yaw_only
from ..terrain.surface_sampler import SurfaceSample, SurfaceSampler


@dataclass
class PlacementStats:
    """Funnel counters for the current run."""
    total_attempts: int = 0
    noise_passed: int = 0
    density_passed: int = 0
    ground_passed: int = 0
    species_passed: int = 0
    placed: int = 0
    cluster_placed: int = 0
    regenerated: int = 0
    candidate_errors: int = 0

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, 0)

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class PlacementResult:
    individual: PlacedIndividual
    handle: IndividualHandle
    cluster: List[PlacedIndividual] = field(default_factory=list)

    @property
    def placed_count(self) -> int:
        return 1 + len(self.cluster)


class PlacementEngine:
    """Turns candidate positions into spawned, tracked individuals."""

    def __init__(self,
                 settings: GenerationSettings,
                 noise_field: NoiseField,
                 sampler: SurfaceSampler,
                 selector: SpeciesSelector,
                 tracker: PopulationTracker,
                 host: SpawnHost,
                 parent: Any = None,
                 stats: Optional[PlacementStats] = None,
                 verbose: bool = False):
        self.settings = settings
        self.noise_field = noise_field
        self.sampler = sampler
        self.selector = selector
        self.tracker = tracker
        self.host = host
        self.parent = parent
        self.stats = stats if stats is not None else PlacementStats()
        self.logger = create_logger(verbose=verbose, name="Placement")

    def effective_density(self, is_regeneration: bool, density_multiplier: float = 1.0) -> float:
        density = self.settings.density.base_density * density_multiplier
        if is_regeneration:
            density *= self.settings.regeneration.density_multiplier
        return density

    def try_place(self,
                  context: GenerationContext,
                  position: Position2D,
                  existing_positions: Optional[List[Position2D]] = None,
                  is_regeneration: bool = False,
                  species: Optional[SpeciesDefinition] = None,
                  density_multiplier: float = 1.0) -> Optional[PlacementResult]:
        """
        Run one candidate through the pipeline.

        Args:
            context: Run context; its RNG is consumed
            position: Candidate (x, z)
            existing_positions: Running list of placed positions used for
                regeneration spacing. Successful placements are appended.
            is_regeneration: Regeneration pass (noise offset, density
                multiplier, eligibility, spacing and target checks)
            species: Restrict selection to this species
            density_multiplier: External multiplier for this pass

        Returns:
            PlacementResult, or None if the candidate was rejected
        """
        s = self.settings
        rng = context.rng
        self.stats.total_attempts += 1

        if not is_position_in_rect(position, s.area_center, s.area_size):
            return None

        raw = self.noise_field.evaluate(context, position, is_regeneration)
        curve = s.density.curve
        noise_value = raw if curve.is_identity() else curve.evaluate(raw)
        if noise_value < s.density.min_noise_threshold or noise_value > s.density.max_noise_threshold:
            return None
        self.stats.noise_passed += 1

        blended = self.effective_density(is_regeneration, density_multiplier) * lerp(
            noise_value, 1.0, 1.0 - s.density.noise_influence)
        if rng.random() > blended:
            return None
        self.stats.density_passed += 1

        sample = self.sampler.sample(position[0], position[1])
        if sample is None:
            return None
        self.stats.ground_passed += 1

        chosen = self.selector.select(rng, noise_value, sample.height, sample.slope_degrees,
                                      is_regeneration, restrict_to=species)
        if chosen is None:
            return None
        self.stats.species_passed += 1

        if is_regeneration:
            if self.tracker.target_met(chosen):
                return None
            if is_too_close(position, existing_positions or [], s.regeneration.min_distance):
                return None

        pass_type = PassType.REGENERATED if is_regeneration else PassType.INITIAL
        individual, handle = self._spawn(context, chosen, sample, pass_type)
        result = PlacementResult(individual=individual, handle=handle)

        if chosen.allow_clustering and chosen.cluster_max > 1:
            result.cluster = self._place_cluster(context, chosen, position, existing_positions, pass_type)

        if existing_positions is not None:
            existing_positions.append(position)
        return result

    def _spawn(self, context: GenerationContext, species: SpeciesDefinition, sample: SurfaceSample,
               pass_type: PassType):
        rng = context.rng
        yaw = rng.random() * 360.0
        if self.settings.terrain.align_to_ground_normal:
            rotation = normal_to_euler_angles(sample.normal, yaw)
        else:
            rotation = yaw_only(yaw)
        scale = lerp(species.min_scale, species.max_scale, rng.random())

        host_handle = self.host.spawn(species, sample.position, rotation, scale, self.parent)
        individual = PlacedIndividual(
            species=species,
            host_handle=host_handle,
            position=sample.position,
            rotation=rotation,
            scale=scale,
            pass_type=pass_type,
        )
        handle = self.tracker.register(individual)
        self.stats.placed += 1
        if pass_type == PassType.REGENERATED:
            self.stats.regenerated += 1
        return individual, handle

    def _place_cluster(self, context: GenerationContext, species: SpeciesDefinition, origin: Position2D,
                       existing_positions: Optional[List[Position2D]],
                       pass_type: PassType) -> List[PlacedIndividual]:
        s = self.settings
        rng = context.rng
        cluster_count = rng.randint(species.cluster_min, max(species.cluster_min, species.cluster_max))
        spacing = s.regeneration.min_distance * s.cluster.spacing_factor
        members = []

        for _ in range(cluster_count - 1):
            position = generate_random_position_in_ring(origin, s.cluster.min_radius, s.cluster.max_radius, rng)
            if not is_position_in_rect(position, s.area_center, s.area_size):
                continue
            sample = self.sampler.sample(position[0], position[1])
            if sample is None or not species.accepts_ground(sample.height, sample.slope_degrees):
                continue
            if pass_type == PassType.REGENERATED and existing_positions is not None:
                if is_too_close(position, existing_positions, spacing):
                    continue

            individual, _ = self._spawn(context, species, sample, pass_type)
            self.stats.cluster_placed += 1
            members.append(individual)
            if existing_positions is not None:
                existing_positions.append(position)

        return members

    def place_candidate(self, context: GenerationContext, position: Position2D,
                        existing_positions: Optional[List[Position2D]] = None,
                        is_regeneration: bool = False,
                        species: Optional[SpeciesDefinition] = None,
                        density_multiplier: float = 1.0) -> Optional[PlacementResult]:
        """``try_place`` for batch loops: a failing candidate is logged and counted, never raised."""
        try:
            return self.try_place(context, position, existing_positions, is_regeneration,
                                  species=species, density_multiplier=density_multiplier)
        except Exception as e:
            self.stats.candidate_errors += 1
            self.logger.warning(f"Candidate at ({position[0]:.2f}, {position[1]:.2f}) failed: {e}")
            return None
