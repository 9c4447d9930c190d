"""
ScatterEngine: the public face of pyflora.

Owns one run's components and drives them from the host frame loop. The
engine is single-threaded; call ``update(dt)`` once per frame to advance
the initial pass, forced regeneration and the regeneration scheduler.
"""
from __future__ import annotations

import random
from typing import Any, Dict, Optional, Tuple

from .context import GenerationContext
from .host import DensityMultiplierProvider, InMemoryWorld, SpawnHost, default_density_multiplier
from .jobs import ForcedRegenerationJob, GenerationJob, StepResult
from .noise_field import NoiseField
from .placement import PlacementEngine, PlacementStats
from .point_generators import CandidatePointGenerator
from .population import PopulationTracker
from .regeneration import RegenerationCycle, RegenerationScheduler
from .settings import GenerationSettings, SpeciesDefinition
from .species_selector import SpeciesSelector
from .validation import ScatterConfigurationError, SettingsValidator
from ..misc.logger import create_logger
from ..terrain.surface_sampler import SurfaceSampler


class ScatterEngine:
    """
    Procedural vegetation scatter over a rectangular area.

    Usage:
        engine = ScatterEngine(settings, FlatSurfaceSampler(height=0.0))
        engine.generate_all()
        engine.start_regeneration()
        while running:
            engine.update(dt)
    """

    def __init__(self,
                 settings: GenerationSettings,
                 sampler: SurfaceSampler,
                 host: Optional[SpawnHost] = None,
                 density_multiplier_provider: Optional[DensityMultiplierProvider] = None,
                 parent: Any = None,
                 verbose: bool = True):
        """
        Args:
            settings: Generation settings; validated here
            sampler: Ground probe; configured from ``settings.terrain``
            host: Spawn host (defaults to a fresh InMemoryWorld)
            density_multiplier_provider: External density multiplier,
                consulted once per pass
            parent: Parent node handed to every spawn
            verbose: Emit INFO logs

        Raises:
            ScatterConfigurationError: If the settings are unusable
        """
        self.logger = create_logger(verbose=verbose, name="ScatterEngine")
        self.verbose = verbose

        result = SettingsValidator().validate(settings)
        if not result.valid:
            self.logger.error(f"Invalid settings '{settings.name}': {result.message}")
            result.raise_if_invalid(ScatterConfigurationError)

        self.settings = settings
        self.sampler = sampler
        self.sampler.configure(settings.terrain.probe_height, settings.terrain.probe_distance,
                               settings.terrain.ground_layers)
        self.host = host if host is not None else InMemoryWorld()
        self.density_multiplier_provider = density_multiplier_provider or default_density_multiplier
        self.parent = parent

        self.stats = PlacementStats()
        self.noise_field = NoiseField(settings.noise)
        self.selector = SpeciesSelector(settings.species)
        self.tracker = PopulationTracker(self.host, settings.species)
        self.placement = PlacementEngine(settings, self.noise_field, sampler, self.selector,
                                         self.tracker, self.host, parent=parent, stats=self.stats,
                                         verbose=verbose)
        self.point_generator = CandidatePointGenerator()
        self.scheduler = RegenerationScheduler(self._new_cycle, settings.regeneration.check_interval,
                                               settings.max_plants_per_frame, verbose=verbose)

        self.regeneration_enabled = settings.regeneration.enabled
        self.context: Optional[GenerationContext] = None
        self._regeneration_offset: Optional[Tuple[float, float]] = None
        self._generation_job: Optional[GenerationJob] = None
        self._forced_job: Optional[ForcedRegenerationJob] = None
        self._seed_rng = random.Random()

    # --- Context ---

    def _new_context(self) -> GenerationContext:
        seed = self.settings.resolve_seed(self._seed_rng)
        context = GenerationContext.create(seed, self.settings.noise)
        if self._regeneration_offset is not None:
            context = context.with_regeneration_offset(self._regeneration_offset)
        return context

    def _ensure_context(self) -> GenerationContext:
        if self.context is None:
            self.context = self._new_context()
        return self.context

    def _density_multiplier(self) -> float:
        return float(self.density_multiplier_provider(self.settings))

    # --- Initial generation ---

    def begin_generation(self) -> GenerationJob:
        """
        Start a fresh initial pass, stepped by ``update``.

        Clears every existing plant, stops any in-flight regeneration and
        draws a new seed.
        """
        self.scheduler.cancel_cycle()
        if self._forced_job is not None:
            self._forced_job.cancel()
            self._forced_job = None
        if self._generation_job is not None:
            self._generation_job.cancel()

        self.clear_existing_plants()
        self.stats.reset()
        self.context = self._new_context()

        s = self.settings
        candidates = self.point_generator.generate(s.area_center, s.area_size, s.mode, s, self.context.rng)
        self._generation_job = GenerationJob(self.placement, self.context, candidates,
                                             density_multiplier=self._density_multiplier())
        self.logger.info(f"Generating '{s.name}' ({s.mode.value}) with seed {self.context.seed}")
        return self._generation_job

    def generate_all(self) -> int:
        """Run a complete initial pass now; returns the live plant count."""
        job = self.begin_generation()
        job.run_to_completion(self.settings.max_plants_per_frame)
        self._finish_generation(job)
        return self.get_plant_count()

    def _finish_generation(self, job: GenerationJob) -> None:
        if self._generation_job is job:
            self._generation_job = None
        counts = ", ".join(f"{s.name}: {self.tracker.count_for(s)}" for s in self.settings.species)
        self.logger.info(f"Generated {self.tracker.total_count()} plants from "
                         f"{job.candidates_evaluated} candidates ({counts})")

    @property
    def is_generating(self) -> bool:
        return self._generation_job is not None

    # --- Frame loop ---

    def update(self, dt: float) -> None:
        """Advance pending work by one frame."""
        budget = self.settings.max_plants_per_frame
        if self._generation_job is not None:
            job = self._generation_job
            if job.run_step(budget) == StepResult.DONE:
                self._finish_generation(job)
            return

        if self._forced_job is not None:
            if self._forced_job.run_step(budget) == StepResult.DONE:
                self.logger.info(f"Forced regeneration generated {self._forced_job.generated} plants")
                self._forced_job = None

        self.scheduler.tick(dt)

    # --- Regeneration ---

    def _new_cycle(self) -> RegenerationCycle:
        return RegenerationCycle(self.placement, self._ensure_context(),
                                 density_multiplier=self._density_multiplier(), verbose=self.verbose)

    def start_regeneration(self) -> bool:
        if not self.regeneration_enabled:
            self.logger.warning("Regeneration is disabled; not starting")
            return False
        self.scheduler.start()
        return True

    def stop_regeneration(self) -> None:
        self.scheduler.stop()

    def set_regeneration_enabled(self, enabled: bool) -> None:
        self.regeneration_enabled = bool(enabled)
        if self.regeneration_enabled:
            self.start_regeneration()
        else:
            self.stop_regeneration()

    def regenerate_now(self) -> bool:
        """Start a regeneration cycle immediately; stepped by ``update``."""
        if not self.regeneration_enabled:
            self.logger.warning("Regeneration is disabled; regenerate_now ignored")
            return False
        return self.scheduler.request_cycle()

    def force_regenerate(self, attempts: int = 10, blocking: bool = True) -> int:
        """
        Make ``attempts`` regeneration attempts for any eligible species.

        Args:
            attempts: Number of random positions to try
            blocking: Run all attempts now; otherwise they are spread over
                ``update`` calls and 0 is returned

        Returns:
            Number of plants generated (blocking only)
        """
        if not self.regeneration_enabled:
            self.logger.warning("Regeneration is disabled; force_regenerate ignored")
            return 0
        if self._forced_job is not None:
            self._forced_job.cancel()
        job = ForcedRegenerationJob(self.placement, self._ensure_context(), attempts,
                                    density_multiplier=self._density_multiplier())
        if not blocking:
            self._forced_job = job
            return 0
        self._forced_job = None
        job.run_to_completion(self.settings.max_plants_per_frame)
        self.logger.info(f"Forced regeneration generated {job.generated} plants")
        return job.generated

    def is_regenerating(self) -> bool:
        return self.scheduler.is_cycling or self._forced_job is not None

    def get_regeneration_count(self) -> int:
        return self.stats.regenerated

    def set_regeneration_noise_offset(self, offset: Tuple[float, float]) -> None:
        self._regeneration_offset = (float(offset[0]), float(offset[1]))
        if self.context is not None:
            self.context = self.context.with_regeneration_offset(self._regeneration_offset)

    # --- Population ---

    def set_plant_target_count(self, species, target: int) -> None:
        """Set the regeneration target for a species (definition or name)."""
        self.tracker.set_target(species, target)

    def get_plant_count(self, species=None) -> int:
        if species is None:
            return self.tracker.total_count()
        return self.tracker.count_for(species)

    def plant_counts(self) -> Dict[str, int]:
        return {s.name: self.tracker.count_for(s) for s in self.settings.species}

    def clear_existing_plants(self) -> None:
        """Destroy every tracked plant through the host and forget it."""
        for individual in self.tracker.individuals():
            self.host.destroy(individual.host_handle)
        self.tracker.clear()

    # --- Area ---

    def set_generation_area(self, center: Tuple[float, float], size: Tuple[float, float]) -> None:
        """Move/resize the area; takes effect for the next pass."""
        if size[0] <= 0 or size[1] <= 0:
            raise ScatterConfigurationError(f"Generation area must have positive size, got {tuple(size)}")
        self.settings = self.settings.with_area(center, size)
        self.placement.settings = self.settings
        self.logger.info(f"Generation area set to center {self.settings.area_center}, "
                         f"size {self.settings.area_size}")

    def species(self, name: str) -> SpeciesDefinition:
        return self.tracker.species(name)
