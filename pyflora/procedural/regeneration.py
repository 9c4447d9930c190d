"""
Target-driven regrowth.

A ``RegenerationCycle`` refills species that fell under their target count.
The ``RegenerationScheduler`` starts one cycle per ``check_interval`` and
steps it from the host's frame loop:

    IDLE --(interval elapsed / regenerate_now)--> CYCLING --(cycle done)--> IDLE
"""
from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Callable, Deque, List, Optional, Tuple

from .context import GenerationContext
from .jobs import Job, StepResult
from .placement import PlacementEngine
from .settings import SpeciesDefinition
from ..misc.logger import create_logger
from ..misc.math_utils import Position2D, random_point_in_rect

# Attempts per missing individual, before the per-cycle cap
ATTEMPTS_PER_MISSING = 3


class RegenerationCycle(Job):
    """
    One refill pass over every species under its target.

    The step budget counts successful placements. Deficits are measured
    lazily on the first step, so destruction that happens between
    scheduling and running is still seen.
    """

    def __init__(self, placement: PlacementEngine, context: GenerationContext,
                 density_multiplier: float = 1.0, verbose: bool = False):
        super().__init__()
        self.placement = placement
        self.context = context
        self.density_multiplier = density_multiplier
        self.logger = create_logger(verbose=verbose, name="Regeneration")

        self._queue: Optional[Deque[SpeciesDefinition]] = None
        self._positions: List[Position2D] = []
        self._current: Optional[SpeciesDefinition] = None
        self._attempts_left = 0
        self.generated = 0
        self.attempts = 0

    def _prepare(self) -> None:
        tracker = self.placement.tracker
        tracker.prune()
        self._queue = deque(s for s in self.placement.settings.species if tracker.needs_regeneration(s))
        self._positions = tracker.positions()
        if self._queue:
            self.logger.debug(f"Cycle started for {len(self._queue)} species under target")

    def _next_species(self) -> bool:
        tracker = self.placement.tracker
        while self._queue:
            species = self._queue.popleft()
            needed = tracker.target_for(species) - tracker.count_for(species)
            if needed <= 0:
                continue
            self._current = species
            self._attempts_left = min(needed * ATTEMPTS_PER_MISSING,
                                      self.placement.settings.regeneration.attempts_per_cycle)
            return True
        self._current = None
        return False

    def _step(self, budget: int) -> StepResult:
        if self._queue is None:
            self._prepare()
        tracker = self.placement.tracker
        s = self.placement.settings
        placed_this_step = 0

        while True:
            if self._current is None or self._attempts_left <= 0 or tracker.target_met(self._current):
                if not self._next_species():
                    self._log_summary()
                    return StepResult.DONE

            self._attempts_left -= 1
            self.attempts += 1
            position = random_point_in_rect(s.area_center, s.area_size, self.context.rng)
            result = self.placement.place_candidate(self.context, position, self._positions, True,
                                                    species=self._current,
                                                    density_multiplier=self.density_multiplier)
            if result is not None:
                self.generated += result.placed_count
                placed_this_step += 1
                if placed_this_step >= budget:
                    return StepResult.CONTINUE

    def _log_summary(self) -> None:
        if self.generated > 0:
            self.logger.info(f"Regenerated {self.generated} plants in {self.attempts} attempts")


class SchedulerState(Enum):
    IDLE = "idle"
    CYCLING = "cycling"


class RegenerationScheduler:
    """
    Interval timer plus at most one active cycle.

    ``tick(dt)`` is called once per frame. While running, the timer
    accumulates in IDLE and starts a cycle once ``check_interval`` elapses;
    an active cycle is stepped with ``budget`` placements per tick whether
    or not the timer is running.
    """

    def __init__(self, cycle_factory: Callable[[], RegenerationCycle], check_interval: float,
                 budget: int, verbose: bool = False):
        self.cycle_factory = cycle_factory
        self.check_interval = check_interval
        self.budget = budget
        self.running = False
        self.state = SchedulerState.IDLE
        self.cycle: Optional[RegenerationCycle] = None
        self.elapsed = 0.0
        self.cycles_completed = 0
        self.logger = create_logger(verbose=verbose, name="Regeneration")

    @property
    def is_cycling(self) -> bool:
        return self.state == SchedulerState.CYCLING

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.elapsed = 0.0
        self.logger.info(f"Regeneration started (interval {self.check_interval}s)")

    def stop(self) -> None:
        """Stop the timer and cancel the active cycle at its next step."""
        if self.cycle is not None:
            self.cycle.cancel()
        if self.running:
            self.logger.info("Regeneration stopped")
        self.running = False

    def cancel_cycle(self) -> None:
        """Cancel the active cycle and return to IDLE immediately."""
        if self.cycle is not None:
            self.cycle.cancel()
        self.cycle = None
        self.state = SchedulerState.IDLE

    def request_cycle(self) -> bool:
        """Start a cycle now; ignored (returns False) while one is active."""
        if self.is_cycling:
            self.logger.debug("Cycle already running, request ignored")
            return False
        self.cycle = self.cycle_factory()
        self.state = SchedulerState.CYCLING
        return True

    def tick(self, dt: float) -> StepResult:
        if self.state == SchedulerState.IDLE:
            if not self.running:
                return StepResult.DONE
            self.elapsed += dt
            if self.elapsed < self.check_interval:
                return StepResult.DONE
            self.elapsed = 0.0
            self.request_cycle()

        cycle = self.cycle
        try:
            result = cycle.run_step(self.budget)
        except Exception as e:
            self.logger.warning(f"Regeneration cycle aborted: {e}")
            cycle.cancel()
            cycle.finished = True
            result = StepResult.DONE
        if result == StepResult.DONE:
            if not cycle.cancelled:
                self.cycles_completed += 1
            self.cycle = None
            self.state = SchedulerState.IDLE
        return result

    def run_cycle_blocking(self) -> Tuple[bool, int]:
        """Run a full cycle now; returns (started, plants generated)."""
        if not self.request_cycle():
            return False, 0
        cycle = self.cycle
        while self.tick(0.0) == StepResult.CONTINUE:
            pass
        return True, cycle.generated
