"""
Resumable units of generation work.

The host frame loop owns time. Every long operation is an object whose
``run_step(budget)`` does a bounded slice of work and reports whether more
remains; nothing here blocks or sleeps.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, List

from .context import GenerationContext
from .placement import PlacementEngine
from ..misc.math_utils import Position2D, random_point_in_rect

# Candidates a single step may evaluate per unit of placement budget
CANDIDATES_PER_PLACEMENT = 50


class StepResult(Enum):
    CONTINUE = "continue"
    DONE = "done"


class Job:
    """Base for step objects; ``cancel`` is observed at the next step."""

    def __init__(self):
        self.cancelled = False
        self.finished = False

    def cancel(self) -> None:
        self.cancelled = True

    def run_step(self, budget: int) -> StepResult:
        if self.finished:
            return StepResult.DONE
        if self.cancelled:
            self.finished = True
            return StepResult.DONE
        result = self._step(max(1, budget))
        if result == StepResult.DONE:
            self.finished = True
        return result

    def _step(self, budget: int) -> StepResult:
        raise NotImplementedError

    def run_to_completion(self, budget: int) -> None:
        while self.run_step(budget) == StepResult.CONTINUE:
            pass


class GenerationJob(Job):
    """
    Initial pass over a candidate stream.

    The step budget counts successful placements. A step also yields after
    ``budget * CANDIDATES_PER_PLACEMENT`` candidates so a low-acceptance
    area cannot stall a frame.
    """

    def __init__(self, placement: PlacementEngine, context: GenerationContext,
                 candidates: Iterator[Position2D], density_multiplier: float = 1.0):
        super().__init__()
        self.placement = placement
        self.context = context
        self.candidates = candidates
        self.density_multiplier = density_multiplier
        self.candidates_evaluated = 0
        self.placed = 0

    def _step(self, budget: int) -> StepResult:
        placed_this_step = 0
        for _ in range(budget * CANDIDATES_PER_PLACEMENT):
            try:
                position = next(self.candidates)
            except StopIteration:
                return StepResult.DONE
            self.candidates_evaluated += 1
            result = self.placement.place_candidate(self.context, position, None, False,
                                                    density_multiplier=self.density_multiplier)
            if result is not None:
                self.placed += result.placed_count
                placed_this_step += 1
                if placed_this_step >= budget:
                    break
        return StepResult.CONTINUE


class ForcedRegenerationJob(Job):
    """
    A fixed number of regeneration attempts at random positions in the area
    for any eligible species. Species that reached their target are still
    skipped.
    """

    def __init__(self, placement: PlacementEngine, context: GenerationContext, attempts: int,
                 density_multiplier: float = 1.0):
        super().__init__()
        self.placement = placement
        self.context = context
        self.remaining = max(0, attempts)
        self.density_multiplier = density_multiplier
        self.positions: List[Position2D] = placement.tracker.positions()
        self.generated = 0

    def _step(self, budget: int) -> StepResult:
        s = self.placement.settings
        for _ in range(budget):
            if self.remaining <= 0:
                return StepResult.DONE
            self.remaining -= 1
            position = random_point_in_rect(s.area_center, s.area_size, self.context.rng)
            result = self.placement.place_candidate(self.context, position, self.positions, True,
                                                    density_multiplier=self.density_multiplier)
            if result is not None:
                self.generated += result.placed_count
        return StepResult.DONE if self.remaining <= 0 else StepResult.CONTINUE

