from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .context import Context, ContextResult, ensure_valid
from .cost import CostBreakdown, LinearResolutionMethod
from .models import DEFAULT_BOX_ORDER, BoxComparator, Pattern, Solution
from .neighbours import default_search_operators, default_walk_operators
from .packing import Packer, PackerKind
from .settings import SolverSettings, load_settings
from .solver import SearchTrace, SimulatedAnnealing

logger = logging.getLogger(__name__)


def generate_first_solution(context: Context) -> Solution:
    """One pattern per box type, each holding a single unit of that type."""
    template = Pattern.empty(context.sheet, context.boxes)
    return Solution(
        tuple(template.with_amount(index, 1) for index in range(len(context.boxes)))
    )


@dataclass
class ResolutionResult:
    label: str
    solution: Solution
    cost: float
    breakdown: CostBreakdown
    packer_kind: PackerKind
    seed_cost: float
    trace: SearchTrace


class Resolution:
    """Run the full pipeline for one context: seed, random walk, annealing."""

    def __init__(
        self,
        context: Context,
        settings: SolverSettings | None = None,
        *,
        comparators: Sequence[BoxComparator] = DEFAULT_BOX_ORDER,
        seed: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.context = ensure_valid(context)
        self.settings = settings or load_settings()
        self.comparators = tuple(comparators)
        self.rng = np.random.default_rng(seed)
        self.cancel_event = cancel_event
        self.method = LinearResolutionMethod(self.settings)

    @classmethod
    def from_result(cls, result: ContextResult, **kwargs) -> "Resolution":
        return cls(result.unwrap(), **kwargs)

    def build_packer(self, kind: PackerKind | str) -> Packer:
        kind = PackerKind.parse(kind)
        packer = kind.build(self.comparators)
        logger.info("Parameters - Packing : %s", packer.name)
        return packer

    def starting_solution(self, packer: Packer) -> Solution:
        walker = SimulatedAnnealing(
            packer,
            self.method,
            default_walk_operators(),
            self.settings.walk_iterations,
            settings=self.settings,
            rng=self.rng,
            cancel_event=self.cancel_event,
        )
        return walker.get_random_solution(generate_first_solution(self.context), self.context)

    def solve(self, iterations: int, packer_kind: PackerKind | str = PackerKind.GUILLOTINE) -> ResolutionResult:
        if iterations <= 0:
            raise ValueError("iterations must be a positive integer")
        kind = PackerKind.parse(packer_kind)
        packer = self.build_packer(kind)

        seed_solution = generate_first_solution(self.context)
        seed_cost = self.method.evaluate(seed_solution, self.context)
        start = self.starting_solution(packer)
        logger.info("First solution -----> %s", start.describe())

        annealer = SimulatedAnnealing(
            packer,
            self.method,
            default_search_operators(packer, self.settings.operator_repetitions),
            iterations,
            settings=self.settings,
            rng=self.rng,
            cancel_event=self.cancel_event,
        )
        best = annealer.get_solution(start, self.context)
        best_cost = annealer.best_cost
        if seed_cost < best_cost:
            logger.info("Search ended above the seed cost, keeping the seed")
            best, best_cost = seed_solution, seed_cost

        breakdown = self.method.breakdown(best, self.context)
        logger.info("Best solution found : %s (cost %.4f)", best.describe(), best_cost)
        return ResolutionResult(
            label=self.context.label,
            solution=best,
            cost=best_cost,
            breakdown=breakdown,
            packer_kind=kind,
            seed_cost=seed_cost,
            trace=annealer.trace,
        )


def solve(
    context: Context,
    iterations: int,
    packer_kind: PackerKind | str = PackerKind.GUILLOTINE,
    *,
    settings: Optional[SolverSettings] = None,
    seed: int | None = None,
) -> ResolutionResult:
    return Resolution(context, settings, seed=seed).solve(iterations, packer_kind)
