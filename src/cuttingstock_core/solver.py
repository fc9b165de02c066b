from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from .context import Context, ensure_valid
from .cost import ResolutionMethod
from .models import Solution
from .neighbours import NeighbourOperator
from .packing import Packer
from .settings import SolverSettings, load_settings

logger = logging.getLogger(__name__)


class SolverState(Enum):
    INITIALIZING = "initializing"
    SEARCHING = "searching"
    TERMINATED = "terminated"


def acceptance_probability(delta: float, temperature: float) -> float:
    """Metropolis rule: always take improvements, worse moves with exp(-d/T)."""
    if delta <= 0:
        return 1.0
    if temperature <= 0:
        return 0.0
    return math.exp(-delta / temperature)


@dataclass
class SearchTrace:
    """Per-iteration record of a run."""

    best_costs: List[float] = field(default_factory=list)
    current_costs: List[float] = field(default_factory=list)
    temperatures: List[float] = field(default_factory=list)
    accepted: int = 0
    rejected: int = 0
    infeasible: int = 0
    improvements: int = 0

    @property
    def iterations(self) -> int:
        return len(self.temperatures)

    def record(self, best_cost: float, current_cost: float, temperature: float) -> None:
        self.best_costs.append(best_cost)
        self.current_costs.append(current_cost)
        self.temperatures.append(temperature)


class Solver:
    def get_solution(self, start: Solution, context: Context) -> Solution:
        raise NotImplementedError


class SimulatedAnnealing(Solver):
    """Simulated annealing over cutting plans with a geometric cooling schedule.

    Each iteration samples one operator uniformly from ``operators``, builds a
    candidate from the current plan and drops it silently when any of its
    patterns cannot be packed. Feasible candidates are accepted with the
    Metropolis rule; the best plan seen is returned once ``nb_iterations``
    steps are done (or ``cancel_event`` is set).
    """

    def __init__(
        self,
        packer: Packer,
        method: ResolutionMethod,
        operators: Sequence[NeighbourOperator],
        nb_iterations: int,
        *,
        settings: SolverSettings | None = None,
        initial_temperature: float | None = None,
        cooling_rate: float | None = None,
        min_temperature: float | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if nb_iterations < 0:
            raise ValueError("nb_iterations cannot be negative")
        if not operators:
            raise ValueError("at least one neighbourhood operator is required")
        settings = settings or load_settings()
        self.packer = packer
        self.method = method
        self.operators = list(operators)
        self.nb_iterations = int(nb_iterations)
        self.initial_temperature = (
            settings.initial_temperature
            if initial_temperature is None
            else float(initial_temperature)
        )
        self.cooling_rate = settings.cooling_rate if cooling_rate is None else float(cooling_rate)
        self.min_temperature = (
            settings.min_temperature if min_temperature is None else float(min_temperature)
        )
        if self.initial_temperature <= 0:
            raise ValueError("initial_temperature must be greater than 0")
        if not 0 < self.cooling_rate <= 1:
            raise ValueError("cooling_rate must be in (0, 1]")
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.cancel_event = cancel_event

        self.state = SolverState.INITIALIZING
        self.temperature = self.initial_temperature
        self.trace = SearchTrace()
        self.best_cost: Optional[float] = None

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _check_start(self, start: Solution, context: Context) -> None:
        ensure_valid(context)
        if not self.packer.all_feasible(start):
            raise ValueError("starting solution holds a pattern the packer cannot place")

    def _next_candidate(self, current: Solution, context: Context) -> Solution:
        operator = self.operators[int(self.rng.integers(len(self.operators)))]
        return operator.generate(current, context, self.rng)

    def _accept(self, delta: float) -> bool:
        if delta <= 0:
            return True
        return self.rng.random() < acceptance_probability(delta, self.temperature)

    def _cool(self) -> None:
        self.temperature = max(self.min_temperature, self.temperature * self.cooling_rate)

    def get_solution(self, start: Solution, context: Context) -> Solution:
        self._check_start(start, context)
        self.state = SolverState.SEARCHING
        self.temperature = self.initial_temperature
        self.trace = SearchTrace()

        current = best = start
        current_cost = best_cost = self.method.evaluate(start, context)
        logger.info(
            "Annealing %d iterations from cost %.4f (T0=%g, rate=%g)",
            self.nb_iterations,
            current_cost,
            self.initial_temperature,
            self.cooling_rate,
        )

        for iteration in range(self.nb_iterations):
            if self._cancelled():
                logger.info("Annealing cancelled after %d iterations", iteration)
                break
            candidate = self._next_candidate(current, context)
            if not self.packer.all_feasible(candidate):
                self.trace.infeasible += 1
            else:
                candidate_cost = self.method.evaluate(candidate, context)
                if self._accept(candidate_cost - current_cost):
                    current, current_cost = candidate, candidate_cost
                    self.trace.accepted += 1
                    if current_cost < best_cost:
                        best, best_cost = current, current_cost
                        self.trace.improvements += 1
                        logger.debug(
                            "Iteration %d: new best %.4f (%d patterns)",
                            iteration,
                            best_cost,
                            len(best),
                        )
                else:
                    self.trace.rejected += 1
            self.trace.record(best_cost, current_cost, self.temperature)
            self._cool()

        self.state = SolverState.TERMINATED
        self.best_cost = best_cost
        logger.info(
            "Annealing done: best %.4f, accepted %d, rejected %d, infeasible %d",
            best_cost,
            self.trace.accepted,
            self.trace.rejected,
            self.trace.infeasible,
        )
        return best

    def get_random_solution(
        self, start: Solution, context: Context, accept_all: bool = True
    ) -> Solution:
        """Random walk over feasible plans.

        With ``accept_all`` every feasible candidate is taken regardless of
        cost; otherwise moves go through the Metropolis rule at the initial
        temperature, without cooling.
        """
        self._check_start(start, context)
        self.state = SolverState.INITIALIZING
        self.temperature = self.initial_temperature
        self.trace = SearchTrace()

        current = start
        current_cost = None if accept_all else self.method.evaluate(start, context)
        for iteration in range(self.nb_iterations):
            if self._cancelled():
                logger.info("Random walk cancelled after %d iterations", iteration)
                break
            candidate = self._next_candidate(current, context)
            if not self.packer.all_feasible(candidate):
                self.trace.infeasible += 1
                continue
            if accept_all:
                current = candidate
                self.trace.accepted += 1
                continue
            candidate_cost = self.method.evaluate(candidate, context)
            if self._accept(candidate_cost - current_cost):
                current, current_cost = candidate, candidate_cost
                self.trace.accepted += 1
            else:
                self.trace.rejected += 1

        logger.debug(
            "Random walk done: %d moves taken, %d infeasible, %d patterns",
            self.trace.accepted,
            self.trace.infeasible,
            len(current),
        )
        return current
