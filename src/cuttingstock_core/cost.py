from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .context import Context
from .models import Solution
from .settings import SolverSettings, load_settings


def compute_prints(solution: Solution, demands: Sequence[int]) -> np.ndarray:
    """Number of sheets to cut with each pattern so that demand is covered.

    Greedy cover: the pattern yielding the most still-needed units per sheet
    is printed as many times as it stays fully useful, until every box type
    that appears in some pattern reaches its demand. Box types present in no
    pattern are left uncovered.
    """
    n_patterns = len(solution)
    if n_patterns == 0:
        return np.zeros(0, dtype=np.int64)

    amounts = np.array([pattern.amounts for pattern in solution], dtype=np.int64)
    remaining = np.asarray(demands, dtype=np.int64).copy()
    remaining[amounts.sum(axis=0) == 0] = 0
    prints = np.zeros(n_patterns, dtype=np.int64)

    while remaining.any():
        useful = np.minimum(amounts, remaining).sum(axis=1)
        best = int(np.argmax(useful))
        if useful[best] <= 0:
            break
        row = amounts[best]
        needed = (row > 0) & (remaining > 0)
        times = max(1, int((remaining[needed] // row[needed]).min()))
        prints[best] += times
        remaining = np.maximum(remaining - row * times, 0)

    return prints


@dataclass(frozen=True)
class CostBreakdown:
    cost: float
    patterns: int
    prints: Tuple[int, ...]
    sheets: int
    waste: float
    produced: Tuple[int, ...]
    unmet: int
    surplus: int


class ResolutionMethod:
    """Turn a solution into a scalar cost; lower is better."""

    def evaluate(self, solution: Solution, context: Context) -> float:
        raise NotImplementedError


class LinearResolutionMethod(ResolutionMethod):
    """Weighted sum of patterns, sheets, trim waste and demand mismatch."""

    def __init__(self, settings: SolverSettings | None = None) -> None:
        self.settings = settings or load_settings()

    def pattern_cost(self, context: Context) -> float:
        if context.pattern_cost is not None:
            return context.pattern_cost
        return self.settings.pattern_cost

    def breakdown(self, solution: Solution, context: Context) -> CostBreakdown:
        demands = np.array(context.demands, dtype=np.int64)
        prints = compute_prints(solution, demands)

        if len(solution):
            amounts = np.array([p.amounts for p in solution], dtype=np.int64)
            produced = amounts.T @ prints
            present = amounts.sum(axis=0) > 0
        else:
            produced = np.zeros_like(demands)
            present = np.zeros(len(demands), dtype=bool)

        unmet = int(demands[~present].sum())
        surplus = int(np.maximum(produced - demands, 0)[present].sum())
        waste = float(sum(1.0 - pattern.utilization for pattern in solution))
        sheets = int(prints.sum())

        weights = self.settings
        cost = (
            self.pattern_cost(context) * len(solution)
            + weights.sheet_cost * sheets
            + weights.waste_weight * waste
            + weights.unmet_penalty * unmet
            + weights.surplus_penalty * surplus
        )
        return CostBreakdown(
            cost=float(cost),
            patterns=len(solution),
            prints=tuple(int(p) for p in prints),
            sheets=sheets,
            waste=waste,
            produced=tuple(int(p) for p in produced),
            unmet=unmet,
            surplus=surplus,
        )

    def evaluate(self, solution: Solution, context: Context) -> float:
        return self.breakdown(solution, context).cost
