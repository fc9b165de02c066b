"""Neighbourhood operators perturbing a cutting plan.

Every operator returns a new :class:`Solution` and leaves its input
untouched. When a move is impossible (nothing to move, a single pattern
where two are needed) the input solution is returned as the candidate.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from .context import Context
from .models import Pattern, Solution
from .packing import Packer


def _random_unit(solution: Solution, rng: np.random.Generator) -> Optional[Tuple[int, int]]:
    """Pick one placed unit uniformly; return ``(pattern_index, box_index)``."""
    total = sum(pattern.unit_count for pattern in solution)
    if total == 0:
        return None
    pick = int(rng.integers(total))
    for pattern_index, pattern in enumerate(solution):
        for box_index, amount in enumerate(pattern.amounts):
            if pick < amount:
                return pattern_index, box_index
            pick -= amount
    return None


def _other_index(count: int, excluded: int, rng: np.random.Generator) -> int:
    index = int(rng.integers(count - 1))
    return index + 1 if index >= excluded else index


def _drop_if_empty(solution: Solution, index: int) -> Solution:
    if solution[index].is_empty and len(solution) > 1:
        return solution.without_pattern(index)
    return solution


def _new_pattern(context: Context, box_index: int) -> Pattern:
    return Pattern.empty(context.sheet, context.boxes).incremented(box_index)


def is_removable(solution: Solution, index: int, context: Context) -> bool:
    """True when every demanded box type still appears without pattern ``index``."""
    totals = solution.box_totals()
    removed = solution[index].amounts
    for box_index, box in enumerate(context.boxes):
        if box.demand <= 0:
            continue
        if totals[box_index] > 0 and totals[box_index] - removed[box_index] == 0:
            return False
    return True


class NeighbourOperator:
    name = "neighbour"

    def generate(
        self, solution: Solution, context: Context, rng: np.random.Generator
    ) -> Solution:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class IncrementNeighbour(NeighbourOperator):
    """Add one unit of a random box type to a random pattern."""

    name = "increment"

    def generate(self, solution, context, rng):
        if not len(solution):
            return solution
        pattern_index = int(rng.integers(len(solution)))
        box_index = int(rng.integers(len(context.boxes)))
        pattern = solution[pattern_index].incremented(box_index)
        return solution.with_pattern(pattern_index, pattern)


class MoveNeighbour(NeighbourOperator):
    """Move one unit from its pattern to another existing pattern."""

    name = "move"

    def generate(self, solution, context, rng):
        if len(solution) < 2:
            return solution
        unit = _random_unit(solution, rng)
        if unit is None:
            return solution
        source, box_index = unit
        target = _other_index(len(solution), source, rng)
        return solution.with_pattern(
            source, solution[source].incremented(box_index, -1)
        ).with_pattern(target, solution[target].incremented(box_index))


class RemovePatternNeighbour(NeighbourOperator):
    """Delete a pattern the remaining ones can do without."""

    name = "remove_pattern"

    def generate(self, solution, context, rng):
        if len(solution) < 2:
            return solution
        candidates = [
            index
            for index in range(len(solution))
            if is_removable(solution, index, context)
        ]
        if not candidates:
            return solution
        index = candidates[int(rng.integers(len(candidates)))]
        return solution.without_pattern(index)


class DynPatternIncrementNeighbour(NeighbourOperator):
    """Increment, opening a new pattern when the chosen one overflows."""

    name = "dyn_increment"

    def __init__(self, packer: Packer) -> None:
        self.packer = packer

    def generate(self, solution, context, rng):
        box_index = int(rng.integers(len(context.boxes)))
        if not len(solution):
            return solution.with_appended(_new_pattern(context, box_index))
        pattern_index = int(rng.integers(len(solution)))
        pattern = solution[pattern_index].incremented(box_index)
        if self.packer.is_feasible(pattern):
            return solution.with_pattern(pattern_index, pattern)
        return solution.with_appended(_new_pattern(context, box_index))


class DynPatternMoveNeighbour(NeighbourOperator):
    """Move a unit; it lands in a new pattern when the target cannot take it.

    A pattern emptied by the move is dropped from the solution.
    """

    name = "dyn_move"

    def __init__(self, packer: Packer) -> None:
        self.packer = packer

    def generate(self, solution, context, rng):
        unit = _random_unit(solution, rng)
        if unit is None:
            return solution
        source_index, box_index = unit
        source = solution[source_index].incremented(box_index, -1)

        if len(solution) > 1:
            target_index = _other_index(len(solution), source_index, rng)
            target = solution[target_index].incremented(box_index)
            if self.packer.is_feasible(target):
                moved = solution.with_pattern(source_index, source).with_pattern(
                    target_index, target
                )
                return _drop_if_empty(moved, source_index)

        if source.is_empty:
            # moving a lone unit into a fresh sheet changes nothing
            return solution
        return solution.with_pattern(source_index, source).with_appended(
            _new_pattern(context, box_index)
        )


def default_walk_operators() -> List[NeighbourOperator]:
    return [IncrementNeighbour(), MoveNeighbour(), RemovePatternNeighbour()]


def default_search_operators(packer: Packer, repetitions: int = 5) -> List[NeighbourOperator]:
    operators: List[NeighbourOperator] = []
    for _ in range(repetitions):
        operators.append(DynPatternIncrementNeighbour(packer))
        operators.append(DynPatternMoveNeighbour(packer))
    operators.append(RemovePatternNeighbour())
    return operators
