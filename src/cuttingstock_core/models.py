from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, Sequence, Tuple


@dataclass(frozen=True)
class Sheet:
    """Stock sheet dimensions."""

    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Box:
    """Box type to cut, with the number of units requested."""

    width: float
    height: float
    demand: int = 0

    @property
    def area(self) -> float:
        return self.width * self.height


BoxComparator = Callable[[Box], float]


def BY_AREA(box: Box) -> float:
    return -box.area


def BY_WIDTH(box: Box) -> float:
    return -box.width


def BY_HEIGHT(box: Box) -> float:
    return -box.height


BOX_COMPARATORS = {
    "area": BY_AREA,
    "width": BY_WIDTH,
    "height": BY_HEIGHT,
}

# Largest area first, then widest, then tallest.
DEFAULT_BOX_ORDER: Tuple[BoxComparator, ...] = (BY_AREA, BY_WIDTH, BY_HEIGHT)


def sort_key(box: Box, comparators: Sequence[BoxComparator]) -> Tuple[float, ...]:
    return tuple(comparator(box) for comparator in comparators)


@dataclass(frozen=True)
class BoxAmount:
    box: Box
    amount: int = 0

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"amount must be >= 0, got {self.amount}")


@dataclass(frozen=True)
class Pattern:
    """One stock sheet and how many units of every box type it holds.

    ``box_amounts`` keeps one entry per box type of the problem, in context
    order, even when the amount is zero, so indices line up across all
    patterns of a solution.
    """

    sheet: Sheet
    box_amounts: Tuple[BoxAmount, ...]

    @classmethod
    def empty(cls, sheet: Sheet, boxes: Sequence[Box]) -> "Pattern":
        return cls(sheet, tuple(BoxAmount(box, 0) for box in boxes))

    @property
    def amounts(self) -> Tuple[int, ...]:
        return tuple(entry.amount for entry in self.box_amounts)

    @property
    def boxes(self) -> Tuple[Box, ...]:
        return tuple(entry.box for entry in self.box_amounts)

    def amount(self, index: int) -> int:
        return self.box_amounts[index].amount

    def with_amount(self, index: int, amount: int) -> "Pattern":
        entries = list(self.box_amounts)
        entries[index] = replace(entries[index], amount=amount)
        return replace(self, box_amounts=tuple(entries))

    def incremented(self, index: int, delta: int = 1) -> "Pattern":
        return self.with_amount(index, self.amount(index) + delta)

    @property
    def unit_count(self) -> int:
        return sum(self.amounts)

    @property
    def is_empty(self) -> bool:
        return self.unit_count == 0

    @property
    def used_area(self) -> float:
        return sum(entry.box.area * entry.amount for entry in self.box_amounts)

    @property
    def utilization(self) -> float:
        if self.sheet.area <= 0:
            return 0.0
        return self.used_area / self.sheet.area

    def expanded_boxes(self) -> List[Tuple[int, Box]]:
        """Return ``(box_index, box)`` once per unit to place."""
        units: List[Tuple[int, Box]] = []
        for index, entry in enumerate(self.box_amounts):
            units.extend((index, entry.box) for _ in range(entry.amount))
        return units


@dataclass(frozen=True)
class Solution:
    """Ordered collection of patterns forming one cutting plan."""

    patterns: Tuple[Pattern, ...] = ()

    def __len__(self) -> int:
        return len(self.patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __getitem__(self, index: int) -> Pattern:
        return self.patterns[index]

    def with_pattern(self, index: int, pattern: Pattern) -> "Solution":
        patterns = list(self.patterns)
        patterns[index] = pattern
        return Solution(tuple(patterns))

    def without_pattern(self, index: int) -> "Solution":
        return Solution(self.patterns[:index] + self.patterns[index + 1 :])

    def with_appended(self, pattern: Pattern) -> "Solution":
        return Solution(self.patterns + (pattern,))

    def box_totals(self) -> Tuple[int, ...]:
        """Units of every box type summed over all patterns."""
        if not self.patterns:
            return ()
        totals = [0] * len(self.patterns[0].box_amounts)
        for pattern in self.patterns:
            for index, amount in enumerate(pattern.amounts):
                totals[index] += amount
        return tuple(totals)

    def describe(self) -> str:
        rows = [
            f"#{idx}: {list(pattern.amounts)} ({pattern.utilization:.1%})"
            for idx, pattern in enumerate(self.patterns)
        ]
        return f"{len(self.patterns)} patterns [" + "; ".join(rows) + "]"
