from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from ..models import DEFAULT_BOX_ORDER, BoxComparator, Pattern, Solution, sort_key
from .geometry import EPS, Rect


@dataclass(frozen=True)
class Placement:
    box_index: int
    x: float
    y: float
    width: float
    height: float

    @property
    def rect(self) -> Rect:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class PackResult:
    feasible: bool
    score: float = 0.0
    placements: Tuple[Placement, ...] = ()


INFEASIBLE = PackResult(feasible=False)


class Packer:
    """Place every unit of a pattern on its sheet, or report that it cannot.

    Units are expanded from the pattern amounts and ordered by the
    comparator chain before placement. Subclasses only decide where a single
    box goes and how the free space is updated (:meth:`_place`). Packing is
    deterministic, so results are memoised per instance.
    """

    name = "packer"

    def __init__(
        self,
        comparators: Sequence[BoxComparator] = DEFAULT_BOX_ORDER,
        *,
        cache_size: int = 8192,
    ) -> None:
        self.comparators = tuple(comparators)
        self._cached_pack = lru_cache(maxsize=cache_size)(self._pack)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def pack(self, pattern: Pattern) -> PackResult:
        return self._cached_pack(pattern)

    def is_feasible(self, pattern: Pattern) -> bool:
        return self.pack(pattern).feasible

    def all_feasible(self, solution: Solution) -> bool:
        return all(self.is_feasible(pattern) for pattern in solution)

    def cache_clear(self) -> None:
        self._cached_pack.cache_clear()

    def ordered_units(self, pattern: Pattern):
        # sorted() is stable: equal keys keep box-type order
        return sorted(
            pattern.expanded_boxes(),
            key=lambda unit: sort_key(unit[1], self.comparators),
        )

    def _pack(self, pattern: Pattern) -> PackResult:
        sheet = pattern.sheet
        if pattern.used_area > sheet.area + EPS:
            return INFEASIBLE

        free: List[Rect] = [(0.0, 0.0, float(sheet.width), float(sheet.height))]
        placements: List[Placement] = []
        for index, box in self.ordered_units(pattern):
            spot = self._place(free, box.width, box.height)
            if spot is None:
                return INFEASIBLE
            x, y = spot
            placements.append(Placement(index, x, y, box.width, box.height))

        return PackResult(True, pattern.utilization, tuple(placements))

    def _place(
        self, free: List[Rect], width: float, height: float
    ) -> Optional[Tuple[float, float]]:
        """Choose a spot for one box and update ``free`` in place."""
        raise NotImplementedError
