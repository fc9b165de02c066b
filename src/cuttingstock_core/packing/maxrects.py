from __future__ import annotations

import math
from typing import List, Optional, Tuple

from .base import Packer
from .geometry import EPS, Rect, contains, fits, intersects, rect_area


def split_free_rect(free: Rect, used: Rect) -> List[Rect]:
    """Return the maximal pieces of ``free`` not covered by ``used``."""
    fx, fy, fw, fh = free
    ux, uy, uw, uh = used
    pieces: List[Rect] = []
    if uy > fy + EPS:
        pieces.append((fx, fy, fw, uy - fy))
    if uy + uh < fy + fh - EPS:
        pieces.append((fx, uy + uh, fw, fy + fh - (uy + uh)))
    if ux > fx + EPS:
        pieces.append((fx, fy, ux - fx, fh))
    if ux + uw < fx + fw - EPS:
        pieces.append((ux + uw, fy, fx + fw - (ux + uw), fh))
    return pieces


def prune_free_rects(rects: List[Rect]) -> List[Rect]:
    """Drop rectangles contained in another one (keeping one of duplicates)."""
    pruned: List[Rect] = []
    for i, rect in enumerate(rects):
        redundant = False
        for j, other in enumerate(rects):
            if i == j or not contains(other, rect):
                continue
            if not contains(rect, other) or j < i:
                redundant = True
                break
        if not redundant:
            pruned.append(rect)
    return pruned


class MaxRectsBafPacker(Packer):
    """Maximal-Rectangles packing with Best-Area-Fit.

    Ties on leftover area go to the free rectangle with the smaller
    short-side leftover.
    """

    name = "Maximum Rectangles Sort BAF"

    def _place(
        self, free: List[Rect], width: float, height: float
    ) -> Optional[Tuple[float, float]]:
        best: Optional[Rect] = None
        best_area_fit = math.inf
        best_short_fit = math.inf
        for rect in free:
            if not fits(rect, width, height):
                continue
            _, _, fw, fh = rect
            area_fit = rect_area(rect) - width * height
            short_fit = min(fw - width, fh - height)
            if area_fit < best_area_fit - EPS or (
                abs(area_fit - best_area_fit) <= EPS and short_fit < best_short_fit
            ):
                best = rect
                best_area_fit = area_fit
                best_short_fit = short_fit
        if best is None:
            return None

        used = (best[0], best[1], width, height)
        updated: List[Rect] = []
        for rect in free:
            if intersects(rect, used):
                updated.extend(split_free_rect(rect, used))
            else:
                updated.append(rect)
        free[:] = prune_free_rects(updated)
        return best[0], best[1]
