from __future__ import annotations

import math
from typing import List, Optional, Tuple

from .base import Packer
from .geometry import EPS, Rect, fits, is_degenerate, rect_area


def split_shorter_leftover_axis(free: Rect, width: float, height: float) -> List[Rect]:
    """Cut the space left around a box placed in the corner of ``free``.

    The cut runs along the axis with the shorter leftover so that the larger
    remaining piece stays as wide (or tall) as possible.
    """
    fx, fy, fw, fh = free
    leftover_w = fw - width
    leftover_h = fh - height
    if leftover_w <= leftover_h:
        # horizontal cut across the whole free rectangle
        top = (fx, fy + height, fw, leftover_h)
        right = (fx + width, fy, leftover_w, height)
    else:
        # vertical cut across the whole free rectangle
        top = (fx, fy + height, width, leftover_h)
        right = (fx + width, fy, leftover_w, fh)
    return [rect for rect in (top, right) if not is_degenerate(rect)]


def _join(a: Rect, b: Rect) -> Optional[Rect]:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    if math.isclose(ax, bx, abs_tol=EPS) and math.isclose(aw, bw, abs_tol=EPS):
        if math.isclose(ay + ah, by, abs_tol=EPS):
            return (ax, ay, aw, ah + bh)
        if math.isclose(by + bh, ay, abs_tol=EPS):
            return (ax, by, aw, ah + bh)
    if math.isclose(ay, by, abs_tol=EPS) and math.isclose(ah, bh, abs_tol=EPS):
        if math.isclose(ax + aw, bx, abs_tol=EPS):
            return (ax, ay, aw + bw, ah)
        if math.isclose(bx + bw, ax, abs_tol=EPS):
            return (bx, ay, aw + bw, ah)
    return None


def merge_free_rects(free: List[Rect]) -> None:
    """Join free rectangles sharing a full edge, in place."""
    merged = True
    while merged:
        merged = False
        for i in range(len(free)):
            for j in range(i + 1, len(free)):
                joined = _join(free[i], free[j])
                if joined is not None:
                    free[i] = joined
                    del free[j]
                    merged = True
                    break
            if merged:
                break


class GuillotineBafPacker(Packer):
    """Guillotine packing with Best-Area-Fit choice of the free rectangle."""

    name = "Guillotine Sort BAF"

    def __init__(self, *args, merge: bool = True, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.merge = merge

    def _place(
        self, free: List[Rect], width: float, height: float
    ) -> Optional[Tuple[float, float]]:
        best_index = None
        best_area = math.inf
        for index, rect in enumerate(free):
            if not fits(rect, width, height):
                continue
            area = rect_area(rect)
            if area < best_area - EPS:
                best_index = index
                best_area = area
        if best_index is None:
            return None

        chosen = free.pop(best_index)
        free.extend(split_shorter_leftover_axis(chosen, width, height))
        if self.merge:
            merge_free_rects(free)
        return chosen[0], chosen[1]
