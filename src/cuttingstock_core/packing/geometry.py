from __future__ import annotations

from typing import List, Tuple

EPS = 1e-9

# Free or used rectangle as (x, y, w, h)
Rect = Tuple[float, float, float, float]


def rect_area(rect: Rect) -> float:
    _, _, w, h = rect
    return max(0.0, w) * max(0.0, h)


def fits(rect: Rect, width: float, height: float) -> bool:
    _, _, w, h = rect
    return width <= w + EPS and height <= h + EPS


def is_degenerate(rect: Rect) -> bool:
    _, _, w, h = rect
    return w <= EPS or h <= EPS


def intersects(a: Rect, b: Rect) -> bool:
    """True when the rectangles share a region of positive area."""
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return (
        ax < bx + bw - EPS
        and bx < ax + aw - EPS
        and ay < by + bh - EPS
        and by < ay + ah - EPS
    )


def contains(outer: Rect, inner: Rect) -> bool:
    ox, oy, ow, oh = outer
    ix, iy, iw, ih = inner
    return (
        ix >= ox - EPS
        and iy >= oy - EPS
        and ix + iw <= ox + ow + EPS
        and iy + ih <= oy + oh + EPS
    )


def layout_is_valid(rects: List[Rect], width: float, height: float) -> bool:
    """Check that rectangles stay on the sheet and never overlap."""
    for x, y, w, h in rects:
        if x < -EPS or y < -EPS or x + w > width + EPS or y + h > height + EPS:
            return False
    for i, a in enumerate(rects):
        for b in rects[i + 1 :]:
            if intersects(a, b):
                return False
    return True
