from __future__ import annotations

from typing import Any, Dict, List

from .context import Context
from .cost import LinearResolutionMethod
from .models import Pattern, Solution
from .packing import Packer


def pattern_metrics(pattern: Pattern, packer: Packer) -> Dict[str, Any]:
    result = packer.pack(pattern)
    sheet = pattern.sheet
    return {
        "amounts": list(pattern.amounts),
        "feasible": result.feasible,
        "utilization": result.score,
        "waste_area": max(0.0, sheet.area - pattern.used_area),
        "placements": [
            [p.box_index, p.x, p.y, p.width, p.height] for p in result.placements
        ],
    }


def solution_metrics(
    solution: Solution,
    context: Context,
    method: LinearResolutionMethod,
) -> Dict[str, Any]:
    breakdown = method.breakdown(solution, context)
    sheet_area = context.sheet.area
    utilizations = [pattern.utilization for pattern in solution]
    printed_waste = sum(
        prints * max(0.0, sheet_area - pattern.used_area)
        for pattern, prints in zip(solution, breakdown.prints)
    )
    boxes: List[Dict[str, Any]] = []
    for index, box in enumerate(context.boxes):
        boxes.append(
            {
                "index": index,
                "width": box.width,
                "height": box.height,
                "demand": box.demand,
                "produced": breakdown.produced[index] if breakdown.produced else 0,
            }
        )
    return {
        "cost": breakdown.cost,
        "patterns": breakdown.patterns,
        "sheets": breakdown.sheets,
        "prints": list(breakdown.prints),
        "mean_utilization": (
            sum(utilizations) / len(utilizations) if utilizations else 0.0
        ),
        "printed_waste_area": printed_waste,
        "unmet": breakdown.unmet,
        "surplus": breakdown.surplus,
        "boxes": boxes,
    }
