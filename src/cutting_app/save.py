from __future__ import annotations

import json
import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from matplotlib import colormaps
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from cuttingstock_core.context import Context
from cuttingstock_core.cost import LinearResolutionMethod
from cuttingstock_core.metrics import pattern_metrics, solution_metrics
from cuttingstock_core.models import Solution
from cuttingstock_core.packing import Packer

from .data.paths import ensure_output_dir

logger = logging.getLogger(__name__)


class Save:
    """Persist a finished solution under the context label."""

    name = "save"
    suffix = ""

    def __init__(
        self,
        packer: Packer,
        method: LinearResolutionMethod | None = None,
        output_dir: str | None = None,
    ) -> None:
        self.packer = packer
        self.method = method or LinearResolutionMethod()
        self.output_dir = output_dir

    def target(self, label: str) -> Path:
        return Path(ensure_output_dir(self.output_dir)) / f"{label or 'solution'}{self.suffix}"

    def save(self, label: str, solution: Solution, context: Context) -> str:
        raise NotImplementedError


def solution_payload(
    label: str,
    solution: Solution,
    context: Context,
    packer: Packer,
    method: LinearResolutionMethod,
) -> Dict[str, Any]:
    metrics = solution_metrics(solution, context, method)
    patterns = []
    for index, pattern in enumerate(solution):
        entry = pattern_metrics(pattern, packer)
        entry["index"] = index
        entry["prints"] = metrics["prints"][index]
        patterns.append(entry)
    return {
        "label": label,
        "packer": packer.name,
        "sheet": {"width": context.sheet.width, "height": context.sheet.height},
        "patternCost": method.pattern_cost(context),
        "metrics": metrics,
        "patterns": patterns,
    }


class JsonSave(Save):
    name = "json"
    suffix = ".json"

    def save(self, label, solution, context):
        path = self.target(label)
        payload = solution_payload(label, solution, context, self.packer, self.method)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        logger.info("Solution written to %s", path)
        return str(path)


class ImageSave(Save):
    """Draw every pattern with its placed boxes into one PNG."""

    name = "image"
    suffix = ".png"
    max_columns = 3

    def render(self, label: str, solution: Solution, context: Context) -> Figure:
        count = max(1, len(solution))
        cols = min(self.max_columns, count)
        rows = math.ceil(count / cols)
        fig = Figure(figsize=(4 * cols, 4 * rows))
        FigureCanvasAgg(fig)
        palette = colormaps["tab20"]
        prints = self.method.breakdown(solution, context).prints

        sheet = context.sheet
        for index, pattern in enumerate(solution):
            ax = fig.add_subplot(rows, cols, index + 1)
            ax.add_patch(
                Rectangle((0, 0), sheet.width, sheet.height, fill=False, edgecolor="black")
            )
            for placement in self.packer.pack(pattern).placements:
                ax.add_patch(
                    Rectangle(
                        (placement.x, placement.y),
                        placement.width,
                        placement.height,
                        facecolor=palette(placement.box_index % palette.N),
                        edgecolor="black",
                        alpha=0.6,
                    )
                )
                ax.text(
                    placement.x + placement.width / 2,
                    placement.y + placement.height / 2,
                    str(placement.box_index),
                    ha="center",
                    va="center",
                    fontsize=7,
                )
            ax.set_xlim(0, sheet.width)
            ax.set_ylim(0, sheet.height)
            ax.set_aspect("equal")
            ax.set_xticks([])
            ax.set_yticks([])
            ax.set_title(f"#{index} x{prints[index]} ({pattern.utilization:.0%})", fontsize=9)

        fig.suptitle(label or "solution")
        return fig

    def save(self, label, solution, context):
        path = self.target(label)
        fig = self.render(label, solution, context)
        fig.savefig(path, dpi=100)
        logger.info("Solution image written to %s", path)
        return str(path)


def save_all(
    label: str,
    solution: Solution,
    context: Context,
    saves: Sequence[Save],
) -> Dict[str, Optional[str]]:
    """Run every save concurrently and wait for all of them.

    Returns the written path per save name, ``None`` for saves that failed.
    """
    written: Dict[str, Optional[str]] = {}
    if not saves:
        return written
    with ThreadPoolExecutor(max_workers=len(saves)) as pool:
        futures = {pool.submit(s.save, label, solution, context): s for s in saves}
        for future in as_completed(futures):
            method = futures[future]
            try:
                written[method.name] = future.result()
            except Exception:
                logger.exception("Failed to save %s with %s", label, method.name)
                written[method.name] = None
    return written
