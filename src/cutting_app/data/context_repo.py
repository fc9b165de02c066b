"""Read and write context files.

A context file holds the sheet size, the pattern cost and one box per
line::

    LX=40
    LY=40
    m=20
    10.2    10.4    25
    8       6.5     12

Decimal commas are accepted, ``#`` starts a comment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cuttingstock_core.context import (
    Context,
    ContextError,
    ContextResult,
    MalformedContextError,
)
from cuttingstock_core.models import Box, Sheet

logger = logging.getLogger(__name__)

HEADER_KEYS = ("LX", "LY", "m")


def _parse_number(text: str, line_no: int) -> float:
    value = text.strip().replace(",", ".")
    if not value:
        raise MalformedContextError(f"line {line_no}: empty value")
    try:
        return float(value)
    except ValueError:
        raise MalformedContextError(f"line {line_no}: '{text}' is not a number")


def _parse_count(text: str, line_no: int) -> int:
    value = _parse_number(text, line_no)
    if not value.is_integer():
        raise MalformedContextError(f"line {line_no}: demand '{text}' is not an integer")
    return int(value)


def parse_context(text: str, label: str = "") -> Context:
    header: dict[str, float] = {}
    boxes: list[Box] = []
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        if "=" in line:
            key, value = (part.strip() for part in line.split("=", 1))
            if key not in HEADER_KEYS:
                raise MalformedContextError(f"line {line_no}: unknown key '{key}'")
            if key in header:
                raise MalformedContextError(f"line {line_no}: duplicate key '{key}'")
            header[key] = _parse_number(value, line_no)
            continue
        parts = line.split()
        if len(parts) != 3:
            raise MalformedContextError(
                f"line {line_no}: expected 'width height demand', got '{line}'"
            )
        boxes.append(
            Box(
                _parse_number(parts[0], line_no),
                _parse_number(parts[1], line_no),
                _parse_count(parts[2], line_no),
            )
        )

    missing = [key for key in ("LX", "LY") if key not in header]
    if missing:
        raise MalformedContextError(f"missing sheet size: {', '.join(missing)}")
    if not boxes:
        raise MalformedContextError("no boxes defined")

    return Context(
        label=label,
        sheet=Sheet(header["LX"], header["LY"]),
        boxes=tuple(boxes),
        pattern_cost=header.get("m"),
    )


def load_context(path: str | os.PathLike) -> Context:
    """Load a context file; the label is the file name without extension."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Context file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedContextError(f"{path} is not valid UTF-8 text: {e}") from e
    return parse_context(text, label=path.stem)


def try_load_context(path: str | os.PathLike) -> ContextResult:
    try:
        return ContextResult.success(load_context(path))
    except (OSError, ContextError) as e:
        logger.error("Cannot load context %s: %s", path, e)
        return ContextResult.failure(e)


def format_context(context: Context) -> str:
    lines = [f"LX={context.sheet.width:g}", f"LY={context.sheet.height:g}"]
    if context.pattern_cost is not None:
        lines.append(f"m={context.pattern_cost:g}")
    for box in context.boxes:
        lines.append(f"{box.width:g}\t{box.height:g}\t{box.demand}")
    return "\n".join(lines) + "\n"


def save_context(path: str | os.PathLike, context: Context) -> None:
    Path(path).write_text(format_context(context), encoding="utf-8")
