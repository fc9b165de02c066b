from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .models import Box, Sheet

ERROR_SHEET_DIMENSIONS = "Sheet width and height must be finite and greater than 0."
ERROR_NO_BOXES = "At least one box type is required."
ERROR_PATTERN_COST = "Pattern cost must be a finite, non-negative number."


class ContextError(Exception):
    """Base class for problems with a problem instance."""


class MalformedContextError(ContextError):
    """The context source does not have the expected structure."""


class IllogicalContextError(ContextError):
    """The context parses but describes an impossible instance."""

    def __init__(self, problems) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def validate_context(context: "Context") -> list[str]:
    problems: list[str] = []
    sheet = context.sheet
    if not (_positive(sheet.width) and _positive(sheet.height)):
        problems.append(ERROR_SHEET_DIMENSIONS)
    if not context.boxes:
        problems.append(ERROR_NO_BOXES)
    if context.pattern_cost is not None and not (
        math.isfinite(context.pattern_cost) and context.pattern_cost >= 0
    ):
        problems.append(ERROR_PATTERN_COST)
    for index, box in enumerate(context.boxes):
        if not (_positive(box.width) and _positive(box.height)):
            problems.append(f"Box #{index} dimensions must be finite and greater than 0.")
        if box.demand < 0:
            problems.append(f"Box #{index} has a negative demand.")
        if box.width > sheet.width or box.height > sheet.height:
            problems.append(
                f"Box #{index} ({box.width} x {box.height}) does not fit on "
                f"the sheet ({sheet.width} x {sheet.height})."
            )
    return problems


@dataclass(frozen=True)
class Context:
    """Problem instance: the stock sheet and the requested boxes."""

    label: str
    sheet: Sheet
    boxes: Tuple[Box, ...]
    pattern_cost: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "boxes", tuple(self.boxes))
        problems = validate_context(self)
        if problems:
            raise IllogicalContextError(problems)

    @property
    def demands(self) -> Tuple[int, ...]:
        return tuple(box.demand for box in self.boxes)


def ensure_valid(context: Context) -> Context:
    """Refuse contexts that bypassed construction-time validation."""
    if context is None:
        raise IllogicalContextError("No context loaded.")
    problems = validate_context(context)
    if problems:
        raise IllogicalContextError(problems)
    return context


@dataclass(frozen=True)
class ContextResult:
    """Outcome of loading a context: either a context or the error."""

    context: Optional[Context] = None
    error: Optional[Exception] = field(default=None)

    @classmethod
    def success(cls, context: Context) -> "ContextResult":
        return cls(context=context)

    @classmethod
    def failure(cls, error: Exception) -> "ContextResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None and self.context is not None

    def unwrap(self) -> Context:
        if self.error is not None:
            raise self.error
        if self.context is None:
            raise IllogicalContextError("No context loaded.")
        return self.context
