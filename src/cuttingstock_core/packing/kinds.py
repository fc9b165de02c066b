from __future__ import annotations

from enum import Enum
from typing import Sequence

from ..models import DEFAULT_BOX_ORDER, BoxComparator
from .base import Packer
from .guillotine import GuillotineBafPacker
from .maxrects import MaxRectsBafPacker

_ALIASES = {
    "guillotine": "guillotine",
    "guillotine_baf": "guillotine",
    "guillotine-baf": "guillotine",
    "maxrects": "maxrects",
    "max_rects": "maxrects",
    "max-rects": "maxrects",
    "maxrects_baf": "maxrects",
}


class PackerKind(Enum):
    GUILLOTINE = "guillotine"
    MAX_RECTS = "maxrects"

    @classmethod
    def parse(cls, value: "str | PackerKind") -> "PackerKind":
        if isinstance(value, PackerKind):
            return value
        key = _ALIASES.get(str(value).strip().lower())
        if key is None:
            choices = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown packer '{value}' (expected one of: {choices})")
        return cls(key)

    def build(self, comparators: Sequence[BoxComparator] = DEFAULT_BOX_ORDER) -> Packer:
        if self is PackerKind.GUILLOTINE:
            return GuillotineBafPacker(comparators)
        if self is PackerKind.MAX_RECTS:
            return MaxRectsBafPacker(comparators)
        raise ValueError(f"No packer registered for {self!r}")
