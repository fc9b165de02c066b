from .base import INFEASIBLE, PackResult, Packer, Placement
from .geometry import EPS, layout_is_valid
from .guillotine import GuillotineBafPacker
from .kinds import PackerKind
from .maxrects import MaxRectsBafPacker

__all__ = [
    "EPS",
    "INFEASIBLE",
    "PackResult",
    "Packer",
    "Placement",
    "GuillotineBafPacker",
    "MaxRectsBafPacker",
    "PackerKind",
    "layout_is_valid",
]
