"""2D cutting-stock optimisation engine."""

from .context import (
    Context,
    ContextError,
    ContextResult,
    IllogicalContextError,
    MalformedContextError,
    validate_context,
)
from .cost import CostBreakdown, LinearResolutionMethod, ResolutionMethod
from .models import (
    BOX_COMPARATORS,
    DEFAULT_BOX_ORDER,
    Box,
    BoxAmount,
    Pattern,
    Sheet,
    Solution,
)
from .packing import GuillotineBafPacker, MaxRectsBafPacker, PackResult, Packer, PackerKind
from .resolution import Resolution, ResolutionResult, generate_first_solution, solve
from .settings import SolverSettings, load_settings
from .solver import SimulatedAnnealing, SolverState, acceptance_probability

__all__ = [
    "Box",
    "BoxAmount",
    "BOX_COMPARATORS",
    "DEFAULT_BOX_ORDER",
    "Pattern",
    "Sheet",
    "Solution",
    "Context",
    "ContextError",
    "ContextResult",
    "IllogicalContextError",
    "MalformedContextError",
    "validate_context",
    "CostBreakdown",
    "LinearResolutionMethod",
    "ResolutionMethod",
    "Packer",
    "PackResult",
    "PackerKind",
    "GuillotineBafPacker",
    "MaxRectsBafPacker",
    "Resolution",
    "ResolutionResult",
    "generate_first_solution",
    "solve",
    "SolverSettings",
    "load_settings",
    "SimulatedAnnealing",
    "SolverState",
    "acceptance_probability",
]
