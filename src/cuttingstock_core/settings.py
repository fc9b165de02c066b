from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

SETTINGS_ENV = "CUTTINGSTOCK_SETTINGS"

_INT_FIELDS = {"walk_iterations", "operator_repetitions"}


@dataclass(frozen=True)
class SolverSettings:
    """Cost weights and annealing schedule."""

    pattern_cost: float = 20.0
    sheet_cost: float = 1.0
    waste_weight: float = 1.0
    unmet_penalty: float = 1000.0
    surplus_penalty: float = 0.05
    initial_temperature: float = 10.0
    cooling_rate: float = 0.995
    min_temperature: float = 1e-6
    walk_iterations: int = 10000
    operator_repetitions: int = 5

    def __post_init__(self) -> None:
        for name in (
            "pattern_cost",
            "sheet_cost",
            "waste_weight",
            "unmet_penalty",
            "surplus_penalty",
            "min_temperature",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.initial_temperature <= 0:
            raise ValueError("initial_temperature must be greater than 0")
        if not 0 < self.cooling_rate <= 1:
            raise ValueError("cooling_rate must be in (0, 1]")
        if self.walk_iterations < 0:
            raise ValueError("walk_iterations cannot be negative")
        if self.operator_repetitions < 1:
            raise ValueError("operator_repetitions must be at least 1")

    def updated(self, **changes: Any) -> "SolverSettings":
        return replace(self, **changes)


DEFAULT_SETTINGS = SolverSettings()


def default_settings_path() -> str:
    env_path = os.getenv(SETTINGS_ENV)
    if env_path:
        return os.path.expanduser(env_path)
    return os.path.join(os.path.dirname(__file__), "settings.yaml")


def _coerce(data: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for item in fields(SolverSettings):
        if item.name not in data:
            continue
        raw = data[item.name]
        try:
            values[item.name] = int(raw) if item.name in _INT_FIELDS else float(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring setting %s=%r (not a number)", item.name, raw)
    return values


def load_settings(path: str | None = None) -> SolverSettings:
    """Load solver settings from ``settings.yaml``.

    Missing files and unknown keys fall back to the defaults. The file
    location can be overridden with ``CUTTINGSTOCK_SETTINGS``, read on every
    call; parsed files are cached per resolved path.
    """
    settings_path = os.path.abspath(path or default_settings_path())
    return read_settings_file(settings_path)


@lru_cache(maxsize=None)
def read_settings_file(settings_path: str) -> SolverSettings:
    if not os.path.exists(settings_path):
        logger.debug("No settings file at %s, using defaults", settings_path)
        return DEFAULT_SETTINGS

    with open(settings_path, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        logger.warning("Settings file %s is not a mapping, using defaults", settings_path)
        return DEFAULT_SETTINGS
    return replace(DEFAULT_SETTINGS, **_coerce(loaded))
