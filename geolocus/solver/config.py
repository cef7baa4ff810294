"""Configuration helpers for solver components."""

from __future__ import annotations

import copy
from typing import Tuple

from .model import GeometryConfig, SolveOptions

_GEOMETRY_CONFIG = GeometryConfig()


def get_geometry_config() -> GeometryConfig:
    return copy.deepcopy(_GEOMETRY_CONFIG)


def set_geometry_config(config: GeometryConfig) -> None:
    global _GEOMETRY_CONFIG
    _GEOMETRY_CONFIG = copy.deepcopy(config)


def resolve_tolerances(options: SolveOptions) -> Tuple[float, float]:
    """Return ``(tolerance, residual_tolerance)`` for ``options``."""

    config = _GEOMETRY_CONFIG
    tolerance = config.tolerance if options.tolerance is None else float(options.tolerance)
    residual = (
        config.residual_tolerance
        if options.residual_tolerance is None
        else float(options.residual_tolerance)
    )
    return tolerance, residual
