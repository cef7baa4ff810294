"""Least-squares polishing of an assignment found by the search."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Sequence

import numpy as np
from scipy.optimize import least_squares

from ..geometry import GeometryProvider
from .model import Assignment, ConstraintGraph
from .types import PointName, Position

logger = logging.getLogger(__name__)


@dataclass
class RefineResult:
    positions: Dict[PointName, Position]
    success: bool
    iterations: int
    max_residual: float
    residuals: Dict[str, float] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)


def residual_vector(
    graph: ConstraintGraph,
    provider: GeometryProvider,
    positions: Mapping[PointName, Position],
) -> np.ndarray:
    """Signed residual of every constraint, in insertion order."""

    out: List[float] = []
    for constraint in graph.constraints:
        kind = provider.kind(constraint.kind)
        pts = [positions[name] for name in constraint.points]
        out.append(kind.residual(pts, constraint.value))
    return np.array(out, dtype=float)


def residual_breakdown(
    graph: ConstraintGraph,
    provider: GeometryProvider,
    positions: Mapping[PointName, Position],
) -> Dict[str, float]:
    return {
        constraint.describe(): provider.residual(constraint, positions)
        for constraint in graph.constraints
    }


def _pack(positions: Mapping[PointName, Position], names: Sequence[PointName]) -> np.ndarray:
    return np.array([coord for name in names for coord in positions[name]], dtype=float)


def _unpack(
    base: Mapping[PointName, Position], names: Sequence[PointName], x: np.ndarray
) -> Dict[PointName, Position]:
    out = dict(base)
    for index, name in enumerate(names):
        out[name] = (float(x[2 * index]), float(x[2 * index + 1]))
    return out


def polish_positions(
    graph: ConstraintGraph,
    provider: GeometryProvider,
    positions: Mapping[PointName, Position],
    *,
    max_nfev: int = 200,
) -> RefineResult:
    """Minimise the constraint residuals starting from ``positions``.

    Origins stay fixed; only unknown points move.
    """

    unknowns = graph.unknowns
    if not unknowns or not graph.constraints:
        breakdown = residual_breakdown(graph, provider, positions)
        return RefineResult(
            positions=dict(positions),
            success=True,
            iterations=0,
            max_residual=max(breakdown.values(), default=0.0),
            residuals=breakdown,
        )

    def residuals(x: np.ndarray) -> np.ndarray:
        return residual_vector(graph, provider, _unpack(positions, unknowns, x))

    result = least_squares(residuals, _pack(positions, unknowns), method="trf", max_nfev=max_nfev)
    polished = _unpack(positions, unknowns, result.x)
    breakdown = residual_breakdown(graph, provider, polished)
    return RefineResult(
        positions=polished,
        success=bool(result.success),
        iterations=int(result.nfev),
        max_residual=max(breakdown.values(), default=0.0),
        residuals=breakdown,
        notes=[] if result.success else ["least_squares did not converge"],
    )


def refine_assignment(
    graph: ConstraintGraph, provider: GeometryProvider, assignment: Assignment
) -> Assignment:
    """Return ``assignment`` polished, or unchanged if polishing does not help."""

    result = polish_positions(graph, provider, assignment.positions)
    if result.max_residual > assignment.max_residual:
        logger.info(
            "Keeping search result: refinement raised max residual %.3g -> %.3g",
            assignment.max_residual,
            result.max_residual,
        )
        return assignment
    logger.info(
        "Refined assignment in %d evaluations: max residual %.3g -> %.3g",
        result.iterations,
        assignment.max_residual,
        result.max_residual,
    )
    return replace(
        assignment,
        positions=result.positions,
        max_residual=result.max_residual,
        warnings=list(assignment.warnings) + result.notes,
    )


__all__ = [
    "RefineResult",
    "polish_positions",
    "refine_assignment",
    "residual_breakdown",
    "residual_vector",
]
