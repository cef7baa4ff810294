"""Translate a parsed sketch into a :class:`ConstraintGraph`."""

from __future__ import annotations

import logging
import math
from dataclasses import fields, replace
from typing import Any, Dict, Mapping, Optional

from ..ast import Program, Stmt
from ..geometry import ConstraintKind
from .model import ConstraintGraph, SolveOptions
from .types import SketchError

logger = logging.getLogger(__name__)

ANGLE_KINDS = frozenset({"angle", "orientation"})
ANGLE_UNITS = ("deg", "rad")
SOLVER_OPTION_NAMES = frozenset(f.name for f in fields(SolveOptions))


def _value_of(stmt: Stmt) -> Optional[float]:
    value = stmt.data.get("value")
    if value is None:
        return None
    if stmt.data["kind"] in ANGLE_KINDS:
        unit = stmt.opts.get("unit", "deg")
        if unit not in ANGLE_UNITS:
            raise SketchError(f"unknown angle unit {unit!r}", stmt)
        if unit == "deg":
            return math.radians(float(value))
    return float(value)


def translate(program: Program, kinds: Optional[Mapping[str, ConstraintKind]] = None) -> ConstraintGraph:
    """Build the constraint graph described by ``program``.

    Points are added in statement order; constraints keep their statement
    order, which is the order the planner sweeps them in.
    """

    graph = ConstraintGraph() if kinds is None else ConstraintGraph(kinds=dict(kinds))
    for stmt in program.stmts:
        try:
            if stmt.kind == "origin":
                graph.add_point(stmt.data["point"], stmt.data["at"])
            elif stmt.kind == "points":
                for name in stmt.data["ids"]:
                    graph.add_point(name)
            elif stmt.kind == "constraint":
                label = stmt.opts.get("label")
                graph.add_constraint(
                    stmt.data["kind"],
                    stmt.data["points"],
                    _value_of(stmt),
                    label=None if label is None else str(label),
                )
        except SketchError as exc:
            if exc.stmt is not None:
                raise
            raise SketchError(str(exc), stmt) from None

    logger.info(
        "Translated sketch %r: %d point(s), %d origin(s), %d constraint(s)",
        program.title,
        len(graph.points),
        len(graph.origins),
        len(graph.constraints),
    )
    return graph


def options_from_program(program: Program, base: Optional[SolveOptions] = None) -> SolveOptions:
    """Overlay the sketch's ``solver [...]`` options on ``base``."""

    overrides: Dict[str, Any] = {}
    for key, value in program.solver_opts().items():
        if key not in SOLVER_OPTION_NAMES:
            raise SketchError(f"unknown solver option {key!r}")
        overrides[key] = value
    return replace(base or SolveOptions(), **overrides)


__all__ = ["ANGLE_KINDS", "SOLVER_OPTION_NAMES", "options_from_program", "translate"]
