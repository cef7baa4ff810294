"""Solver façade: plan orders, try them one by one, report the outcome."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..ast import Program
from ..geometry import GeometryProvider
from .budget import AnyOf, Budget, Cancellation, CancellationToken
from .config import get_geometry_config, resolve_tolerances, set_geometry_config
from .model import (
    Assignment,
    Constraint,
    ConstraintGraph,
    Failure,
    GeometryConfig,
    OrderPlan,
    PlanEntry,
    Point,
    SolveOptions,
    SolveReport,
    SolveResult,
)
from .plan import check_plan, plan_orders
from .refine import polish_positions, refine_assignment, residual_breakdown, residual_vector
from .search import Choice, SolverState, max_residual, solve
from .translator import options_from_program, translate
from .types import DegenerateIntersection, GeometryError, LocusUnavailable, SketchError
from .utils import normalize_point_coords

logger = logging.getLogger(__name__)


def make_provider(graph: ConstraintGraph, options: Optional[SolveOptions] = None) -> GeometryProvider:
    tolerance, _ = resolve_tolerances(options or SolveOptions())
    return GeometryProvider(tolerance=tolerance, kinds=graph.kinds)


def _stopped(
    cancellation: Optional[Cancellation],
    budget: Budget,
    plans_tried: int,
    steps: int,
    warnings: List[str],
) -> SolveReport:
    """Report for a run cut short by the caller's token or by the budget."""

    if cancellation is not None and cancellation.is_cancelled():
        logger.info("Solve cancelled after %d plan(s)", plans_tried)
        return SolveReport(status="cancelled", plans_tried=plans_tried, steps=steps, warnings=warnings)
    warnings.append(f"search budget exhausted ({budget.reason})")
    logger.info("Search budget exhausted (%s) after %d plan(s)", budget.reason, plans_tried)
    return SolveReport(
        status="not-found",
        plans_tried=plans_tried,
        steps=steps,
        warnings=warnings,
        budget_exhausted=True,
    )


def solve_graph(
    graph: ConstraintGraph,
    options: Optional[SolveOptions] = None,
    cancellation: Optional[Cancellation] = None,
    *,
    provider: Optional[GeometryProvider] = None,
) -> SolveReport:
    """Try the planner's orders on ``graph`` until one yields an assignment.

    ``options.max_steps`` and ``options.timeout`` bound the whole run,
    planning included; running out of them reports ``not-found`` with
    ``budget_exhausted`` set, while an external ``cancellation`` reports
    ``cancelled``. Hitting ``options.max_plans`` while orders remain also
    sets ``budget_exhausted``.
    """

    options = options or SolveOptions()
    provider = provider or make_provider(graph, options)
    budget = Budget(max_steps=options.max_steps, timeout=options.timeout)
    signal = AnyOf(cancellation, budget)

    logger.info(
        "Solving graph with %d points (%d origins) and %d constraints",
        len(graph.points),
        len(graph.origins),
        len(graph.constraints),
    )

    warnings: List[str] = []
    plans_tried = 0
    steps = 0
    for plan in plan_orders(graph, provider, signal):
        if options.max_plans is not None and plans_tried >= options.max_plans:
            logger.info("Plan budget of %d exhausted", options.max_plans)
            warnings.append(f"plan budget exhausted (max_plans={options.max_plans})")
            return SolveReport(
                status="not-found",
                plans_tried=plans_tried,
                steps=steps,
                warnings=warnings,
                budget_exhausted=True,
            )
        plans_tried += 1
        logger.info("Trying plan %d: %s", plans_tried, plan.describe())
        result = solve(graph, plan, signal, provider=provider, options=options)
        steps += result.steps
        warnings.extend(w for w in result.warnings if w not in warnings)

        if isinstance(result, Assignment):
            if options.refine:
                result = refine_assignment(graph, provider, result)
            logger.info(
                "Solved with plan %d after %d steps (max residual %.3g)",
                plans_tried,
                steps,
                result.max_residual,
            )
            return SolveReport(
                status="solved",
                assignment=result,
                plans_tried=plans_tried,
                steps=steps,
                warnings=warnings,
            )

        if result.reason == "cancelled":
            return _stopped(cancellation, budget, plans_tried, steps, warnings)
        logger.info("Plan %d exhausted after %d steps", plans_tried, result.steps)

    if budget.reason is not None or (cancellation is not None and cancellation.is_cancelled()):
        return _stopped(cancellation, budget, plans_tried, steps, warnings)
    if plans_tried == 0:
        logger.info("No complete order found")
        return SolveReport(status="ordering-failed", warnings=warnings)
    logger.info("No assignment found within %d plan(s)", plans_tried)
    return SolveReport(status="not-found", plans_tried=plans_tried, steps=steps, warnings=warnings)


def solve_sketch(
    program: Program,
    options: Optional[SolveOptions] = None,
    cancellation: Optional[Cancellation] = None,
) -> SolveReport:
    """Translate ``program`` and solve it, honouring its ``solver`` options."""

    graph = translate(program)
    return solve_graph(graph, options_from_program(program, options), cancellation)


__all__ = [
    "AnyOf",
    "Assignment",
    "Budget",
    "Cancellation",
    "CancellationToken",
    "Choice",
    "Constraint",
    "ConstraintGraph",
    "DegenerateIntersection",
    "Failure",
    "GeometryConfig",
    "GeometryError",
    "LocusUnavailable",
    "OrderPlan",
    "PlanEntry",
    "Point",
    "SketchError",
    "SolveOptions",
    "SolveReport",
    "SolveResult",
    "SolverState",
    "check_plan",
    "get_geometry_config",
    "make_provider",
    "max_residual",
    "normalize_point_coords",
    "options_from_program",
    "plan_orders",
    "polish_positions",
    "refine_assignment",
    "residual_breakdown",
    "residual_vector",
    "set_geometry_config",
    "solve",
    "solve_graph",
    "solve_sketch",
    "translate",
]
