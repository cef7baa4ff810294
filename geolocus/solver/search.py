"""Sequential point assignment with an explicit backtracking stack."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..geometry import GeometryError, GeometryProvider, Locus, filter_points, format_position
from .budget import Cancellation
from .config import resolve_tolerances
from .model import (
    Assignment,
    Constraint,
    ConstraintGraph,
    Failure,
    OrderPlan,
    PlanEntry,
    SolveOptions,
    SolveResult,
)
from .types import PointName, Position

logger = logging.getLogger(__name__)


@dataclass
class Choice:
    """Candidates computed for one point and the index currently in use."""

    point: PointName
    candidates: Tuple[Position, ...]
    index: int = 0

    @property
    def current(self) -> Position:
        return self.candidates[self.index]

    def advance(self) -> bool:
        self.index += 1
        return self.index < len(self.candidates)


@dataclass
class SolverState:
    positions: Dict[PointName, Position]
    stack: List[Choice] = field(default_factory=list)
    steps: int = 0
    warnings: List[str] = field(default_factory=list)

    def push(self, choice: Choice) -> None:
        self.stack.append(choice)
        self.positions[choice.point] = choice.current

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)
        logger.warning(message)


class _Resolver:
    """Computes the candidate positions of one plan entry."""

    def __init__(
        self,
        graph: ConstraintGraph,
        provider: GeometryProvider,
        residual_tolerance: float,
        samples: int,
    ) -> None:
        self.graph = graph
        self.provider = provider
        self.residual_tolerance = residual_tolerance
        self.samples = samples

    def loci(self, entry: PlanEntry, positions: Mapping[PointName, Position]) -> List[Locus]:
        out: List[Locus] = []
        for cid in entry.constraints:
            constraint = self.graph.constraint(cid)
            if self.provider.dimension(constraint, entry.point) is None:
                continue
            out.append(self.provider.possibility_space(constraint, entry.point, positions))
        return out

    def raw_candidates(self, entry: PlanEntry, loci: Sequence[Locus]) -> Tuple[Position, ...]:
        finite = [locus for locus in loci if locus.dimension == 0]
        curves = [locus for locus in loci if locus.dimension == 1]
        if finite or len(curves) >= 2:
            return self.provider.intersect(loci)
        if len(curves) == 1:
            # the orbiter: any position on its seed locus will do
            regions = [locus for locus in loci if locus is not curves[0]]
            return filter_points(curves[0].sample(self.samples), regions, self.provider.tolerance)
        raise GeometryError(f"{entry.point} has no locus to place it on")

    def satisfied(self, constraints: Sequence[Constraint], positions: Mapping[PointName, Position]) -> bool:
        return all(
            self.provider.residual(constraint, positions) <= self.residual_tolerance
            for constraint in constraints
        )

    def candidates(self, entry: PlanEntry, positions: Mapping[PointName, Position]) -> Tuple[Position, ...]:
        """Candidates for ``entry`` that leave every active constraint satisfied.

        Raises :class:`GeometryError` when the loci are degenerate or cannot
        be built from the current positions.
        """

        raw = self.raw_candidates(entry, self.loci(entry, positions))
        constraints = [self.graph.constraint(cid) for cid in entry.constraints]
        trial = dict(positions)
        accepted: List[Position] = []
        for candidate in raw:
            trial[entry.point] = candidate
            if self.satisfied(constraints, trial):
                accepted.append(candidate)
        return tuple(accepted)


def _rank_by_lookahead(
    resolver: _Resolver,
    entry: PlanEntry,
    following: Optional[PlanEntry],
    candidates: Tuple[Position, ...],
    positions: Mapping[PointName, Position],
) -> Tuple[Position, ...]:
    """Stable-sort ``candidates`` so those leaving ``following`` placeable come first."""

    if following is None or len(candidates) < 2:
        return candidates
    trial = dict(positions)
    scores: List[int] = []
    for candidate in candidates:
        trial[entry.point] = candidate
        try:
            viable = bool(resolver.candidates(following, trial))
        except GeometryError:
            viable = False
        scores.append(0 if viable else 1)
    order = sorted(range(len(candidates)), key=lambda i: scores[i])
    return tuple(candidates[i] for i in order)


def _cancelled(cancellation: Optional[Cancellation]) -> bool:
    return cancellation is not None and cancellation.is_cancelled()


def max_residual(
    graph: ConstraintGraph, provider: GeometryProvider, positions: Mapping[PointName, Position]
) -> float:
    if not graph.constraints:
        return 0.0
    return max(provider.residual(constraint, positions) for constraint in graph.constraints)


def solve(
    graph: ConstraintGraph,
    order: OrderPlan,
    cancellation: Optional[Cancellation] = None,
    *,
    provider: Optional[GeometryProvider] = None,
    options: Optional[SolveOptions] = None,
) -> SolveResult:
    """Assign every point of ``graph`` following ``order``.

    Each entry takes the first candidate its loci allow; the remaining ones
    stay on the choice stack. When an entry has no candidate the most recent
    choice moves to its next candidate, popping exhausted choices on the way.
    ``cancellation`` is polled once per resolution step and once per
    backtrack step.
    """

    options = options or SolveOptions()
    tolerance, residual_tolerance = resolve_tolerances(options)
    provider = provider or GeometryProvider(tolerance=tolerance, kinds=graph.kinds)
    resolver = _Resolver(graph, provider, residual_tolerance, options.orbiter_samples)
    state = SolverState(positions=graph.origin_positions())

    origins = set(graph.origins)
    for constraint in graph.closed_constraints(origins):
        if provider.residual(constraint, state.positions) > residual_tolerance:
            state.warn(f"origins violate {constraint.describe()}")
            return Failure(reason="exhausted", steps=state.steps, plan=order, warnings=state.warnings)

    entries = [entry for entry in order.entries if entry.role != "origin"]
    logger.debug("Solving %s", order.describe())

    while len(state.stack) < len(entries):
        if _cancelled(cancellation):
            logger.info("Solve cancelled after %d steps", state.steps)
            return Failure(reason="cancelled", steps=state.steps, plan=order, warnings=state.warnings)
        state.steps += 1
        index = len(state.stack)
        entry = entries[index]
        try:
            candidates = resolver.candidates(entry, state.positions)
        except GeometryError as exc:
            state.warn(f"dead end at {entry.point}: {exc}")
            candidates = ()

        if candidates:
            if options.lookahead:
                following = entries[index + 1] if index + 1 < len(entries) else None
                candidates = _rank_by_lookahead(resolver, entry, following, candidates, state.positions)
            state.push(Choice(point=entry.point, candidates=candidates))
            logger.debug(
                "Placed %s at %s (%d candidate(s))",
                entry.point,
                format_position(state.positions[entry.point]),
                len(candidates),
            )
            continue

        logger.debug("No candidate for %s; backtracking", entry.point)
        while True:
            if _cancelled(cancellation):
                logger.info("Solve cancelled after %d steps", state.steps)
                return Failure(reason="cancelled", steps=state.steps, plan=order, warnings=state.warnings)
            state.steps += 1
            if not state.stack:
                logger.debug("Choice stack exhausted after %d steps", state.steps)
                return Failure(reason="exhausted", steps=state.steps, plan=order, warnings=state.warnings)
            choice = state.stack[-1]
            if choice.advance():
                state.positions[choice.point] = choice.current
                logger.debug("Retrying %s at %s", choice.point, format_position(choice.current))
                break
            state.stack.pop()
            del state.positions[choice.point]

    return Assignment(
        positions={name: state.positions[name] for name in graph.point_order},
        plan=order,
        steps=state.steps,
        max_residual=max_residual(graph, provider, state.positions),
        warnings=list(state.warnings),
    )


__all__ = ["Choice", "SolverState", "max_residual", "solve"]
