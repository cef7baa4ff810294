"""Breadth-first search for safe point orders.

A plan starts from the origins. Optionally one *orbiter* point, reachable from
a root origin through a single 1D constraint (its seed), is treated as known
before it is discrete: the solver later places it anywhere on the seed locus,
which pins the rotational or sliding freedom the figure has around the root.
Points then join the order one by one, each the instant the constraints
already applicable to it reduce its two degrees of freedom to a finite set.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

from ..geometry import GeometryProvider
from .budget import Cancellation
from .model import Constraint, ConstraintGraph, OrderPlan, PlanEntry
from .types import ConstraintId, PointName

logger = logging.getLogger(__name__)

# degrees of freedom removed by one locus of the given dimension
_DOF_REDUCTION: Dict[Optional[int], int] = {0: 2, 1: 1, 2: 0, None: 0}


class _Sweep:
    """Discreteness bookkeeping for one (root, orbiter) attempt."""

    def __init__(
        self,
        graph: ConstraintGraph,
        provider: GeometryProvider,
        orbiter: Optional[PointName],
        seed: Optional[Constraint],
    ) -> None:
        self.graph = graph
        self.provider = provider
        self.orbiter = orbiter
        self.order: List[PointName] = list(graph.origins)
        self.known: Set[PointName] = set(self.order)
        self.counted: Dict[PointName, List[Constraint]] = {}
        self.reduction: Dict[PointName, int] = {}
        self.discretized_by: Dict[PointName, Tuple[ConstraintId, ...]] = {}
        self.prefix: Optional[FrozenSet[PointName]] = None
        self.interrupted = False
        if orbiter is not None and seed is not None:
            self.order.append(orbiter)
            self.known.add(orbiter)
            self._count(seed, orbiter)

    @property
    def orbiter_pending(self) -> bool:
        return self.orbiter is not None and self.orbiter not in self.discretized_by

    def _count(self, constraint: Constraint, target: PointName) -> bool:
        """Count ``constraint`` towards ``target``; return ``True`` if it became discrete."""

        seen = self.counted.setdefault(target, [])
        if any(prev.cid == constraint.cid for prev in seen):
            return False
        if any(self.provider.coincident(prev, constraint, target) for prev in seen):
            logger.debug(
                "Ignoring %s for %s: coincides with a counted locus", constraint.describe(), target
            )
            return False
        seen.append(constraint)
        gain = _DOF_REDUCTION[self.provider.dimension(constraint, target)]
        if gain == 0:
            return False
        self.reduction[target] = self.reduction.get(target, 0) + gain
        if self.reduction[target] < 2:
            return False
        self.discretized_by[target] = tuple(
            prev.cid
            for prev in seen
            if _DOF_REDUCTION[self.provider.dimension(prev, target)] > 0
        )
        return True

    def _visit(self, constraint: Constraint) -> bool:
        target = self.graph.target_of(constraint.cid, self.known)
        if target is not None:
            if not self._count(constraint, target):
                return False
            self.known.add(target)
            self.order.append(target)
            logger.debug("Point %s discrete via %s", target, self.discretized_by[target])
        elif (
            self.orbiter_pending
            and self.orbiter in constraint.points
            and all(name in self.known for name in constraint.points)
        ):
            if not self._count(constraint, self.orbiter):
                return False
            logger.debug("Orbiter %s discrete via %s", self.orbiter, self.discretized_by[self.orbiter])
        else:
            return False
        if self.orbiter is not None and self.prefix is None and not self.orbiter_pending:
            self.prefix = frozenset(self.order)
        return True

    def run(self, cancellation: Optional[Cancellation] = None) -> bool:
        """Sweep constraints in insertion order until nothing changes.

        ``cancellation`` is polled before every sweep; when it fires the run
        stops incomplete with :attr:`interrupted` set.
        """

        changed = True
        while changed:
            if cancellation is not None and cancellation.is_cancelled():
                self.interrupted = True
                return False
            changed = False
            for constraint in self.graph.constraints:
                if self._visit(constraint):
                    changed = True
        return self.complete

    @property
    def complete(self) -> bool:
        return not self.orbiter_pending and len(self.order) == len(self.graph.points)

    def to_plan(self, root: Optional[PointName]) -> OrderPlan:
        entries: List[PlanEntry] = []
        placed: Set[PointName] = set()
        origins = set(self.graph.origins)
        for name in self.order:
            if name in origins:
                entries.append(PlanEntry(point=name, role="origin"))
            else:
                active = tuple(
                    constraint.cid
                    for constraint in self.graph.evaluable_for(name, placed)
                )
                entries.append(
                    PlanEntry(
                        point=name,
                        role="orbiter" if name == self.orbiter else "discrete",
                        constraints=active,
                        discretized_by=self.discretized_by.get(name, ()),
                    )
                )
            placed.add(name)
        prefix = self.prefix if self.prefix is not None else frozenset(self.order)
        return OrderPlan(root=root, orbiter=self.orbiter, entries=tuple(entries), prefix=prefix)


def _seeds(
    graph: ConstraintGraph, provider: GeometryProvider, root: PointName
) -> List[Tuple[Constraint, PointName]]:
    known = set(graph.origins)
    out: List[Tuple[Constraint, PointName]] = []
    for constraint, target in graph.evaluable(known):
        if root not in constraint.points:
            continue
        if provider.dimension(constraint, target) != 1:
            continue
        out.append((constraint, target))
    return out


def plan_orders(
    graph: ConstraintGraph,
    provider: GeometryProvider,
    cancellation: Optional[Cancellation] = None,
) -> Iterator[OrderPlan]:
    """Lazily yield complete :class:`OrderPlan` s for ``graph``.

    The origin-only plan comes first when the origins alone discretize every
    point. Then each root origin (insertion order) is paired with each orbiter
    reachable through one of its 1D seed constraints (insertion order). A pair
    is skipped when both its root and orbiter were already placed before the
    orbiter of an emitted plan became discrete, since that plan covers the same
    rigid sub-figure. Calling the function again restarts the enumeration.

    ``cancellation`` is polled once per (root, orbiter) pair and once per
    sweep; when it fires the enumeration simply ends, so callers must ask the
    signal itself why no further plan arrived.
    """

    emitted: List[OrderPlan] = []
    signatures: Set[Tuple[Tuple[PointName, Tuple[ConstraintId, ...]], ...]] = set()

    def accept(plan: OrderPlan) -> bool:
        if plan.signature in signatures:
            logger.debug("Dropping duplicate plan %s", plan.describe())
            return False
        signatures.add(plan.signature)
        emitted.append(plan)
        return True

    sweep = _Sweep(graph, provider, orbiter=None, seed=None)
    complete = sweep.run(cancellation)
    if sweep.interrupted:
        logger.info("Planning interrupted before the first pair")
        return
    if complete:
        plan = sweep.to_plan(root=None)
        if accept(plan):
            logger.debug("Emitting %s", plan.describe())
            yield plan

    for root in graph.origins:
        for seed, orbiter in _seeds(graph, provider, root):
            if cancellation is not None and cancellation.is_cancelled():
                logger.info("Planning interrupted at root=%s orbiter=%s", root, orbiter)
                return
            if any(root in prev.prefix and orbiter in prev.prefix for prev in emitted):
                logger.debug("Skipping redundant pair root=%s orbiter=%s", root, orbiter)
                continue
            sweep = _Sweep(graph, provider, orbiter=orbiter, seed=seed)
            complete = sweep.run(cancellation)
            if sweep.interrupted:
                logger.info("Planning interrupted at root=%s orbiter=%s", root, orbiter)
                return
            if not complete:
                logger.debug(
                    "Pair root=%s orbiter=%s leaves %s undiscovered",
                    root,
                    orbiter,
                    [name for name in graph.points if name not in sweep.known or name == orbiter],
                )
                continue
            plan = sweep.to_plan(root=root)
            if accept(plan):
                logger.debug("Emitting %s", plan.describe())
                yield plan


def check_plan(graph: ConstraintGraph, provider: GeometryProvider, plan: OrderPlan) -> List[str]:
    """Return the problems that make ``plan`` unsafe for ``graph`` (empty when sound)."""

    problems: List[str] = []
    sequence = plan.sequence
    if sorted(sequence) != sorted(graph.points) or len(set(sequence)) != len(sequence):
        problems.append("plan does not cover every point exactly once")
    for index, entry in enumerate(plan.entries):
        if entry.role == "origin":
            if index >= len(graph.origins):
                problems.append(f"origin {entry.point} placed after an unknown point")
            continue
        preceding = set(sequence[:index])
        for cid in entry.constraints:
            others = [name for name in graph.constraint(cid).points if name != entry.point]
            if not all(name in preceding for name in others):
                problems.append(f"{entry.point}: constraint #{cid} references a later point")
        if entry.role == "discrete":
            gain = sum(
                _DOF_REDUCTION[provider.dimension(graph.constraint(cid), entry.point)]
                for cid in entry.discretized_by
            )
            if gain < 2:
                problems.append(f"{entry.point} is not discrete when reached")
    return problems


__all__ = ["check_plan", "plan_orders"]
