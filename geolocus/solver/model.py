"""Core data structures: points, constraints and the constraint graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from ..geometry import KINDS, ConstraintKind
from .types import (
    ConstraintId,
    EntryRole,
    FailureReason,
    PointName,
    Position,
    SketchError,
    SolveStatus,
    is_point_name,
)


@dataclass(frozen=True)
class Point:
    """A sketch point; origins carry a fixed position and zero degrees of freedom."""

    name: PointName
    position: Optional[Position] = None

    @property
    def is_origin(self) -> bool:
        return self.position is not None

    @property
    def dof(self) -> int:
        return 0 if self.is_origin else 2


@dataclass(frozen=True)
class Constraint:
    """One geometric constraint between an ordered tuple of points."""

    cid: ConstraintId
    kind: str
    points: Tuple[PointName, ...]
    value: Optional[float] = None
    label: Optional[str] = None

    def describe(self) -> str:
        text = f"#{self.cid} {self.kind} {'-'.join(self.points)}"
        if self.value is not None:
            text += f" = {self.value:.6g}"
        return text


@dataclass
class ConstraintGraph:
    """Static point/constraint adjacency.

    The graph never tracks which points are solved. Every applicability
    query takes the caller's ``known`` set explicitly so the same graph can be
    reused across plans and solve attempts.
    """

    kinds: Dict[str, ConstraintKind] = field(default_factory=lambda: dict(KINDS))
    points: Dict[PointName, Point] = field(default_factory=dict)
    constraints: List[Constraint] = field(default_factory=list)
    _by_point: Dict[PointName, List[ConstraintId]] = field(default_factory=dict, repr=False)

    # -- construction -----------------------------------------------------

    def add_point(self, name: PointName, position: Optional[Position] = None) -> Point:
        if not is_point_name(name):
            raise SketchError(f"invalid point name {name!r}")
        if name in self.points:
            raise SketchError(f"point {name} already defined")
        if position is not None:
            position = (float(position[0]), float(position[1]))
        point = Point(name=name, position=position)
        self.points[name] = point
        self._by_point[name] = []
        return point

    def add_constraint(
        self,
        kind: str,
        points: Iterable[PointName],
        value: Optional[float] = None,
        *,
        label: Optional[str] = None,
    ) -> Constraint:
        refs = tuple(points)
        spec = self.kinds.get(kind)
        if spec is None:
            raise SketchError(f"unknown constraint kind {kind!r}")
        if len(refs) != spec.arity:
            raise SketchError(f"{kind} expects {spec.arity} points, got {len(refs)}")
        if len(set(refs)) != len(refs):
            raise SketchError(f"{kind} {'-'.join(refs)} repeats a point; expected {spec.description}")
        for name in refs:
            if name not in self.points:
                raise SketchError(f"{kind} references unknown point {name}")
        if spec.needs_value and value is None:
            raise SketchError(f"{kind} {'-'.join(refs)} requires a value")
        constraint = Constraint(
            cid=len(self.constraints),
            kind=kind,
            points=refs,
            value=None if value is None else float(value),
            label=label,
        )
        self.constraints.append(constraint)
        for name in refs:
            self._by_point[name].append(constraint.cid)
        return constraint

    # -- structure queries ------------------------------------------------

    @property
    def point_order(self) -> List[PointName]:
        return list(self.points)

    @property
    def origins(self) -> List[PointName]:
        return [name for name, point in self.points.items() if point.is_origin]

    @property
    def unknowns(self) -> List[PointName]:
        return [name for name, point in self.points.items() if not point.is_origin]

    def origin_positions(self) -> Dict[PointName, Position]:
        return {
            name: point.position
            for name, point in self.points.items()
            if point.position is not None
        }

    def constraint(self, cid: ConstraintId) -> Constraint:
        return self.constraints[cid]

    def constraints_of(self, point: PointName) -> List[Constraint]:
        return [self.constraints[cid] for cid in self._by_point[point]]

    def points_of(self, cid: ConstraintId) -> Tuple[PointName, ...]:
        return self.constraints[cid].points

    def neighbors(self, point: PointName) -> List[PointName]:
        seen: List[PointName] = []
        for constraint in self.constraints_of(point):
            for name in constraint.points:
                if name != point and name not in seen:
                    seen.append(name)
        return seen

    # -- applicability against a known set --------------------------------

    def target_of(self, cid: ConstraintId, known: Collection[PointName]) -> Optional[PointName]:
        """The single unknown point ``cid`` references, or ``None``."""

        missing = [name for name in self.constraints[cid].points if name not in known]
        if len(missing) != 1:
            return None
        return missing[0]

    def evaluable(self, known: Collection[PointName]) -> List[Tuple[Constraint, PointName]]:
        """Constraints with exactly one unknown point, paired with that point."""

        out: List[Tuple[Constraint, PointName]] = []
        for constraint in self.constraints:
            target = self.target_of(constraint.cid, known)
            if target is not None:
                out.append((constraint, target))
        return out

    def evaluable_for(self, point: PointName, known: Collection[PointName]) -> List[Constraint]:
        """Constraints on ``point`` whose other points are all known."""

        if point in known:
            known = [name for name in known if name != point]
        return [
            constraint
            for constraint in self.constraints_of(point)
            if all(name in known for name in constraint.points if name != point)
        ]

    def closed_constraints(self, known: Collection[PointName]) -> List[Constraint]:
        """Constraints whose points are all in ``known``."""

        return [
            constraint
            for constraint in self.constraints
            if all(name in known for name in constraint.points)
        ]


@dataclass(frozen=True)
class PlanEntry:
    """One step of an order: the point to place and the constraints active there."""

    point: PointName
    role: EntryRole
    constraints: Tuple[ConstraintId, ...] = ()
    discretized_by: Tuple[ConstraintId, ...] = ()


@dataclass(frozen=True)
class OrderPlan:
    """A total order over the sketch's points, origins first."""

    root: Optional[PointName]
    orbiter: Optional[PointName]
    entries: Tuple[PlanEntry, ...]
    prefix: FrozenSet[PointName] = frozenset()

    @property
    def sequence(self) -> List[PointName]:
        return [entry.point for entry in self.entries]

    @property
    def signature(self) -> Tuple[Tuple[PointName, Tuple[ConstraintId, ...]], ...]:
        return tuple((entry.point, entry.constraints) for entry in self.entries)

    def entry(self, point: PointName) -> PlanEntry:
        for entry in self.entries:
            if entry.point == point:
                return entry
        raise KeyError(point)

    def describe(self) -> str:
        seed = f"root={self.root} orbiter={self.orbiter}" if self.orbiter else "origins only"
        steps = ", ".join(
            f"{entry.point}[{','.join(str(cid) for cid in entry.constraints)}]"
            for entry in self.entries
            if entry.role != "origin"
        )
        return f"OrderPlan({seed}: {steps})"


@dataclass
class GeometryConfig:
    """Process-wide numeric tolerances.

    ``tolerance`` drives locus membership and candidate deduplication;
    ``residual_tolerance`` bounds the residual an accepted position may leave
    on any active constraint.
    """

    tolerance: float = 1e-9
    residual_tolerance: float = 1e-6


@dataclass
class SolveOptions:
    """Solver options.

    ``None`` tolerances fall back to the process-wide :class:`GeometryConfig`.
    """

    tolerance: Optional[float] = None
    residual_tolerance: Optional[float] = None
    max_plans: Optional[int] = 32
    max_steps: Optional[int] = 100_000
    timeout: Optional[float] = None
    orbiter_samples: int = 1
    lookahead: bool = False
    refine: bool = False


@dataclass
class Assignment:
    """A full assignment of positions satisfying every constraint."""

    positions: Dict[PointName, Position]
    plan: Optional[OrderPlan] = None
    steps: int = 0
    max_residual: float = 0.0
    warnings: List[str] = field(default_factory=list)

    def normalized_point_coords(self, scale: float = 100.0) -> Dict[PointName, Position]:
        """Return positions scaled into ``[0, scale]`` with the shape preserved."""

        from .utils import normalize_point_coords

        return normalize_point_coords(self.positions, scale=scale)


@dataclass
class Failure:
    """An order that yielded no assignment, with the reason why."""

    reason: FailureReason
    steps: int = 0
    plan: Optional[OrderPlan] = None
    warnings: List[str] = field(default_factory=list)


SolveResult = Union[Assignment, Failure]


@dataclass
class SolveReport:
    """Outcome of trying successive plans on one graph."""

    status: SolveStatus
    assignment: Optional[Assignment] = None
    plans_tried: int = 0
    steps: int = 0
    warnings: List[str] = field(default_factory=list)
    budget_exhausted: bool = False

    @property
    def success(self) -> bool:
        return self.status == "solved"

    @property
    def positions(self) -> Dict[PointName, Position]:
        return dict(self.assignment.positions) if self.assignment else {}


__all__ = [
    "Assignment",
    "Constraint",
    "ConstraintGraph",
    "Failure",
    "GeometryConfig",
    "OrderPlan",
    "PlanEntry",
    "Point",
    "SolveOptions",
    "SolveReport",
    "SolveResult",
    "SolveStatus",
]
