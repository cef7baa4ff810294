"""Geometry provider: per-kind loci, intersections and residuals."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Mapping, Optional, Sequence, Tuple

from ..logging_utils import apply_debug_logging
from .intersect import filter_points, intersect, intersect_pair
from .kinds import KINDS, ConstraintKind, register_kind
from .loci import LOCUS_DIMENSIONS, Locus, LocusKind
from .math_utils import EPSILON, Position, format_position
from .types import (
    ConstraintLike,
    DegenerateIntersection,
    GeometryError,
    LocusUnavailable,
    PointName,
    UnderdeterminedIntersection,
)

logger = logging.getLogger(__name__)


class GeometryProvider:
    """Bridge between solver constraints and the per-kind geometry.

    The provider is pure: the same constraint and positions always give the
    same locus, and the same loci always give the same intersection.
    """

    def __init__(
        self,
        tolerance: float = EPSILON,
        kinds: Optional[Mapping[str, ConstraintKind]] = None,
    ) -> None:
        self.tolerance = float(tolerance)
        self._kinds: Dict[str, ConstraintKind] = dict(kinds if kinds is not None else KINDS)

    def kind(self, name: str) -> ConstraintKind:
        try:
            return self._kinds[name]
        except KeyError:
            raise KeyError(f"unknown constraint kind {name!r}") from None

    def has_kind(self, name: str) -> bool:
        return name in self._kinds

    @property
    def kind_names(self) -> Tuple[str, ...]:
        return tuple(self._kinds)

    def dimension(self, constraint: ConstraintLike, target: PointName) -> Optional[int]:
        """Static locus dimension of ``constraint`` applied to ``target``."""

        kind = self.kind(constraint.kind)
        return kind.dimension(constraint.points.index(target))

    def coincident(self, a: ConstraintLike, b: ConstraintLike, target: PointName) -> bool:
        """``True`` when ``a`` and ``b`` yield the same locus for ``target`` whatever the positions."""

        if a.kind != b.kind or target not in a.points or target not in b.points:
            return False
        kind = self.kind(a.kind)
        return kind.canonical(a.points, a.value) == kind.canonical(b.points, b.value)

    def possibility_space(
        self,
        constraint: ConstraintLike,
        target: PointName,
        positions: Mapping[PointName, Position],
    ) -> Locus:
        kind = self.kind(constraint.kind)
        slot = constraint.points.index(target)
        if kind.dimension(slot) is None:
            raise LocusUnavailable(f"{constraint.kind} has no locus for slot {slot}")
        slots = [None if name == target else positions.get(name) for name in constraint.points]
        locus = kind.locus(slot, slots, constraint.value, self.tolerance)
        return replace(locus, source=constraint.cid)

    def intersect(self, loci: Sequence[Locus]) -> Tuple[Position, ...]:
        return intersect(loci, self.tolerance)

    def residual(self, constraint: ConstraintLike, positions: Mapping[PointName, Position]) -> float:
        kind = self.kind(constraint.kind)
        pts = [positions[name] for name in constraint.points]
        return abs(kind.residual(pts, constraint.value))


apply_debug_logging(
    globals(),
    logger=logger,
    wrap_methods=True,
    skip={"GeometryProvider.kind", "GeometryProvider.has_kind", "GeometryProvider.dimension", "GeometryProvider.residual"},
)


__all__ = [
    "ConstraintKind",
    "ConstraintLike",
    "DegenerateIntersection",
    "EPSILON",
    "GeometryError",
    "GeometryProvider",
    "KINDS",
    "LOCUS_DIMENSIONS",
    "Locus",
    "LocusKind",
    "LocusUnavailable",
    "Position",
    "UnderdeterminedIntersection",
    "filter_points",
    "format_position",
    "intersect",
    "intersect_pair",
    "register_kind",
]
