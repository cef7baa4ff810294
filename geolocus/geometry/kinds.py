"""Constraint kinds known to the bundled geometry provider.

Each kind maps a *slot* (the index of the target point inside the
constraint's point tuple) plus the positions of the other points to a
:class:`Locus`. ``positions`` passed to ``locus`` always has the target slot
set to ``None``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from .loci import Locus
from .math_utils import (
    EPSILON,
    Position,
    _add2,
    _cross2,
    _dist2,
    _dot2,
    _from_angle,
    _midpoint2,
    _norm2,
    _rotate,
    _rotate90,
    _scale2,
    _unit2,
    _vec2,
)
from .types import LocusUnavailable

Slots = Sequence[Optional[Position]]
LocusFunc = Callable[[int, Slots, Optional[float], float], Locus]
ResidualFunc = Callable[[Sequence[Position], Optional[float]], float]
CanonicalFunc = Callable[[Tuple[str, ...], Optional[float]], Hashable]

_VALUE_DIGITS = 9


@dataclass(frozen=True)
class ConstraintKind:
    """Static description of one constraint kind."""

    name: str
    arity: int
    needs_value: bool
    dimensions: Tuple[Optional[int], ...]
    locus: LocusFunc
    residual: ResidualFunc
    canonical: CanonicalFunc
    description: str = ""

    def dimension(self, slot: int) -> Optional[int]:
        """Locus dimension for ``slot`` or ``None`` when the kind only filters."""

        return self.dimensions[slot]


def _value(value: Optional[float]) -> float:
    if value is None:
        raise LocusUnavailable("constraint requires a numeric value")
    return float(value)


def _rounded(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(float(value), _VALUE_DIGITS)


def _wrap_angle(angle: float) -> float:
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped < 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def _direction(a: Position, b: Position, tol: float, what: str) -> Position:
    vec = _vec2(a, b)
    if _norm2(vec) <= tol:
        raise LocusUnavailable(f"{what}: reference points coincide")
    return _unit2(vec)


def _known(positions: Slots, *slots: int) -> List[Position]:
    out: List[Position] = []
    for slot in slots:
        pos = positions[slot]
        if pos is None:
            raise LocusUnavailable(f"slot {slot} is not known")
        out.append(pos)
    return out


# ---------------------------------------------------------------------------
# distance(A, B) = r


def _distance_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    (centre,) = _known(positions, 1 - slot)
    return Locus.circle(centre, _value(value))


def _distance_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    return _dist2(pts[0], pts[1]) - float(value or 0.0)


def _distance_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    return ("distance", frozenset(points), _rounded(value))


# ---------------------------------------------------------------------------
# orientation(A, B) = theta: direction A -> B has angle theta


def _orientation_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    theta = _value(value)
    if slot == 1:
        (start,) = _known(positions, 0)
        return Locus.ray(start, _from_angle(theta))
    (end,) = _known(positions, 1)
    return Locus.ray(end, _from_angle(theta + math.pi))


def _orientation_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    rel = _vec2(pts[0], pts[1])
    unit = _from_angle(float(value or 0.0))
    if _dot2(rel, unit) < 0.0:
        return _norm2(rel)
    return _cross2(unit, rel)


def _orientation_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    theta = _wrap_angle(float(value or 0.0))
    a, b = points
    if b < a:
        a, b = b, a
        theta = _wrap_angle(theta + math.pi)
    return ("orientation", a, b, _rounded(theta))


# ---------------------------------------------------------------------------
# angle(A, V, C) = theta: signed angle from ray V->A to ray V->C


def _angle_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    theta = _value(value)
    if slot == 2:
        a, v = _known(positions, 0, 1)
        return Locus.ray(v, _rotate(_direction(v, a, tol, "angle"), theta))
    if slot == 0:
        v, c = _known(positions, 1, 2)
        return Locus.ray(v, _rotate(_direction(v, c, tol, "angle"), -theta))
    # vertex: arc of the circle seeing chord A-C under theta
    a, c = _known(positions, 0, 2)
    chord = _vec2(a, c)
    half = 0.5 * _norm2(chord)
    if half <= tol:
        raise LocusUnavailable("angle: chord endpoints coincide")
    sin_t = math.sin(theta)
    if abs(sin_t) <= tol:
        return Locus.line(a, chord)
    normal = _rotate90(_unit2(chord))
    centre = _add2(_midpoint2(a, c), _scale2(normal, half * math.cos(theta) / sin_t))
    return Locus.circle(centre, half / abs(sin_t))


def _angle_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    a, v, c = pts
    va = _vec2(v, a)
    vc = _vec2(v, c)
    if _norm2(va) <= EPSILON or _norm2(vc) <= EPSILON:
        return 0.0
    measured = math.atan2(_cross2(va, vc), _dot2(va, vc))
    return _wrap_angle(measured - float(value or 0.0))


def _angle_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    a, v, c = points
    theta = _wrap_angle(float(value or 0.0))
    if c < a:
        a, c = c, a
        theta = -theta
    return ("angle", a, v, c, _rounded(theta))


# ---------------------------------------------------------------------------
# incident(P, A, B): the three points are collinear


def _incident_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    others = [i for i in range(3) if i != slot]
    p, q = _known(positions, *others)
    return Locus.line(p, _direction(p, q, tol, "incident"))


def _incident_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    p, a, b = pts
    base = _vec2(a, b)
    length = _norm2(base)
    if length <= EPSILON:
        return 0.0
    return _cross2(base, _vec2(a, p)) / length


def _incident_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    return ("incident", frozenset(points))


# ---------------------------------------------------------------------------
# parallel(A, B, C, D) / perpendicular(A, B, C, D): line AB against line CD


def _partner(slot: int) -> int:
    return {0: 1, 1: 0, 2: 3, 3: 2}[slot]


def _make_direction_locus(turn: bool, name: str) -> LocusFunc:
    def locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
        ref = (2, 3) if slot < 2 else (0, 1)
        p, q = _known(positions, *ref)
        direction = _direction(p, q, tol, name)
        if turn:
            direction = _rotate90(direction)
        (through,) = _known(positions, _partner(slot))
        return Locus.line(through, direction)

    return locus


def _parallel_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    ab = _vec2(pts[0], pts[1])
    cd = _vec2(pts[2], pts[3])
    scale = max(_norm2(ab), _norm2(cd))
    if scale <= EPSILON:
        return 0.0
    return _cross2(ab, cd) / scale


def _perpendicular_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    ab = _vec2(pts[0], pts[1])
    cd = _vec2(pts[2], pts[3])
    scale = max(_norm2(ab), _norm2(cd))
    if scale <= EPSILON:
        return 0.0
    return _dot2(ab, cd) / scale


def _make_line_pair_key(name: str) -> CanonicalFunc:
    def key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
        return (name, frozenset([frozenset(points[:2]), frozenset(points[2:])]))

    return key


# ---------------------------------------------------------------------------
# midpoint(M, A, B) and coincident(A, B)


def _midpoint_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    if slot == 0:
        a, b = _known(positions, 1, 2)
        return Locus.point_set([_midpoint2(a, b)])
    m, other = _known(positions, 0, 3 - slot)
    return Locus.point_set([(2.0 * m[0] - other[0], 2.0 * m[1] - other[1])])


def _midpoint_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    return _dist2(pts[0], _midpoint2(pts[1], pts[2]))


def _midpoint_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    return ("midpoint", points[0], frozenset(points[1:]))


def _coincident_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    (other,) = _known(positions, 1 - slot)
    return Locus.point_set([other])


def _coincident_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    return _dist2(pts[0], pts[1])


def _coincident_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    return ("coincident", frozenset(points))


# ---------------------------------------------------------------------------
# line-distance(P, A, B) = d: signed distance of P from A->B, left positive.
# Tangency of line AB to the circle of radius |d| around P.


def _line_distance_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    if slot != 0:
        raise LocusUnavailable("line-distance only yields a locus for its subject point")
    a, b = _known(positions, 1, 2)
    direction = _direction(a, b, tol, "line-distance")
    return Locus.line(_add2(a, _scale2(_rotate90(direction), _value(value))), direction)


def _line_distance_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    p, a, b = pts
    base = _vec2(a, b)
    length = _norm2(base)
    if length <= EPSILON:
        return _dist2(p, a) - abs(float(value or 0.0))
    return _cross2(base, _vec2(a, p)) / length - float(value or 0.0)


def _line_distance_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    p, a, b = points
    d = float(value or 0.0)
    if b < a:
        a, b = b, a
        d = -d
    return ("line-distance", p, a, b, _rounded(d))


# ---------------------------------------------------------------------------
# side(P, A, B): P lies left of (or on) the directed line A->B


def _side_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    if slot == 0:
        a, b = _known(positions, 1, 2)
        normal = _rotate90(_vec2(a, b))
        offset = -_dot2(normal, a)
    elif slot == 1:
        p, b = _known(positions, 0, 2)
        w = _vec2(p, b)
        normal = (w[1], -w[0])
        offset = _cross2(b, p)
    else:
        p, a = _known(positions, 0, 1)
        w = _vec2(a, p)
        normal = (w[1], -w[0])
        offset = -_cross2(a, w)
    if _norm2(normal) <= tol:
        raise LocusUnavailable("side: reference points coincide")
    return Locus.halfplane(normal, offset)


def _side_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    p, a, b = pts
    base = _vec2(a, b)
    length = _norm2(base)
    if length <= EPSILON:
        return 0.0
    return max(0.0, -_cross2(base, _vec2(a, p)) / length)


def _side_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    # orientation of triangle P-A-B is invariant under rotation of the tuple
    rotations = [points[i:] + points[:i] for i in range(3)]
    return ("side", min(rotations))


# ---------------------------------------------------------------------------
# within(P, C) = r: P lies inside the disc of radius r around C


def _within_locus(slot: int, positions: Slots, value: Optional[float], tol: float) -> Locus:
    (centre,) = _known(positions, 1 - slot)
    return Locus.disc(centre, _value(value))


def _within_residual(pts: Sequence[Position], value: Optional[float]) -> float:
    return max(0.0, _dist2(pts[0], pts[1]) - float(value or 0.0))


def _within_key(points: Tuple[str, ...], value: Optional[float]) -> Hashable:
    return ("within", frozenset(points), _rounded(value))


KINDS: Dict[str, ConstraintKind] = {
    kind.name: kind
    for kind in [
        ConstraintKind(
            name="distance",
            arity=2,
            needs_value=True,
            dimensions=(1, 1),
            locus=_distance_locus,
            residual=_distance_residual,
            canonical=_distance_key,
            description="distance A-B = length",
        ),
        ConstraintKind(
            name="orientation",
            arity=2,
            needs_value=True,
            dimensions=(1, 1),
            locus=_orientation_locus,
            residual=_orientation_residual,
            canonical=_orientation_key,
            description="direction A->B has the given angle",
        ),
        ConstraintKind(
            name="angle",
            arity=3,
            needs_value=True,
            dimensions=(1, 1, 1),
            locus=_angle_locus,
            residual=_angle_residual,
            canonical=_angle_key,
            description="signed angle A-V-C",
        ),
        ConstraintKind(
            name="incident",
            arity=3,
            needs_value=False,
            dimensions=(1, 1, 1),
            locus=_incident_locus,
            residual=_incident_residual,
            canonical=_incident_key,
            description="P lies on line A-B",
        ),
        ConstraintKind(
            name="parallel",
            arity=4,
            needs_value=False,
            dimensions=(1, 1, 1, 1),
            locus=_make_direction_locus(False, "parallel"),
            residual=_parallel_residual,
            canonical=_make_line_pair_key("parallel"),
            description="A-B parallel to C-D",
        ),
        ConstraintKind(
            name="perpendicular",
            arity=4,
            needs_value=False,
            dimensions=(1, 1, 1, 1),
            locus=_make_direction_locus(True, "perpendicular"),
            residual=_perpendicular_residual,
            canonical=_make_line_pair_key("perpendicular"),
            description="A-B perpendicular to C-D (distinct points; a corner at V is angle A-V-C = 90)",
        ),
        ConstraintKind(
            name="midpoint",
            arity=3,
            needs_value=False,
            dimensions=(0, 0, 0),
            locus=_midpoint_locus,
            residual=_midpoint_residual,
            canonical=_midpoint_key,
            description="M is the midpoint of A-B",
        ),
        ConstraintKind(
            name="coincident",
            arity=2,
            needs_value=False,
            dimensions=(0, 0),
            locus=_coincident_locus,
            residual=_coincident_residual,
            canonical=_coincident_key,
            description="A and B coincide",
        ),
        ConstraintKind(
            name="line-distance",
            arity=3,
            needs_value=True,
            dimensions=(1, None, None),
            locus=_line_distance_locus,
            residual=_line_distance_residual,
            canonical=_line_distance_key,
            description="signed distance of P from line A->B (tangency)",
        ),
        ConstraintKind(
            name="side",
            arity=3,
            needs_value=False,
            dimensions=(2, 2, 2),
            locus=_side_locus,
            residual=_side_residual,
            canonical=_side_key,
            description="P lies left of A->B",
        ),
        ConstraintKind(
            name="within",
            arity=2,
            needs_value=True,
            dimensions=(2, 2),
            locus=_within_locus,
            residual=_within_residual,
            canonical=_within_key,
            description="P lies within the given radius of C",
        ),
    ]
}


def register_kind(kind: ConstraintKind) -> None:
    """Add or replace a constraint kind in the shared registry."""

    if len(kind.dimensions) != kind.arity:
        raise ValueError(f"kind {kind.name!r}: dimensions must list one entry per point")
    KINDS[kind.name] = kind


__all__ = ["ConstraintKind", "KINDS", "register_kind"]
