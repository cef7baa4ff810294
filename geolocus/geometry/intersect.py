"""Intersection of loci.

Pairwise intersection dispatches on the pair of locus tags. Rays reuse the
line routines and are then clipped by membership. Every routine returns the
intersection points in a deterministic order and raises
:class:`DegenerateIntersection` when the two curves share a continuous range.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Sequence, Tuple

from ..logging_utils import apply_debug_logging
from .loci import Locus
from .math_utils import (
    EPSILON,
    Position,
    _add2,
    _cross2,
    _dot2,
    _norm2,
    _rotate90,
    _scale2,
    _unique_points,
    _vec2,
)
from .types import DegenerateIntersection, UnderdeterminedIntersection

logger = logging.getLogger(__name__)

PairFunc = Callable[[Locus, Locus, float], List[Position]]


def _degenerate(a: Locus, b: Locus, why: str) -> DegenerateIntersection:
    return DegenerateIntersection(
        f"{a.describe()} and {b.describe()} {why}", sources=(a.source, b.source)
    )


def _line_interval(locus: Locus, base: Locus) -> Tuple[float, float]:
    """Parameter interval of a line-like locus along ``base``'s direction."""

    t0 = _dot2(_vec2(base.anchor, locus.anchor), base.direction)
    if locus.kind == "line":
        return -math.inf, math.inf
    if _dot2(locus.direction, base.direction) > 0.0:
        return t0, math.inf
    return -math.inf, t0


def _line_line(a: Locus, b: Locus, tol: float) -> List[Position]:
    denom = _cross2(a.direction, b.direction)
    diff = _vec2(a.anchor, b.anchor)
    if abs(denom) <= tol:
        if abs(_cross2(a.direction, diff)) > tol:
            # parallel and apart
            return []
        lo_a, hi_a = _line_interval(a, a)
        lo_b, hi_b = _line_interval(b, a)
        lo = max(lo_a, lo_b)
        hi = min(hi_a, hi_b)
        if hi < lo - tol:
            return []
        if hi - lo > tol:
            raise _degenerate(a, b, "overlap along a common line")
        return [_add2(a.anchor, _scale2(a.direction, lo))]
    t_a = _cross2(diff, b.direction) / denom
    point = _add2(a.anchor, _scale2(a.direction, t_a))
    return [p for p in [point] if a.contains(p, tol) and b.contains(p, tol)]


def _line_circle(line: Locus, circle: Locus, tol: float) -> List[Position]:
    o_c = _vec2(circle.anchor, line.anchor)
    v_o_c = _dot2(line.direction, o_c)
    delta = v_o_c * v_o_c - (_dot2(o_c, o_c) - circle.radius * circle.radius)
    slack = 2.0 * tol * max(1.0, circle.radius)
    if delta < -slack:
        return []
    if delta <= slack:
        # tangent
        params = [-v_o_c]
    else:
        root = math.sqrt(delta)
        params = [-v_o_c + root, -v_o_c - root]
    points = [_add2(line.anchor, _scale2(line.direction, t)) for t in params]
    return [p for p in points if line.contains(p, tol)]


def _circle_line(circle: Locus, line: Locus, tol: float) -> List[Position]:
    return _line_circle(line, circle, tol)


def _circle_circle(a: Locus, b: Locus, tol: float) -> List[Position]:
    offset = _vec2(a.anchor, b.anchor)
    d = _norm2(offset)
    r0, r1 = a.radius, b.radius
    if d <= tol:
        if abs(r0 - r1) <= tol:
            if r0 <= tol:
                return [a.anchor]
            raise _degenerate(a, b, "are the same circle")
        return []
    if d < abs(r0 - r1) - tol or d > r0 + r1 + tol:
        return []
    direction = (offset[0] / d, offset[1] / d)
    along = (r0 * r0 - r1 * r1 + d * d) / (2.0 * d)
    foot = _add2(a.anchor, _scale2(direction, along))
    h_sq = r0 * r0 - along * along
    if h_sq <= 2.0 * tol * max(1.0, r0, r1):
        # circles touch
        return [foot]
    h_v = _scale2(_rotate90(direction), math.sqrt(h_sq))
    return [_add2(foot, h_v), _add2(foot, _scale2(h_v, -1.0))]


_PAIR_DISPATCH: Dict[Tuple[str, str], PairFunc] = {
    ("line", "line"): _line_line,
    ("line", "ray"): _line_line,
    ("ray", "line"): _line_line,
    ("ray", "ray"): _line_line,
    ("line", "circle"): _line_circle,
    ("ray", "circle"): _line_circle,
    ("circle", "line"): _circle_line,
    ("circle", "ray"): _circle_line,
    ("circle", "circle"): _circle_circle,
}


def intersect_pair(a: Locus, b: Locus, tol: float = EPSILON) -> Tuple[Position, ...]:
    """Intersect two 1D loci into a finite point tuple."""

    try:
        func = _PAIR_DISPATCH[(a.kind, b.kind)]
    except KeyError:
        raise UnderdeterminedIntersection(
            f"no finite intersection rule for {a.kind} x {b.kind}"
        ) from None
    return tuple(_unique_points(func(a, b, tol), tol))


def filter_points(
    points: Sequence[Position], loci: Sequence[Locus], tol: float = EPSILON
) -> Tuple[Position, ...]:
    """Keep the points contained in every locus, preserving order."""

    return tuple(p for p in points if all(locus.contains(p, tol) for locus in loci))


def intersect(loci: Sequence[Locus], tol: float = EPSILON) -> Tuple[Position, ...]:
    """Common intersection of ``loci`` as a finite, ordered point tuple.

    0D loci are used directly; otherwise the first pair of curves that meets
    in a finite set seeds the candidates. All remaining loci, 2D regions
    included, then act as membership filters. An empty tuple means the loci
    have no common point; :class:`DegenerateIntersection` means every curve
    pair shares a continuous range.
    """

    finite = [locus for locus in loci if locus.dimension == 0]
    curves = [locus for locus in loci if locus.dimension == 1]

    if finite:
        seed = finite[0]
        rest = [locus for locus in loci if locus is not seed]
        return filter_points(seed.points, rest, tol)

    if len(curves) < 2:
        raise UnderdeterminedIntersection(
            f"{len(curves)} curve(s) cannot reduce to a finite candidate set"
        )

    first_error = None
    for i in range(len(curves)):
        for j in range(i + 1, len(curves)):
            try:
                seed_points = intersect_pair(curves[i], curves[j], tol)
            except DegenerateIntersection as exc:
                if first_error is None:
                    first_error = exc
                continue
            rest = [locus for locus in loci if locus is not curves[i] and locus is not curves[j]]
            return filter_points(seed_points, rest, tol)

    assert first_error is not None
    raise first_error


apply_debug_logging(globals(), logger=logger)


__all__ = ["filter_points", "intersect", "intersect_pair"]
