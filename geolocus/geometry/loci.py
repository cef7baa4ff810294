"""Possibility spaces (loci) produced by the geometry provider.

A :class:`Locus` is a tagged variant rather than a class hierarchy: every
instance carries a ``kind`` tag and the payload fields relevant to that tag.
Intersection code dispatches on pairs of tags (see :mod:`.intersect`).

=========== ===== ==========================================================
kind        dim   payload
=========== ===== ==========================================================
points      0     ``points``
line        1     ``anchor`` (a point on the line), ``direction`` (unit)
ray         1     ``anchor`` (start), ``direction`` (unit)
circle      1     ``anchor`` (centre), ``radius``
halfplane   2     ``direction`` (normal ``n``), ``offset`` (``c``);
                  the region is ``n . X + c >= 0``
disc        2     ``anchor`` (centre), ``radius``
plane       2     none
=========== ===== ==========================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Literal, Optional, Sequence, Tuple

from .math_utils import (
    EPSILON,
    Position,
    _add2,
    _cross2,
    _dist2,
    _dot2,
    _norm2,
    _same_point,
    _scale2,
    _unique_points,
    _unit2,
    _vec2,
    format_position,
)

LocusKind = Literal["points", "line", "ray", "circle", "halfplane", "disc", "plane"]

LOCUS_DIMENSIONS: Dict[str, int] = {
    "points": 0,
    "line": 1,
    "ray": 1,
    "circle": 1,
    "halfplane": 2,
    "disc": 2,
    "plane": 2,
}


@dataclass(frozen=True)
class Locus:
    """Set of positions one point may occupy under one constraint."""

    kind: LocusKind
    points: Tuple[Position, ...] = ()
    anchor: Position = (0.0, 0.0)
    direction: Position = (1.0, 0.0)
    radius: float = 0.0
    offset: float = 0.0
    source: Optional[int] = None

    # -- constructors -----------------------------------------------------

    @classmethod
    def point_set(cls, points: Sequence[Position], source: Optional[int] = None) -> "Locus":
        return cls(kind="points", points=tuple(_unique_points(points)), source=source)

    @classmethod
    def line(cls, anchor: Position, direction: Position, source: Optional[int] = None) -> "Locus":
        return cls(kind="line", anchor=anchor, direction=_unit2(direction), source=source)

    @classmethod
    def ray(cls, anchor: Position, direction: Position, source: Optional[int] = None) -> "Locus":
        return cls(kind="ray", anchor=anchor, direction=_unit2(direction), source=source)

    @classmethod
    def circle(cls, centre: Position, radius: float, source: Optional[int] = None) -> "Locus":
        return cls(kind="circle", anchor=centre, radius=abs(float(radius)), source=source)

    @classmethod
    def halfplane(cls, normal: Position, offset: float, source: Optional[int] = None) -> "Locus":
        scale = _norm2(normal)
        if scale <= 0.0:
            raise ZeroDivisionError("half-plane normal must be non-zero")
        return cls(
            kind="halfplane",
            direction=(normal[0] / scale, normal[1] / scale),
            offset=float(offset) / scale,
            source=source,
        )

    @classmethod
    def disc(cls, centre: Position, radius: float, source: Optional[int] = None) -> "Locus":
        return cls(kind="disc", anchor=centre, radius=abs(float(radius)), source=source)

    @classmethod
    def plane(cls, source: Optional[int] = None) -> "Locus":
        return cls(kind="plane", source=source)

    # -- queries ----------------------------------------------------------

    @property
    def dimension(self) -> int:
        return LOCUS_DIMENSIONS[self.kind]

    @property
    def is_curve(self) -> bool:
        return self.dimension == 1

    @property
    def is_region(self) -> bool:
        return self.dimension == 2

    def distance_to(self, point: Position) -> float:
        """Euclidean distance from ``point`` to the locus (0 inside regions)."""

        if self.kind == "points":
            if not self.points:
                return math.inf
            return min(_dist2(point, p) for p in self.points)
        if self.kind == "line":
            return abs(_cross2(self.direction, _vec2(self.anchor, point)))
        if self.kind == "ray":
            rel = _vec2(self.anchor, point)
            if _dot2(rel, self.direction) < 0.0:
                return _norm2(rel)
            return abs(_cross2(self.direction, rel))
        if self.kind == "circle":
            return abs(_dist2(self.anchor, point) - self.radius)
        if self.kind == "halfplane":
            return max(0.0, -(_dot2(self.direction, point) + self.offset))
        if self.kind == "disc":
            return max(0.0, _dist2(self.anchor, point) - self.radius)
        return 0.0

    def contains(self, point: Position, tol: float = EPSILON) -> bool:
        if self.kind == "points":
            return any(_same_point(point, p, tol) for p in self.points)
        return self.distance_to(point) <= tol

    def sample(self, count: int = 1) -> Tuple[Position, ...]:
        """Return ``count`` canonical positions on the locus.

        The first sample is always the same for a given locus: the centre
        plus ``+x * radius`` on circles, one unit along a ray, the anchor of a
        line.
        """

        count = max(1, int(count))
        if self.kind == "points":
            return self.points[:count]
        if self.kind == "circle":
            return tuple(
                _add2(
                    self.anchor,
                    (
                        self.radius * math.cos(2.0 * math.pi * i / count),
                        self.radius * math.sin(2.0 * math.pi * i / count),
                    ),
                )
                for i in range(count)
            )
        if self.kind == "ray":
            return tuple(_add2(self.anchor, _scale2(self.direction, float(i + 1))) for i in range(count))
        if self.kind == "line":
            out = [self.anchor]
            step = 1
            while len(out) < count:
                out.append(_add2(self.anchor, _scale2(self.direction, float(step))))
                if len(out) < count:
                    out.append(_add2(self.anchor, _scale2(self.direction, float(-step))))
                step += 1
            return tuple(out)
        if self.kind == "disc":
            return (self.anchor,)
        if self.kind == "halfplane":
            # foot of the origin on the boundary
            return (_scale2(self.direction, -self.offset),)
        return ((0.0, 0.0),)

    def describe(self) -> str:
        if self.kind == "points":
            return "points{" + ", ".join(format_position(p) for p in self.points) + "}"
        if self.kind in {"line", "ray"}:
            return f"{self.kind}(at={format_position(self.anchor)}, dir={format_position(self.direction)})"
        if self.kind in {"circle", "disc"}:
            return f"{self.kind}(centre={format_position(self.anchor)}, r={self.radius:.6g})"
        if self.kind == "halfplane":
            return f"halfplane(n={format_position(self.direction)}, c={self.offset:.6g})"
        return "plane"


__all__ = ["LOCUS_DIMENSIONS", "Locus", "LocusKind"]
