from __future__ import annotations

import math
from typing import Iterable, List, Tuple

Position = Tuple[float, float]

EPSILON = 1e-9
_DENOM_EPS = 1e-12


def _vec2(a: Position, b: Position) -> Position:
    return b[0] - a[0], b[1] - a[1]


def _add2(a: Position, b: Position) -> Position:
    return a[0] + b[0], a[1] + b[1]


def _scale2(v: Position, k: float) -> Position:
    return v[0] * k, v[1] * k


def _dot2(a: Position, b: Position) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _cross2(a: Position, b: Position) -> float:
    return a[0] * b[1] - a[1] * b[0]


def _norm_sq2(v: Position) -> float:
    return _dot2(v, v)


def _norm2(v: Position) -> float:
    return math.sqrt(max(_norm_sq2(v), 0.0))


def _dist2(a: Position, b: Position) -> float:
    return _norm2(_vec2(a, b))


def _midpoint2(a: Position, b: Position) -> Position:
    return (a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5


def _rotate90(v: Position) -> Position:
    return -v[1], v[0]


def _rotate(v: Position, angle: float) -> Position:
    c = math.cos(angle)
    s = math.sin(angle)
    return v[0] * c - v[1] * s, v[0] * s + v[1] * c


def _unit2(v: Position) -> Position:
    n = _norm2(v)
    if n <= _DENOM_EPS:
        raise ZeroDivisionError("cannot normalise a zero-length vector")
    return v[0] / n, v[1] / n


def _from_angle(angle: float) -> Position:
    return math.cos(angle), math.sin(angle)


def _about_zero(value: float, tol: float = EPSILON) -> bool:
    return abs(value) <= tol


def _about_eq(a: float, b: float, tol: float = EPSILON) -> bool:
    return abs(a - b) <= tol


def _same_point(a: Position, b: Position, tol: float = EPSILON) -> bool:
    return _about_eq(a[0], b[0], tol) and _about_eq(a[1], b[1], tol)


def _unique_points(points: Iterable[Position], tol: float = EPSILON) -> List[Position]:
    """Drop near-duplicates while keeping first-seen order."""

    unique: List[Position] = []
    for point in points:
        if any(_same_point(point, seen, tol) for seen in unique):
            continue
        unique.append(point)
    return unique


def format_position(point: Position) -> str:
    return f"({point[0]:.6f}, {point[1]:.6f})"


__all__ = [
    "EPSILON",
    "Position",
    "_about_eq",
    "_about_zero",
    "_add2",
    "_cross2",
    "_dist2",
    "_dot2",
    "_from_angle",
    "_midpoint2",
    "_norm2",
    "_norm_sq2",
    "_rotate",
    "_rotate90",
    "_same_point",
    "_scale2",
    "_unique_points",
    "_unit2",
    "_vec2",
    "format_position",
]
