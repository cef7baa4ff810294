from __future__ import annotations

import re
from typing import Any, Literal, Optional

from ..geometry import DegenerateIntersection, GeometryError, LocusUnavailable, Position

PointName = str
ConstraintId = int

EntryRole = Literal["origin", "orbiter", "discrete"]
FailureReason = Literal["exhausted", "cancelled"]
SolveStatus = Literal["solved", "ordering-failed", "not-found", "cancelled"]


class SketchError(ValueError):
    """Raised when a constraint graph is built from inconsistent input."""

    def __init__(self, message: str, stmt: Optional[Any] = None):
        super().__init__(message)
        self.stmt = stmt


_POINT_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def is_point_name(value: object) -> bool:
    """Return ``True`` when ``value`` is a valid point identifier."""

    if not isinstance(value, str) or not value:
        return False
    return bool(_POINT_NAME_RE.match(value))


__all__ = [
    "ConstraintId",
    "DegenerateIntersection",
    "EntryRole",
    "FailureReason",
    "GeometryError",
    "LocusUnavailable",
    "PointName",
    "Position",
    "SketchError",
    "SolveStatus",
    "is_point_name",
]
