from __future__ import annotations

from typing import Optional, Protocol, Tuple

from .math_utils import Position

PointName = str


class GeometryError(RuntimeError):
    """Base class for failures raised by the geometry provider."""


class DegenerateIntersection(GeometryError):
    """Two loci coincide over a continuous range instead of meeting in points."""

    def __init__(self, message: str, sources: Tuple[Optional[int], ...] = ()):
        super().__init__(message)
        self.sources = sources


class LocusUnavailable(GeometryError):
    """A constraint cannot produce a locus from the given known positions."""


class UnderdeterminedIntersection(GeometryError):
    """The supplied loci do not reduce to a finite candidate set."""


class ConstraintLike(Protocol):
    cid: int
    kind: str
    points: Tuple[PointName, ...]
    value: Optional[float]


__all__ = [
    "ConstraintLike",
    "DegenerateIntersection",
    "GeometryError",
    "LocusUnavailable",
    "PointName",
    "Position",
    "UnderdeterminedIntersection",
]
