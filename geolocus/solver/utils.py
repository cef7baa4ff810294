"""Utility helpers shared across solver modules."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Tuple

from .types import PointName

logger = logging.getLogger(__name__)


def normalize_point_coords(
    coords: Mapping[PointName, Tuple[float, float]],
    scale: float = 100.0,
) -> Dict[PointName, Tuple[float, float]]:
    """Normalize a coordinate mapping into ``[0, scale]``.

    Both axes share one factor so the figure keeps its shape; the longer
    axis spans the full range.
    """

    if not coords:
        return {}

    xs = [pt[0] for pt in coords.values()]
    ys = [pt[1] for pt in coords.values()]
    min_x, min_y = min(xs), min(ys)
    span = max(max(xs) - min_x, max(ys) - min_y)

    normalized: Dict[PointName, Tuple[float, float]] = {}
    for name, (x, y) in coords.items():
        nx = 0.0 if span == 0 else (x - min_x) / span
        ny = 0.0 if span == 0 else (y - min_y) / span
        normalized[name] = (nx * scale, ny * scale)

    logger.info("Normalized coordinates for %d points with scale=%s", len(coords), scale)
    return normalized


__all__ = ["normalize_point_coords"]
