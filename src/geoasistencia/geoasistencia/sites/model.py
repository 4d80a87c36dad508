from __future__ import annotations

from dataclasses import dataclass

from ..geo.model import Coordinate


@dataclass(frozen=True)
class Site:
    """Sede de trabajo con su geocerca circular."""

    site_id: int
    name: str
    coord: Coordinate
    radius_meters: float
