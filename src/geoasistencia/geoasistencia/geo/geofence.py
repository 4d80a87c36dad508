"""Circular geofence containment."""

from __future__ import annotations

from typing import Optional

from ..sites.model import Site
from .geodesy import distance_meters
from .model import Fix, GeofenceStatus


def evaluate(fix: Optional[Fix], site: Optional[Site]) -> GeofenceStatus:
    """Evaluate a fix against a site's circular geofence.

    Without a fix or a site containment is undefined and reported as outside
    with no distance. A fix exactly on the boundary counts as inside; there is
    no hysteresis band.
    """

    if fix is None or site is None:
        return GeofenceStatus.unknown()

    dist = distance_meters(fix.coord, site.coord)
    return GeofenceStatus(inside=dist <= site.radius_meters, distance_meters=dist)
