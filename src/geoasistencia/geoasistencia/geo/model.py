from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Coordinate:
    """A point on Earth in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class Fix:
    """One location sample from the phone.

    Attributes:
        coord: Reported position.
        accuracy_meters: Horizontal accuracy radius reported by the sensor.
        captured_at: When the sensor took the sample (not when we received it).
    """

    coord: Coordinate
    accuracy_meters: float
    captured_at: datetime


@dataclass(frozen=True)
class GeofenceStatus:
    """Result of evaluating a fix against a site. Derived, never persisted."""

    inside: bool
    distance_meters: Optional[float]

    @classmethod
    def unknown(cls) -> "GeofenceStatus":
        return cls(inside=False, distance_meters=None)
