"""Location source contract and the shared normalization/watchdog logic."""

from __future__ import annotations

import logging
import time
from abc import ABC
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Protocol

from ..common.datetime_utils import dt_from_epoch_ms
from ..common.validators import require_latitude, require_longitude, require_non_negative
from ..core.constants import DEFAULT_GPS_TIMEOUT_SECONDS
from ..core.exceptions import ValidationError
from ..geo.model import Coordinate, Fix

logger = logging.getLogger(__name__)

FixCallback = Callable[[Fix], None]
ErrorCallback = Callable[[str], None]

GPS_TIMEOUT_MESSAGE = "Tiempo de espera del GPS agotado"


class LocationSource(Protocol):
    """Start/stop subscription to continuous location updates."""

    @property
    def active(self) -> bool:
        raise NotImplementedError

    def start(self, on_fix: FixCallback, on_error: ErrorCallback) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


def normalize_reading(reading: Mapping[str, Any]) -> Fix:
    """Turn a raw reading into a ``Fix``.

    Accepts the browser Geolocation shape (``{"coords": {...}, "timestamp": ms}``)
    as well as flat ``lat``/``lng`` or ``latitude``/``longitude`` keys. A missing
    timestamp means "now"; a missing accuracy is taken as 0.

    Raises:
        ValidationError: If the reading is malformed or coordinates are out of range.
    """

    if not isinstance(reading, Mapping):
        raise ValidationError("Lectura GPS inválida")
    coords = reading.get("coords") or reading
    if not isinstance(coords, Mapping):
        raise ValidationError("Lectura GPS inválida")
    lat = coords.get("latitude", coords.get("lat"))
    lng = coords.get("longitude", coords.get("lng"))
    if lat is None or lng is None:
        raise ValidationError("Lectura GPS sin coordenadas")

    accuracy = coords.get("accuracy")
    timestamp = reading.get("timestamp")
    if timestamp is None:
        captured_at = datetime.now(timezone.utc)
    else:
        try:
            captured_at = dt_from_epoch_ms(timestamp)
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise ValidationError("timestamp inválido") from exc

    return Fix(
        coord=Coordinate(lat=require_latitude(lat), lng=require_longitude(lng)),
        accuracy_meters=require_non_negative(accuracy or 0.0, "accuracy"),
        captured_at=captured_at,
    )


class BaseLocationSource(ABC):
    """Delivers normalized, strictly time-ordered fixes to one subscriber.

    Subclasses feed raw readings through ``_deliver`` and sensor failures
    through ``_report``. ``tick`` reports a timeout once when no fix arrived
    within ``timeout_seconds`` since start or since the last fix.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_GPS_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._timeout_seconds = float(timeout_seconds)
        self._clock = clock
        self._on_fix: Optional[FixCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._last_captured_at: Optional[datetime] = None
        self._deadline = 0.0
        self._timed_out = False

    @property
    def active(self) -> bool:
        return self._on_fix is not None

    def start(self, on_fix: FixCallback, on_error: ErrorCallback) -> None:
        if self.active:
            logger.debug("%s already started", type(self).__name__)
            return
        self._on_fix = on_fix
        self._on_error = on_error
        self._last_captured_at = None
        self._deadline = self._clock() + self._timeout_seconds
        self._timed_out = False

    def stop(self) -> None:
        self._on_fix = None
        self._on_error = None

    def tick(self) -> None:
        if not self.active or self._timed_out:
            return
        if self._clock() >= self._deadline:
            self._timed_out = True
            self._report(GPS_TIMEOUT_MESSAGE)

    def _deliver(self, reading: Mapping[str, Any]) -> None:
        if not self.active:
            logger.debug("Dropping reading, %s is stopped", type(self).__name__)
            return

        try:
            fix = normalize_reading(reading)
        except ValidationError as exc:
            self._report(str(exc))
            return

        if self._last_captured_at is not None and fix.captured_at <= self._last_captured_at:
            logger.debug("Dropping stale fix captured at %s", fix.captured_at.isoformat())
            return

        self._last_captured_at = fix.captured_at
        self._deadline = self._clock() + self._timeout_seconds
        self._timed_out = False
        self._on_fix(fix)

    def _report(self, message: str) -> None:
        if not self.active:
            return
        logger.info("Location unavailable: %s", message)
        self._on_error(message or "Error GPS")
