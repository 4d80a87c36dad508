"""Pure pieces of the session engine: the observation reducer, the on/off
edge fold and the automatic-closure debounce lock."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from ..core.enums import Edge
from ..geo.geofence import evaluate
from ..geo.model import Fix, GeofenceStatus
from ..sites.model import Site


@dataclass(frozen=True)
class FixReceived:
    fix: Fix


@dataclass(frozen=True)
class SignalLost:
    reason: str


@dataclass(frozen=True)
class SiteSelected:
    site: Optional[Site]


TrackingEvent = Union[FixReceived, SignalLost, SiteSelected]


@dataclass(frozen=True)
class Observation:
    """The two booleans the auto-close edge detector watches."""

    signal_available: bool = False
    inside: bool = False


@dataclass(frozen=True)
class Tracking:
    site: Optional[Site] = None
    fix: Optional[Fix] = None
    signal_available: bool = False
    signal_error: Optional[str] = None
    status: GeofenceStatus = GeofenceStatus(inside=False, distance_meters=None)

    @property
    def observation(self) -> Observation:
        return Observation(signal_available=self.signal_available, inside=self.status.inside)


def reduce_tracking(state: Tracking, event: TrackingEvent) -> Tracking:
    """Apply one location/site event.

    A fix that is not strictly newer than the last accepted one leaves the
    state untouched, so duplicates and late arrivals can never flip an
    observation. After a signal loss the last fix and its containment are
    kept; only ``signal_available`` drops.
    """

    if isinstance(event, FixReceived):
        if state.fix is not None and event.fix.captured_at <= state.fix.captured_at:
            return state
        return replace(
            state,
            fix=event.fix,
            signal_available=True,
            signal_error=None,
            status=evaluate(event.fix, state.site),
        )

    if isinstance(event, SignalLost):
        return replace(state, signal_available=False, signal_error=event.reason)

    if isinstance(event, SiteSelected):
        return replace(state, site=event.site, status=evaluate(state.fix, event.site))

    raise TypeError(f"Unknown tracking event: {event!r}")


def detect_edges(previous: Observation, current: Observation) -> tuple[Edge, ...]:
    edges = []
    if previous.signal_available and not current.signal_available:
        edges.append(Edge.SIGNAL_LOST)
    if previous.inside and not current.inside:
        edges.append(Edge.GEOFENCE_EXIT)
    return tuple(edges)


class AutoCloseLock:
    """Single-fire guard for automatic closures.

    ``arm`` when a closure triggers; ``release`` when its submission ends.
    The lock stays armed until ``rearm_after`` seconds past the release, so a
    burst of flapping readings around one real exit yields one mark.
    """

    def __init__(self, rearm_after: float, *, clock: Callable[[], float] = time.monotonic):
        self.rearm_after = float(rearm_after)
        self._clock = clock
        self._armed = False
        self._release_at: Optional[float] = None

    @property
    def armed(self) -> bool:
        if self._armed and self._release_at is not None and self._clock() >= self._release_at:
            self._armed = False
            self._release_at = None
        return self._armed

    def arm(self) -> None:
        self._armed = True
        self._release_at = None

    def release(self) -> None:
        if self._armed:
            self._release_at = self._clock() + self.rearm_after
