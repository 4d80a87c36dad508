from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable, Optional

from ..core.constants import DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS
from ..core.enums import Edge, MarkOutcome, MarkType, RejectReason, SessionState
from ..core.exceptions import GatewayError
from ..geo.geofence import evaluate
from ..geo.model import Fix
from ..location.source import LocationSource
from ..sites.model import Site
from .gateway import AttendanceGateway
from .model import DailyHistory, Mark, MarkRequest, MarkResult
from .transitions import (
    AutoCloseLock,
    FixReceived,
    Observation,
    SignalLost,
    SiteSelected,
    Tracking,
    TrackingEvent,
    detect_edges,
    reduce_tracking,
)

logger = logging.getLogger(__name__)

GPS_STOPPED_MESSAGE = "GPS desactivado"
NOT_ACCEPTED_MESSAGE = "No se pudo registrar"


class AttendanceSession:
    """Attendance session engine for one employee.

    Location and site events go through an in-order queue and are reduced
    one at a time. Each step compares the new ``Observation`` with the
    previous one; a signal-loss or geofence-exit edge while the session is
    OPEN submits one automatic SALIDA, guarded by ``AutoCloseLock``.

    Only one submission runs at a time: manual marks attempted during a
    submission are rejected with ``SAVE_IN_FLIGHT`` and events that arrive
    meanwhile wait in the queue until the submission and the history
    refresh are done.

    Not thread-safe; callers serialize access (see ``AttendanceSessionService``).
    """

    def __init__(
        self,
        gateway: AttendanceGateway,
        *,
        device_id: str,
        cooldown_seconds: float = DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._gateway = gateway
        self._device_id = device_id
        self._history = DailyHistory()
        self._tracking = Tracking()
        self._previous = Observation()
        self._lock = AutoCloseLock(cooldown_seconds, clock=clock)
        self._pending: deque[TrackingEvent] = deque()
        self._busy = False
        self._saving = False
        self._source: Optional[LocationSource] = None
        self.last_error: Optional[str] = None
        self.last_auto_result: Optional[MarkResult] = None

    @property
    def state(self) -> SessionState:
        return self._history.session_state

    @property
    def history(self) -> DailyHistory:
        return self._history

    @property
    def tracking(self) -> Tracking:
        return self._tracking

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def auto_close_armed(self) -> bool:
        return self._lock.armed

    @property
    def device_id(self) -> str:
        return self._device_id

    # ----- history -----

    def refresh_history(self) -> bool:
        """Reload today's marks from the gateway. Returns False if it failed."""

        try:
            entries = self._gateway.fetch_today_history()
        except GatewayError as exc:
            logger.warning("Could not load today's history: %s", exc)
            self.last_error = str(exc)
            return False
        self._history = DailyHistory(entries=tuple(entries))
        return True

    # ----- location / site events -----

    def start_tracking(self, source: LocationSource) -> None:
        if self._source is source and source.active:
            return
        if self._source is not None:
            self._source.stop()
        self._source = source
        source.start(self.observe_fix, self.observe_signal_lost)

    def stop_tracking(self) -> None:
        # Turning the GPS off is a signal-loss edge like any sensor failure.
        if self._source is not None:
            self._source.stop()
            self._source = None
        self.observe_signal_lost(GPS_STOPPED_MESSAGE)

    def observe_fix(self, fix: Fix) -> None:
        self._dispatch(FixReceived(fix))

    def observe_signal_lost(self, reason: str = "Error GPS") -> None:
        self._dispatch(SignalLost(reason))

    def select_site(self, site: Optional[Site]) -> None:
        self._dispatch(SiteSelected(site))

    def _dispatch(self, event: TrackingEvent) -> None:
        self._pending.append(event)
        if not self._busy:
            self._drain()

    def _drain(self) -> None:
        self._busy = True
        try:
            while self._pending:
                self._step(self._pending.popleft())
        finally:
            self._busy = False

    def _step(self, event: TrackingEvent) -> None:
        before = self._tracking
        self._tracking = reduce_tracking(before, event)

        current = self._tracking.observation
        edges = detect_edges(self._previous, current)
        self._previous = current

        if edges:
            # The session belongs to the site selected before this event.
            self._auto_close(edges, site=before.site or self._tracking.site)

    def _auto_close(self, edges: tuple[Edge, ...], *, site: Optional[Site]) -> None:
        names = ", ".join(e.value for e in edges)
        if self.state != SessionState.OPEN:
            logger.debug("Ignoring %s, no open session", names)
            return
        if self._lock.armed:
            logger.info("Ignoring %s, automatic SALIDA already issued recently", names)
            return

        fix = self._tracking.fix
        if site is None or fix is None:
            logger.warning("Cannot close session automatically on %s: no site or position", names)
            return

        self._lock.arm()
        logger.info("Closing session automatically on %s (site=%s)", names, site.site_id)
        try:
            result = self._submit(MarkType.SALIDA, site, fix, automatic=True)
        finally:
            self._lock.release()
        self.last_auto_result = result

    # ----- manual marks -----

    def check(self, mark_type: MarkType) -> Optional[RejectReason]:
        """Why a manual mark of ``mark_type`` is not allowed now, or None."""

        if self._saving:
            return RejectReason.SAVE_IN_FLIGHT
        if self._tracking.site is None:
            return RejectReason.NO_SITE
        if not self._tracking.signal_available or self._tracking.fix is None:
            return RejectReason.NO_SIGNAL

        state = self.state
        if mark_type == MarkType.ENTRADA:
            if state == SessionState.OPEN:
                return RejectReason.SESSION_ALREADY_OPEN
            if not self._tracking.status.inside:
                return RejectReason.OUTSIDE_GEOFENCE
        elif state != SessionState.OPEN:
            return RejectReason.SESSION_NOT_OPEN
        return None

    def mark(self, mark_type: MarkType) -> MarkResult:
        mark_type = MarkType(mark_type)
        reason = self.check(mark_type)
        if reason is not None:
            return MarkResult(outcome=MarkOutcome.REJECTED, type=mark_type, reason=reason)

        was_busy = self._busy
        self._busy = True
        try:
            return self._submit(mark_type, self._tracking.site, self._tracking.fix, automatic=False)
        finally:
            self._busy = was_busy
            if not was_busy:
                self._drain()

    # ----- submission -----

    def _submit(self, mark_type: MarkType, site: Site, fix: Fix, *, automatic: bool) -> MarkResult:
        request = MarkRequest(
            site_id=site.site_id,
            type=mark_type,
            coord=fix.coord,
            inside_geofence=evaluate(fix, site).inside,
            device_id=self._device_id,
            automatic=automatic,
        )

        self._saving = True
        try:
            try:
                receipt = self._gateway.submit_mark(request)
            except GatewayError as exc:
                logger.warning("%s mark %s failed: %s", "Automatic" if automatic else "Manual", mark_type.value, exc)
                self.last_error = str(exc)
                return MarkResult(outcome=MarkOutcome.FAILED, type=mark_type, automatic=automatic, error=str(exc))

            if not receipt.accepted:
                logger.warning("Mark %s was not accepted by the server", mark_type.value)
                self.last_error = NOT_ACCEPTED_MESSAGE
                return MarkResult(
                    outcome=MarkOutcome.FAILED,
                    type=mark_type,
                    automatic=automatic,
                    error=NOT_ACCEPTED_MESSAGE,
                )

            mark = Mark.from_request(request, receipt, site_name=site.name)
            if not self.refresh_history():
                # The server has the mark; assume it until the next refresh.
                self._history = self._history.prepend(mark)
            self.last_error = None
            return MarkResult(outcome=MarkOutcome.ACCEPTED, type=mark_type, automatic=automatic, mark=mark)
        finally:
            self._saving = False
