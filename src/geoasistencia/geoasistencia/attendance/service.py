from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence

from ..core.constants import (
    DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS,
    DEFAULT_GPS_TIMEOUT_SECONDS,
    DEFAULT_MARK_LOCK_WAIT_SECONDS,
    DEFAULT_SESSION_IDLE_SECONDS,
    HISTORY_TIME_FORMAT,
)
from ..core.enums import MarkType
from ..core.exceptions import SessionBusyError, SessionNotStartedError, ValidationError
from ..location.push_source import PushLocationSource
from ..sites.model import Site
from ..sites.repository import SiteDirectory
from .gateway import AttendanceGateway
from .model import Mark, MarkResult
from .session import AttendanceSession

logger = logging.getLogger(__name__)


@dataclass
class UserSlot:
    """Everything kept in memory for one logged-in employee."""

    session: AttendanceSession
    source: PushLocationSource
    directory: SiteDirectory
    sites: Sequence[Site] = ()
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_used: float = 0.0


class AttendanceSessionService:
    """Owns one ``AttendanceSession`` per user and serializes access to it.

    Web requests run on several threads; every operation takes the user's
    lock. Manual marks fail fast with ``SessionBusyError`` while a submission
    (manual or automatic) is running, and otherwise wait at most
    ``mark_wait_seconds`` for the lock. Slots unused for ``idle_seconds`` are
    evicted whenever another user opens a session.
    """

    def __init__(
        self,
        *,
        gateway_factory: Callable[[str], AttendanceGateway],
        directory_factory: Callable[[str], SiteDirectory],
        cooldown_seconds: float = DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS,
        gps_timeout_seconds: float = DEFAULT_GPS_TIMEOUT_SECONDS,
        mark_wait_seconds: float = DEFAULT_MARK_LOCK_WAIT_SECONDS,
        idle_seconds: float = DEFAULT_SESSION_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._gateway_factory = gateway_factory
        self._directory_factory = directory_factory
        self._cooldown_seconds = float(cooldown_seconds)
        self._gps_timeout_seconds = float(gps_timeout_seconds)
        self._mark_wait_seconds = float(mark_wait_seconds)
        self._idle_seconds = float(idle_seconds)
        self._clock = clock
        self._slots: dict[int, UserSlot] = {}
        self._slots_lock = threading.Lock()

    def is_open(self, user_id: int) -> bool:
        return user_id in self._slots

    def open(self, user_id: int, *, token: str, device_id: str) -> None:
        self.evict_idle()
        with self._slots_lock:
            if user_id in self._slots:
                return
            session = AttendanceSession(
                self._gateway_factory(token),
                device_id=device_id,
                cooldown_seconds=self._cooldown_seconds,
                clock=self._clock,
            )
            slot = UserSlot(
                session=session,
                source=PushLocationSource(timeout_seconds=self._gps_timeout_seconds, clock=self._clock),
                directory=self._directory_factory(token),
                last_used=self._clock(),
            )
            self._slots[user_id] = slot

        with self._use(user_id) as slot:
            slot.session.refresh_history()
        logger.info("Attendance session opened for user %s", user_id)

    def close(self, user_id: int) -> None:
        with self._slots_lock:
            slot = self._slots.pop(user_id, None)
        if slot is not None:
            slot.source.stop()
            logger.info("Attendance session closed for user %s", user_id)

    def evict_idle(self) -> list[int]:
        """Close the slots nobody used for ``idle_seconds``. Busy slots are kept."""

        now = self._clock()
        with self._slots_lock:
            idle = [
                uid
                for uid, slot in self._slots.items()
                if now - slot.last_used >= self._idle_seconds and not slot.lock.locked()
            ]
            evicted = [self._slots.pop(uid) for uid in idle]
        for slot in evicted:
            slot.source.stop()
        if idle:
            logger.info("Evicted idle attendance sessions: %s", idle)
        return idle

    @contextmanager
    def _use(self, user_id: int, *, timeout: float = -1) -> Iterator[UserSlot]:
        slot = self._slots.get(user_id)
        if slot is None:
            raise SessionNotStartedError(f"No attendance session for user {user_id}")
        if not slot.lock.acquire(timeout=timeout):
            raise SessionBusyError("Guardando...")
        slot.last_used = self._clock()
        try:
            yield slot
        finally:
            slot.lock.release()

    # ----- sites -----

    def load_sites(self, user_id: int) -> Sequence[Site]:
        with self._use(user_id) as slot:
            slot.sites = tuple(slot.directory.list_sites())
            if slot.session.tracking.site is None and slot.sites:
                slot.session.select_site(slot.sites[0])
            return slot.sites

    def select_site(self, user_id: int, site_id: int) -> Site:
        with self._use(user_id) as slot:
            site = next((s for s in slot.sites if s.site_id == int(site_id)), None)
            if site is None:
                raise ValidationError("Sede no encontrada")
            slot.session.select_site(site)
            return site

    # ----- GPS -----

    def start_gps(self, user_id: int) -> None:
        with self._use(user_id) as slot:
            slot.session.start_tracking(slot.source)

    def stop_gps(self, user_id: int) -> None:
        with self._use(user_id) as slot:
            slot.session.stop_tracking()

    def push_fix(self, user_id: int, reading: Mapping[str, Any]) -> None:
        with self._use(user_id) as slot:
            slot.source.push(reading)

    def push_error(self, user_id: int, message: str) -> None:
        with self._use(user_id) as slot:
            slot.source.fail(message)

    # ----- marks -----

    def mark(self, user_id: int, tipo: str) -> MarkResult:
        try:
            mark_type = MarkType(str(tipo).upper())
        except ValueError as exc:
            raise ValidationError("Tipo de marcación inválido") from exc

        slot = self._slots.get(user_id)
        if slot is not None and slot.session.saving:
            raise SessionBusyError("Guardando...")
        with self._use(user_id, timeout=self._mark_wait_seconds) as slot:
            return slot.session.mark(mark_type)

    def refresh(self, user_id: int) -> None:
        with self._use(user_id) as slot:
            slot.session.refresh_history()

    # ----- view -----

    def view(self, user_id: int) -> dict:
        with self._use(user_id) as slot:
            slot.source.tick()
            return self._to_ui(slot)

    def _to_ui(self, slot: UserSlot) -> dict:
        session = slot.session
        tracking = session.tracking
        site = tracking.site
        fix = tracking.fix
        dist = tracking.status.distance_meters
        can_entrada = session.check(MarkType.ENTRADA)
        can_salida = session.check(MarkType.SALIDA)
        auto = session.last_auto_result

        return {
            "estado": session.state.value,
            "sede": site.site_id if site else None,
            "sedes": [{"id_sede": s.site_id, "nombre": s.name} for s in slot.sites],
            "gps_activo": tracking.signal_available,
            "gps_error": tracking.signal_error,
            "latitud": fix.coord.lat if fix else None,
            "longitud": fix.coord.lng if fix else None,
            "precision_m": round(fix.accuracy_meters) if fix else None,
            "dentro_geocerca": tracking.status.inside,
            "distancia_m": round(dist) if dist is not None else None,
            "radio_m": site.radius_meters if site else None,
            "guardando": session.saving,
            "puede_entrada": can_entrada is None,
            "motivo_entrada": can_entrada.value if can_entrada else None,
            "puede_salida": can_salida is None,
            "motivo_salida": can_salida.value if can_salida else None,
            "ultima_salida_auto": auto.outcome.value if auto else None,
            "ultimo_error": session.last_error,
            "historial": [self._mark_to_ui(m) for m in session.history.entries],
        }

    def _mark_to_ui(self, m: Mark) -> dict:
        return {
            "tipo": m.type.value,
            "sede": m.site_name or "",
            "hora": _local_time(m.server_timestamp),
            "auto": m.automatic,
        }


def _local_time(ts: Optional[datetime]) -> str:
    if ts is None:
        return "-"
    if ts.tzinfo is not None:
        ts = ts.astimezone()
    return ts.strftime(HISTORY_TIME_FORMAT)
