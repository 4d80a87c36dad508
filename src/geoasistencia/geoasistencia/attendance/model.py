from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import MarkOutcome, MarkType, RejectReason, SessionState
from ..geo.model import Coordinate


@dataclass(frozen=True)
class MarkRequest:
    """Payload sent to the gateway for one ENTRADA/SALIDA."""

    site_id: int
    type: MarkType
    coord: Coordinate
    inside_geofence: bool
    device_id: str
    automatic: bool = False


@dataclass(frozen=True)
class MarkReceipt:
    accepted: bool
    server_timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class Mark:
    """A persisted clock-in/out as returned by the backend.

    History rows from the backend only guarantee ``type`` and the server
    timestamp, so the rest is optional.
    """

    type: MarkType
    server_timestamp: Optional[datetime]
    site_id: Optional[int] = None
    site_name: Optional[str] = None
    coord: Optional[Coordinate] = None
    inside_geofence: Optional[bool] = None
    device_id: Optional[str] = None
    automatic: bool = False

    @classmethod
    def from_request(cls, req: MarkRequest, receipt: MarkReceipt, *, site_name: Optional[str] = None) -> "Mark":
        return cls(
            type=req.type,
            server_timestamp=receipt.server_timestamp,
            site_id=req.site_id,
            site_name=site_name,
            coord=req.coord,
            inside_geofence=req.inside_geofence,
            device_id=req.device_id,
            automatic=req.automatic,
        )


@dataclass(frozen=True)
class DailyHistory:
    """Today's marks for the current user, most recent first."""

    entries: Sequence[Mark] = ()

    @property
    def latest(self) -> Optional[Mark]:
        return self.entries[0] if self.entries else None

    @property
    def session_state(self) -> SessionState:
        # Sole rule: the latest mark of the day decides.
        latest = self.latest
        if latest is not None and latest.type == MarkType.ENTRADA:
            return SessionState.OPEN
        return SessionState.CLOSED

    def prepend(self, mark: Mark) -> "DailyHistory":
        return DailyHistory(entries=(mark, *self.entries))


@dataclass(frozen=True)
class MarkResult:
    """What happened to a mark attempt.

    REJECTED means it was illegal and never sent; FAILED means the gateway
    did not accept it. Neither changes the session state.
    """

    outcome: MarkOutcome
    type: MarkType
    automatic: bool = False
    mark: Optional[Mark] = None
    reason: Optional[RejectReason] = None
    error: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.outcome == MarkOutcome.ACCEPTED

    @property
    def message(self) -> str:
        if self.reason is not None:
            return self.reason.message
        if self.error:
            return self.error
        return ""
