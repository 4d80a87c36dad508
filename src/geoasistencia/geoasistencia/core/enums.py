from __future__ import annotations

from enum import Enum


class MarkType(str, Enum):
    """Tipo de marcación tal como lo espera el backend."""

    ENTRADA = "ENTRADA"
    SALIDA = "SALIDA"


class SessionState(str, Enum):
    """Estado derivado de la última marcación del día."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Edge(str, Enum):
    """On -> off transitions that close an open session automatically."""

    SIGNAL_LOST = "SIGNAL_LOST"
    GEOFENCE_EXIT = "GEOFENCE_EXIT"


class MarkOutcome(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class RejectReason(str, Enum):
    """Why a manual mark is not allowed right now.

    The value is a stable code for API clients; ``message`` is what the
    employee sees.
    """

    NO_SITE = "NO_SITE"
    NO_SIGNAL = "NO_SIGNAL"
    OUTSIDE_GEOFENCE = "OUTSIDE_GEOFENCE"
    SESSION_ALREADY_OPEN = "SESSION_ALREADY_OPEN"
    SESSION_NOT_OPEN = "SESSION_NOT_OPEN"
    SAVE_IN_FLIGHT = "SAVE_IN_FLIGHT"

    @property
    def message(self) -> str:
        return {
            RejectReason.NO_SITE: "Selecciona una sede",
            RejectReason.NO_SIGNAL: "Activa GPS",
            RejectReason.OUTSIDE_GEOFENCE: "Fuera de la geocerca",
            RejectReason.SESSION_ALREADY_OPEN: "Ya tienes una entrada activa",
            RejectReason.SESSION_NOT_OPEN: "No tienes una entrada activa",
            RejectReason.SAVE_IN_FLIGHT: "Guardando...",
        }[self]
