from __future__ import annotations

from dataclasses import dataclass

from .api.client import ApiClient, ApiConfig
from .attendance.http_gateway import HttpAttendanceGateway
from .attendance.service import AttendanceSessionService
from .core.constants import (
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS,
    DEFAULT_GPS_TIMEOUT_SECONDS,
    DEFAULT_MARK_LOCK_WAIT_SECONDS,
    DEFAULT_SESSION_IDLE_SECONDS,
)
from .sites.http_site_directory import HttpSiteDirectory


@dataclass(frozen=True)
class Container:
    api_client: ApiClient
    attendance_session_service: AttendanceSessionService


def build_container(*, settings) -> Container:
    api_client = ApiClient(
        ApiConfig(
            base_url=str(getattr(settings, "API_BASE_URL")),
            timeout_seconds=float(getattr(settings, "API_TIMEOUT_SECONDS", DEFAULT_API_TIMEOUT_SECONDS)),
        )
    )

    attendance_session_service = AttendanceSessionService(
        gateway_factory=lambda token: HttpAttendanceGateway(api_client, token=token),
        directory_factory=lambda token: HttpSiteDirectory(api_client, token=token),
        cooldown_seconds=float(getattr(settings, "AUTO_CLOSE_COOLDOWN_SECONDS", DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS)),
        gps_timeout_seconds=float(getattr(settings, "GPS_TIMEOUT_SECONDS", DEFAULT_GPS_TIMEOUT_SECONDS)),
        mark_wait_seconds=float(getattr(settings, "MARK_LOCK_WAIT_SECONDS", DEFAULT_MARK_LOCK_WAIT_SECONDS)),
        idle_seconds=float(getattr(settings, "SESSION_IDLE_SECONDS", DEFAULT_SESSION_IDLE_SECONDS)),
    )

    return Container(
        api_client=api_client,
        attendance_session_service=attendance_session_service,
    )
