from __future__ import annotations

import pytest

from geoasistencia.attendance.session import AttendanceSession
from geoasistencia.sites.model import Site

from tests.fakes import SITE_CENTER, FakeClock, InMemoryGateway


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def site() -> Site:
    return Site(site_id=1, name="Matriz", coord=SITE_CENTER, radius_meters=50.0)


@pytest.fixture
def make_session(clock, site):
    """Build a session over an in-memory gateway, site selected, history loaded."""

    def _make(history=None, *, cooldown_seconds: float = 4.0):
        gateway = InMemoryGateway(history)
        session = AttendanceSession(gateway, device_id="device-1", cooldown_seconds=cooldown_seconds, clock=clock)
        session.refresh_history()
        session.select_site(site)
        return session, gateway

    return _make
