from datetime import datetime, timezone

import pytest
import requests

from geoasistencia.api.client import ApiClient, ApiConfig
from geoasistencia.attendance.http_gateway import HttpAttendanceGateway
from geoasistencia.attendance.model import MarkRequest
from geoasistencia.core.enums import MarkType
from geoasistencia.core.exceptions import AuthenticationError, GatewayError
from geoasistencia.geo.model import Coordinate

from tests.fakes import FakeHttpSession, FakeResponse


def _gateway(*responses):
    http = FakeHttpSession(*responses)
    client = ApiClient(ApiConfig(base_url="http://backend.test/api/", timeout_seconds=3), session=http)
    return HttpAttendanceGateway(client, token="tok-123"), http


def _request(**overrides):
    data = dict(
        site_id=7,
        type=MarkType.SALIDA,
        coord=Coordinate(-2.2, -79.9),
        inside_geofence=False,
        device_id="dev-1",
        automatic=True,
    )
    data.update(overrides)
    return MarkRequest(**data)


def test_submit_mark_posts_backend_payload():
    gateway, http = _gateway(FakeResponse(201, {"ok": True, "ts_servidor": "2026-02-02T13:05:00Z"}))

    receipt = gateway.submit_mark(_request())

    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://backend.test/api/asistencia/marcar"
    assert call["headers"] == {"Authorization": "Bearer tok-123"}
    assert call["timeout"] == 3
    assert call["json"] == {
        "id_sede": 7,
        "tipo": "SALIDA",
        "latitud": -2.2,
        "longitud": -79.9,
        "dentro_geocerca": False,
        "device_id": "dev-1",
        "auto": True,
    }
    assert receipt.accepted is True
    assert receipt.server_timestamp == datetime(2026, 2, 2, 13, 5, tzinfo=timezone.utc)
    assert http.headers["Content-Type"] == "application/json"


def test_submit_mark_with_empty_body_is_accepted():
    gateway, _ = _gateway(FakeResponse(204))

    receipt = gateway.submit_mark(_request())

    assert receipt.accepted is True
    assert receipt.server_timestamp is None


def test_submit_mark_explicit_refusal():
    gateway, _ = _gateway(FakeResponse(200, {"data": {"accepted": False}}))
    assert gateway.submit_mark(_request()).accepted is False


def test_malformed_receipt_timestamp_does_not_fail_the_mark():
    gateway, _ = _gateway(FakeResponse(200, {"ts_servidor": "ayer"}))

    receipt = gateway.submit_mark(_request())

    assert receipt.accepted is True
    assert receipt.server_timestamp is None


def test_rule_conflict_carries_server_message():
    gateway, _ = _gateway(FakeResponse(409, {"message": "Ya registraste ENTRADA"}))

    with pytest.raises(GatewayError) as exc_info:
        gateway.submit_mark(_request(type=MarkType.ENTRADA))

    assert str(exc_info.value) == "Ya registraste ENTRADA"
    assert exc_info.value.status_code == 409


def test_server_error_without_message_uses_default():
    gateway, _ = _gateway(FakeResponse(500, raw=b"<html>"))

    with pytest.raises(GatewayError, match="No se pudo registrar"):
        gateway.submit_mark(_request())


def test_unauthorized_raises_authentication_error():
    gateway, _ = _gateway(FakeResponse(401, {"message": "jwt expired"}))

    with pytest.raises(AuthenticationError):
        gateway.fetch_today_history()


@pytest.mark.parametrize("error", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_transport_errors_become_gateway_errors(error):
    gateway, _ = _gateway(error)

    with pytest.raises(GatewayError):
        gateway.submit_mark(_request())


def test_fetch_today_history_parses_rows():
    gateway, http = _gateway(
        FakeResponse(
            200,
            {
                "data": [
                    {"tipo": "SALIDA", "sede": "Matriz", "ts_servidor": "2026-02-02T17:00:00Z", "auto": True},
                    {"tipo": "ENTRADA", "sede": "Matriz", "ts_servidor": "2026-02-02T13:00:00+00:00", "id_sede": "1"},
                ]
            },
        )
    )

    marks = gateway.fetch_today_history()

    assert http.calls[0]["method"] == "GET"
    assert http.calls[0]["url"] == "http://backend.test/api/asistencia/hoy"
    assert [m.type for m in marks] == [MarkType.SALIDA, MarkType.ENTRADA]
    assert marks[0].automatic is True
    assert marks[0].site_name == "Matriz"
    assert marks[1].site_id == 1
    assert marks[1].server_timestamp == datetime(2026, 2, 2, 13, 0, tzinfo=timezone.utc)


def test_fetch_today_history_accepts_bare_list_and_empty():
    gateway, _ = _gateway(FakeResponse(200, []), FakeResponse(200, {"data": None}))
    assert gateway.fetch_today_history() == []
    assert gateway.fetch_today_history() == []


def test_unknown_mark_type_in_history_is_a_gateway_error():
    gateway, _ = _gateway(FakeResponse(200, [{"tipo": "PAUSA", "ts_servidor": None}]))

    with pytest.raises(GatewayError):
        gateway.fetch_today_history()
