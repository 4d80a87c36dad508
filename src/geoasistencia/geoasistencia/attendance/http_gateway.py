from __future__ import annotations

import logging
from typing import Sequence

from ..api.client import ApiClient, unwrap
from ..common.datetime_utils import parse_server_timestamp
from ..core.enums import MarkType
from ..core.exceptions import GatewayError
from ..geo.model import Coordinate
from .gateway import AttendanceGateway
from .model import Mark, MarkReceipt, MarkRequest

logger = logging.getLogger(__name__)


class HttpAttendanceGateway(AttendanceGateway):
    def __init__(self, client: ApiClient, *, token: str):
        self._client = client
        self._token = token

    def submit_mark(self, request: MarkRequest) -> MarkReceipt:
        body = unwrap(
            self._client.post(
                "/asistencia/marcar",
                {
                    "id_sede": request.site_id,
                    "tipo": request.type.value,
                    "latitud": request.coord.lat,
                    "longitud": request.coord.lng,
                    "dentro_geocerca": bool(request.inside_geofence),
                    "device_id": request.device_id,
                    "auto": bool(request.automatic),
                },
                token=self._token,
            )
        )
        body = body if isinstance(body, dict) else {}
        # A 2xx without an explicit verdict counts as accepted.
        return MarkReceipt(
            accepted=bool(body.get("accepted", body.get("ok", True))),
            server_timestamp=_receipt_timestamp(body.get("ts_servidor")),
        )

    def fetch_today_history(self) -> Sequence[Mark]:
        rows = unwrap(self._client.get("/asistencia/hoy", token=self._token))
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise GatewayError("Historial inválido")
        return [mark_from_row(r) for r in rows]


def mark_from_row(r: dict) -> Mark:
    try:
        mark_type = MarkType(r["tipo"])
        coord = None
        if r.get("latitud") is not None and r.get("longitud") is not None:
            coord = Coordinate(lat=float(r["latitud"]), lng=float(r["longitud"]))
        site_id = r.get("id_sede")
        return Mark(
            type=mark_type,
            server_timestamp=parse_server_timestamp(r.get("ts_servidor")),
            site_id=int(site_id) if site_id is not None else None,
            site_name=r.get("sede"),
            coord=coord,
            inside_geofence=r.get("dentro_geocerca"),
            device_id=r.get("device_id"),
            automatic=bool(r.get("auto", False)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise GatewayError(f"Marcación inválida en el historial: {r!r}") from exc


def _receipt_timestamp(value):
    # The mark is already stored at this point; a malformed timestamp must not
    # turn it into a failure the engine would retry.
    try:
        return parse_server_timestamp(value)
    except ValueError:
        logger.warning("Ignoring malformed ts_servidor %r in mark receipt", value)
        return None
