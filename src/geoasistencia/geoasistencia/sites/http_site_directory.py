from __future__ import annotations

import logging
from typing import Sequence

from ..api.client import ApiClient, unwrap
from ..common.validators import require_latitude, require_longitude, require_non_negative
from ..core.exceptions import ValidationError
from ..geo.model import Coordinate
from .model import Site
from .repository import SiteDirectory

logger = logging.getLogger(__name__)


class HttpSiteDirectory(SiteDirectory):
    def __init__(self, client: ApiClient, *, token: str):
        self._client = client
        self._token = token

    def list_sites(self) -> Sequence[Site]:
        rows = unwrap(self._client.get("/sedes", token=self._token)) or []
        sites = []
        for r in rows:
            try:
                sites.append(site_from_row(r))
            except (KeyError, TypeError, ValueError, ValidationError) as exc:
                logger.warning("Skipping site row %r: %s", r.get("id_sede") if isinstance(r, dict) else r, exc)
        return sites


def site_from_row(r: dict) -> Site:
    return Site(
        site_id=int(r["id_sede"]),
        name=str(r.get("nombre") or ""),
        coord=Coordinate(
            lat=require_latitude(r["latitud"]),
            lng=require_longitude(r["longitud"]),
        ),
        radius_meters=require_non_negative(r.get("radio_metros") or 0, "radio_metros"),
    )
