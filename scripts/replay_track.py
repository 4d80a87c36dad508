"""Replay a recorded GPS track against one site and print the marks the
attendance engine would issue. Nothing is sent to the backend.

Run:
    python scripts/replay_track.py --csv track.csv --lat -2.2038 --lng -79.8819 --radius 80 --open
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone

from geoasistencia.attendance.model import Mark, MarkReceipt, MarkRequest
from geoasistencia.attendance.session import AttendanceSession
from geoasistencia.core.enums import MarkType
from geoasistencia.geo.model import Coordinate
from geoasistencia.location.replay_source import ReplayLocationSource
from geoasistencia.sites.model import Site


class DryRunGateway:
    """Accepts every mark and keeps today's history in memory."""

    def __init__(self, *, open_session: bool):
        self.requests: list[MarkRequest] = []
        self._history: list[Mark] = []
        if open_session:
            self._history.append(Mark(type=MarkType.ENTRADA, server_timestamp=datetime.now(timezone.utc)))

    def submit_mark(self, request: MarkRequest) -> MarkReceipt:
        receipt = MarkReceipt(accepted=True, server_timestamp=datetime.now(timezone.utc))
        self.requests.append(request)
        self._history.insert(0, Mark.from_request(request, receipt))
        return receipt

    def fetch_today_history(self):
        return list(self._history)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Replay a GPS track through the attendance engine")
    p.add_argument("--csv", required=True, help="Track CSV: timestamp_ms,latitude,longitude,accuracy[,error]")
    p.add_argument("--lat", type=float, required=True, help="Site latitude")
    p.add_argument("--lng", type=float, required=True, help="Site longitude")
    p.add_argument("--radius", type=float, required=True, help="Geofence radius in meters")
    p.add_argument("--open", action="store_true", help="Start with an open session (ENTRADA already marked)")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    gateway = DryRunGateway(open_session=args.open)
    session = AttendanceSession(gateway, device_id="replay")
    session.refresh_history()
    session.select_site(Site(site_id=0, name="replay", coord=Coordinate(args.lat, args.lng), radius_meters=args.radius))

    source = ReplayLocationSource.from_csv(args.csv)
    session.start_tracking(source)
    consumed = source.run()
    source.stop()

    print(f"readings={consumed} marks={len(gateway.requests)} final_state={session.state.value}")
    for req in gateway.requests:
        kind = "auto" if req.automatic else "manual"
        print(f"{req.type.value:8s} {kind:6s} inside={req.inside_geofence} at={req.coord.lat:.6f},{req.coord.lng:.6f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
