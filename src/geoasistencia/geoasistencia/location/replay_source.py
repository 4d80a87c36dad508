"""Replay a recorded track through the attendance engine."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from .source import BaseLocationSource

logger = logging.getLogger(__name__)

NO_SIGNAL_MESSAGE = "Sin señal GPS"


def iter_track_readings(csv_path: str | Path) -> Iterator[dict[str, Any]]:
    """Yield readings from a track CSV.

    Expected columns: ``timestamp_ms, latitude, longitude, accuracy`` and an
    optional ``error``. Rows with empty coordinates are sensor errors.
    """

    path = Path(csv_path)
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            lat = (row.get("latitude") or "").strip()
            lng = (row.get("longitude") or "").strip()
            if not lat or not lng:
                yield {"error": (row.get("error") or "").strip() or NO_SIGNAL_MESSAGE}
                continue
            accuracy = (row.get("accuracy") or "").strip()
            yield {
                "latitude": float(lat),
                "longitude": float(lng),
                "accuracy": float(accuracy) if accuracy else 0.0,
                "timestamp": int(row["timestamp_ms"]),
            }


class ReplayLocationSource(BaseLocationSource):
    """Plays back readings in order once ``run`` is called.

    A reading with an ``error`` key is delivered as a sensor failure.
    Stopping the source mid-run ends the playback.
    """

    def __init__(self, readings: Iterable[Mapping[str, Any]], **kwargs):
        super().__init__(**kwargs)
        self._readings = readings

    @classmethod
    def from_csv(cls, csv_path: str | Path, **kwargs) -> "ReplayLocationSource":
        return cls(iter_track_readings(csv_path), **kwargs)

    def run(self) -> int:
        """Deliver every reading; return how many were consumed."""

        count = 0
        for reading in self._readings:
            if not self.active:
                logger.info("Replay stopped after %s readings", count)
                break
            count += 1
            if reading.get("error"):
                self._report(str(reading["error"]))
            else:
                self._deliver(reading)
        return count
