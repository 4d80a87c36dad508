from __future__ import annotations

from typing import Any, Mapping

from .source import BaseLocationSource


class PushLocationSource(BaseLocationSource):
    """Location source fed from outside, e.g. readings the phone's browser posts
    from ``navigator.geolocation.watchPosition``."""

    def push(self, reading: Mapping[str, Any]) -> None:
        self._deliver(reading)

    def fail(self, message: str) -> None:
        self._report(message)
