from __future__ import annotations

from typing import Protocol, Sequence

from .model import Mark, MarkReceipt, MarkRequest


class AttendanceGateway(Protocol):
    """Attendance backend as seen by the session engine.

    The session engine depends on this interface only. Implementations raise
    ``GatewayError`` on transport or validation failures.
    """

    def submit_mark(self, request: MarkRequest) -> MarkReceipt:
        raise NotImplementedError

    def fetch_today_history(self) -> Sequence[Mark]:
        """Today's marks of the token's user, most recent first."""

        raise NotImplementedError
