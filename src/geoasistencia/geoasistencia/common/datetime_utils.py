from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def dt_from_epoch_ms(epoch_ms: float) -> datetime:
    """Convert epoch milliseconds (browser ``position.timestamp``) to aware UTC datetime."""
    return datetime.fromtimestamp(float(epoch_ms) / 1000.0, tz=timezone.utc)


def parse_server_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse the backend's ISO-8601 ``ts_servidor``; ``None``/empty stays ``None``."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
