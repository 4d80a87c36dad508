"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_M = 6_371_000.0

DEFAULT_AUTO_CLOSE_COOLDOWN_SECONDS = 4.0
DEFAULT_GPS_TIMEOUT_SECONDS = 15.0
DEFAULT_API_TIMEOUT_SECONDS = 10.0

HISTORY_TIME_FORMAT = "%H:%M:%S"

# Web layer: how long a manual mark waits for the user's session lock,
# and how long an unused per-user session stays in memory.
DEFAULT_MARK_LOCK_WAIT_SECONDS = 2.0
DEFAULT_SESSION_IDLE_SECONDS = 8 * 60 * 60.0
