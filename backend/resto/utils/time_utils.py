"""Time utilities bound to the restaurant's local timezone."""

import os
from datetime import datetime
from zoneinfo import ZoneInfo

try:
    LOCAL_TZ = ZoneInfo(os.getenv("APP_TIMEZONE", "Asia/Manila"))
except Exception:
    # Fallback to system local timezone when tzdata is unavailable (Windows)
    LOCAL_TZ = datetime.now().astimezone().tzinfo


def now_local() -> datetime:
    """Return timezone-aware datetime in the restaurant's zone."""
    return datetime.now(LOCAL_TZ)


def now_local_naive() -> datetime:
    """Return naive datetime representing restaurant local time.

    This is the default clock for the order service; timestamps are stored
    naive, in local time.
    """
    return now_local().replace(tzinfo=None)

