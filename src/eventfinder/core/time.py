"""
Timezone normalization and display formatting.

Event start times are handled as timezone-aware datetimes end to end; they are
only converted to the viewer's timezone when rendered.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def format_event_date(dt: datetime, timezone: str) -> str:
    """Render a start time like `Thu, Aug 15, 6:00 PM` in `timezone`."""
    local = ensure_tz(dt, timezone).astimezone(ZoneInfo(timezone))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local:%a}, {local:%b} {local.day}, {hour}:{local:%M} {meridiem}"
