"""Clock and timestamp helpers.

Scheduled times travel as ISO-8601 strings; "today" and the day a task
falls on are calendar dates in a named timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

DEFAULT_TZ = "UTC"


def zone(name: str = DEFAULT_TZ) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def today_in(tz_name: str = DEFAULT_TZ, now: datetime | None = None) -> date:
    """Calendar day of `now` (default: the current instant) in `tz_name`."""
    if now is None:
        now = now_utc()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone(tz_name)).date()


def to_iso_z(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        raise ValueError("dt must be timezone-aware")
    utc = dt.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str | datetime, tz_name: str = DEFAULT_TZ) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive values (a bare "2024-01-05T10:00" from a form) are interpreted in
    `tz_name`. Returns None for anything unparseable.
    """
    if isinstance(raw, datetime):
        dt = raw
    else:
        if not isinstance(raw, str) or not raw.strip():
            return None
        try:
            dt = datetime.fromisoformat(raw.strip())
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone(tz_name))
    return dt


def local_date(raw: str, tz_name: str = DEFAULT_TZ) -> date | None:
    """Calendar day a timestamp falls on in `tz_name`, or None."""
    dt = parse_timestamp(raw, tz_name)
    if dt is None:
        return None
    return dt.astimezone(zone(tz_name)).date()
