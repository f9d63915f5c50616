from __future__ import annotations

from datetime import datetime, timezone

from dateutil import tz


def local_now() -> datetime:
    # tzlocal() follows the host's DST rules, a bare astimezone() freezes today's offset.
    return datetime.now(tz.tzlocal())


def to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
