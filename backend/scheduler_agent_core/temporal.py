"""Resolve free-text appointment times into absolute UTC timestamps.

Resolution order, first hit wins:

1. the text is a full date/time literal (ISO 8601, or any spelled-out
   form ``dateutil`` reads that names a calendar day),
2. the text is a loose ``YYYY-MM-DD HH:MM`` stamp in local time,
3. heuristics: an optional day anchor (``tomorrow``, ``today``,
   ``next week`` or a weekday name) plus a mandatory time of day.

A day anchor without a time of day resolves to ``None`` so the caller
re-prompts instead of guessing an hour.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo

from dateutil import parser

from .time_utils import local_now, to_iso

_ISO_SHAPED_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")
_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LOOSE_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[ T](\d{2}):(\d{2})$")
_WEEKDAY_RE = re.compile(r"(monday|tuesday|wednesday|thursday|friday|saturday|sunday)")
_TIME_OF_DAY_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?|(\d{1,2})h")

# Sunday-first, matching the weekday numbering used by the delta formula.
_WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

# Two defaults that differ in year, month and day: a field that comes out
# the same under both was present in the text.
_SENTINEL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _attach_zone(value: datetime, zone: tzinfo | None) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value


def _parse_iso_literal(text: str, zone: tzinfo | None) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # A bare calendar date is a UTC midnight, a date-time without offset is local.
    if _DATE_ONLY_RE.match(text):
        return _attach_zone(parsed, timezone.utc)
    return _attach_zone(parsed, zone)


def _parse_literal(text: str, zone: tzinfo | None) -> datetime | None:
    if _ISO_SHAPED_RE.match(text):
        return _parse_iso_literal(text, zone)

    try:
        first, second = (parser.parse(text, default=default) for default in _SENTINEL_DEFAULTS)
    except (ValueError, OverflowError):
        return None
    if (first.year, first.month, first.day) != (second.year, second.month, second.day):
        return None
    return _attach_zone(first, zone)


def _parse_loose_iso(text: str, zone: tzinfo | None) -> datetime | None:
    match = _LOOSE_ISO_RE.match(text)
    if not match:
        return None
    year, month, day, hour, minute = (int(part) for part in match.groups())
    # Out-of-range fields carry into the next unit ("2025-13-01" is 2026-01-01).
    carry, month_index = divmod(month - 1, 12)
    try:
        first_of_month = datetime(year + carry, month_index + 1, 1, tzinfo=zone)
        return first_of_month + timedelta(days=day - 1, hours=hour, minutes=minute)
    except (ValueError, OverflowError):
        return None


def _sunday_index(value: datetime) -> int:
    return (value.weekday() + 1) % 7


def _apply_day_anchor(lowered: str, base: datetime) -> datetime:
    if "tomorrow" in lowered:
        return base + timedelta(days=1)
    if "today" in lowered:
        return base
    if "next week" in lowered:
        return base + timedelta(days=7)

    weekday_match = _WEEKDAY_RE.search(lowered)
    if not weekday_match:
        return base
    target = _WEEKDAYS.index(weekday_match.group(1))
    extra = 7 if "next" in lowered else 0
    delta = (target + 7 - _sunday_index(base) + extra) % 7 or 7
    return base + timedelta(days=delta)


def _extract_time_of_day(lowered: str) -> tuple[int, int] | None:
    match = _TIME_OF_DAY_RE.search(lowered)
    if not match:
        return None
    hours = int(match.group(1) or match.group(4))
    minutes = int(match.group(2) or 0)
    meridiem = match.group(3)
    if meridiem == "pm" and hours < 12:
        hours += 12
    if meridiem == "am" and hours == 12:
        hours = 0
    return hours, minutes


def _resolve_heuristic(lowered: str, now: datetime) -> datetime | None:
    base = _apply_day_anchor(lowered, now)
    time_of_day = _extract_time_of_day(lowered)
    if time_of_day is None:
        return None
    hours, minutes = time_of_day
    # Out-of-range hours/minutes roll forward instead of failing.
    midnight = base.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(hours=hours, minutes=minutes)


def resolve_preferred_time(text: str | None, now: datetime | None = None) -> str | None:
    """Return the ISO-8601 UTC timestamp for ``text`` or ``None``.

    ``now`` must be timezone-aware; its zone is treated as the user's local
    zone. Defaults to the process local time.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return None

    now = now or local_now()
    zone = now.tzinfo

    parsed = _parse_literal(trimmed, zone)
    if parsed is not None:
        return to_iso(parsed)

    parsed = _parse_loose_iso(trimmed, zone)
    if parsed is not None:
        return to_iso(parsed)

    resolved = _resolve_heuristic(trimmed.lower(), now)
    return to_iso(resolved) if resolved is not None else None
