"""ISO 8601 week helpers.

Weeks start on Monday and week 1 is the week holding the year's first
Thursday. All conversions are done in UTC.
"""
from __future__ import annotations
import datetime
import re
from typing import NamedTuple, Optional

_WEEK_PATTERN = re.compile(r"^(\d{4})-W(\d{1,2})$")


class WeekIdentifier(NamedTuple):
    year: int
    week: int

    def __str__(self) -> str:
        return format_week(self)


def _utc(now: Optional[datetime.datetime]) -> datetime.datetime:
    if now is None:
        return datetime.datetime.now(datetime.timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=datetime.timezone.utc)
    return now.astimezone(datetime.timezone.utc)


def iso_week(value: datetime.date | datetime.datetime) -> WeekIdentifier:
    if isinstance(value, datetime.datetime):
        value = _utc(value).date()
    year, week, _ = value.isocalendar()
    return WeekIdentifier(year, week)


def iso_week_from_timestamp(timestamp_ms: float) -> WeekIdentifier:
    dt = datetime.datetime.fromtimestamp(timestamp_ms / 1000.0, tz=datetime.timezone.utc)
    return iso_week(dt)


def week_start(year: int, week: int) -> datetime.datetime:
    """Return Monday 00:00 UTC of ``year``-W``week``."""
    day = datetime.date.fromisocalendar(year, week, 1)
    return datetime.datetime(day.year, day.month, day.day, tzinfo=datetime.timezone.utc)


def week_end(year: int, week: int) -> datetime.datetime:
    """Return the last millisecond of Sunday in ``year``-W``week``."""
    return week_start(year, week) + datetime.timedelta(days=7, milliseconds=-1)


def current_week(now: Optional[datetime.datetime] = None) -> WeekIdentifier:
    return iso_week(_utc(now))


def format_week(week: WeekIdentifier) -> str:
    return f"{week.year}-W{week.week:02d}"


def parse_week(text: str) -> Optional[WeekIdentifier]:
    match = _WEEK_PATTERN.match(text.strip()) if text else None
    if match is None:
        return None
    return WeekIdentifier(int(match.group(1)), int(match.group(2)))


def trailing_weeks(count: int, now: Optional[datetime.datetime] = None) -> list[WeekIdentifier]:
    """Return ``count`` weeks ending with the current one, oldest first."""
    if count < 0:
        raise ValueError("count must be non-negative")
    current = current_week(now)
    monday = week_start(current.year, current.week)
    weeks = [iso_week(monday - datetime.timedelta(days=7 * i)) for i in range(count)]
    weeks.reverse()
    return weeks
