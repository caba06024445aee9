"""Calendar boundaries used for mission rollover."""

from __future__ import annotations

from datetime import date, datetime, timedelta

EPOCH = datetime(1970, 1, 1)


def week_start(day: date) -> date:
    """Monday of the week containing *day*. Sunday belongs to the week before."""
    return day - timedelta(days=day.weekday())


def daily_rollover_due(last_reset: datetime | None, now: datetime) -> bool:
    if last_reset is None:
        return True
    return last_reset.date() < now.date()


def weekly_rollover_due(last_reset: datetime | None, now: datetime) -> bool:
    if last_reset is None:
        return True
    return week_start(last_reset.date()) < week_start(now.date())


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp. Returns None for unreadable input."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    # Comparisons are against naive local time
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
