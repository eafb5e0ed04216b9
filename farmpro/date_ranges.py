"""Date-range resolution and timezone-aware date helpers."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .report_types import DateRange

logger = logging.getLogger(__name__)

# Inclusive span lengths, in days, for the rolling windows
_ROLLING_WINDOWS = {
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
}


def resolve_timezone(tz_name: Optional[str]):
    """Return a tzinfo for ``tz_name``, falling back to UTC when unknown."""
    if not tz_name:
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{tz_name}', falling back to UTC")
        return timezone.utc


def current_time(tz_name: Optional[str] = None) -> datetime:
    """Current instant as an aware datetime in the configured timezone."""
    return datetime.now(resolve_timezone(tz_name))


def resolve_date_range(date_range: Any, now: datetime) -> Tuple[date, date]:
    """
    Resolve a symbolic range to an inclusive ``[start, end]`` day window.

    ``end`` is always ``now``'s calendar date. "This month" starts on the
    first day of ``now``'s month; the rolling windows count ``end`` as
    their last day. Unrecognised ranges resolve like "Last 7 days".

    Args:
        date_range: Range name or DateRange member
        now: Anchor instant, already in the server's timezone

    Returns:
        Tuple of (start, end) dates
    """
    end = now.date() if isinstance(now, datetime) else now
    normalized = DateRange.normalize(date_range)

    if normalized == DateRange.THIS_MONTH:
        return end.replace(day=1), end

    span = _ROLLING_WINDOWS[normalized]
    return end - timedelta(days=span - 1), end


def parse_date(value: Any) -> Optional[date]:
    """Best-effort conversion of a stored date/timestamp into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_iso_date(value: Any, tz_name: Optional[str] = None) -> str:
    """
    Render a date or datetime as ``YYYY-MM-DD``.

    Aware datetimes are converted into ``tz_name`` first; plain dates and
    ISO strings are printed as stored. Unparseable input is returned as text.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz_name:
            value = value.astimezone(resolve_timezone(tz_name))
        return value.date().isoformat()
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.isoformat()


def format_long_date(value: Any) -> str:
    """Render a date as e.g. ``05 March 2026`` for listings."""
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%d %B %Y")
