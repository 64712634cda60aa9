"""
Money and time helpers shared by the reporting services.
"""

from datetime import UTC, date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """
    Coerce a numeric column or aggregate result to a two-place Decimal.

    Aggregates may come back as float, int, Decimal or None depending on
    the backend; None counts as zero.
    """
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the start of `day`."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def relative_time(moment: datetime, now: datetime | None = None) -> str:
    """
    Describe how long ago `moment` was.

    Example:
        >>> now = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        >>> relative_time(datetime(2024, 1, 1, 11, 15, tzinfo=UTC), now)
        '45 minutes ago'
    """
    now = now or utc_now()
    minutes = int((ensure_utc(now) - ensure_utc(moment)).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minutes ago"
    if minutes < 120:
        return "1 hour ago"
    if minutes < 1440:
        return f"{minutes // 60} hours ago"
    return f"{minutes // 1440} days ago"
