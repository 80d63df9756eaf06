"""
Date and period utilities.

Shared by the HTTP layer, the CLI and the aggregation functions.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


@dataclass
class DateRange:
    """Calendar date range with string helpers."""
    start: date
    end: date

    @property
    def start_str(self) -> str:
        """Start date as YYYY-MM-DD string."""
        return self.start.strftime("%Y-%m-%d")

    @property
    def end_str(self) -> str:
        """End date as YYYY-MM-DD string."""
        return self.end.strftime("%Y-%m-%d")

    @property
    def days(self) -> int:
        """Number of calendar days covered, inclusive."""
        return (self.end - self.start).days + 1

    def as_tuple(self) -> Tuple[date, date]:
        """Return as (start, end) tuple of dates."""
        return (self.start, self.end)


PERIODS = ("today", "yesterday", "week", "last_week", "month", "last_month")


def parse_period(
    period: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    reference_date: Optional[date] = None,
) -> DateRange:
    """
    Parse a period shortcut or explicit dates into a DateRange.

    Args:
        period: today, yesterday, week, last_week, month or last_month
        start_date: Explicit start date (YYYY-MM-DD), used if period is None
        end_date: Explicit end date (YYYY-MM-DD), used if period is None
        reference_date: Date treated as "today" (default: date.today())

    Examples:
        >>> parse_period("yesterday", reference_date=date(2026, 3, 10))
        DateRange(start=datetime.date(2026, 3, 9), end=datetime.date(2026, 3, 9))

        >>> parse_period(start_date="2026-01-01", end_date="2026-01-31")
        DateRange(start=datetime.date(2026, 1, 1), end=datetime.date(2026, 1, 31))
    """
    today = reference_date or date.today()

    if period == "today":
        return DateRange(today, today)

    elif period == "yesterday":
        yesterday = today - timedelta(days=1)
        return DateRange(yesterday, yesterday)

    elif period == "week":
        start_of_week = today - timedelta(days=today.weekday())
        return DateRange(start_of_week, today)

    elif period == "last_week":
        start_of_this_week = today - timedelta(days=today.weekday())
        end_of_last_week = start_of_this_week - timedelta(days=1)
        return DateRange(end_of_last_week - timedelta(days=6), end_of_last_week)

    elif period == "month":
        return DateRange(today.replace(day=1), today)

    elif period == "last_month":
        last_of_last_month = today.replace(day=1) - timedelta(days=1)
        return DateRange(last_of_last_month.replace(day=1), last_of_last_month)

    if start_date and end_date:
        start = datetime.strptime(start_date, "%Y-%m-%d").date()
        end = datetime.strptime(end_date, "%Y-%m-%d").date()
        return DateRange(start, end)

    return DateRange(today, today)


def get_period_label(period: Optional[str]) -> str:
    """Human-readable label for a period shortcut."""
    labels = {
        "today": "Today",
        "yesterday": "Yesterday",
        "week": "This Week",
        "last_week": "Last Week",
        "month": "This Month",
        "last_month": "Last Month",
    }
    return labels.get(period, period.replace("_", " ").title() if period else "Today")


# ─── Calendar bucketing ───────────────────────────────────────────────────────

def day_key(moment: datetime, tz: ZoneInfo) -> str:
    """YYYY-MM-DD of a timestamp in the report timezone."""
    return moment.astimezone(tz).strftime("%Y-%m-%d")


def month_key(moment: datetime, tz: ZoneInfo) -> str:
    """YYYY-MM of a timestamp in the report timezone."""
    return moment.astimezone(tz).strftime("%Y-%m")
