"""
Tests for reporting.filters module.
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from reporting.filters import DateRange, day_key, get_period_label, month_key, parse_period

# Tuesday
REFERENCE = date(2026, 3, 10)


class TestParsePeriod:
    """Tests for parse_period function."""

    def test_today(self):
        assert parse_period("today", reference_date=REFERENCE).as_tuple() == (REFERENCE, REFERENCE)

    def test_yesterday(self):
        result = parse_period("yesterday", reference_date=REFERENCE)
        assert result.start == result.end == date(2026, 3, 9)

    def test_week_starts_monday(self):
        result = parse_period("week", reference_date=REFERENCE)
        assert result.start == date(2026, 3, 9)
        assert result.end == REFERENCE

    def test_last_week(self):
        result = parse_period("last_week", reference_date=REFERENCE)
        assert result.as_tuple() == (date(2026, 3, 2), date(2026, 3, 8))
        assert result.days == 7

    def test_month(self):
        result = parse_period("month", reference_date=REFERENCE)
        assert result.as_tuple() == (date(2026, 3, 1), REFERENCE)

    def test_last_month(self):
        result = parse_period("last_month", reference_date=REFERENCE)
        assert result.as_tuple() == (date(2026, 2, 1), date(2026, 2, 28))

    def test_last_month_across_year(self):
        result = parse_period("last_month", reference_date=date(2026, 1, 15))
        assert result.as_tuple() == (date(2025, 12, 1), date(2025, 12, 31))

    def test_explicit_dates(self):
        """Explicit dates are used when no period is given."""
        result = parse_period(start_date="2026-01-01", end_date="2026-01-31")
        assert result.start_str == "2026-01-01"
        assert result.end_str == "2026-01-31"
        assert result.days == 31

    def test_fallback_today(self):
        """No period and no dates means today."""
        assert parse_period(reference_date=REFERENCE) == DateRange(REFERENCE, REFERENCE)


class TestPeriodLabel:
    """Tests for get_period_label function."""

    def test_known(self):
        assert get_period_label("last_week") == "Last Week"

    def test_unknown_is_titled(self):
        assert get_period_label("custom_range") == "Custom Range"

    def test_none(self):
        assert get_period_label(None) == "Today"


class TestCalendarKeys:
    """Tests for day_key and month_key."""

    def test_day_key_utc(self):
        moment = datetime(2026, 1, 5, 23, 30, tzinfo=timezone.utc)
        assert day_key(moment, ZoneInfo("UTC")) == "2026-01-05"

    def test_day_key_shifts_with_timezone(self):
        """A late UTC sale belongs to the previous local day west of UTC."""
        moment = datetime(2026, 1, 6, 3, 0, tzinfo=timezone.utc)
        assert day_key(moment, ZoneInfo("America/Mexico_City")) == "2026-01-05"

    def test_month_key(self):
        moment = datetime(2026, 2, 1, 2, 0, tzinfo=timezone.utc)
        assert month_key(moment, ZoneInfo("UTC")) == "2026-02"
        assert month_key(moment, ZoneInfo("America/Mexico_City")) == "2026-01"
