"""
Input validation functions for report parameters.

All validators raise ValidationError on invalid input.
"""

import re
from datetime import date, datetime
from typing import Optional, Tuple

from reporting.config import REPORT_FAMILIES
from reporting.exceptions import ValidationError
from reporting.filters import PERIODS

# Maximum allowed values
MAX_RANGE_DAYS = 366
MAX_IDENTIFIER_LENGTH = 64

COMPARISON_DIMENSIONS = ("overall", "product", "category")
GROUP_BY_OPTIONS = ("day", "month")

# UUIDs, numeric ids and slugs
_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_.:-]+$")


def validate_date_string(
    value: str,
    field: str = "date",
    format: str = "%Y-%m-%d"
) -> date:
    """
    Validate and parse a date string.

    Args:
        value: Date string to validate
        field: Field name for error messages
        format: Expected date format (default: YYYY-MM-DD)

    Returns:
        Parsed date object

    Raises:
        ValidationError: If date is missing or malformed
    """
    if not value:
        raise ValidationError(field, "Date is required", value)

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    try:
        return datetime.strptime(value, format).date()
    except ValueError:
        raise ValidationError(field, f"Invalid date format. Expected {format}", value)


def validate_date_range(
    start_date: str,
    end_date: str,
    max_days: int = MAX_RANGE_DAYS
) -> Tuple[date, date]:
    """
    Validate a date range.

    Returns:
        Tuple of (start_date, end_date) as date objects

    Raises:
        ValidationError: If dates are invalid, reversed, or span too many days
    """
    start = validate_date_string(start_date, "start_date")
    end = validate_date_string(end_date, "end_date")

    if start > end:
        raise ValidationError(
            "date_range",
            "Start date must be before or equal to end date",
            f"{start_date} to {end_date}"
        )

    days_diff = (end - start).days
    if days_diff > max_days:
        raise ValidationError(
            "date_range",
            f"Date range cannot exceed {max_days} days",
            f"{days_diff} days"
        )

    return start, end


def validate_family(value: Optional[str]) -> str:
    """Validate a report family name."""
    if not value:
        raise ValidationError("type", "Report type is required")
    if value not in REPORT_FAMILIES:
        raise ValidationError(
            "type",
            f"Must be one of: {', '.join(REPORT_FAMILIES)}",
            value
        )
    return value


def validate_period(value: Optional[str]) -> Optional[str]:
    """Validate a period shortcut; None means explicit dates."""
    if value is None:
        return None
    if value not in PERIODS:
        raise ValidationError("period", f"Must be one of: {', '.join(PERIODS)}", value)
    return value


def validate_identifier(
    value: Optional[str],
    field: str,
    allow_none: bool = True
) -> Optional[str]:
    """
    Validate an opaque record identifier (branch, POS, customer...).

    Returns:
        Stripped identifier or None
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if allow_none:
            return None
        raise ValidationError(field, "Identifier is required")

    value = str(value).strip()

    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(field, f"Must be at most {MAX_IDENTIFIER_LENGTH} characters", value)

    if not _IDENTIFIER_RE.match(value):
        raise ValidationError(field, "Contains invalid characters", value)

    return value


def validate_dimension(value: str) -> str:
    """Validate a comparison dimension."""
    if value not in COMPARISON_DIMENSIONS:
        raise ValidationError(
            "dimension", f"Must be one of: {', '.join(COMPARISON_DIMENSIONS)}", value
        )
    return value


def validate_group_by(value: str) -> str:
    """Validate a comparison time bucket."""
    if value not in GROUP_BY_OPTIONS:
        raise ValidationError("group_by", f"Must be one of: {', '.join(GROUP_BY_OPTIONS)}", value)
    return value
