"""Shared dependencies for API route modules."""
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request

from slowapi import Limiter
from slowapi.util import get_remote_address

from reporting.assembler import ReportEngine
from reporting.exceptions import RecordSourceError, ValidationError
from reporting.filters import parse_period
from reporting.models import ReportFilter
from reporting.validators import (
    validate_date_range,
    validate_identifier,
    validate_period,
)
from reporting.config import config
from web.config import RETRY_AFTER_SECONDS

# Shared limiter instance
limiter = Limiter(key_func=get_remote_address)

# Shared logger factory
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

# Track startup time for uptime calculation
START_TIME = time.time()

logger = get_logger(__name__)


def get_engine(request: Request) -> ReportEngine:
    """Report engine created at startup."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Report engine not initialized")
    return engine


def build_filter(
    period: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    status: Optional[str] = None,
    customer_id: Optional[str] = None,
    product_id: Optional[str] = None,
    branch_id: Optional[str] = None,
    pos_id: Optional[str] = None,
    payment_method: Optional[str] = None,
    category: Optional[str] = None,
) -> ReportFilter:
    """
    Validate query parameters and build a ReportFilter.

    Raises:
        ValidationError: On any invalid parameter
    """
    validate_period(period)

    if period is None and (start_date or end_date):
        if not (start_date and end_date):
            missing = "end_date" if start_date else "start_date"
            raise ValidationError(missing, "Both start_date and end_date are required")
        validate_date_range(start_date, end_date, max_days=config.web.max_range_days)

    date_range = parse_period(period, start_date, end_date)

    return ReportFilter.for_dates(
        date_range.start,
        date_range.end,
        status=validate_identifier(status, "status"),
        customer_id=validate_identifier(customer_id, "customer_id"),
        product_id=validate_identifier(product_id, "product_id"),
        branch_id=validate_identifier(branch_id, "branch_id"),
        pos_id=validate_identifier(pos_id, "pos_id"),
        payment_method=validate_identifier(payment_method, "payment_method"),
        category=validate_identifier(category, "category"),
    )


def bad_request(error: ValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(error))


def source_unavailable(error: RecordSourceError) -> HTTPException:
    """503 with a retry hint; an empty period is never reported this way."""
    logger.error(f"Record source unavailable: {error}")
    return HTTPException(
        status_code=503,
        detail=f"Report data temporarily unavailable: {error.message}",
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "get_logger",
    "START_TIME",
    "get_engine",
    "build_filter",
    "bad_request",
    "source_unavailable",
    "ValidationError",
    "RecordSourceError",
]
