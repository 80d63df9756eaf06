"""Reports endpoints: family reports, comparison, catalog."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from reporting.assembler import ReportEngine
from reporting.config import REPORT_FAMILIES, config
from reporting.models import ReportFilter
from reporting.validators import validate_date_range, validate_family, validate_identifier
from web.config import REPORT_RATE_LIMIT
from web.schemas import ComparisonResponse, ReportTypeResponse
from ._deps import (
    limiter, get_engine, build_filter, bad_request, source_unavailable,
    ValidationError, RecordSourceError,
)

router = APIRouter(prefix="/reports", tags=["reports"])

REPORT_TYPES = {
    "sales": (
        "Sales Report",
        "Comprehensive sales analysis with revenue, top products, and trends",
    ),
    "inventory": (
        "Inventory Report",
        "Stock levels, low stock alerts, and inventory valuation",
    ),
    "customers": (
        "Customer Report",
        "Customer analytics, segmentation, and retention metrics",
    ),
    "financial": (
        "Financial Report",
        "Revenue, costs, profit analysis, and financial trends",
    ),
}


@router.get("")
@limiter.limit(REPORT_RATE_LIMIT)
async def get_report(
    request: Request,
    type: str = Query(..., description="Report family: sales, inventory, customers or financial"),
    period: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    product_id: Optional[str] = Query(None),
    branch_id: Optional[str] = Query(None),
    pos_id: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    engine: ReportEngine = Depends(get_engine),
):
    """Get one report family with trends and previous-period figures."""
    try:
        family = validate_family(type)
        report_filter = build_filter(
            period, start_date, end_date, status, customer_id, product_id,
            branch_id, pos_id, payment_method, category,
        )
    except ValidationError as ex:
        raise bad_request(ex)

    try:
        return await engine.compute_report(family, report_filter)
    except RecordSourceError as ex:
        raise source_unavailable(ex)


@router.get("/compare", response_model=ComparisonResponse, response_model_exclude_none=True)
@limiter.limit(REPORT_RATE_LIMIT)
async def compare_reports(
    request: Request,
    start_date_a: str = Query(...),
    end_date_a: str = Query(...),
    start_date_b: str = Query(...),
    end_date_b: str = Query(...),
    dimension: str = Query("overall", description="overall, category or product"),
    group_by: str = Query("day", description="day or month"),
    details: bool = Query(True),
    branch_id: Optional[str] = Query(None),
    pos_id: Optional[str] = Query(None),
    engine: ReportEngine = Depends(get_engine),
):
    """Compare two periods side by side."""
    try:
        start_a, end_a = validate_date_range(start_date_a, end_date_a, max_days=config.web.max_range_days)
        start_b, end_b = validate_date_range(start_date_b, end_date_b, max_days=config.web.max_range_days)
        branch_id = validate_identifier(branch_id, "branch_id")
        pos_id = validate_identifier(pos_id, "pos_id")
        filter_a = ReportFilter.for_dates(start_a, end_a, branch_id=branch_id, pos_id=pos_id)
        filter_b = ReportFilter.for_dates(start_b, end_b, branch_id=branch_id, pos_id=pos_id)
        return await engine.compare(filter_a, filter_b, dimension, group_by, details)
    except ValidationError as ex:
        raise bad_request(ex)
    except RecordSourceError as ex:
        raise source_unavailable(ex)


@router.get("/types", response_model=List[ReportTypeResponse])
@limiter.limit(REPORT_RATE_LIMIT)
async def get_report_types(request: Request):
    """Catalog of available report families."""
    return [
        {
            "id": family,
            "name": REPORT_TYPES[family][0],
            "description": REPORT_TYPES[family][1],
            "cacheTtlSeconds": config.cache.ttl_for(family),
        }
        for family in REPORT_FAMILIES
    ]
