"""Customer report aggregation."""
from typing import List, Optional, Sequence

from reporting.models import (
    CustomerAggregate,
    CustomerRecord,
    CustomerSegment,
    ReportFilter,
    TopCustomer,
)
from reporting.settings import ReportSettings

SEGMENT_VIP = "VIP"
SEGMENT_REGULAR = "Regular"
SEGMENT_NEW = "Nuevo"


def _ratio_pct(count: float, total: int) -> float:
    return count / total * 100 if total else 0.0


def _spend(customer: CustomerRecord, report_filter: ReportFilter, settings: ReportSettings) -> TopCustomer:
    sales = customer.qualifying_sales(report_filter)
    return TopCustomer(
        id=customer.id,
        name=customer.name or settings.unnamed_customer_label,
        total_spent=sum(s.total_amount for s in sales),
        orders=len(sales),
    )


def count_new_customers(customers: Sequence[CustomerRecord], report_filter: ReportFilter) -> int:
    """Customers whose creation time falls in the inclusive window."""
    return sum(1 for c in customers if report_filter.contains(c.created_at))


def segment_customers(
    top_customers: Sequence[TopCustomer],
    new_customers: int,
    total_customers: int,
    settings: ReportSettings,
) -> List[CustomerSegment]:
    """
    Fixed VIP / Regular / Nuevo buckets.

    VIP and Regular are drawn from the top-N list only; spenders at or below
    the regular threshold fall in neither.
    """
    vip = sum(1 for c in top_customers if c.total_spent > settings.vip_threshold)
    regular = sum(
        1 for c in top_customers
        if settings.regular_threshold < c.total_spent <= settings.vip_threshold
    )
    return [
        CustomerSegment(segment=name, count=count, percentage=_ratio_pct(count, total_customers))
        for name, count in ((SEGMENT_VIP, vip), (SEGMENT_REGULAR, regular), (SEGMENT_NEW, new_customers))
    ]


def aggregate_customers(
    customers: Sequence[CustomerRecord],
    report_filter: ReportFilter,
    settings: Optional[ReportSettings] = None,
) -> CustomerAggregate:
    """
    Build the customer report for one period.

    Args:
        customers: Customers matching the filter, each with embedded sales
        report_filter: Window plus branch/POS filters applied to embedded sales
        settings: Thresholds and labels (default: from config)
    """
    settings = settings or ReportSettings.from_config()

    total_customers = len(customers)
    new_customers = count_new_customers(customers, report_filter)

    spend = [_spend(c, report_filter, settings) for c in customers]
    active_customers = sum(1 for s in spend if s.orders > 0)

    # sorted() is stable, so ties keep fetch order
    top_customers = sorted(spend, key=lambda c: c.total_spent, reverse=True)[:settings.top_n]

    # top-N spend spread over every customer in the window
    top_spend = sum(c.total_spent for c in top_customers)
    lifetime_value = top_spend / total_customers if total_customers else 0.0

    return CustomerAggregate(
        total_customers=total_customers,
        new_customers=new_customers,
        active_customers=active_customers,
        customer_lifetime_value=lifetime_value,
        top_customers=tuple(top_customers),
        customer_segments=tuple(
            segment_customers(top_customers, new_customers, total_customers, settings)
        ),
    )
