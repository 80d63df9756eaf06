"""
Aggregation functions, one module per report family.

Every function is pure and synchronous: it folds over already-normalized
records and returns a new frozen aggregate.
"""
from reporting.aggregations.sales import aggregate_sales
from reporting.aggregations.inventory import (
    STATUS_LOW,
    STATUS_NORMAL,
    aggregate_inventory,
    stock_status,
)
from reporting.aggregations.customers import (
    SEGMENT_NEW,
    SEGMENT_REGULAR,
    SEGMENT_VIP,
    aggregate_customers,
    count_new_customers,
    segment_customers,
)
from reporting.aggregations.financial import aggregate_financial, profit_margin
from reporting.aggregations.comparison import (
    PRODUCT_LIMIT,
    PeriodRows,
    change_pct,
    compare_periods,
    summarize,
)

__all__ = [
    "aggregate_sales",
    "STATUS_LOW",
    "STATUS_NORMAL",
    "aggregate_inventory",
    "stock_status",
    "SEGMENT_NEW",
    "SEGMENT_REGULAR",
    "SEGMENT_VIP",
    "aggregate_customers",
    "count_new_customers",
    "segment_customers",
    "aggregate_financial",
    "profit_margin",
    "PRODUCT_LIMIT",
    "PeriodRows",
    "change_pct",
    "compare_periods",
    "summarize",
]
