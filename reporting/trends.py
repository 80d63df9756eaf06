"""
Period-over-period trend calculation.

The previous window always has the same length as the current one and ends
exactly where the current one starts.
"""
import math
from datetime import timedelta
from typing import Dict

from reporting.models import CustomerAggregate, FinancialAggregate, ReportFilter, SalesAggregate

TrendSet = Dict[str, float]

ONE_DAY = timedelta(days=1)


def pct(curr: float, prev: float) -> float:
    """
    Percent change from prev to curr.

    Growth from nothing reads as +100% rather than infinity, and no change
    from zero reads as 0.

    Examples:
        >>> pct(150, 100)
        50.0
        >>> pct(5, 0)
        100.0
    """
    if prev > 0:
        return (curr - prev) / prev * 100
    if curr > 0:
        return 100.0
    return 0.0


def period_days(report_filter: ReportFilter) -> int:
    """Window length in whole days, rounded up, at least 1."""
    return max(1, math.ceil((report_filter.end_date - report_filter.start_date) / ONE_DAY))


def previous_period(report_filter: ReportFilter) -> ReportFilter:
    """Filter for the window immediately preceding `report_filter`."""
    prev_end = report_filter.start_date
    prev_start = prev_end - timedelta(days=period_days(report_filter))
    return report_filter.shifted(prev_start, prev_end)


def sales_trends(current: SalesAggregate, previous: SalesAggregate) -> TrendSet:
    return {
        "salesPct": pct(current.total_sales, previous.total_sales),
        "ordersPct": pct(current.total_orders, previous.total_orders),
        "aovPct": pct(current.average_order_value, previous.average_order_value),
    }


def financial_trends(current: FinancialAggregate, previous: FinancialAggregate) -> TrendSet:
    return {
        "revenuePct": pct(current.total_revenue, previous.total_revenue),
        "expensesPct": pct(current.total_expenses, previous.total_expenses),
        "profitPct": pct(current.net_profit, previous.net_profit),
        "marginPct": pct(current.profit_margin, previous.profit_margin),
    }


def customer_trends(current: CustomerAggregate, previous: CustomerAggregate) -> TrendSet:
    return {"newCustomersPct": pct(current.new_customers, previous.new_customers)}
