"""Financial report aggregation: revenue, expenses and profit."""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from reporting.filters import month_key
from reporting.models import (
    ExpenseCategory,
    ExpenseRecord,
    FinancialAggregate,
    MonthlyFinancials,
    SaleRecord,
)
from reporting.settings import ReportSettings


def profit_margin(revenue: float, profit: float) -> float:
    """Net margin in percent; 0 when there is no revenue."""
    return profit / revenue * 100 if revenue > 0 else 0.0


def _by_month(
    sales: Sequence[SaleRecord],
    expenses: Sequence[ExpenseRecord],
    settings: ReportSettings,
) -> List[MonthlyFinancials]:
    revenue: Dict[str, float] = defaultdict(float)
    spent: Dict[str, float] = defaultdict(float)

    for sale in sales:
        if sale.created_at is not None:
            revenue[month_key(sale.created_at, settings.tz)] += sale.total_amount

    for expense in expenses:
        if expense.created_at is not None:
            spent[month_key(expense.created_at, settings.tz)] += expense.amount

    return [
        MonthlyFinancials(month=month, revenue=revenue.get(month, 0.0), expenses=spent.get(month, 0.0))
        for month in sorted(set(revenue) | set(spent))
    ]


def _expense_breakdown(
    expenses: Sequence[ExpenseRecord],
    total_expenses: float,
    settings: ReportSettings,
) -> List[ExpenseCategory]:
    by_category: Dict[str, float] = defaultdict(float)
    for expense in expenses:
        by_category[expense.category or settings.uncategorized_label] += expense.amount

    ranked = sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
    return [
        ExpenseCategory(
            category=category,
            amount=amount,
            percentage=amount / total_expenses * 100 if total_expenses else 0.0,
        )
        for category, amount in ranked
    ]


def aggregate_financial(
    sales: Sequence[SaleRecord],
    expenses: Sequence[ExpenseRecord],
    settings: Optional[ReportSettings] = None,
) -> FinancialAggregate:
    """
    Build the financial report for one period.

    Only completed sales count as revenue; anything else in `sales` is
    ignored. Net profit may be negative.
    """
    settings = settings or ReportSettings.from_config()

    completed = [s for s in sales if s.is_completed]
    total_revenue = sum(s.total_amount for s in completed)
    total_expenses = sum(e.amount for e in expenses)
    net_profit = total_revenue - total_expenses

    return FinancialAggregate(
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit=net_profit,
        profit_margin=profit_margin(total_revenue, net_profit),
        revenue_by_month=tuple(_by_month(completed, expenses, settings)),
        expense_breakdown=tuple(_expense_breakdown(expenses, total_expenses, settings)),
    )
