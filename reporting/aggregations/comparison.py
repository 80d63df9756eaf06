"""
Side-by-side comparison of two arbitrary periods.

Each period is summarized on its own (orders, revenue, profit after item
cost), optionally broken down by category or product, and the two summaries
are diffed with `change_pct`.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from reporting.filters import day_key, month_key
from reporting.models import ProductRecord, SaleItemRecord, SaleRecord
from reporting.settings import ReportSettings

PRODUCT_LIMIT = 50


@dataclass(frozen=True)
class PeriodRows:
    """Everything fetched for one side of a comparison."""
    sales: Sequence[SaleRecord] = ()
    items: Sequence[SaleItemRecord] = ()
    products: Mapping[str, ProductRecord] = field(default_factory=dict)

    def cost_of(self, item: SaleItemRecord) -> float:
        product = self.products.get(item.product_id) if item.product_id else None
        return (product.cost_price if product else 0.0) * item.quantity


def change_pct(a: float, b: float) -> float:
    """
    Percent change from a to b, rounded to 2 decimals.

    A zero baseline reads as +100% unless both sides are zero.
    """
    if a == 0 and b == 0:
        return 0.0
    if a == 0:
        return 100.0
    return round((b - a) / a * 100, 2)


def summarize(rows: PeriodRows) -> Dict[str, Any]:
    """Order, revenue and profit summary of one period."""
    total_orders = len(rows.sales)
    total_revenue = sum(s.total_amount for s in rows.sales)
    total_cost = sum(rows.cost_of(item) for item in rows.items)
    total_profit = total_revenue - total_cost

    average = total_revenue / total_orders if total_orders else 0.0
    margin = total_profit / total_revenue * 100 if total_revenue > 0 else 0.0

    return {
        "totalOrders": total_orders,
        "totalRevenue": total_revenue,
        "totalProfit": total_profit,
        "averageOrderValue": average,
        "profitMargin": round(margin, 2),
    }


def group_by_date(rows: PeriodRows, group_by: str, settings: ReportSettings) -> List[Dict[str, Any]]:
    """Orders, revenue and profit per day or month bucket."""
    key_fn = month_key if group_by == "month" else day_key

    cost_by_sale: Dict[str, float] = defaultdict(float)
    for item in rows.items:
        cost_by_sale[item.sale_id] += rows.cost_of(item)

    buckets: Dict[str, Dict[str, float]] = {}
    for sale in rows.sales:
        if sale.created_at is None:
            continue
        key = key_fn(sale.created_at, settings.tz)
        bucket = buckets.setdefault(key, {"orders": 0, "revenue": 0.0, "profit": 0.0})
        bucket["orders"] += 1
        bucket["revenue"] += sale.total_amount
        bucket["profit"] += sale.total_amount - cost_by_sale.get(sale.id, 0.0)

    return [{"key": key, **buckets[key]} for key in sorted(buckets)]


def group_by_category(rows: PeriodRows, settings: ReportSettings) -> List[Dict[str, Any]]:
    """Item revenue and profit per product category, largest first."""
    totals: Dict[str, List[float]] = {}
    for item in rows.items:
        product = rows.products.get(item.product_id) if item.product_id else None
        category = product.category_id if product and product.category_id else settings.uncategorized_label
        revenue = item.quantity * item.unit_price
        entry = totals.setdefault(category, [0.0, 0.0])
        entry[0] += revenue
        entry[1] += revenue - rows.cost_of(item)

    ranked = sorted(totals.items(), key=lambda kv: kv[1][0], reverse=True)
    return [
        {"category": category, "revenue": revenue, "profit": profit}
        for category, (revenue, profit) in ranked
    ]


def group_by_product(rows: PeriodRows, settings: ReportSettings) -> List[Dict[str, Any]]:
    """Top products by item revenue."""
    totals: Dict[str, Dict[str, Any]] = {}
    for item in rows.items:
        product_id = item.product_id or "unknown"
        product = rows.products.get(product_id)
        unit_price = item.unit_price or (product.sale_price if product else 0.0)
        revenue = item.quantity * unit_price

        entry = totals.get(product_id)
        if entry is None:
            entry = totals[product_id] = {
                "id": product_id,
                "name": product.name if product and product.name else settings.unknown_product_label,
                "quantity": 0.0,
                "revenue": 0.0,
                "profit": 0.0,
            }
        entry["quantity"] += item.quantity
        entry["revenue"] += revenue
        entry["profit"] += revenue - rows.cost_of(item)

    return sorted(totals.values(), key=lambda e: e["revenue"], reverse=True)[:PRODUCT_LIMIT]


def _period(
    rows: PeriodRows,
    dimension: str,
    group_by: str,
    details: bool,
    settings: ReportSettings,
) -> Dict[str, Any]:
    period: Dict[str, Any] = {
        "summary": summarize(rows),
        "byDate": group_by_date(rows, group_by, settings),
    }
    if details and dimension == "category":
        period["byCategory"] = group_by_category(rows, settings)
    elif details and dimension == "product":
        period["byProduct"] = group_by_product(rows, settings)
    return period


def compare_periods(
    period_a: PeriodRows,
    period_b: PeriodRows,
    dimension: str = "overall",
    group_by: str = "day",
    details: bool = True,
    settings: Optional[ReportSettings] = None,
) -> Dict[str, Any]:
    """
    Build the comparison payload for two periods.

    Args:
        period_a: Baseline period rows
        period_b: Period compared against the baseline
        dimension: overall, category or product
        group_by: day or month buckets for byDate
        details: Include the category/product breakdown
        settings: Labels and timezone (default: from config)

    Returns:
        Dict with periodA, periodB and deltas
    """
    settings = settings or ReportSettings.from_config()

    a = _period(period_a, dimension, group_by, details, settings)
    b = _period(period_b, dimension, group_by, details, settings)
    sa, sb = a["summary"], b["summary"]

    return {
        "periodA": a,
        "periodB": b,
        "deltas": {
            "ordersChangePct": change_pct(sa["totalOrders"], sb["totalOrders"]),
            "revenueChangePct": change_pct(sa["totalRevenue"], sb["totalRevenue"]),
            "profitChangePct": change_pct(sa["totalProfit"], sb["totalProfit"]),
        },
    }
