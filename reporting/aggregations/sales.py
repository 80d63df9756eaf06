"""Sales report aggregation."""
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from reporting.filters import day_key
from reporting.models import (
    CategorySales,
    DailySales,
    ProductRecord,
    SaleItemRecord,
    SaleRecord,
    SalesAggregate,
    TopProduct,
)
from reporting.settings import ReportSettings


def _share(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def _top_products(
    items: Iterable[SaleItemRecord],
    products: Mapping[str, ProductRecord],
    settings: ReportSettings,
) -> List[TopProduct]:
    totals: Dict[str, List[float]] = {}
    names: Dict[str, str] = {}

    for item in items:
        product_id = item.product_id or "unknown"
        if product_id not in totals:
            product = products.get(product_id)
            names[product_id] = product.name if product and product.name else settings.unknown_product_label
            totals[product_id] = [0.0, 0.0]
        totals[product_id][0] += item.total_price
        totals[product_id][1] += item.quantity

    ranked = sorted(totals.items(), key=lambda kv: kv[1][0], reverse=True)
    return [
        TopProduct(id=pid, name=names[pid], sales=sales, quantity=quantity)
        for pid, (sales, quantity) in ranked[:settings.top_n]
    ]


def _sales_by_date(sales: Iterable[SaleRecord], settings: ReportSettings) -> List[DailySales]:
    amounts: Dict[str, float] = defaultdict(float)
    orders: Dict[str, int] = defaultdict(int)

    for sale in sales:
        if sale.created_at is None:
            continue
        key = day_key(sale.created_at, settings.tz)
        amounts[key] += sale.total_amount
        orders[key] += 1

    return [
        DailySales(date=key, sales=amounts[key], orders=orders[key])
        for key in sorted(amounts)
    ]


def _sales_by_category(
    items: Iterable[SaleItemRecord],
    products: Mapping[str, ProductRecord],
    total_sales: float,
    settings: ReportSettings,
) -> List[CategorySales]:
    by_category: Dict[str, float] = defaultdict(float)

    for item in items:
        product = products.get(item.product_id) if item.product_id else None
        category = product.category_id if product and product.category_id else settings.uncategorized_label
        by_category[category] += item.total_price

    ranked = sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
    return [
        CategorySales(category=category, sales=amount, percentage=_share(amount, total_sales))
        for category, amount in ranked
    ]


def aggregate_sales(
    sales: Sequence[SaleRecord],
    items: Sequence[SaleItemRecord],
    products: Mapping[str, ProductRecord],
    settings: Optional[ReportSettings] = None,
) -> SalesAggregate:
    """
    Build the sales report for one period.

    Args:
        sales: Sales in the period
        items: Line items of those sales
        products: Products by id, for names and category attribution
        settings: Thresholds and labels (default: from config)

    Returns:
        SalesAggregate; zeroed when there are no sales
    """
    settings = settings or ReportSettings.from_config()

    if not sales:
        return SalesAggregate()

    total_sales = sum(s.total_amount for s in sales)
    total_orders = len(sales)

    return SalesAggregate(
        total_sales=total_sales,
        total_orders=total_orders,
        average_order_value=total_sales / total_orders,
        top_products=tuple(_top_products(items, products, settings)),
        sales_by_date=tuple(_sales_by_date(sales, settings)),
        sales_by_category=tuple(_sales_by_category(items, products, total_sales, settings)),
    )
