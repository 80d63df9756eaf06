"""Inventory snapshot aggregation."""
from typing import Dict, List, Optional, Sequence

from reporting.models import CategoryStock, InventoryAggregate, ProductRecord, StockLevel
from reporting.settings import ReportSettings

STATUS_LOW = "low"
STATUS_NORMAL = "normal"


def stock_status(product: ProductRecord) -> str:
    """
    Per-item stock status.

    Out-of-stock items are reported as "low" here while the summary counts
    them separately in outOfStockItems; consumers rely on both.
    """
    if product.stock_quantity == 0 or product.stock_quantity <= product.min_stock:
        return STATUS_LOW
    return STATUS_NORMAL


def aggregate_inventory(
    products: Sequence[ProductRecord],
    settings: Optional[ReportSettings] = None,
) -> InventoryAggregate:
    """Build the point-in-time inventory report."""
    settings = settings or ReportSettings.from_config()

    low_stock = 0
    out_of_stock = 0
    total_value = 0.0
    levels: List[StockLevel] = []
    # dicts keep first-seen category order
    breakdown: Dict[str, List[float]] = {}

    for product in products:
        stock = product.stock_quantity
        if stock == 0:
            out_of_stock += 1
        elif stock <= product.min_stock:
            low_stock += 1

        value = product.stock_value
        total_value += value

        levels.append(StockLevel(
            id=product.id,
            name=product.name,
            stock=stock,
            status=stock_status(product),
        ))

        category = product.category_id or settings.uncategorized_label
        entry = breakdown.setdefault(category, [0, 0.0])
        entry[0] += 1
        entry[1] += value

    return InventoryAggregate(
        total_products=len(products),
        low_stock_items=low_stock,
        out_of_stock_items=out_of_stock,
        total_value=total_value,
        stock_levels=tuple(levels),
        category_breakdown=tuple(
            CategoryStock(category=category, count=count, value=value)
            for category, (count, value) in breakdown.items()
        ),
    )
