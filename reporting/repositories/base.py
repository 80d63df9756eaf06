"""
Schema and shared SQL helpers for the DuckDB record store.

Timestamps are stored as naive UTC `TIMESTAMP` values; `from_row` turns
them back into aware UTC datetimes.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from reporting.models import ReportFilter, parse_timestamp

SCHEMA_SQL = """
-- Sales (POS transactions)
CREATE TABLE IF NOT EXISTS sales (
    id VARCHAR PRIMARY KEY,
    total_amount DOUBLE NOT NULL DEFAULT 0,
    status VARCHAR,
    created_at TIMESTAMP,
    customer_id VARCHAR,
    branch_id VARCHAR,
    pos_id VARCHAR,
    payment_method VARCHAR
);

-- Sale line items
CREATE TABLE IF NOT EXISTS sale_items (
    sale_id VARCHAR NOT NULL,
    product_id VARCHAR,
    quantity DOUBLE NOT NULL DEFAULT 0,
    unit_price DOUBLE NOT NULL DEFAULT 0,
    total_price DOUBLE NOT NULL DEFAULT 0
);

-- Products with current stock
CREATE TABLE IF NOT EXISTS products (
    id VARCHAR PRIMARY KEY,
    name VARCHAR NOT NULL,
    category_id VARCHAR,
    stock_quantity DOUBLE NOT NULL DEFAULT 0,
    min_stock DOUBLE,
    sale_price DOUBLE NOT NULL DEFAULT 0,
    cost_price DOUBLE NOT NULL DEFAULT 0,
    branch_id VARCHAR
);

-- Customers
CREATE TABLE IF NOT EXISTS customers (
    id VARCHAR PRIMARY KEY,
    name VARCHAR,
    created_at TIMESTAMP
);

-- Operating expenses
CREATE TABLE IF NOT EXISTS expenses (
    amount DOUBLE NOT NULL DEFAULT 0,
    category VARCHAR,
    created_at TIMESTAMP,
    branch_id VARCHAR
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_sales_created_at ON sales(created_at);
CREATE INDEX IF NOT EXISTS idx_sales_customer_id ON sales(customer_id);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale_id ON sale_items(sale_id);
CREATE INDEX IF NOT EXISTS idx_products_category_id ON products(category_id);
CREATE INDEX IF NOT EXISTS idx_expenses_created_at ON expenses(created_at);
"""


def to_db_timestamp(value: Any) -> Optional[datetime]:
    """Convert any accepted timestamp form to naive UTC for storage."""
    moment = parse_timestamp(value)
    if moment is None:
        return None
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def placeholders(values: Sequence[Any]) -> str:
    """`?, ?, ?` for an IN list."""
    return ", ".join("?" for _ in values)


def window_clause(report_filter: ReportFilter, column: str) -> Tuple[List[str], List[Any]]:
    """Inclusive date window condition on `column`."""
    return (
        [f"{column} BETWEEN ? AND ?"],
        [to_db_timestamp(report_filter.start_date), to_db_timestamp(report_filter.end_date)],
    )


def where_sql(clauses: List[str]) -> str:
    return f"WHERE {' AND '.join(clauses)}" if clauses else ""
