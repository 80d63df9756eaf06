"""
Pytest configuration and shared fixtures.

The sample data covers January 2026 (current window) and December 2025
(previous window) in UTC.
"""
import os

# Must be set before reporting.config is imported
os.environ.setdefault("REPORTS_DB_PATH", ":memory:")
os.environ["REPORT_TIMEZONE"] = "UTC"
os.environ["REPORT_CACHE_ENABLED"] = "true"

import pytest
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from reporting.exceptions import RecordSourceError
from reporting.models import (
    CustomerRecord,
    ExpenseRecord,
    ProductRecord,
    ReportFilter,
    SaleItemRecord,
    SaleRecord,
)
from reporting.settings import ReportSettings
from reporting.source import RecordSource


def utc(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


class FakeRecordSource(RecordSource):
    """In-memory RecordSource that filters like the DuckDB store and records calls."""

    def __init__(
        self,
        sales: Sequence[SaleRecord] = (),
        items: Sequence[SaleItemRecord] = (),
        products: Sequence[ProductRecord] = (),
        customers: Sequence[CustomerRecord] = (),
        expenses: Sequence[ExpenseRecord] = (),
        error: Optional[Exception] = None,
    ):
        self.sales = list(sales)
        self.items = list(items)
        self.products = list(products)
        self.customers = list(customers)
        self.expenses = list(expenses)
        self.error = error
        self.calls: List[tuple] = []

    def _check(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if self.error is not None:
            raise self.error

    async def fetch_sales(self, report_filter: ReportFilter) -> List[SaleRecord]:
        self._check("sales", report_filter)
        result = []
        for sale in self.sales:
            if not report_filter.contains(sale.created_at):
                continue
            if report_filter.status and (sale.status or "").lower() != report_filter.status.lower():
                continue
            if not sale.matches_location(report_filter.branch_id, report_filter.pos_id):
                continue
            if report_filter.customer_id and sale.customer_id != report_filter.customer_id:
                continue
            result.append(sale)
        return result

    async def fetch_sale_items(self, sale_ids: Sequence[str]) -> List[SaleItemRecord]:
        self._check("sale_items", tuple(sale_ids))
        wanted = set(sale_ids)
        return [i for i in self.items if i.sale_id in wanted]

    async def fetch_products(
        self,
        report_filter: Optional[ReportFilter] = None,
        product_ids: Optional[Sequence[str]] = None,
    ) -> List[ProductRecord]:
        self._check("products", product_ids)
        result = self.products
        if product_ids is not None:
            wanted = set(product_ids)
            result = [p for p in result if p.id in wanted]
        if report_filter is not None and report_filter.category:
            result = [p for p in result if p.category_id == report_filter.category]
        if report_filter is not None and report_filter.branch_id:
            result = [p for p in result if p.branch_id == report_filter.branch_id]
        return list(result)

    async def fetch_customers(self, report_filter: ReportFilter) -> List[CustomerRecord]:
        self._check("customers", report_filter)
        if report_filter.customer_id:
            return [c for c in self.customers if c.id == report_filter.customer_id]
        return list(self.customers)

    async def fetch_expenses(self, report_filter: ReportFilter) -> List[ExpenseRecord]:
        self._check("expenses", report_filter)
        return [
            e for e in self.expenses
            if report_filter.contains(e.created_at)
            and (report_filter.branch_id is None or e.branch_id == report_filter.branch_id)
        ]


# ═══════════════════════════════════════════════════════════════════════════════
# RAW ROWS
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def product_rows() -> List[Dict[str, Any]]:
    """Catalog rows as a store would return them."""
    return [
        {"id": "P1", "name": "Café", "category_id": "bebidas", "stock_quantity": 50,
         "min_stock": 10, "sale_price": 3, "cost_price": 1},
        {"id": "P2", "name": "Sandwich", "category_id": "comida", "stock_quantity": 5,
         "min_stock": 10, "sale_price": 8, "cost_price": 4},
        {"id": "P3", "name": "Galleta", "category_id": None, "stock_quantity": 0,
         "min_stock": 5, "sale_price": 2, "cost_price": 1},
    ]


@pytest.fixture
def sale_rows() -> List[Dict[str, Any]]:
    """Three January sales and one December sale."""
    return [
        {"id": "S0", "total_amount": 200, "status": "completed", "created_at": "2025-12-15T10:00:00Z",
         "customer_id": "C1", "branch_id": "B1", "pos_id": "T1", "payment_method": "cash"},
        {"id": "S1", "total_amount": 100, "status": "completed", "created_at": "2026-01-05T10:00:00Z",
         "customer_id": "C1", "branch_id": "B1", "pos_id": "T1", "payment_method": "cash"},
        {"id": "S2", "total": 300, "status": "COMPLETED", "created_at": "2026-01-06T15:00:00Z",
         "customer_id": "C2", "branch_id": "B2", "pos_id": "T2", "payment_method": "card"},
        {"id": "S3", "total_amount": 50, "status": "pending", "created_at": "2026-01-06T18:00:00Z",
         "customer_id": "C1", "branch_id": "B1", "pos_id": "T1", "payment_method": "cash"},
    ]


@pytest.fixture
def item_rows() -> List[Dict[str, Any]]:
    return [
        {"sale_id": "S0", "product_id": "P1", "quantity": 20, "unit_price": 3, "total_price": 60},
        {"sale_id": "S1", "product_id": "P1", "quantity": 10, "unit_price": 3, "total_price": 30},
        {"sale_id": "S1", "product_id": "P2", "quantity": 5, "unit_price": 8, "total_price": 40},
        {"sale_id": "S2", "product_id": "P2", "quantity": 20, "unit_price": 8, "total_price": 160},
        {"sale_id": "S2", "product_id": "P9", "quantity": 2, "price": 10},
        {"sale_id": "S3", "product_id": "P3", "quantity": 5, "unit_price": 2, "total_price": 10},
    ]


@pytest.fixture
def expense_rows() -> List[Dict[str, Any]]:
    return [
        {"amount": 200, "category": "renta", "created_at": "2025-12-10T09:00:00Z"},
        {"amount": 500, "category": "renta", "created_at": "2026-01-02T09:00:00Z"},
        {"amount": 100, "category": None, "created_at": "2026-01-15T09:00:00Z"},
    ]


@pytest.fixture
def customer_rows() -> List[Dict[str, Any]]:
    """Customers without embedded sales; see `customers` for the joined form."""
    return [
        {"id": "C1", "name": "Ana", "created_at": "2025-06-01T08:00:00Z"},
        {"id": "C2", "name": None, "created_at": "2026-01-03T08:00:00Z"},
        {"id": "C3", "name": "Luis", "created_at": "2026-01-20T08:00:00Z"},
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def products(product_rows) -> List[ProductRecord]:
    return [ProductRecord.from_row(r) for r in product_rows]


@pytest.fixture
def sales(sale_rows) -> List[SaleRecord]:
    return [SaleRecord.from_row(r) for r in sale_rows]


@pytest.fixture
def items(item_rows) -> List[SaleItemRecord]:
    return [SaleItemRecord.from_row(r) for r in item_rows]


@pytest.fixture
def expenses(expense_rows) -> List[ExpenseRecord]:
    return [ExpenseRecord.from_row(r) for r in expense_rows]


@pytest.fixture
def customers(customer_rows, sale_rows) -> List[CustomerRecord]:
    by_customer: Dict[str, list] = {}
    for row in sale_rows:
        by_customer.setdefault(row["customer_id"], []).append(row)
    return [
        CustomerRecord.from_row({**row, "sales": by_customer.get(row["id"], [])})
        for row in customer_rows
    ]


@pytest.fixture
def january() -> ReportFilter:
    """Whole of January 2026, UTC."""
    return ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC")


@pytest.fixture
def settings() -> ReportSettings:
    return ReportSettings()


@pytest.fixture
def fake_source(sales, items, products, customers, expenses) -> FakeRecordSource:
    return FakeRecordSource(sales, items, products, customers, expenses)


@pytest.fixture
def failing_source() -> FakeRecordSource:
    return FakeRecordSource(error=RecordSourceError("connection refused", entity="sales"))


@pytest.fixture
def empty_source() -> FakeRecordSource:
    return FakeRecordSource()
