"""
Integration tests for reporting/store.py

Runs the DuckDB record source against an in-memory database loaded with
the conftest.py rows.
"""
import pytest
from datetime import date, datetime, timezone

from reporting.assembler import ReportEngine
from reporting.exceptions import RecordSourceError
from reporting.models import ReportFilter
from reporting.store import MEMORY_PATH, DuckDBRecordSource

pytestmark = pytest.mark.integration


async def _loaded_store(product_rows, sale_rows, item_rows, customer_rows, expense_rows):
    store = DuckDBRecordSource(MEMORY_PATH)
    await store.insert_products(product_rows)
    await store.insert_customers(customer_rows)
    await store.insert_sales(sale_rows)
    await store.insert_sale_items(item_rows)
    await store.insert_expenses(expense_rows)
    return store


@pytest.fixture
def rows(product_rows, sale_rows, item_rows, customer_rows, expense_rows):
    return product_rows, sale_rows, item_rows, customer_rows, expense_rows


class TestDuckDBRecordSource:
    """Tests for fetches against a loaded store."""

    @pytest.mark.asyncio
    async def test_connect_lazily(self):
        store = DuckDBRecordSource(MEMORY_PATH)
        assert store.get_connection_info()["status"] == "not_initialized"
        try:
            assert await store.fetch_sales(
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC")
            ) == []
            assert store.get_connection_info()["status"] == "active"
        finally:
            await store.close()
        assert store.get_connection_info()["status"] == "not_initialized"

    @pytest.mark.asyncio
    async def test_fetch_sales_window(self, rows, january):
        store = await _loaded_store(*rows)
        try:
            sales = await store.fetch_sales(january)
        finally:
            await store.close()

        assert [s.id for s in sales] == ["S1", "S2", "S3"]
        assert sales[0].created_at == datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
        assert sales[1].total_amount == 300

    @pytest.mark.asyncio
    async def test_status_case_insensitive(self, rows, january):
        store = await _loaded_store(*rows)
        try:
            completed = ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", status="Completed")
            sales = await store.fetch_sales(completed)
        finally:
            await store.close()

        assert [s.id for s in sales] == ["S1", "S2"]

    @pytest.mark.asyncio
    async def test_dimension_filters(self, rows):
        store = await _loaded_store(*rows)
        try:
            by_pos = await store.fetch_sales(
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", pos_id="T2")
            )
            by_product = await store.fetch_sales(
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", product_id="P2")
            )
            by_category = await store.fetch_sales(
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", category="bebidas")
            )
        finally:
            await store.close()

        assert [s.id for s in by_pos] == ["S2"]
        assert [s.id for s in by_product] == ["S1", "S2"]
        assert [s.id for s in by_category] == ["S1"]

    @pytest.mark.asyncio
    async def test_fetch_sale_items(self, rows):
        store = await _loaded_store(*rows)
        try:
            items = await store.fetch_sale_items(["S2"])
            none = await store.fetch_sale_items([])
        finally:
            await store.close()

        assert none == []
        assert sorted(i.product_id for i in items) == ["P2", "P9"]
        derived = next(i for i in items if i.product_id == "P9")
        assert derived.total_price == 20

    @pytest.mark.asyncio
    async def test_fetch_products(self, rows, january):
        store = await _loaded_store(*rows)
        try:
            everything = await store.fetch_products(january)
            some = await store.fetch_products(product_ids=["P3", "P1"])
            empty = await store.fetch_products(product_ids=[])
        finally:
            await store.close()

        assert [p.id for p in everything] == ["P1", "P2", "P3"]
        assert everything[2].min_stock == 5
        assert [p.id for p in some] == ["P1", "P3"]
        assert empty == []

    @pytest.mark.asyncio
    async def test_fetch_customers_embeds_sales(self, rows, january):
        store = await _loaded_store(*rows)
        try:
            customers = await store.fetch_customers(january)
            single = await store.fetch_customers(
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", customer_id="C2")
            )
        finally:
            await store.close()

        assert [c.id for c in customers] == ["C1", "C2", "C3"]
        assert [s.id for s in customers[0].sales] == ["S0", "S1", "S3"]
        assert customers[2].sales == ()
        assert [c.id for c in single] == ["C2"]

    @pytest.mark.asyncio
    async def test_fetch_expenses(self, rows, january):
        store = await _loaded_store(*rows)
        try:
            expenses = await store.fetch_expenses(january)
        finally:
            await store.close()

        assert [e.amount for e in expenses] == [500, 100]

    @pytest.mark.asyncio
    async def test_insert_replaces(self, rows, january, sale_rows):
        store = await _loaded_store(*rows)
        try:
            await store.insert_sales([{**sale_rows[1], "total_amount": 999}])
            sales = await store.fetch_sales(january)
        finally:
            await store.close()

        assert sales[0].total_amount == 999
        assert len(sales) == 3

    @pytest.mark.asyncio
    async def test_query_error_wrapped(self):
        store = DuckDBRecordSource(MEMORY_PATH)
        try:
            with pytest.raises(RecordSourceError) as exc_info:
                await store._fetch_rows("SELECT * FROM no_such_table", entity="sales")
        finally:
            await store.close()

        assert exc_info.value.entity == "sales"
        assert "no_such_table" in str(exc_info.value)


class TestEngineOnStore:
    """Full report computation against DuckDB."""

    @pytest.mark.asyncio
    async def test_reports_match_fixture_totals(self, rows, january, settings):
        store = await _loaded_store(*rows)
        try:
            engine = ReportEngine(store, settings=settings)
            payloads = await engine.compute_all(january)
        finally:
            await store.close()

        assert payloads["sales"]["totalSales"] == 450
        assert payloads["sales"]["trends"]["salesPct"] == 125
        assert payloads["financial"]["totalRevenue"] == 400
        assert payloads["financial"]["netProfit"] == -200
        assert payloads["customers"]["newCustomers"] == 2
        assert payloads["inventory"]["totalValue"] == 190

    @pytest.mark.asyncio
    async def test_financial_category_keeps_expenses(self, rows, settings):
        """A product category filter leaves the expense ledger whole."""
        store = await _loaded_store(*rows)
        try:
            engine = ReportEngine(store, settings=settings)
            scoped = await engine.compute_report(
                "financial",
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", category="bebidas"),
            )
            expenses = await store.fetch_expenses(
                ReportFilter.for_dates(date(2026, 1, 1), date(2026, 1, 31), "UTC", category="renta")
            )
        finally:
            await store.close()

        assert scoped["totalRevenue"] == 400
        assert scoped["totalExpenses"] == 600
        assert scoped["netProfit"] == -200
        assert scoped["profitMargin"] == -50
        assert [e.amount for e in expenses] == [500, 100]
