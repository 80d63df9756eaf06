"""
Tests for reporting.aggregations.comparison module.

Period A is December 2025 and period B is January 2026 from conftest.py.
"""
import pytest
from datetime import datetime, timezone

from reporting.aggregations.comparison import (
    PRODUCT_LIMIT,
    PeriodRows,
    change_pct,
    compare_periods,
    group_by_category,
    group_by_date,
    group_by_product,
    summarize,
)
from reporting.models import SaleItemRecord, SaleRecord


def _rows(sales, items, products, month):
    picked = [s for s in sales if s.created_at.strftime("%Y-%m") == month]
    ids = {s.id for s in picked}
    return PeriodRows(
        sales=picked,
        items=[i for i in items if i.sale_id in ids],
        products={p.id: p for p in products},
    )


@pytest.fixture
def december_rows(sales, items, products):
    return _rows(sales, items, products, "2025-12")


@pytest.fixture
def january_rows(sales, items, products):
    return _rows(sales, items, products, "2026-01")


class TestChangePct:
    """Tests for change_pct function."""

    def test_rounded(self):
        assert change_pct(180, 335) == 86.11

    def test_zero_baseline(self):
        assert change_pct(0, 10) == 100
        assert change_pct(0, 0) == 0

    def test_decline(self):
        assert change_pct(200, 50) == -75


class TestSummarize:
    """Tests for summarize function."""

    def test_profit_after_item_cost(self, january_rows):
        """Unknown products carry no cost."""
        summary = summarize(january_rows)
        assert summary["totalOrders"] == 3
        assert summary["totalRevenue"] == 450
        assert summary["totalProfit"] == 335
        assert summary["averageOrderValue"] == 150
        assert summary["profitMargin"] == 74.44

    def test_empty(self):
        assert summarize(PeriodRows()) == {
            "totalOrders": 0,
            "totalRevenue": 0,
            "totalProfit": 0,
            "averageOrderValue": 0,
            "profitMargin": 0,
        }


class TestGrouping:
    """Tests for the per-period breakdowns."""

    def test_by_day(self, january_rows, settings):
        assert group_by_date(january_rows, "day", settings) == [
            {"key": "2026-01-05", "orders": 1, "revenue": 100, "profit": 70},
            {"key": "2026-01-06", "orders": 2, "revenue": 350, "profit": 265},
        ]

    def test_by_month(self, january_rows, settings):
        assert group_by_date(january_rows, "month", settings) == [
            {"key": "2026-01", "orders": 3, "revenue": 450, "profit": 335},
        ]

    def test_by_category(self, january_rows, settings):
        assert group_by_category(january_rows, settings) == [
            {"category": "comida", "revenue": 200, "profit": 100},
            {"category": "bebidas", "revenue": 30, "profit": 20},
            {"category": "Sin categoría", "revenue": 30, "profit": 25},
        ]

    def test_by_product(self, january_rows, settings):
        products = group_by_product(january_rows, settings)
        assert [p["id"] for p in products] == ["P2", "P1", "P9", "P3"]
        assert products[0] == {"id": "P2", "name": "Sandwich", "quantity": 25, "revenue": 200, "profit": 100}
        assert products[2]["name"] == "Desconocido"

    def test_by_product_limit(self, settings):
        sale = SaleRecord(id="s", total_amount=1, created_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
        items = [
            SaleItemRecord(sale_id="s", product_id=f"P{n}", quantity=1, unit_price=n, total_price=n)
            for n in range(1, PRODUCT_LIMIT + 11)
        ]
        products = group_by_product(PeriodRows(sales=[sale], items=items), settings)
        assert len(products) == PRODUCT_LIMIT
        assert products[0]["id"] == f"P{PRODUCT_LIMIT + 10}"


class TestComparePeriods:
    """Tests for compare_periods function."""

    def test_deltas(self, december_rows, january_rows, settings):
        result = compare_periods(december_rows, january_rows, settings=settings)
        assert result["deltas"] == {
            "ordersChangePct": 200,
            "revenueChangePct": 125,
            "profitChangePct": 86.11,
        }
        assert result["periodA"]["summary"]["totalProfit"] == 180

    def test_overall_has_no_breakdown(self, december_rows, january_rows, settings):
        result = compare_periods(december_rows, january_rows, "overall", settings=settings)
        assert set(result["periodB"]) == {"summary", "byDate"}

    def test_category_dimension(self, december_rows, january_rows, settings):
        result = compare_periods(december_rows, january_rows, "category", settings=settings)
        assert "byCategory" in result["periodA"]
        assert "byProduct" not in result["periodB"]

    def test_product_dimension_without_details(self, december_rows, january_rows, settings):
        result = compare_periods(december_rows, january_rows, "product", details=False, settings=settings)
        assert "byProduct" not in result["periodB"]

    def test_both_empty(self, settings):
        result = compare_periods(PeriodRows(), PeriodRows(), settings=settings)
        assert result["deltas"] == {"ordersChangePct": 0, "revenueChangePct": 0, "profitChangePct": 0}
