"""DuckDBRecordSource sale and sale item methods."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Sequence

from reporting.models import ReportFilter, SaleItemRecord, SaleRecord
from reporting.observability import timed
from reporting.repositories.base import placeholders, to_db_timestamp, where_sql, window_clause

logger = logging.getLogger(__name__)


class SalesMixin:

    async def insert_sales(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert or replace sales; rows go through SaleRecord.from_row first."""
        records = [SaleRecord.from_row(r) for r in rows]
        count = await self._execute_many(
            """
            INSERT OR REPLACE INTO sales
            (id, total_amount, status, created_at, customer_id, branch_id, pos_id, payment_method)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                [s.id, s.total_amount, s.status, to_db_timestamp(s.created_at),
                 s.customer_id, s.branch_id, s.pos_id, s.payment_method]
                for s in records
            ],
            entity="sales",
        )
        logger.info(f"Inserted {count} sales")
        return count

    async def insert_sale_items(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert sale line items."""
        records = [SaleItemRecord.from_row(r) for r in rows]
        count = await self._execute_many(
            """
            INSERT INTO sale_items (sale_id, product_id, quantity, unit_price, total_price)
            VALUES (?, ?, ?, ?, ?)
            """,
            [[i.sale_id, i.product_id, i.quantity, i.unit_price, i.total_price] for i in records],
            entity="sale_items",
        )
        logger.info(f"Inserted {count} sale items")
        return count

    @timed("store.fetch_sales")
    async def fetch_sales(self, report_filter: ReportFilter) -> List[SaleRecord]:
        """
        Sales in the filter window.

        Status is matched case-insensitively; product and category filters
        keep sales with at least one matching line item.
        """
        clauses, params = window_clause(report_filter, "s.created_at")

        if report_filter.status:
            clauses.append("LOWER(s.status) = LOWER(?)")
            params.append(report_filter.status)
        for column in ("customer_id", "branch_id", "pos_id", "payment_method"):
            value = getattr(report_filter, column)
            if value is not None:
                clauses.append(f"s.{column} = ?")
                params.append(value)
        if report_filter.product_id:
            clauses.append(
                "EXISTS (SELECT 1 FROM sale_items i WHERE i.sale_id = s.id AND i.product_id = ?)"
            )
            params.append(report_filter.product_id)
        if report_filter.category:
            clauses.append("""
                EXISTS (
                    SELECT 1 FROM sale_items i
                    JOIN products p ON p.id = i.product_id
                    WHERE i.sale_id = s.id AND p.category_id = ?
                )
            """)
            params.append(report_filter.category)

        rows = await self._fetch_rows(
            f"""
            SELECT s.id, s.total_amount, s.status, s.created_at, s.customer_id,
                   s.branch_id, s.pos_id, s.payment_method
            FROM sales s
            {where_sql(clauses)}
            ORDER BY s.created_at, s.id
            """,
            params,
            entity="sales",
        )
        return [SaleRecord.from_row(r) for r in rows]

    @timed("store.fetch_sale_items")
    async def fetch_sale_items(self, sale_ids: Sequence[str]) -> List[SaleItemRecord]:
        """Line items of the given sales."""
        if not sale_ids:
            return []

        ids = list(sale_ids)
        rows = await self._fetch_rows(
            f"""
            SELECT sale_id, product_id, quantity, unit_price, total_price
            FROM sale_items
            WHERE sale_id IN ({placeholders(ids)})
            """,
            ids,
            entity="sale_items",
        )
        return [SaleItemRecord.from_row(r) for r in rows]
