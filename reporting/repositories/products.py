"""DuckDBRecordSource product methods."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from reporting.models import ProductRecord, ReportFilter
from reporting.observability import timed
from reporting.repositories.base import placeholders, where_sql

logger = logging.getLogger(__name__)


class ProductsMixin:

    async def insert_products(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert or replace products with their current stock."""
        records = [ProductRecord.from_row(r) for r in rows]
        count = await self._execute_many(
            """
            INSERT OR REPLACE INTO products
            (id, name, category_id, stock_quantity, min_stock, sale_price, cost_price, branch_id)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                [p.id, p.name, p.category_id, p.stock_quantity, p.min_stock,
                 p.sale_price, p.cost_price, p.branch_id]
                for p in records
            ],
            entity="products",
        )
        logger.info(f"Inserted {count} products")
        return count

    @timed("store.fetch_products")
    async def fetch_products(
        self,
        report_filter: Optional[ReportFilter] = None,
        product_ids: Optional[Sequence[str]] = None,
    ) -> List[ProductRecord]:
        """
        Current product catalog.

        The date window does not apply: stock is a snapshot. Branch,
        category and product filters do.
        """
        clauses: List[str] = []
        params: List[Any] = []

        if product_ids is not None:
            ids = list(product_ids)
            if not ids:
                return []
            clauses.append(f"id IN ({placeholders(ids)})")
            params.extend(ids)

        if report_filter is not None:
            if report_filter.product_id:
                clauses.append("id = ?")
                params.append(report_filter.product_id)
            if report_filter.category:
                clauses.append("category_id = ?")
                params.append(report_filter.category)
            if report_filter.branch_id:
                clauses.append("branch_id = ?")
                params.append(report_filter.branch_id)

        rows = await self._fetch_rows(
            f"""
            SELECT id, name, category_id, stock_quantity, min_stock,
                   sale_price, cost_price, branch_id
            FROM products
            {where_sql(clauses)}
            ORDER BY id
            """,
            params,
            entity="products",
        )
        return [ProductRecord.from_row(r) for r in rows]
