"""DuckDBRecordSource customer methods."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping

from reporting.models import CustomerRecord, ReportFilter
from reporting.observability import timed
from reporting.repositories.base import placeholders, to_db_timestamp, where_sql

logger = logging.getLogger(__name__)


class CustomersMixin:

    async def insert_customers(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert or replace customers. Embedded sales are ignored; load them with insert_sales."""
        params = []
        for row in rows:
            customer = CustomerRecord.from_row({**row, "sales": ()})
            params.append([customer.id, customer.name, to_db_timestamp(customer.created_at)])

        count = await self._execute_many(
            "INSERT OR REPLACE INTO customers (id, name, created_at) VALUES (?, ?, ?)",
            params,
            entity="customers",
        )
        logger.info(f"Inserted {count} customers")
        return count

    @timed("store.fetch_customers")
    async def fetch_customers(self, report_filter: ReportFilter) -> List[CustomerRecord]:
        """
        Customers with their whole sales history embedded.

        Only the customer_id filter narrows the customer list; the window
        and branch/POS filters are applied to embedded sales by the
        aggregation.
        """
        clauses: List[str] = []
        params: List[Any] = []
        if report_filter.customer_id:
            clauses.append("id = ?")
            params.append(report_filter.customer_id)

        customers = await self._fetch_rows(
            f"SELECT id, name, created_at FROM customers {where_sql(clauses)} ORDER BY id",
            params,
            entity="customers",
        )
        if not customers:
            return []

        ids = [c["id"] for c in customers]
        sales = await self._fetch_rows(
            f"""
            SELECT id, customer_id, total_amount, status, created_at, branch_id, pos_id, payment_method
            FROM sales
            WHERE customer_id IN ({placeholders(ids)})
            ORDER BY created_at, id
            """,
            ids,
            entity="sales",
        )

        by_customer: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for sale in sales:
            by_customer[sale["customer_id"]].append(sale)

        return [
            CustomerRecord.from_row({**c, "sales": by_customer.get(c["id"], [])})
            for c in customers
        ]
