"""DuckDBRecordSource expense methods."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping

from reporting.models import ExpenseRecord, ReportFilter
from reporting.observability import timed
from reporting.repositories.base import to_db_timestamp, where_sql, window_clause

logger = logging.getLogger(__name__)


class ExpensesMixin:

    async def insert_expenses(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Append expenses."""
        records = [ExpenseRecord.from_row(r) for r in rows]
        count = await self._execute_many(
            "INSERT INTO expenses (amount, category, created_at, branch_id) VALUES (?, ?, ?, ?)",
            [[e.amount, e.category, to_db_timestamp(e.created_at), e.branch_id] for e in records],
            entity="expenses",
        )
        logger.info(f"Inserted {count} expenses")
        return count

    @timed("store.fetch_expenses")
    async def fetch_expenses(self, report_filter: ReportFilter) -> List[ExpenseRecord]:
        """Expenses in the filter window, optionally by branch."""
        clauses, params = window_clause(report_filter, "created_at")

        if report_filter.branch_id:
            clauses.append("branch_id = ?")
            params.append(report_filter.branch_id)

        rows = await self._fetch_rows(
            f"""
            SELECT amount, category, created_at, branch_id
            FROM expenses
            {where_sql(clauses)}
            ORDER BY created_at
            """,
            params,
            entity="expenses",
        )
        return [ExpenseRecord.from_row(r) for r in rows]
