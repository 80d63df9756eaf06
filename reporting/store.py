"""
DuckDB record store for POS reporting.

Implements the RecordSource contract on top of a single DuckDB connection.
Domain-specific methods are organized into repository mixins:
- SalesMixin: sales and line items
- ProductsMixin: catalog and stock snapshot
- CustomersMixin: customers with embedded sales
- ExpensesMixin: operating expenses
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import duckdb

from reporting.config import config
from reporting.exceptions import QueryTimeoutError, RecordSourceError
from reporting.observability import get_logger
from reporting.repositories import CustomersMixin, ExpensesMixin, ProductsMixin, SalesMixin
from reporting.repositories.base import SCHEMA_SQL
from reporting.source import RecordSource

logger = get_logger(__name__)

MEMORY_PATH = ":memory:"


class DuckDBRecordSource(SalesMixin, ProductsMixin, CustomersMixin, ExpensesMixin, RecordSource):
    """
    Async-compatible DuckDB record source.

    Features:
    - Persistent or in-memory storage
    - Serialized access to the single connection
    - Thread offloading to avoid blocking the event loop
    - Query timeouts
    """

    def __init__(self, db_path=None, query_timeout: Optional[float] = None):
        self.db_path = str(db_path) if db_path is not None else str(config.store.db_path)
        self.query_timeout = query_timeout if query_timeout is not None else config.store.query_timeout
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = asyncio.Lock()  # Serializes all database access
        self._executor: Optional[ThreadPoolExecutor] = None
        self._total_queries = 0

    async def connect(self) -> None:
        """Open the connection, create the schema and the worker thread."""
        async with self._lock:
            if self._connection is not None:
                return

            if self.db_path != MEMORY_PATH:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            try:
                self._connection = duckdb.connect(self.db_path)
                self._connection.execute(SCHEMA_SQL)
            except duckdb.Error as e:
                self._connection = None
                raise RecordSourceError("Failed to open record store", str(e)) from e

            # Single worker: DuckDB connections need serialized access
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="duckdb")
            logger.info(f"DuckDB connected: {self.db_path}")

    async def close(self) -> None:
        """Close the connection and the worker thread."""
        async with self._lock:
            if self._executor:
                self._executor.shutdown(wait=True)
                self._executor = None

            if self._connection:
                self._connection.close()
                self._connection = None
                logger.info("DuckDB connection closed")

    def get_connection_info(self) -> Dict[str, Any]:
        """Get connection info for monitoring."""
        return {
            "status": "active" if self._connection else "not_initialized",
            "total_queries": self._total_queries,
            "db_path": self.db_path,
        }

    @asynccontextmanager
    async def connection(self):
        """Get the connection, connecting on first use; holds the lock while in use."""
        if self._connection is None:
            await self.connect()
        async with self._lock:
            yield self._connection

    # ─── Query Execution with Timeout ────────────────────────────────────────

    async def _run(self, fn, query: str, entity: Optional[str]):
        self._total_queries += 1
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, fn),
                timeout=self.query_timeout,
            )
        except asyncio.TimeoutError:
            raise QueryTimeoutError(query, self.query_timeout, f"Querying {entity}")
        except duckdb.Error as e:
            logger.error(f"DuckDB query failed ({entity}): {e}")
            raise RecordSourceError(f"Record store query failed ({entity})", str(e), entity=entity) from e

    async def _fetch_rows(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        entity: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Execute a query and return rows as dicts keyed by column name.

        Raises:
            QueryTimeoutError: If the query exceeds the timeout
            RecordSourceError: On any DuckDB error
        """
        async with self.connection() as conn:
            def _fetch():
                cursor = conn.execute(query, params or [])
                columns = [d[0] for d in cursor.description]
                return [dict(zip(columns, row)) for row in cursor.fetchall()]

            return await self._run(_fetch, query, entity)

    async def _execute_many(
        self,
        query: str,
        rows: Sequence[Sequence[Any]],
        entity: Optional[str] = None,
    ) -> int:
        """Run a parameterized statement per row inside one transaction."""
        if not rows:
            return 0

        async with self.connection() as conn:
            def _write():
                conn.execute("BEGIN TRANSACTION")
                try:
                    conn.executemany(query, [list(r) for r in rows])
                    conn.execute("COMMIT")
                except duckdb.Error:
                    conn.execute("ROLLBACK")
                    raise
                return len(rows)

            return await self._run(_write, query, entity)


# Singleton instance
_store_instance: Optional[DuckDBRecordSource] = None
_store_lock = asyncio.Lock()


async def get_store() -> DuckDBRecordSource:
    """Get singleton record store instance (coroutine-safe)."""
    global _store_instance
    async with _store_lock:
        if _store_instance is None:
            _store_instance = DuckDBRecordSource()
            await _store_instance.connect()
    return _store_instance


async def close_store() -> None:
    """Close singleton store instance."""
    global _store_instance
    if _store_instance:
        await _store_instance.close()
        _store_instance = None
