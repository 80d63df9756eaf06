"""
Report assembly and the engine entry point.

`ReportEngine.compute_report` is the only thing callers need: it fetches the
current and previous windows from a RecordSource, runs the family's
aggregation over each, diffs them and returns the payload dict consumed by
the HTTP layer, the CLI and exporters.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from reporting.aggregations import (
    PeriodRows,
    aggregate_customers,
    aggregate_financial,
    aggregate_inventory,
    aggregate_sales,
    compare_periods,
)
from reporting.cache import ReportCache
from reporting.config import config
from reporting.exceptions import RecordSourceError
from reporting.models import ProductRecord, ReportFilter, SaleItemRecord, SaleRecord
from reporting.observability import Timer, get_logger, metrics
from reporting.settings import ReportSettings, merge
from reporting.source import RecordSource
from reporting.trends import TrendSet, customer_trends, financial_trends, previous_period, sales_trends
from reporting.validators import validate_dimension, validate_family, validate_group_by

logger = get_logger(__name__)

# Top-level scalars of the previous aggregate echoed back under previousPeriod
PREVIOUS_PERIOD_FIELDS: Dict[str, Tuple[str, ...]] = {
    "sales": ("totalSales", "totalOrders", "averageOrderValue"),
    "inventory": (),
    "customers": ("newCustomers",),
    "financial": ("totalRevenue", "totalExpenses", "netProfit", "profitMargin"),
}


# ═══════════════════════════════════════════════════════════════════════════════
# ASSEMBLY
# ═══════════════════════════════════════════════════════════════════════════════

def previous_subset(family: str, previous: Any) -> Dict[str, Any]:
    """Pick the family's previous-period scalars from an aggregate."""
    keys = PREVIOUS_PERIOD_FIELDS[family]
    if not keys or previous is None:
        return {}
    data = previous.to_dict()
    return {key: data[key] for key in keys}


def assemble(current: Any, trends: Optional[TrendSet], previous_period: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Compose the final payload.

    Builds a fresh dict; neither the aggregate nor the given mappings are
    modified or shared with the result.
    """
    return {
        **current.to_dict(),
        "trends": dict(trends or {}),
        "previousPeriod": dict(previous_period or {}),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# ENGINE
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FamilyResult:
    """Current and previous aggregate of one report family."""
    current: Any
    previous: Any = None
    trends: Optional[TrendSet] = None
    rows: int = 0


class ReportEngine:
    """
    Computes report payloads from a RecordSource.

    Args:
        source: Record source adapter
        settings: Base settings (default: from config)
        cache: Optional caller-owned ReportCache

    Fetch failures propagate unchanged; the engine never retries.
    """

    def __init__(
        self,
        source: RecordSource,
        settings: Optional[ReportSettings] = None,
        cache: Optional[ReportCache] = None,
    ):
        self.source = source
        self.settings = settings or ReportSettings.from_config()
        self.cache = cache
        self._handlers: Dict[str, Callable[[ReportFilter, ReportSettings], Awaitable[FamilyResult]]] = {
            "sales": self._sales,
            "inventory": self._inventory,
            "customers": self._customers,
            "financial": self._financial,
        }

    async def compute_report(
        self,
        family: str,
        report_filter: ReportFilter,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Compute one report family for a filter.

        Args:
            family: sales, inventory, customers or financial
            report_filter: Date window and dimension filters
            overrides: Per-call ReportSettings overrides (e.g. {"top_n": 5})

        Returns:
            Aggregate payload with `trends` and `previousPeriod`

        Raises:
            ValidationError: Unknown family or setting
            RecordSourceError: A fetch failed
        """
        family = validate_family(family)
        settings = merge(self.settings, overrides)

        if self.cache is None:
            return await self._compute(family, report_filter, settings)

        key = report_filter.cache_key()
        if overrides:
            key += "|" + "|".join(f"{k}={v}" for k, v in sorted(overrides.items()))

        return await self.cache.get_or_compute(
            family, key, lambda: self._compute(family, report_filter, settings)
        )

    async def compute_all(self, report_filter: ReportFilter) -> Dict[str, Dict[str, Any]]:
        """Compute every family concurrently for one dashboard."""
        families = list(self._handlers)
        payloads = await asyncio.gather(
            *(self.compute_report(family, report_filter) for family in families)
        )
        return dict(zip(families, payloads))

    async def compare(
        self,
        filter_a: ReportFilter,
        filter_b: ReportFilter,
        dimension: str = "overall",
        group_by: str = "day",
        details: bool = True,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Compare two arbitrary periods side by side.

        Returns:
            Dict with periodA, periodB and deltas
        """
        dimension = validate_dimension(dimension)
        group_by = validate_group_by(group_by)
        settings = merge(self.settings, overrides)

        metrics.record_request("report.compare")
        with Timer("report.compare", logger) as timer:
            try:
                rows_a, rows_b = await asyncio.gather(
                    self._fetch_sales_rows(filter_a),
                    self._fetch_sales_rows(filter_b),
                )
            except RecordSourceError as e:
                metrics.record_error(type(e).__name__)
                logger.error(f"Comparison fetch failed: {e}")
                raise
            result = compare_periods(rows_a, rows_b, dimension, group_by, details, settings)

        metrics.record_timing("report.compare", timer.elapsed_ms)
        return result

    # ─── Internals ────────────────────────────────────────────────────────────

    async def _compute(self, family: str, report_filter: ReportFilter, settings: ReportSettings) -> Dict[str, Any]:
        metrics.record_request(f"report.{family}")

        with Timer(f"report.{family}", logger) as timer:
            try:
                result = await self._handlers[family](report_filter, settings)
            except RecordSourceError as e:
                metrics.record_error(type(e).__name__)
                logger.error(f"Report fetch failed ({family}): {e}")
                raise

            payload = assemble(result.current, result.trends, previous_subset(family, result.previous))

        metrics.record_timing(f"report.{family}", timer.elapsed_ms)
        logger.info(
            f"Report computed: {family}",
            extra={
                "family": family,
                "start_date": report_filter.start_date.isoformat(),
                "end_date": report_filter.end_date.isoformat(),
                "rows": result.rows,
                "duration_ms": round(timer.elapsed_ms, 2),
            },
        )
        return payload

    async def _windows(
        self,
        report_filter: ReportFilter,
        fetch: Callable[[ReportFilter], Awaitable[Any]],
    ) -> List[Any]:
        """Run the same fetch for the current and previous window concurrently."""
        return await asyncio.gather(fetch(report_filter), fetch(previous_period(report_filter)))

    async def _fetch_sales_rows(self, report_filter: ReportFilter) -> PeriodRows:
        sales = await self.source.fetch_sales(report_filter)
        items = await self._fetch_items(sales)
        products = await self._fetch_products_for(items)
        return PeriodRows(sales=sales, items=items, products=products)

    async def _fetch_items(self, sales: Sequence[SaleRecord]) -> List[SaleItemRecord]:
        if not sales:
            return []
        return await self.source.fetch_sale_items([s.id for s in sales])

    async def _fetch_products_for(self, items: Sequence[SaleItemRecord]) -> Dict[str, ProductRecord]:
        product_ids = sorted({i.product_id for i in items if i.product_id})
        if not product_ids:
            return {}
        products = await self.source.fetch_products(product_ids=product_ids)
        return {p.id: p for p in products}

    async def _sales(self, report_filter: ReportFilter, settings: ReportSettings) -> FamilyResult:
        current_rows, previous_rows = await self._windows(report_filter, self._fetch_sales_rows)
        current = aggregate_sales(current_rows.sales, current_rows.items, current_rows.products, settings)
        previous = aggregate_sales(previous_rows.sales, previous_rows.items, previous_rows.products, settings)
        rows = len(current_rows.sales) + len(previous_rows.sales)
        return FamilyResult(current, previous, sales_trends(current, previous), rows)

    async def _inventory(self, report_filter: ReportFilter, settings: ReportSettings) -> FamilyResult:
        # Stock is a snapshot: no previous window, no trends
        products = await self.source.fetch_products(report_filter)
        return FamilyResult(aggregate_inventory(products, settings), rows=len(products))

    async def _customers(self, report_filter: ReportFilter, settings: ReportSettings) -> FamilyResult:
        prev_filter = previous_period(report_filter)
        current_rows, previous_rows = await asyncio.gather(
            self.source.fetch_customers(report_filter),
            self.source.fetch_customers(prev_filter),
        )
        current = aggregate_customers(current_rows, report_filter, settings)
        previous = aggregate_customers(previous_rows, prev_filter, settings)
        rows = len(current_rows) + len(previous_rows)
        return FamilyResult(current, previous, customer_trends(current, previous), rows)

    async def _financial(self, report_filter: ReportFilter, settings: ReportSettings) -> FamilyResult:
        # Revenue and costs are scoped by location only. Product, customer and
        # payment dimensions do not apply to expenses.
        completed = ReportFilter(
            start_date=report_filter.start_date,
            end_date=report_filter.end_date,
            status=config.reports.completed_status,
            branch_id=report_filter.branch_id,
            pos_id=report_filter.pos_id,
        )

        async def fetch(window: ReportFilter):
            return await asyncio.gather(
                self.source.fetch_sales(window),
                self.source.fetch_expenses(window),
            )

        (sales, expenses), (prev_sales, prev_expenses) = await self._windows(completed, fetch)
        current = aggregate_financial(sales, expenses, settings)
        previous = aggregate_financial(prev_sales, prev_expenses, settings)
        rows = len(sales) + len(expenses) + len(prev_sales) + len(prev_expenses)
        return FamilyResult(current, previous, financial_trends(current, previous), rows)
