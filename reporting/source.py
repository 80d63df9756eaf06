"""
Record source contract used by the report engine.

Implementations return normalized records (built with each record's
`from_row`). Filters an implementation cannot apply are ignored rather than
rejected. Failures surface as RecordSourceError.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from reporting.models import (
    CustomerRecord,
    ExpenseRecord,
    ProductRecord,
    ReportFilter,
    SaleItemRecord,
    SaleRecord,
)


class RecordSource(ABC):
    """Async read access to the raw transactional data."""

    @abstractmethod
    async def fetch_sales(self, report_filter: ReportFilter) -> List[SaleRecord]:
        """Sales created within the filter window."""

    @abstractmethod
    async def fetch_sale_items(self, sale_ids: Sequence[str]) -> List[SaleItemRecord]:
        """Line items belonging to the given sales."""

    @abstractmethod
    async def fetch_products(
        self,
        report_filter: Optional[ReportFilter] = None,
        product_ids: Optional[Sequence[str]] = None,
    ) -> List[ProductRecord]:
        """Products, optionally restricted to ids; stock is current, not historical."""

    @abstractmethod
    async def fetch_customers(self, report_filter: ReportFilter) -> List[CustomerRecord]:
        """Customers with their sales embedded."""

    @abstractmethod
    async def fetch_expenses(self, report_filter: ReportFilter) -> List[ExpenseRecord]:
        """Expenses created within the filter window."""
