"""
Domain models for POS report generation.

Input records are frozen dataclasses built once per fetched row through
`from_row`, which is the only place that knows about column aliases and
malformed values. Aggregation code reads the canonical attributes only.

Aggregation results serialize to the payload shape consumed by the
presentation and export layers via `to_dict()`.
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone
from typing import Optional, List, Dict, Any, Mapping, Tuple
from zoneinfo import ZoneInfo

from reporting.config import config
from reporting.exceptions import ValidationError
from reporting.observability import get_logger

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# FIELD COERCION
# ═══════════════════════════════════════════════════════════════════════════════

def _first(row: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among the given column aliases."""
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def to_number(value: Any) -> float:
    """Coerce to a finite float; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric value coerced to 0: {value!r}")
        return 0.0
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


def _non_negative(value: Any) -> float:
    return max(0.0, to_number(value))


def _optional_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def to_utc(value: datetime) -> datetime:
    """Make a datetime timezone-aware UTC; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a datetime, date or ISO-8601 string into aware UTC, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            logger.debug(f"Unparseable timestamp ignored: {value!r}")
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# FILTER
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ReportFilter:
    """Date window plus optional dimension filters for every record fetch."""
    start_date: datetime
    end_date: datetime
    status: Optional[str] = None
    customer_id: Optional[str] = None
    product_id: Optional[str] = None
    branch_id: Optional[str] = None
    pos_id: Optional[str] = None
    payment_method: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.start_date, datetime):
            raise ValidationError("start_date", "Must be a datetime", self.start_date)
        if not isinstance(self.end_date, datetime):
            raise ValidationError("end_date", "Must be a datetime", self.end_date)

        object.__setattr__(self, "start_date", to_utc(self.start_date))
        object.__setattr__(self, "end_date", to_utc(self.end_date))

        if self.start_date > self.end_date:
            raise ValidationError(
                "date_range",
                "Start date must be before or equal to end date",
                f"{self.start_date.isoformat()} to {self.end_date.isoformat()}",
            )

    @classmethod
    def for_dates(
        cls,
        start: date,
        end: date,
        tz_name: Optional[str] = None,
        **dimensions: Optional[str],
    ) -> "ReportFilter":
        """Build a filter covering whole calendar days in the report timezone."""
        tz = ZoneInfo(tz_name or config.reports.timezone)
        return cls(
            start_date=datetime.combine(start, time.min, tzinfo=tz),
            end_date=datetime.combine(end, time.max, tzinfo=tz),
            **dimensions,
        )

    def shifted(self, start_date: datetime, end_date: datetime) -> "ReportFilter":
        """Copy with a new window and the same dimension filters."""
        return replace(self, start_date=start_date, end_date=end_date)

    def contains(self, moment: Optional[datetime]) -> bool:
        """Check if a timestamp falls in the inclusive window."""
        if moment is None:
            return False
        return self.start_date <= moment <= self.end_date

    def dimensions(self) -> Dict[str, str]:
        """Populated dimension filters only."""
        names = ("status", "customer_id", "product_id", "branch_id",
                 "pos_id", "payment_method", "category")
        return {n: getattr(self, n) for n in names if getattr(self, n) is not None}

    def cache_key(self) -> str:
        """Deterministic key for this filter."""
        parts = [self.start_date.isoformat(), self.end_date.isoformat()]
        parts.extend(f"{k}={v}" for k, v in sorted(self.dimensions().items()))
        return "|".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SaleRecord:
    """Completed, pending or cancelled POS transaction."""
    id: str
    total_amount: float
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    customer_id: Optional[str] = None
    branch_id: Optional[str] = None
    pos_id: Optional[str] = None
    payment_method: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SaleRecord":
        """Create SaleRecord from a raw store row."""
        return cls(
            id=str(_first(row, "id") or ""),
            total_amount=to_number(_first(row, "total_amount", "total")),
            status=_optional_id(_first(row, "status")),
            created_at=parse_timestamp(_first(row, "created_at")),
            customer_id=_optional_id(_first(row, "customer_id")),
            branch_id=_optional_id(_first(row, "branch_id")),
            pos_id=_optional_id(_first(row, "pos_id")),
            payment_method=_first(row, "payment_method"),
        )

    @property
    def is_completed(self) -> bool:
        """Check if the sale counts as revenue."""
        return (self.status or "").lower() == config.reports.completed_status

    def matches_location(self, branch_id: Optional[str], pos_id: Optional[str]) -> bool:
        """Check branch/POS filters; an unset filter always matches."""
        if branch_id is not None and self.branch_id != branch_id:
            return False
        if pos_id is not None and self.pos_id != pos_id:
            return False
        return True


@dataclass(frozen=True)
class SaleItemRecord:
    """Line item of a sale."""
    sale_id: str
    product_id: Optional[str]
    quantity: float
    unit_price: float
    total_price: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SaleItemRecord":
        """Create SaleItemRecord, deriving total_price when it is missing."""
        quantity = _non_negative(_first(row, "quantity"))
        unit_price = _non_negative(_first(row, "unit_price", "price"))
        total_price = _first(row, "total_price")
        return cls(
            sale_id=str(_first(row, "sale_id") or ""),
            product_id=_optional_id(_first(row, "product_id")),
            quantity=quantity,
            unit_price=unit_price,
            total_price=to_number(total_price) if total_price is not None else quantity * unit_price,
        )


@dataclass(frozen=True)
class ProductRecord:
    """Catalog product with its current stock snapshot."""
    id: str
    name: str
    category_id: Optional[str] = None
    stock_quantity: float = 0.0
    min_stock: float = config.reports.default_min_stock
    sale_price: float = 0.0
    cost_price: float = 0.0
    branch_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProductRecord":
        """Create ProductRecord from a raw store row."""
        min_stock = _first(row, "min_stock")
        return cls(
            id=str(_first(row, "id") or ""),
            name=str(_first(row, "name") or ""),
            category_id=_optional_id(_first(row, "category_id", "category")),
            stock_quantity=_non_negative(_first(row, "stock_quantity", "stock")),
            min_stock=_non_negative(min_stock) if min_stock is not None else config.reports.default_min_stock,
            sale_price=_non_negative(_first(row, "sale_price", "price")),
            cost_price=_non_negative(_first(row, "cost_price")),
            branch_id=_optional_id(_first(row, "branch_id")),
        )

    @property
    def stock_value(self) -> float:
        """Retail value of the stock on hand."""
        return self.sale_price * self.stock_quantity


@dataclass(frozen=True)
class CustomerRecord:
    """Customer with their own sales history embedded."""
    id: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    sales: Tuple[SaleRecord, ...] = ()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CustomerRecord":
        """Create CustomerRecord; embedded sales go through SaleRecord.from_row."""
        sales = row.get("sales") or ()
        return cls(
            id=str(_first(row, "id") or ""),
            name=_first(row, "name"),
            created_at=parse_timestamp(_first(row, "created_at")),
            sales=tuple(
                s if isinstance(s, SaleRecord) else SaleRecord.from_row(s)
                for s in sales
            ),
        )

    def qualifying_sales(self, report_filter: ReportFilter) -> List[SaleRecord]:
        """Sales in the window that match the branch/POS filters."""
        return [
            s for s in self.sales
            if report_filter.contains(s.created_at)
            and s.matches_location(report_filter.branch_id, report_filter.pos_id)
        ]


@dataclass(frozen=True)
class ExpenseRecord:
    """Operating expense."""
    amount: float
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    branch_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ExpenseRecord":
        """Create ExpenseRecord from a raw store row."""
        return cls(
            amount=to_number(_first(row, "amount")),
            category=_first(row, "category"),
            created_at=parse_timestamp(_first(row, "created_at")),
            branch_id=_optional_id(_first(row, "branch_id")),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# AGGREGATION RESULTS
# ═══════════════════════════════════════════════════════════════════════════════

def _money(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class TopProduct:
    """Product ranked by sales amount."""
    id: str
    name: str
    sales: float
    quantity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sales": _money(self.sales),
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class DailySales:
    """Sales of one calendar day."""
    date: str
    sales: float
    orders: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "sales": _money(self.sales), "orders": self.orders}


@dataclass(frozen=True)
class CategorySales:
    """Sales attributed to one product category."""
    category: str
    sales: float
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "sales": _money(self.sales),
            "percentage": round(self.percentage, 2),
        }


@dataclass(frozen=True)
class SalesAggregate:
    """Sales report for one period."""
    total_sales: float = 0.0
    total_orders: int = 0
    average_order_value: float = 0.0
    top_products: Tuple[TopProduct, ...] = ()
    sales_by_date: Tuple[DailySales, ...] = ()
    sales_by_category: Tuple[CategorySales, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the sales payload."""
        return {
            "totalSales": _money(self.total_sales),
            "totalOrders": self.total_orders,
            "averageOrderValue": _money(self.average_order_value),
            "topProducts": [p.to_dict() for p in self.top_products],
            "salesByDate": [d.to_dict() for d in self.sales_by_date],
            "salesByCategory": [c.to_dict() for c in self.sales_by_category],
        }


@dataclass(frozen=True)
class StockLevel:
    """Per-product stock status."""
    id: str
    name: str
    stock: float
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "stock": self.stock, "status": self.status}


@dataclass(frozen=True)
class CategoryStock:
    """Stock count and value for one category."""
    category: str
    count: int
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "count": self.count, "value": _money(self.value)}


@dataclass(frozen=True)
class InventoryAggregate:
    """Point-in-time inventory report."""
    total_products: int = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    total_value: float = 0.0
    stock_levels: Tuple[StockLevel, ...] = ()
    category_breakdown: Tuple[CategoryStock, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the inventory payload."""
        return {
            "totalProducts": self.total_products,
            "lowStockItems": self.low_stock_items,
            "outOfStockItems": self.out_of_stock_items,
            "totalValue": _money(self.total_value),
            "stockLevels": [s.to_dict() for s in self.stock_levels],
            "categoryBreakdown": [c.to_dict() for c in self.category_breakdown],
        }


@dataclass(frozen=True)
class TopCustomer:
    """Customer ranked by spend in the period."""
    id: str
    name: str
    total_spent: float
    orders: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "totalSpent": _money(self.total_spent),
            "orders": self.orders,
        }


@dataclass(frozen=True)
class CustomerSegment:
    """Customer segment share."""
    segment: str
    count: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {"segment": self.segment, "count": self.count, "percentage": round(self.percentage, 2)}


@dataclass(frozen=True)
class CustomerAggregate:
    """Customer report for one period."""
    total_customers: int = 0
    new_customers: int = 0
    active_customers: int = 0
    customer_lifetime_value: float = 0.0
    top_customers: Tuple[TopCustomer, ...] = ()
    customer_segments: Tuple[CustomerSegment, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the customers payload."""
        return {
            "totalCustomers": self.total_customers,
            "newCustomers": self.new_customers,
            "activeCustomers": self.active_customers,
            "customerLifetimeValue": _money(self.customer_lifetime_value),
            "topCustomers": [c.to_dict() for c in self.top_customers],
            "customerSegments": [s.to_dict() for s in self.customer_segments],
        }


@dataclass(frozen=True)
class MonthlyFinancials:
    """Revenue and expenses of one calendar month."""
    month: str
    revenue: float
    expenses: float

    @property
    def profit(self) -> float:
        return self.revenue - self.expenses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "revenue": _money(self.revenue),
            "expenses": _money(self.expenses),
            "profit": _money(self.profit),
        }


@dataclass(frozen=True)
class ExpenseCategory:
    """Expense total for one category."""
    category: str
    amount: float
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "amount": _money(self.amount),
            "percentage": round(self.percentage, 2),
        }


@dataclass(frozen=True)
class FinancialAggregate:
    """Financial report for one period."""
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0
    revenue_by_month: Tuple[MonthlyFinancials, ...] = ()
    expense_breakdown: Tuple[ExpenseCategory, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the financial payload."""
        return {
            "totalRevenue": _money(self.total_revenue),
            "totalExpenses": _money(self.total_expenses),
            "netProfit": _money(self.net_profit),
            "profitMargin": round(self.profit_margin, 2),
            "revenueByMonth": [m.to_dict() for m in self.revenue_by_month],
            "expenseBreakdown": [e.to_dict() for e in self.expense_breakdown],
        }
