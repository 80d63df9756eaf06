"""
Pydantic response models for API endpoints.

Report payloads themselves are produced by the engine as plain dicts; these
models cover the catalog, comparison and health responses.
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════

class StoreInfo(BaseModel):
    """Record store connection info."""
    status: str = Field(description="active or not_initialized")
    total_queries: int = Field(0, description="Queries executed since start")
    db_path: str = Field(description="DuckDB database path")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status: healthy or degraded")
    version: str = Field(description="Application version")
    uptime_seconds: int = Field(description="Uptime in seconds")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
    store: Optional[StoreInfo] = Field(None, description="Record store status")
    cache: Optional[Dict[str, Any]] = Field(None, description="Report cache statistics")
    metrics: Dict[str, Any] = Field(default_factory=dict, description="Request and report metrics")


# ═══════════════════════════════════════════════════════════════════════════════
# REPORTS
# ═══════════════════════════════════════════════════════════════════════════════

class ReportTypeResponse(BaseModel):
    """One report family in the catalog."""
    id: str = Field(description="Family id used as the type parameter")
    name: str = Field(description="Display name")
    description: str = Field(description="What the report covers")
    cacheTtlSeconds: int = Field(description="How long a computed report is reused")


class ComparisonSummary(BaseModel):
    """Headline figures of one compared period."""
    totalOrders: int
    totalRevenue: float
    totalProfit: float
    averageOrderValue: float
    profitMargin: float


class ComparisonPeriod(BaseModel):
    """One side of a comparison."""
    summary: ComparisonSummary
    byDate: List[Dict[str, Any]] = Field(description="Orders, revenue, profit per day or month")
    byCategory: Optional[List[Dict[str, Any]]] = Field(None, description="Present for dimension=category")
    byProduct: Optional[List[Dict[str, Any]]] = Field(None, description="Present for dimension=product")


class ComparisonDeltas(BaseModel):
    """Percent change from period A to period B."""
    ordersChangePct: float
    revenueChangePct: float
    profitChangePct: float


class ComparisonResponse(BaseModel):
    """Comparative report response."""
    periodA: ComparisonPeriod
    periodB: ComparisonPeriod
    deltas: ComparisonDeltas
