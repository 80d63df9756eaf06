"""Health check and metrics endpoint."""
import time

from fastapi import APIRouter, Request

from reporting.observability import get_correlation_id, metrics
from web.config import VERSION, HEALTH_RATE_LIMIT
from web.schemas import HealthResponse
from ._deps import limiter, get_logger, START_TIME

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
@limiter.limit(HEALTH_RATE_LIMIT)
async def health_check(request: Request):
    """Health check endpoint for Docker/load balancer monitoring."""
    uptime_seconds = int(time.time() - START_TIME)

    engine = getattr(request.app.state, "engine", None)
    store_info = None
    cache_stats = None

    if engine is not None:
        info = getattr(engine.source, "get_connection_info", None)
        if info is not None:
            store_info = info()
        if engine.cache is not None:
            cache_stats = engine.cache.get_stats()

    healthy = engine is not None and (store_info is None or store_info["status"] == "active")

    return {
        "status": "healthy" if healthy else "degraded",
        "version": VERSION,
        "uptime_seconds": uptime_seconds,
        "correlation_id": get_correlation_id(),
        "store": store_info,
        "cache": cache_stats,
        "metrics": metrics.get_stats(),
    }
