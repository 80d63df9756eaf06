"""
FastAPI web application for POS reports.
"""
import os
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse, JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from web.config import VERSION
from web.routes import api
from web.routes.api._deps import limiter
from web.middleware import RequestLoggingMiddleware
from reporting.assembler import ReportEngine
from reporting.cache import ReportCache
from reporting.config import validate_config, ConfigurationError
from reporting.observability import setup_logging, get_logger
from reporting.store import get_store, close_store

# Configure structured logging
# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
log_format = os.getenv("LOG_FORMAT", "text")
log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=log_level, json_format=(log_format == "json"))
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="POS Reports",
    description="Sales, inventory, customer and financial reports for POS data",
    version=VERSION,
    default_response_class=ORJSONResponse
)

# Route decorators and the app share one limiter
app.state.limiter = limiter

# Custom rate limit exceeded handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": "Too many requests. Please try again later.",
            "retry_after": exc.detail
        }
    )

# Add request logging middleware (adds correlation IDs and timing)
app.add_middleware(RequestLoggingMiddleware)

# Add Gzip compression (min 500 bytes to compress)
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(api.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("POS reports API starting...")

    # Validate configuration early - fail fast with clear errors
    try:
        validate_config()
        logger.info("Configuration validated")
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        raise SystemExit(1)

    # Tests may install their own engine before startup
    if getattr(app.state, "engine", None) is None:
        store = await get_store()
        app.state.engine = ReportEngine(store, cache=ReportCache())
        logger.info(f"Record store ready: {store.get_connection_info()['db_path']}")

    logger.info("Reports API ready")


@app.on_event("shutdown")
async def shutdown_event():
    await close_store()
    logger.info("Reports API stopped")
