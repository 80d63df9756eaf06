"""
Observability helpers: structured logging, correlation IDs, timing and metrics.

Usage:
    from reporting.observability import setup_logging, get_logger, correlation_context

    # In app startup:
    setup_logging()

    # In modules:
    logger = get_logger(__name__)

    # Around a unit of work:
    with correlation_context(request_id):
        logger.info("Computing report", extra={"family": "sales"})
"""
import asyncio
import functools
import json
import logging
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional, Any, Dict, Callable

# Request/report correlation ID
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# LogRecord attributes that are not user-supplied extras
_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
})


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Generate a new short correlation ID."""
    return uuid.uuid4().hex[:8]


class correlation_context:
    """Context manager that scopes a correlation ID to a block."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self.token = None

    def __enter__(self):
        self.token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, *args):
        _correlation_id.reset(self.token)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: v for k, v in record.__dict__.items()
        if k not in _STANDARD_ATTRS and not k.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter.

    Each line carries timestamp, level, logger, message, the correlation ID
    when one is set, any `extra=` fields and the formatted exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        log_entry.update(_extras(record))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Plain-text formatter.

    Format: TIMESTAMP - LEVEL - LOGGER [CORRELATION_ID] - MESSAGE | extras
    """

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        correlation_str = f" [{correlation_id}]" if correlation_id else ""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        base_msg = f"{timestamp} - {record.levelname:8} - {record.name}{correlation_str} - {record.getMessage()}"

        extras = _extras(record)
        if extras:
            base_msg += f" | {extras}"

        if record.exc_info:
            base_msg += f"\n{self.formatException(record.exc_info)}"

        return base_msg


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_libs: bool = False
) -> None:
    """
    Configure root logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit JSON lines instead of plain text
        include_libs: Keep third-party library loggers at the root level
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    if not include_libs:
        for noisy in ("uvicorn.access", "httpx", "httpcore", "watchfiles"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════════════════
# TIMING
# ═══════════════════════════════════════════════════════════════════════════════

class Timer:
    """
    Context manager for timing a block.

    Usage:
        with Timer("aggregate_sales", logger) as t:
            aggregate = aggregate_sales(...)
        print(t.elapsed_ms)
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None, warn_threshold_ms: float = 1000):
        self.name = name
        self.logger = logger
        self.warn_threshold_ms = warn_threshold_ms
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        if self.logger:
            level = logging.WARNING if self.elapsed_ms > self.warn_threshold_ms else logging.DEBUG
            self.logger.log(
                level,
                f"{self.name} completed",
                extra={"duration_ms": round(self.elapsed_ms, 2)}
            )


def timed(name: Optional[str] = None, warn_threshold_ms: float = 1000):
    """
    Decorator that logs how long a sync or async callable took.

    Args:
        name: Operation name (defaults to function name)
        warn_threshold_ms: Log at WARNING level above this threshold
    """
    def decorator(func: Callable) -> Callable:
        operation_name = name or func.__name__
        func_logger = get_logger(func.__module__)

        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                with Timer(operation_name, func_logger, warn_threshold_ms):
                    return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with Timer(operation_name, func_logger, warn_threshold_ms):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS COLLECTOR (simple in-memory stats)
# ═══════════════════════════════════════════════════════════════════════════════

class MetricsCollector:
    """
    In-memory counters for the reporting service.

    Tracks:
    - Requests/reports by name
    - Errors by type
    - Timing samples (last N per operation)
    """

    def __init__(self, max_samples: int = 100):
        self._request_counts: Dict[str, int] = {}
        self._error_counts: Dict[str, int] = {}
        self._timing_samples: Dict[str, list] = {}
        self._max_samples = max_samples

    def record_request(self, name: str) -> None:
        """Count one request or report computation."""
        self._request_counts[name] = self._request_counts.get(name, 0) + 1

    def record_error(self, error_type: str) -> None:
        """Count one error."""
        self._error_counts[error_type] = self._error_counts.get(error_type, 0) + 1

    def record_timing(self, operation: str, duration_ms: float) -> None:
        """Add a timing sample for an operation."""
        samples = self._timing_samples.setdefault(operation, [])
        samples.append(duration_ms)
        if len(samples) > self._max_samples:
            del samples[:-self._max_samples]

    def get_stats(self) -> Dict[str, Any]:
        """Get current metrics snapshot."""
        stats = {
            "requests": dict(self._request_counts),
            "errors": dict(self._error_counts),
            "timing": {},
        }

        for operation, samples in self._timing_samples.items():
            if not samples:
                continue
            ordered = sorted(samples)
            stats["timing"][operation] = {
                "count": len(samples),
                "avg_ms": round(sum(samples) / len(samples), 2),
                "min_ms": round(ordered[0], 2),
                "max_ms": round(ordered[-1], 2),
                "p50_ms": round(ordered[len(ordered) // 2], 2),
                "p95_ms": round(ordered[int(len(ordered) * 0.95)], 2) if len(ordered) >= 20 else None,
            }

        return stats

    def reset(self) -> None:
        """Reset all metrics."""
        self._request_counts.clear()
        self._error_counts.clear()
        self._timing_samples.clear()


# Global metrics instance
metrics = MetricsCollector()
