"""
Centralized configuration for the POS reporting service.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables with sensible defaults.

Usage:
    from reporting.config import config

    top_n = config.reports.top_n
    ttl = config.cache.ttl_for("sales")
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


REPORT_FAMILIES = ("sales", "inventory", "customers", "financial")


@dataclass(frozen=True)
class ReportConfig:
    """Aggregation defaults."""

    top_n: int = 10
    default_min_stock: float = 10
    vip_threshold: float = 10000
    regular_threshold: float = 1000
    timezone: str = field(default_factory=lambda: os.getenv("REPORT_TIMEZONE", "UTC"))

    # Fallback labels shown to Spanish-speaking store staff
    unknown_product_label: str = "Desconocido"
    uncategorized_label: str = "Sin categoría"
    unnamed_customer_label: str = "Sin nombre"

    # Statuses that count as revenue in the financial report
    completed_status: str = "completed"


@dataclass(frozen=True)
class CacheConfig:
    """Report cache configuration."""

    enabled: bool = field(
        default_factory=lambda: os.getenv("REPORT_CACHE_ENABLED", "true").lower() == "true"
    )
    max_entries: int = 256

    # Sales change most often; financial summaries least
    ttl_seconds: Dict[str, int] = field(default_factory=lambda: {
        "sales": 60,
        "inventory": 120,
        "customers": 120,
        "financial": 180,
    })
    default_ttl_seconds: int = 60

    def ttl_for(self, family: str) -> int:
        """Get staleness window for a report family."""
        return self.ttl_seconds.get(family, self.default_ttl_seconds)


@dataclass(frozen=True)
class StoreConfig:
    """DuckDB record store configuration."""

    db_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("REPORTS_DB_PATH", str(Path(__file__).parent.parent / "data" / "reports.duckdb"))
        )
    )
    query_timeout: float = 30.0


@dataclass(frozen=True)
class WebConfig:
    """HTTP API configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("WEB_PORT", "8080")))

    # Rate limiting
    rate_limit_per_minute: int = 30
    max_range_days: int = 366


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    reports: ReportConfig = field(default_factory=ReportConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Global config instance
config = AppConfig()

VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(app_config: AppConfig = None) -> None:
    """
    Validate configuration values.

    Call this on application startup to fail fast with clear error messages
    instead of odd aggregation results.

    Raises:
        ConfigurationError: If any value is invalid
    """
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

    cfg = app_config or config
    errors = []

    try:
        ZoneInfo(cfg.reports.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"REPORT_TIMEZONE '{cfg.reports.timezone}' is not a known timezone")

    if cfg.reports.top_n < 1:
        errors.append("reports.top_n must be at least 1")

    if cfg.reports.regular_threshold > cfg.reports.vip_threshold:
        errors.append("reports.regular_threshold must not exceed reports.vip_threshold")

    for family, ttl in cfg.cache.ttl_seconds.items():
        if ttl <= 0:
            errors.append(f"cache TTL for '{family}' must be positive")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
