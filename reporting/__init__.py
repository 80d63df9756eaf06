"""
POS report aggregation engine.

This package contains the reporting logic used by the web/ package and the
CLI:
- exceptions: Custom exception hierarchy
- models: Filter, input records and aggregate results
- aggregations: Per-family aggregation functions
- trends / assembler: Period-over-period deltas and the ReportEngine
- store: DuckDB record source
- config: Centralized configuration
"""

# Import in dependency order
from reporting.exceptions import (
    ReportError,
    RecordSourceError,
    QueryTimeoutError,
    ValidationError,
)

from reporting.validators import (
    validate_date_string,
    validate_date_range,
    validate_family,
    validate_period,
)

from reporting.models import ReportFilter
from reporting.settings import ReportSettings, merge
from reporting.source import RecordSource
from reporting.cache import ReportCache
from reporting.assembler import ReportEngine, assemble

from reporting.config import config

__all__ = [
    # Exceptions
    "ReportError",
    "RecordSourceError",
    "QueryTimeoutError",
    "ValidationError",
    # Validators
    "validate_date_string",
    "validate_date_range",
    "validate_family",
    "validate_period",
    # Engine
    "ReportFilter",
    "ReportSettings",
    "merge",
    "RecordSource",
    "ReportCache",
    "ReportEngine",
    "assemble",
    # Config
    "config",
]
