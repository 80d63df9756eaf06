"""
Custom exception hierarchy for report generation.

Exception Hierarchy:
    ReportError (base)
    └── RecordSourceError      - Record fetch failed (recoverable by the caller)
        └── QueryTimeoutError  - Store query exceeded its timeout

    ValidationError            - Input validation failed

An empty period is never an exception: the engine returns a zeroed payload.
"""


class ReportError(Exception):
    """Base exception for all report-related errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class RecordSourceError(ReportError):
    """
    The record source rejected a fetch or could not be reached.

    Propagated unchanged through the engine; the caller owns retry policy.
    """

    def __init__(self, message: str, details: str = None, entity: str = None):
        super().__init__(message, details)
        self.entity = entity


class QueryTimeoutError(RecordSourceError):
    """
    Store query exceeded timeout.

    Usually a missing index or a date range far larger than intended.
    """

    def __init__(self, query: str, timeout: float, details: str = None):
        self.query = query[:200] + "..." if len(query) > 200 else query
        self.timeout = timeout
        super().__init__(f"Query timed out after {timeout}s", details)

    def __str__(self) -> str:
        return f"QueryTimeoutError: Query timed out after {self.timeout}s - {self.query}"


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating filters and settings before any fetch happens.
    """

    def __init__(self, field: str, message: str, value: any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
