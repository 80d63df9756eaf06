"""
Per-computation report settings and the override merge helper.

`ReportSettings` starts from `config.reports`; callers layer request-level
edits on top with `merge`, which never mutates its inputs.
"""
from dataclasses import dataclass, fields, is_dataclass, replace
from typing import Any, Mapping, Optional, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from reporting.config import ReportConfig, config
from reporting.exceptions import ValidationError

T = TypeVar("T")


def merge(base: T, overrides: Optional[Mapping[str, Any]]) -> T:
    """
    Return a new object with `overrides` applied on top of `base`.

    Keys present in `overrides` win, including explicit None. Works for
    dataclass instances and plain dicts; keys unknown to a dataclass raise
    ValidationError.
    """
    if not overrides:
        return replace(base) if is_dataclass(base) else dict(base)

    if isinstance(base, Mapping):
        return {**base, **overrides}

    if not is_dataclass(base):
        raise TypeError(f"Cannot merge into {type(base).__name__}")

    known = {f.name for f in fields(base)}
    for key in overrides:
        if key not in known:
            raise ValidationError(key, "Unknown setting", overrides[key])
    return replace(base, **dict(overrides))


@dataclass(frozen=True)
class ReportSettings:
    """Tunables read by the aggregation functions."""
    top_n: int = 10
    vip_threshold: float = 10000
    regular_threshold: float = 1000
    timezone: str = "UTC"
    unknown_product_label: str = "Desconocido"
    uncategorized_label: str = "Sin categoría"
    unnamed_customer_label: str = "Sin nombre"

    def __post_init__(self):
        if self.top_n < 1:
            raise ValidationError("top_n", "Must be at least 1", self.top_n)
        if self.regular_threshold > self.vip_threshold:
            raise ValidationError(
                "regular_threshold", "Must not exceed vip_threshold", self.regular_threshold
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError("timezone", "Unknown timezone", self.timezone)

    @classmethod
    def from_config(cls, report_config: ReportConfig = None) -> "ReportSettings":
        """Build settings from application configuration."""
        rc = report_config or config.reports
        return cls(
            top_n=rc.top_n,
            vip_threshold=rc.vip_threshold,
            regular_threshold=rc.regular_threshold,
            timezone=rc.timezone,
            unknown_product_label=rc.unknown_product_label,
            uncategorized_label=rc.uncategorized_label,
            unnamed_customer_label=rc.unnamed_customer_label,
        )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
