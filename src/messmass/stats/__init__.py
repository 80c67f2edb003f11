"""Statistics record helpers for MessMass."""

from messmass.stats.validator import (
    CRITICAL_METRICS,
    DERIVED_METRICS,
    OPTIONAL_METRICS,
    REQUIRED_BASE_METRICS,
    can_benchmark,
    can_generate_insights,
    ensure_derived_metrics,
    filter_by_data_quality,
    resolve_derived_metric,
    safe_get_stat,
    validate_project_stats,
    validate_required_fields,
)

__all__ = [
    "CRITICAL_METRICS",
    "DERIVED_METRICS",
    "OPTIONAL_METRICS",
    "REQUIRED_BASE_METRICS",
    "can_benchmark",
    "can_generate_insights",
    "ensure_derived_metrics",
    "filter_by_data_quality",
    "resolve_derived_metric",
    "safe_get_stat",
    "validate_project_stats",
    "validate_required_fields",
]
