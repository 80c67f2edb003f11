"""Statistics record validation and enrichment.

A stats record is an open mapping of field name to value. These helpers
check it for completeness and fill in the built-in derived metrics.
"""

import math
from collections.abc import Mapping
from typing import Any

from messmass.schemas.stats import DataQuality, ProjectStatsValidation, RequiredFieldsResult

# Metrics that must be present for basic analytics
REQUIRED_BASE_METRICS: tuple[str, ...] = (
    "remoteImages",
    "hostessImages",
    "selfies",
    "indoor",
    "outdoor",
    "stadium",
    "female",
    "male",
    "genAlpha",
    "genYZ",
    "genX",
    "boomer",
    "merched",
    "jersey",
    "scarf",
    "flags",
    "baseballCap",
    "other",
)

OPTIONAL_METRICS: tuple[str, ...] = (
    "eventAttendees",
    "visitQrCode",
    "visitShortUrl",
    "visitWeb",
    "eventValuePropositionVisited",
    "eventValuePropositionPurchases",
    "eventTicketPurchases",
    "eventResultHome",
    "eventResultVisitor",
    "bitlyTotalClicks",
    "bitlyUniqueClicks",
    "bitlyMobileClicks",
)

# Minimum data for insight generation
CRITICAL_METRICS: tuple[str, ...] = (
    "remoteImages",
    "hostessImages",
    "selfies",
    "stadium",
    "indoor",
    "outdoor",
    "merched",
    "female",
    "male",
)

# Built-in metrics computed from base metrics when a record lacks them
DERIVED_METRICS: tuple[str, ...] = (
    "remoteFans",
    "totalFans",
    "allImages",
    "totalUnder40",
    "totalOver40",
)


def _is_missing(value: Any) -> bool:
    return value is None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def safe_get_stat(stats: Mapping[str, Any], field: str, fallback: float = 0) -> float:
    """
    Get a numeric stat, or the fallback when it is missing or not a number.

    Args:
        stats: Statistics record
        field: Field name
        fallback: Value returned for missing or non-numeric fields

    Returns:
        Field value or fallback
    """
    value = stats.get(field)
    return value if _is_number(value) else fallback


def resolve_derived_metric(name: str, stats: Mapping[str, Any]) -> float | None:
    """
    Compute a built-in derived metric from its inputs.

    Callers only reach this when the record has no stored value for name,
    so a stored totalFans or allImages is trusted as-is even when it
    disagrees with its inputs; it is never recomputed from them. Likewise a
    stored remoteFans takes precedence over indoor + outdoor when computing
    totalFans.

    Returns:
        Computed value, or None if name is not a built-in derived metric
    """
    if name == "remoteFans":
        return safe_get_stat(stats, "indoor") + safe_get_stat(stats, "outdoor")
    if name == "totalFans":
        remote = stats.get("remoteFans")
        if _is_missing(remote):
            remote_fans = resolve_derived_metric("remoteFans", stats)
        else:
            remote_fans = safe_get_stat(stats, "remoteFans")
        return remote_fans + safe_get_stat(stats, "stadium")
    if name == "allImages":
        return (
            safe_get_stat(stats, "remoteImages")
            + safe_get_stat(stats, "hostessImages")
            + safe_get_stat(stats, "selfies")
        )
    if name == "totalUnder40":
        return safe_get_stat(stats, "genAlpha") + safe_get_stat(stats, "genYZ")
    if name == "totalOver40":
        return safe_get_stat(stats, "genX") + safe_get_stat(stats, "boomer")
    return None


def ensure_derived_metrics(stats: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return a copy of the record with allImages, remoteFans and totalFans set.

    Values already stored in the record are kept as they are.
    """
    enriched = dict(stats)
    for name in ("allImages", "remoteFans", "totalFans"):
        if _is_missing(enriched.get(name)):
            enriched[name] = resolve_derived_metric(name, enriched)
    return enriched


def validate_required_fields(
    stats: Mapping[str, Any],
    required_fields: list[str] | tuple[str, ...],
) -> RequiredFieldsResult:
    """Check that each required field is present and not None."""
    missing = [field for field in required_fields if _is_missing(stats.get(field))]
    return RequiredFieldsResult(valid=not missing, missing=missing)


def can_generate_insights(stats: Mapping[str, Any]) -> bool:
    """True when the record carries every critical metric."""
    return validate_required_fields(stats, CRITICAL_METRICS).valid


def can_benchmark(stats: Mapping[str, Any]) -> bool:
    """True when the record carries every required base metric."""
    return validate_required_fields(stats, REQUIRED_BASE_METRICS).valid


def _quality_for(completeness: int) -> DataQuality:
    if completeness >= 90:
        return DataQuality.EXCELLENT
    if completeness >= 75:
        return DataQuality.GOOD
    if completeness >= 50:
        return DataQuality.FAIR
    if completeness >= 25:
        return DataQuality.POOR
    return DataQuality.INSUFFICIENT


def validate_project_stats(stats: Mapping[str, Any]) -> ProjectStatsValidation:
    """
    Score a statistics record for completeness and quality.

    Args:
        stats: Statistics record

    Returns:
        Validation report with missing fields and a data quality tier
    """
    missing_required: list[str] = []
    missing_optional: list[str] = []
    warnings: list[str] = []
    errors: list[str] = []

    for field in REQUIRED_BASE_METRICS:
        value = stats.get(field)
        if _is_missing(value):
            missing_required.append(field)
            errors.append(f"Missing required metric: {field}")
        elif not _is_number(value):
            errors.append(
                f"Invalid value for {field}: expected number, got {type(value).__name__}"
            )

    for field in OPTIONAL_METRICS:
        if _is_missing(stats.get(field)):
            missing_optional.append(field)

    for field in ("remoteFans", "totalFans", "allImages"):
        if _is_missing(stats.get(field)):
            warnings.append(f"Derived metric {field} is missing (can be computed from base metrics)")

    total_fields = len(REQUIRED_BASE_METRICS) + len(OPTIONAL_METRICS)
    present_fields = total_fields - len(missing_required) - len(missing_optional)
    completeness = round(present_fields / total_fields * 100)

    return ProjectStatsValidation(
        is_valid=not missing_required,
        completeness=completeness,
        missing_required=missing_required,
        missing_optional=missing_optional,
        has_minimum_data=not missing_required,
        has_full_data=not missing_required and not missing_optional,
        warnings=warnings,
        errors=errors,
        data_quality=_quality_for(completeness),
    )


def filter_by_data_quality(
    records: list[Mapping[str, Any]],
    min_quality: DataQuality = DataQuality.FAIR,
) -> list[Mapping[str, Any]]:
    """Keep records whose "stats" mapping meets the minimum quality tier."""
    order = [
        DataQuality.INSUFFICIENT,
        DataQuality.POOR,
        DataQuality.FAIR,
        DataQuality.GOOD,
        DataQuality.EXCELLENT,
    ]
    min_score = order.index(DataQuality(min_quality))
    kept = []
    for record in records:
        stats = record.get("stats")
        if not stats:
            continue
        if order.index(validate_project_stats(stats).data_quality) >= min_score:
            kept.append(record)
    return kept
