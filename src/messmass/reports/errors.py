"""Chart error helpers.

Chart failures are returned inside ChartResult rather than raised, so one
broken chart never stops a report from rendering.
"""

from typing import Any

from messmass.schemas.chart import ChartError, ChartErrorType


def create_chart_error(
    error_type: ChartErrorType | str,
    message: str,
    context: dict[str, Any] | None = None,
) -> ChartError:
    """Build a categorized chart error."""
    return ChartError(type=ChartErrorType(error_type), message=message, context=context or {})


def get_user_friendly_error_message(error: ChartError) -> str:
    """Message suitable for showing in place of a chart."""
    context = error.context

    if error.type == ChartErrorType.MISSING_VARIABLE:
        name = context.get("variableName", "unknown")
        return f"Variable '{name}' not found in event data"
    if error.type == ChartErrorType.SYNTAX_ERROR:
        formula = context.get("formula")
        if formula:
            return f"Formula syntax error: {formula}"
        return "Formula syntax error"
    if error.type == ChartErrorType.DIVISION_BY_ZERO:
        return "Division by zero in formula"
    if error.type == ChartErrorType.MISSING_CHART_CONFIG:
        chart_id = context.get("chartId", "unknown")
        return f"Chart configuration '{chart_id}' not found"
    if error.type == ChartErrorType.INVALID_CHART_TYPE:
        chart_type = context.get("chartType", "unknown")
        return f"Unsupported chart type '{chart_type}'"
    return f"Calculation failed: {error.message}"
