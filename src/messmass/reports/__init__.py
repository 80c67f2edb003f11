"""Report chart calculation."""

from messmass.reports.calculator import ReportCalculator
from messmass.reports.errors import create_chart_error, get_user_friendly_error_message

__all__ = [
    "ReportCalculator",
    "create_chart_error",
    "get_user_friendly_error_message",
]
