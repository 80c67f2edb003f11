"""Report calculation engine.

Turns chart configurations plus an event's statistics into ChartResult
objects ready for rendering. Formatting (prefixes, suffixes, decimals) is
passed through for the renderer; values are never formatted here.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from messmass.core.logging import LoggerMixin
from messmass.formula.engine import evaluate_formula
from messmass.formula.result import NA
from messmass.reports.errors import create_chart_error
from messmass.schemas.chart import (
    AspectRatio,
    Chart,
    ChartElementResult,
    ChartErrorType,
    ChartResult,
    ChartType,
)

# "reportText1", "stats.reportText1" or "[stats.reportText1]"
SIMPLE_VARIABLE_PATTERN = re.compile(
    r"^(?:\[(?:stats\.)?([A-Za-z0-9_]+)\]|(?:stats\.)?([A-Za-z0-9_]+))$"
)


class ReportCalculator(LoggerMixin):
    """
    Calculates chart results for a report.

    Example:
        calculator = ReportCalculator(charts, project_stats)
        results = calculator.calculate_all(["total-fans", "gender-distribution"])
    """

    def __init__(self, charts: Iterable[Chart | Mapping[str, Any]], stats: Mapping[str, Any]):
        """
        Initialize calculator with chart configurations and project stats.

        Args:
            charts: Chart configurations (models or raw documents)
            stats: Project statistics record
        """
        self._charts: dict[str, Chart] = {}
        for chart in charts:
            if not isinstance(chart, Chart):
                chart = Chart.model_validate(chart)
            self._charts[chart.chart_id] = chart
        self._stats = stats

    def calculate_all(self, chart_ids: Iterable[str]) -> list[ChartResult]:
        """Calculate the given charts, skipping inactive ones."""
        results = []
        for chart_id in chart_ids:
            result = self.calculate_chart(chart_id)
            if result is not None:
                results.append(result)
        return results

    def calculate_chart(self, chart_id: str) -> Optional[ChartResult]:
        """
        Calculate a single chart.

        Returns:
            Chart result, an error result for missing or unsupported charts,
            or None if the chart is inactive
        """
        chart = self._charts.get(chart_id)

        if chart is None:
            self.logger.warning(f"Chart not found: {chart_id}")
            return ChartResult(
                chart_id=chart_id,
                type="unknown",
                title=chart_id,
                error="Chart configuration not found",
                chart_error=create_chart_error(
                    ChartErrorType.MISSING_CHART_CONFIG,
                    "Chart configuration not found",
                    {"chartId": chart_id},
                ),
            )

        if not chart.is_active:
            return None

        try:
            chart_type = ChartType(chart.type)
        except ValueError:
            self.logger.warning(f"Unknown chart type '{chart.type}' for chart {chart_id}")
            return self._error_result(
                chart,
                create_chart_error(
                    ChartErrorType.INVALID_CHART_TYPE,
                    f"Unknown chart type: {chart.type}",
                    {"chartId": chart_id, "chartType": chart.type},
                ),
            )

        try:
            if chart_type == ChartType.KPI:
                return self._calculate_kpi(chart)
            if chart_type in (ChartType.PIE, ChartType.BAR):
                return self._calculate_multi_element(chart)
            if chart_type in (ChartType.TEXT, ChartType.IMAGE):
                return self._calculate_content(chart, chart_type)
            return self._calculate_value(chart)
        except Exception as e:
            self.logger.exception(f"Failed to calculate chart {chart_id}")
            return self._error_result(
                chart,
                create_chart_error(
                    ChartErrorType.CALCULATION_ERROR,
                    str(e) or "Calculation failed",
                    {"chartId": chart_id, "formula": chart.formula},
                ),
            )

    # ==========================================================================
    # Chart Types
    # ==========================================================================

    def _calculate_kpi(self, chart: Chart) -> ChartResult:
        """KPI charts display a single number."""
        value = self._evaluate(chart.formula)
        return ChartResult(
            **self._base_fields(chart),
            kpi_value="NA" if value is NA else value,
            formatting=chart.formatting,
        )

    def _calculate_multi_element(self, chart: Chart) -> ChartResult:
        """Pie and bar charts keep only elements with a non-negative number."""
        elements = self._valid_elements(chart)

        total = None
        if chart.type == ChartType.BAR.value and chart.show_total:
            total = sum(el.value for el in elements) if elements else "NA"

        return ChartResult(
            **self._base_fields(chart),
            elements=elements,
            total=total,
            formatting=chart.formatting,
        )

    def _calculate_content(self, chart: Chart, chart_type: ChartType) -> ChartResult:
        """
        Text and image charts carry a string (text content or image URL).

        Only simple variable references are supported. They read the raw
        value so strings survive; any other formula yields empty content.
        """
        content = ""
        match = SIMPLE_VARIABLE_PATTERN.match(chart.formula.strip())
        if match:
            field_name = match.group(1) or match.group(2)
            raw = self._stats.get(field_name)
            if raw is not None:
                content = str(raw)

        result = ChartResult(**self._base_fields(chart), kpi_value=content)
        if chart_type == ChartType.IMAGE:
            result.aspect_ratio = chart.aspect_ratio or AspectRatio.LANDSCAPE
        return result

    def _calculate_value(self, chart: Chart) -> ChartResult:
        """Value charts combine a KPI (NA shown as 0) with a breakdown."""
        value = self._evaluate(chart.formula)
        return ChartResult(
            **self._base_fields(chart),
            kpi_value=0.0 if value is NA else value,
            elements=self._valid_elements(chart),
            formatting=chart.formatting,
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _evaluate(self, formula: str):
        if not formula or not isinstance(formula, str):
            self.logger.warning(f"Invalid formula: {formula!r}")
            return NA
        return evaluate_formula(formula, self._stats)

    def _valid_elements(self, chart: Chart) -> list[ChartElementResult]:
        elements = []
        for element in chart.elements:
            value = self._evaluate(element.formula)
            if value is NA or value < 0:
                continue
            elements.append(ChartElementResult(label=element.label, value=value, color=element.color))
        return elements

    @staticmethod
    def _base_fields(chart: Chart) -> dict[str, Any]:
        return {
            "chart_id": chart.chart_id,
            "type": chart.type,
            "title": chart.title,
            "icon": chart.icon,
            "icon_variant": chart.icon_variant,
            "show_title": chart.show_title,
        }

    def _error_result(self, chart: Chart, chart_error) -> ChartResult:
        return ChartResult(
            **self._base_fields(chart),
            error=chart_error.message,
            chart_error=chart_error,
        )

    @staticmethod
    def has_valid_data(result: ChartResult) -> bool:
        """
        Check whether a chart result is worth rendering.

        Errors always fail. Text and image need content, KPI needs a number,
        and multi-element charts need a positive total.
        """
        if result.error or result.chart_error:
            return False

        if result.type in (ChartType.TEXT.value, ChartType.IMAGE.value):
            return isinstance(result.kpi_value, str) and len(result.kpi_value) > 0

        if result.type == ChartType.KPI.value:
            return result.kpi_value is not None and result.kpi_value != "NA"

        if result.type in (ChartType.PIE.value, ChartType.BAR.value, ChartType.VALUE.value):
            if not result.elements:
                return False
            total = sum(el.value for el in result.elements if isinstance(el.value, (int, float)))
            return total > 0

        return False

    def update_stats(self, stats: Mapping[str, Any]) -> None:
        """Swap in a new statistics record for recalculation."""
        self._stats = stats

    def get_chart(self, chart_id: str) -> Optional[Chart]:
        return self._charts.get(chart_id)

    def get_all_charts(self) -> list[Chart]:
        return list(self._charts.values())
