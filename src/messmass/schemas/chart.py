"""Chart configuration and calculation result schemas."""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Serialized form of NA in chart results
NAValue = Literal["NA"]


class ChartErrorType(str, Enum):
    """Categories of chart calculation failures."""

    MISSING_VARIABLE = "MISSING_VARIABLE"
    SYNTAX_ERROR = "SYNTAX_ERROR"
    DIVISION_BY_ZERO = "DIVISION_BY_ZERO"
    MISSING_CHART_CONFIG = "MISSING_CHART_CONFIG"
    INVALID_CHART_TYPE = "INVALID_CHART_TYPE"
    CALCULATION_ERROR = "CALCULATION_ERROR"


class ChartError(BaseModel):
    """Categorized chart failure with the context needed to explain it."""

    type: ChartErrorType
    message: str
    context: dict[str, Any] = Field(default_factory=dict)


class ChartType(str, Enum):
    """Supported chart types."""

    KPI = "kpi"
    PIE = "pie"
    BAR = "bar"
    TEXT = "text"
    IMAGE = "image"
    VALUE = "value"


class AspectRatio(str, Enum):
    """Image chart aspect ratios."""

    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"


class ChartElement(BaseModel):
    """A labeled segment of a pie, bar or value chart."""

    label: str
    formula: str
    color: Optional[str] = None


class ChartFormatting(BaseModel):
    """Display formatting applied by renderers, never by the evaluator."""

    prefix: Optional[str] = None
    suffix: Optional[str] = None
    decimals: Optional[int] = Field(default=None, ge=0, le=10)


class Chart(BaseModel):
    """Chart configuration document."""

    model_config = ConfigDict(populate_by_name=True)

    chart_id: str = Field(..., alias="chartId")
    title: str
    # Kept as a plain string so unknown types can be reported, not rejected
    type: str
    formula: str = ""
    is_active: bool = Field(default=True, alias="isActive")
    order: int = 0
    icon: Optional[str] = None
    icon_variant: Optional[Literal["outlined", "rounded"]] = Field(
        default=None, alias="iconVariant"
    )
    elements: list[ChartElement] = Field(default_factory=list)
    formatting: Optional[ChartFormatting] = None
    aspect_ratio: Optional[AspectRatio] = Field(default=None, alias="aspectRatio")
    show_title: Optional[bool] = Field(default=None, alias="showTitle")
    show_total: bool = Field(default=False, alias="showTotal")


class ChartElementResult(BaseModel):
    """Calculated value of a chart element."""

    label: str
    value: Union[float, NAValue]
    color: Optional[str] = None


class ChartResult(BaseModel):
    """Standardized output of a chart calculation."""

    chart_id: str
    type: str
    title: str
    icon: Optional[str] = None
    icon_variant: Optional[str] = None
    kpi_value: Optional[Union[float, str]] = None
    elements: Optional[list[ChartElementResult]] = None
    total: Optional[Union[float, NAValue]] = None
    formatting: Optional[ChartFormatting] = None
    aspect_ratio: Optional[AspectRatio] = None
    show_title: Optional[bool] = None
    error: Optional[str] = None
    chart_error: Optional[ChartError] = None
