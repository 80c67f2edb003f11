"""Pydantic schemas for MessMass results and configuration documents."""

from messmass.schemas.chart import (
    Chart,
    ChartElement,
    ChartElementResult,
    ChartError,
    ChartErrorType,
    ChartFormatting,
    ChartResult,
    ChartType,
)
from messmass.schemas.formula import (
    BatchEvaluationItem,
    FormulaValidationResult,
    SampleEvaluation,
    StatsValidationResult,
)
from messmass.schemas.stats import DataQuality, ProjectStatsValidation, RequiredFieldsResult
from messmass.schemas.variable import VariableDefinition, VariableType

__all__ = [
    "BatchEvaluationItem",
    "Chart",
    "ChartElement",
    "ChartElementResult",
    "ChartError",
    "ChartErrorType",
    "ChartFormatting",
    "ChartResult",
    "ChartType",
    "DataQuality",
    "FormulaValidationResult",
    "ProjectStatsValidation",
    "RequiredFieldsResult",
    "SampleEvaluation",
    "StatsValidationResult",
    "VariableDefinition",
    "VariableType",
]
