"""Formula validation and evaluation schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from messmass.formula.result import NA, NotApplicable


def _serialize_result(value: Any) -> Any:
    return "NA" if value is NA else value


class FormulaValidationResult(BaseModel):
    """Whether a formula is usable, and what it evaluates to on sample data."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    is_valid: bool
    error: Optional[str] = None
    used_variables: list[str] = Field(default_factory=list)
    evaluated_result: Optional[float | NotApplicable] = None

    @field_serializer("evaluated_result")
    def serialize_evaluated_result(self, value: Any) -> Any:
        return _serialize_result(value)


class StatsValidationResult(BaseModel):
    """Which variables a formula needs that a record does not provide."""

    valid: bool
    missing_variables: list[str] = Field(default_factory=list)
    available_variables: list[str] = Field(default_factory=list)
    can_evaluate: bool = True


class BatchEvaluationItem(BaseModel):
    """One formula's result within a batch evaluation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    formula: str
    result: float | NotApplicable
    valid: bool

    @field_serializer("result")
    def serialize_result(self, value: Any) -> Any:
        return _serialize_result(value)


class SampleEvaluation(BaseModel):
    """A formula evaluated against the built-in sample record."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    result: float | NotApplicable
    sample_data: dict[str, float]

    @field_serializer("result")
    def serialize_result(self, value: Any) -> Any:
        return _serialize_result(value)
