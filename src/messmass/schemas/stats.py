"""Stats validation schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class DataQuality(str, Enum):
    """Data quality tiers derived from record completeness."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    INSUFFICIENT = "insufficient"


class RequiredFieldsResult(BaseModel):
    """Outcome of checking a record for required fields."""

    valid: bool
    missing: list[str] = Field(default_factory=list)


class ProjectStatsValidation(BaseModel):
    """Completeness report for a project's statistics record."""

    is_valid: bool
    completeness: int = Field(..., ge=0, le=100, description="Present fields, percent")
    missing_required: list[str] = Field(default_factory=list)
    missing_optional: list[str] = Field(default_factory=list)
    has_minimum_data: bool
    has_full_data: bool
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    data_quality: DataQuality
