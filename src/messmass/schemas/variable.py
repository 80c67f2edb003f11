"""Variable metadata schemas."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VariableType(str, Enum):
    """Value kinds a statistics variable can hold."""

    COUNT = "count"
    PERCENTAGE = "percentage"
    CURRENCY = "currency"
    NUMERIC = "numeric"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"


class VariableFlags(BaseModel):
    """Where a variable is editable in the admin surfaces."""

    model_config = ConfigDict(populate_by_name=True)

    visible_in_clicker: bool = Field(default=False, alias="visibleInClicker")
    editable_in_manual: bool = Field(default=False, alias="editableInManual")


class VariableDefinition(BaseModel):
    """
    Metadata for one statistics variable.

    Derived variables carry a bracket-notation formula over other variables.
    The catalogue is data: operators add variables at runtime, so nothing
    here is a closed set.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Stats field name")
    label: str = ""
    category: str = "Custom"
    type: VariableType = VariableType.COUNT
    description: Optional[str] = None
    unit: Optional[str] = None
    derived: bool = False
    formula: Optional[str] = None
    example_usage: Optional[str] = Field(default=None, alias="exampleUsage")
    flags: Optional[VariableFlags] = None
    is_system: bool = Field(default=True, alias="isSystem")

    @property
    def is_numeric(self) -> bool:
        """True for variables that can appear in arithmetic formulas."""
        return self.type not in (VariableType.TEXT, VariableType.DATE)
