"""Evaluation result type for MessMass formulas.

A formula evaluates to either a finite float or the NA marker. NA is a
single shared instance, compared by identity (``result is NA``).
"""

from typing import Any, Union


class NotApplicable:
    """Marker for a formula that could not produce a meaningful number."""

    __slots__ = ()
    _instance: "NotApplicable | None" = None

    def __new__(cls) -> "NotApplicable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NA"

    def __str__(self) -> str:
        return "NA"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (NotApplicable, ())


NA = NotApplicable()

EvaluationResult = Union[float, NotApplicable]


def is_na(value: Any) -> bool:
    """Return True for the NA marker (and its serialized form "NA")."""
    return value is NA or value == "NA"


def to_display(value: EvaluationResult, placeholder: str = "N/A") -> str:
    """Render a result for display, substituting NA with a placeholder."""
    if value is NA:
        return placeholder
    if float(value).is_integer():
        return str(int(value))
    return str(value)
