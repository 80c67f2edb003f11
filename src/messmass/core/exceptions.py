"""
Custom exceptions for MessMass.

Provides a hierarchy of exceptions with structured error information.
Formula errors never reach callers of the public evaluation API: they are
collapsed to the NA result at that boundary.
"""

from typing import Any


class MessMassException(Exception):
    """
    Base exception for all MessMass errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Formula Errors
# =============================================================================


class FormulaError(MessMassException):
    """A formula could not produce a numeric result."""


class FormulaSyntaxError(FormulaError):
    """Formula text could not be parsed."""

    def __init__(self, formula: str, reason: str) -> None:
        super().__init__(
            message=f"Invalid formula syntax: {reason}",
            code="SYNTAX_ERROR",
            details={"formula": formula},
        )


class FormulaDivisionByZeroError(FormulaError):
    """A division had a zero (or missing) divisor."""

    def __init__(self) -> None:
        super().__init__(message="Division by zero", code="DIVISION_BY_ZERO")


class FormulaValueError(FormulaError):
    """A referenced value is not numeric."""

    def __init__(self, field_name: str, value: Any) -> None:
        super().__init__(
            message=f"Value of '{field_name}' is not numeric",
            code="INVALID_VALUE",
            details={"field_name": field_name, "value": str(value)[:100]},
        )


class UnknownFunctionError(FormulaError):
    """Formula calls a function that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Unknown function: {name}",
            code="UNKNOWN_FUNCTION",
            details={"function": name},
        )


# =============================================================================
# Variables Errors
# =============================================================================


class CircularReferenceError(MessMassException):
    """Derived variable definitions reference each other in a cycle."""

    def __init__(self, variable: str) -> None:
        super().__init__(
            message=f"Circular reference detected for variable '{variable}'",
            code="CIRCULAR_REFERENCE",
            details={"variable": variable},
        )


class VariablesFetchError(MessMassException):
    """Variables metadata could not be loaded."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="VARIABLES_FETCH_FAILED")
