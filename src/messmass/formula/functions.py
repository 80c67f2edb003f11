"""Formula functions for MessMass.

Implements the math functions available in KPI formulas. Arguments are
already-evaluated finite numbers; a function that cannot produce a value
raises FormulaError, which the engine turns into NA.
"""

import math
from typing import Callable

from messmass.core.exceptions import FormulaError

# Type alias for formula functions
FormulaFunction = Callable[..., float]

# Decimal places accepted by ROUND
MAX_ROUND_DECIMALS = 15

# Registry of formula functions
FORMULA_FUNCTIONS: dict[str, FormulaFunction] = {}


def register_function(name: str) -> Callable[[FormulaFunction], FormulaFunction]:
    """Decorator to register a formula function."""

    def decorator(func: FormulaFunction) -> FormulaFunction:
        FORMULA_FUNCTIONS[name.upper()] = func
        return func

    return decorator


def _require_args(name: str, args: tuple[float, ...]) -> list[float]:
    values = [float(a) for a in args if not math.isnan(a)]
    if not values:
        raise FormulaError(f"{name} requires at least one numeric argument")
    return values


@register_function("MAX")
def func_max(*args: float) -> float:
    """Maximum value. Example: MAX(10, 20, 5) returns 20."""
    return max(_require_args("MAX", args))


@register_function("MIN")
def func_min(*args: float) -> float:
    """Minimum value. Example: MIN(10, 20, 5) returns 5."""
    return min(_require_args("MIN", args))


@register_function("ROUND")
def func_round(value: float, decimals: float = 0) -> float:
    """
    Round to the given number of decimals, halves toward positive infinity.

    ROUND(10.5) returns 11 and ROUND(-10.5) returns -10. decimals must be
    a whole number between 0 and MAX_ROUND_DECIMALS.
    """
    places = int(decimals)
    if places != decimals or not 0 <= places <= MAX_ROUND_DECIMALS:
        raise FormulaError(f"ROUND decimals must be 0-{MAX_ROUND_DECIMALS}, got {decimals}")
    factor = 10**places
    return math.floor(float(value) * factor + 0.5) / factor


@register_function("ABS")
def func_abs(value: float) -> float:
    """Absolute value."""
    return abs(float(value))
