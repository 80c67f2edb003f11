"""Formula evaluator for MessMass.

Evaluates parsed formula ASTs against a statistics record.
"""

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from messmass.core.exceptions import (
    FormulaDivisionByZeroError,
    FormulaError,
    FormulaValueError,
    UnknownFunctionError,
)
from messmass.formula.functions import FORMULA_FUNCTIONS
from messmass.formula.parser import (
    BinaryOpNode,
    FieldRefNode,
    FunctionCallNode,
    NumberNode,
    UnaryOpNode,
)
from messmass.stats.validator import resolve_derived_metric

_MISSING = object()


class FormulaEvaluator:
    """
    Evaluates formula ASTs against statistics records.

    Missing references contribute 0. Every failure (zero divisor,
    non-numeric value, unknown function) raises a FormulaError subclass;
    the engine module turns those into NA.
    """

    def __init__(
        self,
        fields: Mapping[str, Any] | None = None,
        parameters: Mapping[str, Any] | None = None,
        manual_data: Mapping[str, Any] | None = None,
    ):
        """
        Initialize evaluator with optional lookup sources.

        Args:
            fields: Statistics record mapping field names to values
            parameters: Values for [PARAM:key] references
            manual_data: Values for [MANUAL:key] references
        """
        self._fields = fields or {}
        self._parameters = parameters or {}
        self._manual_data = manual_data or {}

    def evaluate(
        self,
        ast: Any,
        fields: Mapping[str, Any] | None = None,
    ) -> float:
        """
        Evaluate an AST node.

        Args:
            ast: AST node to evaluate
            fields: Optional statistics record (overrides constructor values)

        Returns:
            Finite numeric result

        Raises:
            FormulaError: If the formula cannot produce a number
        """
        if fields is not None:
            self._fields = fields

        try:
            return self._eval(ast)
        except RecursionError:
            raise FormulaError("Formula is nested too deeply") from None

    def _eval(self, node: Any) -> float:
        """Recursively evaluate an AST node."""
        if isinstance(node, NumberNode):
            return _check_finite(float(node.value))

        if isinstance(node, FieldRefNode):
            return self._resolve(node)

        if isinstance(node, FunctionCallNode):
            return self._eval_function(node)

        if isinstance(node, BinaryOpNode):
            return self._eval_binary(node)

        if isinstance(node, UnaryOpNode):
            return self._eval_unary(node)

        raise FormulaError(f"Unsupported formula node: {type(node).__name__}")

    # ==========================================================================
    # Reference Resolution
    # ==========================================================================

    def _resolve(self, node: FieldRefNode) -> float:
        """Look up a reference in its source. Missing values are 0."""
        if node.source == "param":
            value = self._parameters.get(node.field_name)
        elif node.source == "manual":
            value = self._manual_data.get(node.field_name)
        else:
            value = self._lookup_stat(node.field_name)
            if value is _MISSING or value is None:
                value = resolve_derived_metric(node.field_name, self._fields)

        if value is _MISSING:
            value = None
        return _to_number(node.token or node.field_name, value)

    def _lookup_stat(self, path: str) -> Any:
        """Walk a dotted path through nested mappings."""
        if path in self._fields:
            return self._fields[path]

        value: Any = self._fields
        for part in path.split("."):
            if not isinstance(value, Mapping) or part not in value:
                return _MISSING
            value = value[part]
        return value

    # ==========================================================================
    # Operators
    # ==========================================================================

    def _eval_function(self, node: FunctionCallNode) -> float:
        """Evaluate a function call."""
        func = FORMULA_FUNCTIONS.get(node.name)
        if func is None:
            raise UnknownFunctionError(node.name)

        args = [self._eval(arg) for arg in node.arguments]

        try:
            result = float(func(*args))
        except (TypeError, ValueError, ArithmeticError) as e:
            raise FormulaError(f"Invalid arguments for {node.name}: {e}") from e
        return _check_finite(result)

    def _eval_binary(self, node: BinaryOpNode) -> float:
        """Evaluate a binary operation."""
        left = self._eval(node.left)
        right = self._eval(node.right)
        op = node.operator

        if op == "+":
            return _check_finite(left + right)
        if op == "-":
            return _check_finite(left - right)
        if op == "*":
            return _check_finite(left * right)
        if op == "/":
            if right == 0:
                raise FormulaDivisionByZeroError()
            return _check_finite(left / right)

        raise FormulaError(f"Unknown operator: {op}")

    def _eval_unary(self, node: UnaryOpNode) -> float:
        """Evaluate a unary operation."""
        operand = self._eval(node.operand)
        if node.operator == "-":
            return -operand

        raise FormulaError(f"Unknown unary operator: {node.operator}")


def _check_finite(value: float) -> float:
    """Reject overflowed intermediate results so they cannot turn into 0 later."""
    if not math.isfinite(value):
        raise FormulaError("Formula result is not a finite number")
    return value


def _to_number(name: str, value: Any) -> float:
    """Coerce a looked-up value to float. None counts as 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            raise FormulaValueError(name, value) from None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            raise FormulaValueError(name, value) from None
    else:
        raise FormulaValueError(name, value)

    if not math.isfinite(number):
        raise FormulaValueError(name, value)
    return number


def evaluate_ast(
    formula_ast: Any,
    fields: Mapping[str, Any],
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
) -> float:
    """
    Convenience function to evaluate a parsed formula.

    Args:
        formula_ast: Parsed formula AST
        fields: Statistics record
        parameters: Values for [PARAM:key] references
        manual_data: Values for [MANUAL:key] references

    Returns:
        Evaluation result

    Raises:
        FormulaError: If the formula cannot produce a number
    """
    evaluator = FormulaEvaluator(fields, parameters, manual_data)
    return evaluator.evaluate(formula_ast)
