"""Formula parser for MessMass.

Parses formula strings into an AST using Lark parser.
"""

from dataclasses import dataclass
from typing import Any, Union

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

from messmass.core.exceptions import FormulaSyntaxError
from messmass.formula.grammar import FORMULA_GRAMMAR

PARAM_PREFIX = "PARAM:"
MANUAL_PREFIX = "MANUAL:"
STATS_PREFIX = "stats."


# AST Node types. Parsed trees are cached and shared, so nodes are frozen.
@dataclass(frozen=True)
class NumberNode:
    value: float | int


@dataclass(frozen=True)
class FieldRefNode:
    """Reference to a value in one of the three lookup sources.

    source is "stats" for record fields, "param" for [PARAM:key] and
    "manual" for [MANUAL:key]. token keeps the text between the brackets.
    """

    field_name: str
    source: str = "stats"
    token: str = ""


@dataclass(frozen=True)
class FunctionCallNode:
    name: str
    arguments: tuple[Any, ...]


@dataclass(frozen=True)
class BinaryOpNode:
    operator: str
    left: Any
    right: Any


@dataclass(frozen=True)
class UnaryOpNode:
    operator: str
    operand: Any


FormulaNode = Union[NumberNode, FieldRefNode, FunctionCallNode, BinaryOpNode, UnaryOpNode]


def make_field_ref(token: str) -> FieldRefNode:
    """Build a FieldRefNode from the text inside a [...] reference."""
    if token.startswith(PARAM_PREFIX):
        return FieldRefNode(token[len(PARAM_PREFIX) :], "param", token)
    if token.startswith(MANUAL_PREFIX):
        return FieldRefNode(token[len(MANUAL_PREFIX) :], "manual", token)
    name = token[len(STATS_PREFIX) :] if token.startswith(STATS_PREFIX) else token
    return FieldRefNode(name, "stats", token)


class FormulaTransformer(Transformer):
    """Transform Lark parse tree into AST nodes."""

    @v_args(inline=True)
    def number(self, token):
        value = float(token)
        # Keep as int if no decimal
        if value.is_integer() and abs(value) < 2**53:
            value = int(value)
        return NumberNode(value)

    @v_args(inline=True)
    def field_ref(self, token):
        # Extract token from [fieldName]
        return make_field_ref(str(token)[1:-1])

    def function_call(self, items):
        name = str(items[0]).upper()
        args = tuple(items[1]) if len(items) > 1 and items[1] else ()
        return FunctionCallNode(name, args)

    def arguments(self, items):
        return list(items)

    @v_args(inline=True)
    def add(self, left, right):
        return BinaryOpNode("+", left, right)

    @v_args(inline=True)
    def sub(self, left, right):
        return BinaryOpNode("-", left, right)

    @v_args(inline=True)
    def mul(self, left, right):
        return BinaryOpNode("*", left, right)

    @v_args(inline=True)
    def div(self, left, right):
        return BinaryOpNode("/", left, right)

    @v_args(inline=True)
    def neg(self, operand):
        return UnaryOpNode("-", operand)

    @v_args(inline=True)
    def pos(self, operand):
        return operand  # Positive is a no-op


class FormulaParser:
    """
    Parser for MessMass formulas.

    Parses formula strings into an AST that can be evaluated.
    """

    def __init__(self):
        self._parser = Lark(
            FORMULA_GRAMMAR,
            parser="lalr",
            transformer=FormulaTransformer(),
        )

    def parse(self, formula: str) -> FormulaNode:
        """
        Parse a formula string into an AST.

        Args:
            formula: Formula string to parse

        Returns:
            AST root node

        Raises:
            FormulaSyntaxError: If formula syntax is invalid
        """
        if not isinstance(formula, str):
            raise FormulaSyntaxError(str(formula), "formula must be a string")
        if not formula.strip():
            raise FormulaSyntaxError(formula, "formula is empty")
        try:
            return self._parser.parse(formula)
        except LarkError as e:
            raise FormulaSyntaxError(formula, str(e).strip()) from e

    def validate(self, formula: str) -> tuple[bool, str | None]:
        """
        Validate formula syntax.

        Args:
            formula: Formula string to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.parse(formula)
            return True, None
        except FormulaSyntaxError as e:
            return False, e.message

    def get_field_references(self, formula: str) -> list[str]:
        """
        Extract all field references from a formula.

        Args:
            formula: Formula string

        Returns:
            Reference tokens in order of first appearance
        """
        ast = self.parse(formula)
        fields: list[str] = []
        self._collect_fields(ast, fields)
        return list(dict.fromkeys(fields))

    def _collect_fields(self, node: Any, fields: list[str]) -> None:
        """Recursively collect field references from AST."""
        if isinstance(node, FieldRefNode):
            fields.append(node.token or node.field_name)
        elif isinstance(node, BinaryOpNode):
            self._collect_fields(node.left, fields)
            self._collect_fields(node.right, fields)
        elif isinstance(node, UnaryOpNode):
            self._collect_fields(node.operand, fields)
        elif isinstance(node, FunctionCallNode):
            for arg in node.arguments:
                self._collect_fields(arg, fields)
