"""Unit tests for FormulaParser."""

import pytest
from messmass.core.exceptions import FormulaSyntaxError
from messmass.formula.parser import (
    BinaryOpNode,
    FieldRefNode,
    FormulaParser,
    FunctionCallNode,
    NumberNode,
    UnaryOpNode,
    make_field_ref,
)


@pytest.fixture
def parser():
    return FormulaParser()


class TestFormulaParser:
    """Tests for FormulaParser class."""

    def test_parse_integer(self, parser):
        """Test parsing an integer literal."""
        ast = parser.parse("42")
        assert ast == NumberNode(42)
        assert isinstance(ast.value, int)

    def test_parse_decimal(self, parser):
        """Test parsing a decimal literal."""
        assert parser.parse("3.14") == NumberNode(3.14)
        assert parser.parse(".5") == NumberNode(0.5)

    def test_parse_scientific_notation(self, parser):
        """Test parsing scientific notation."""
        assert parser.parse("1e3") == NumberNode(1000)

    def test_parse_field_reference(self, parser):
        """Test parsing a plain field reference."""
        assert parser.parse("[female]") == FieldRefNode("female", "stats", "female")

    def test_parse_stats_prefixed_reference(self, parser):
        """Test parsing a stats. prefixed reference."""
        ast = parser.parse("[stats.female]")
        assert ast.field_name == "female"
        assert ast.source == "stats"
        assert ast.token == "stats.female"

    def test_parse_param_reference(self, parser):
        """Test parsing a PARAM reference."""
        ast = parser.parse("[PARAM:jerseyPrice]")
        assert ast == FieldRefNode("jerseyPrice", "param", "PARAM:jerseyPrice")

    def test_parse_manual_reference(self, parser):
        """Test parsing a MANUAL reference."""
        ast = parser.parse("[MANUAL:totalRevenue]")
        assert ast == FieldRefNode("totalRevenue", "manual", "MANUAL:totalRevenue")

    def test_parse_addition(self, parser):
        """Test parsing addition."""
        ast = parser.parse("[indoor] + [outdoor]")
        assert isinstance(ast, BinaryOpNode)
        assert ast.operator == "+"
        assert ast.left.field_name == "indoor"
        assert ast.right.field_name == "outdoor"

    def test_parse_precedence(self, parser):
        """Test that multiplication binds tighter than addition."""
        ast = parser.parse("[a] + [b] * [c]")
        assert ast.operator == "+"
        assert isinstance(ast.right, BinaryOpNode)
        assert ast.right.operator == "*"

    def test_parse_left_associativity(self, parser):
        """Test that subtraction is left associative."""
        ast = parser.parse("10 - 4 - 3")
        assert ast.operator == "-"
        assert isinstance(ast.left, BinaryOpNode)
        assert ast.right == NumberNode(3)

    def test_parse_parentheses(self, parser):
        """Test that parentheses override precedence."""
        ast = parser.parse("([a] + [b]) * [c]")
        assert ast.operator == "*"
        assert ast.left.operator == "+"

    def test_parse_unary_minus(self, parser):
        """Test parsing unary minus."""
        ast = parser.parse("-[a]")
        assert isinstance(ast, UnaryOpNode)
        assert ast.operator == "-"

    def test_parse_unary_plus_is_noop(self, parser):
        """Test that unary plus disappears from the AST."""
        assert parser.parse("+5") == NumberNode(5)

    def test_parse_function_call(self, parser):
        """Test parsing a function call with arguments."""
        ast = parser.parse("MAX([a], [b], 3)")
        assert isinstance(ast, FunctionCallNode)
        assert ast.name == "MAX"
        assert len(ast.arguments) == 3

    def test_parse_function_name_uppercased(self, parser):
        """Test that function names are case-insensitive."""
        assert parser.parse("round(1.5)").name == "ROUND"

    def test_parse_function_without_arguments(self, parser):
        """Test parsing a function call with no arguments."""
        ast = parser.parse("MAX()")
        assert ast.arguments == ()

    def test_parse_whitespace(self, parser):
        """Test that whitespace is ignored."""
        assert parser.parse("  [a]\t+\n1 ") == parser.parse("[a]+1")

    @pytest.mark.parametrize(
        "formula",
        [
            "",
            "   ",
            "([a] + 1",
            "[a] + 1)",
            "[a] +",
            "[a] [b]",
            "[a] % 2",
            "2 ^ 3",
            "[a] > 1",
            "[]",
            "{a}",
            '"text"',
        ],
    )
    def test_parse_invalid(self, parser, formula):
        """Test that malformed formulas raise FormulaSyntaxError."""
        with pytest.raises(FormulaSyntaxError):
            parser.parse(formula)

    def test_parse_non_string(self, parser):
        """Test that a non-string formula raises FormulaSyntaxError."""
        with pytest.raises(FormulaSyntaxError):
            parser.parse(None)

    def test_syntax_error_details(self, parser):
        """Test that syntax errors carry the formula and code."""
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parser.parse("[a] +")
        assert exc_info.value.code == "SYNTAX_ERROR"
        assert exc_info.value.details["formula"] == "[a] +"
        assert exc_info.value.message.startswith("Invalid formula syntax")

    def test_validate_valid(self, parser):
        """Test validating a valid formula."""
        assert parser.validate("[a] / [b]") == (True, None)

    def test_validate_invalid(self, parser):
        """Test validating an invalid formula."""
        is_valid, error = parser.validate("[a] / ")
        assert is_valid is False
        assert error is not None

    def test_get_field_references(self, parser):
        """Test extracting field references in order without duplicates."""
        refs = parser.get_field_references("[b] + MAX([a], [b]) / -[PARAM:x]")
        assert refs == ["b", "a", "PARAM:x"]

    def test_get_field_references_none(self, parser):
        """Test extracting references from a constant formula."""
        assert parser.get_field_references("1 + 2") == []


class TestMakeFieldRef:
    """Tests for make_field_ref helper."""

    def test_plain(self):
        assert make_field_ref("male") == FieldRefNode("male", "stats", "male")

    def test_stats_prefix(self):
        assert make_field_ref("stats.male").field_name == "male"

    def test_nested_path_kept(self):
        """Test that dotted paths other than stats. are kept whole."""
        assert make_field_ref("bitly.clicks").field_name == "bitly.clicks"

    def test_param_and_manual(self):
        assert make_field_ref("PARAM:k").source == "param"
        assert make_field_ref("MANUAL:k").source == "manual"
