"""Unit tests for FormulaEvaluator."""

from decimal import Decimal

import pytest
from messmass.core.exceptions import (
    FormulaDivisionByZeroError,
    FormulaError,
    FormulaValueError,
    UnknownFunctionError,
)
from messmass.formula.evaluator import FormulaEvaluator, evaluate_ast
from messmass.formula.parser import FormulaParser


@pytest.fixture
def parser():
    return FormulaParser()


class TestFormulaEvaluator:
    """Tests for FormulaEvaluator class."""

    def test_evaluator_initialization(self):
        """Test that evaluator initializes correctly."""
        evaluator = FormulaEvaluator()
        assert evaluator._fields == {}
        assert evaluator._parameters == {}
        assert evaluator._manual_data == {}

    def test_evaluate_number_literal(self, parser):
        """Test evaluating number literal."""
        result = FormulaEvaluator().evaluate(parser.parse("42"))
        assert result == 42.0
        assert isinstance(result, float)

    def test_evaluate_field_reference(self, parser):
        """Test evaluating field reference."""
        evaluator = FormulaEvaluator({"female": 120})
        assert evaluator.evaluate(parser.parse("[female]")) == 120

    def test_evaluate_stats_prefixed_reference(self, parser):
        """Test that [stats.x] reads the same field as [x]."""
        evaluator = FormulaEvaluator({"female": 120})
        assert evaluator.evaluate(parser.parse("[stats.female]")) == 120

    def test_evaluate_missing_field_is_zero(self, parser):
        """Test that a missing field contributes zero."""
        assert FormulaEvaluator().evaluate(parser.parse("[missing] + 5")) == 5

    def test_evaluate_none_field_is_zero(self, parser):
        """Test that a None field contributes zero."""
        evaluator = FormulaEvaluator({"a": None})
        assert evaluator.evaluate(parser.parse("[a] + 1")) == 1

    def test_evaluate_field_override(self, parser):
        """Test evaluating with a record passed to evaluate()."""
        evaluator = FormulaEvaluator({"a": 10})
        assert evaluator.evaluate(parser.parse("[a]"), fields={"a": 20}) == 20

    def test_evaluate_nested_path(self, parser):
        """Test walking a dotted path through nested mappings."""
        evaluator = FormulaEvaluator({"bitly": {"clicks": 7}})
        assert evaluator.evaluate(parser.parse("[bitly.clicks]")) == 7

    def test_evaluate_dotted_key_wins(self, parser):
        """Test that a literal dotted key is preferred over a nested path."""
        evaluator = FormulaEvaluator({"bitly.clicks": 3, "bitly": {"clicks": 7}})
        assert evaluator.evaluate(parser.parse("[bitly.clicks]")) == 3

    def test_evaluate_numeric_string(self, parser):
        """Test that numeric strings are coerced."""
        evaluator = FormulaEvaluator({"a": " 12.5 ", "b": ""})
        assert evaluator.evaluate(parser.parse("[a] + [b]")) == 12.5

    def test_evaluate_decimal_and_bool(self, parser):
        """Test that Decimal and bool values are coerced."""
        evaluator = FormulaEvaluator({"a": Decimal("1.5"), "b": True})
        assert evaluator.evaluate(parser.parse("[a] + [b]")) == 2.5

    @pytest.mark.parametrize("value", ["abc", [1, 2], {"x": 1}, float("nan"), float("inf")])
    def test_evaluate_non_numeric_value(self, parser, value):
        """Test that non-numeric values raise FormulaValueError."""
        evaluator = FormulaEvaluator({"a": value})
        with pytest.raises(FormulaValueError) as exc_info:
            evaluator.evaluate(parser.parse("[a] + 1"))
        assert exc_info.value.details["field_name"] == "a"

    def test_evaluate_param_reference(self, parser):
        """Test resolving PARAM references from parameters."""
        evaluator = FormulaEvaluator({"jersey": 10}, parameters={"jerseyPrice": 85})
        assert evaluator.evaluate(parser.parse("[jersey] * [PARAM:jerseyPrice]")) == 850

    def test_evaluate_manual_reference(self, parser):
        """Test resolving MANUAL references from manual data."""
        evaluator = FormulaEvaluator(manual_data={"revenue": 400})
        assert evaluator.evaluate(parser.parse("[MANUAL:revenue] / 4")) == 100

    def test_param_not_read_from_stats(self, parser):
        """Test that PARAM references never fall back to the stats record."""
        evaluator = FormulaEvaluator({"price": 5})
        assert evaluator.evaluate(parser.parse("[PARAM:price]")) == 0

    def test_evaluate_precedence(self, parser):
        """Test evaluating with operator precedence."""
        evaluator = FormulaEvaluator({"a": 1, "b": 2, "c": 3})
        assert evaluator.evaluate(parser.parse("[a] + [b] * [c]")) == 7
        assert evaluator.evaluate(parser.parse("([a] + [b]) * [c]")) == 9

    def test_evaluate_unary_minus(self, parser):
        """Test evaluating unary minus."""
        evaluator = FormulaEvaluator({"a": 4})
        assert evaluator.evaluate(parser.parse("-[a] + 10")) == 6
        assert evaluator.evaluate(parser.parse("--[a]")) == 4

    def test_evaluate_division(self, parser):
        """Test evaluating division."""
        evaluator = FormulaEvaluator({"visitWeb": 150, "eventAttendees": 200})
        assert evaluator.evaluate(parser.parse("[visitWeb] / [eventAttendees] * 100")) == 75

    def test_evaluate_division_by_zero(self, parser):
        """Test that a zero divisor raises FormulaDivisionByZeroError."""
        evaluator = FormulaEvaluator({"a": 1, "b": 0})
        with pytest.raises(FormulaDivisionByZeroError):
            evaluator.evaluate(parser.parse("[a] / [b]"))

    def test_evaluate_division_by_missing(self, parser):
        """Test that a missing divisor counts as zero."""
        with pytest.raises(FormulaDivisionByZeroError):
            FormulaEvaluator({"a": 1}).evaluate(parser.parse("[a] / [b]"))

    def test_evaluate_division_by_zero_inside_function(self, parser):
        """Test that a zero divisor inside a function argument still fails."""
        with pytest.raises(FormulaDivisionByZeroError):
            FormulaEvaluator().evaluate(parser.parse("MAX(1, 1 / 0)"))

    def test_evaluate_overflow_not_finite(self, parser):
        """Test that an infinite result raises FormulaError."""
        evaluator = FormulaEvaluator({"a": 1e308})
        with pytest.raises(FormulaError):
            evaluator.evaluate(parser.parse("[a] * 10"))

    def test_evaluate_function(self, parser):
        """Test evaluating a function call."""
        evaluator = FormulaEvaluator({"a": 3, "b": 7})
        assert evaluator.evaluate(parser.parse("MAX([a], [b])")) == 7
        assert evaluator.evaluate(parser.parse("min([a], [b])")) == 3

    def test_evaluate_unknown_function(self, parser):
        """Test that an unknown function raises UnknownFunctionError."""
        with pytest.raises(UnknownFunctionError):
            FormulaEvaluator().evaluate(parser.parse("SQRT(4)"))

    def test_evaluate_wrong_argument_count(self, parser):
        """Test that bad arguments raise FormulaError."""
        with pytest.raises(FormulaError):
            FormulaEvaluator().evaluate(parser.parse("ABS(1, 2)"))


class TestDerivedMetricFallback:
    """Tests for built-in derived metrics missing from the record."""

    def test_total_fans_computed(self, parser):
        """Test computing totalFans from base metrics."""
        evaluator = FormulaEvaluator({"indoor": 10, "outdoor": 5, "stadium": 20})
        assert evaluator.evaluate(parser.parse("[totalFans]")) == 35

    def test_total_fans_uses_stored_remote_fans(self, parser):
        """Test that a stored remoteFans is used for totalFans."""
        evaluator = FormulaEvaluator({"remoteFans": 100, "indoor": 10, "stadium": 20})
        assert evaluator.evaluate(parser.parse("[stats.totalFans]")) == 120

    def test_stored_derived_value_wins(self, parser):
        """Test that a stored derived value is not recomputed."""
        evaluator = FormulaEvaluator({"allImages": 3, "selfies": 50})
        assert evaluator.evaluate(parser.parse("[allImages]")) == 3

    def test_age_groups(self, parser):
        """Test computing age group totals."""
        evaluator = FormulaEvaluator({"genAlpha": 1, "genYZ": 2, "genX": 4, "boomer": 8})
        assert evaluator.evaluate(parser.parse("[totalUnder40]")) == 3
        assert evaluator.evaluate(parser.parse("[totalOver40]")) == 12


def test_evaluate_ast_convenience():
    """Test the evaluate_ast convenience function."""
    ast = FormulaParser().parse("[a] * [PARAM:k]")
    assert evaluate_ast(ast, {"a": 2}, parameters={"k": 21}) == 42
