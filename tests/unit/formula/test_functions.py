"""Unit tests for formula functions."""

import pytest
from messmass.core.exceptions import FormulaError
from messmass.formula.functions import (
    FORMULA_FUNCTIONS,
    MAX_ROUND_DECIMALS,
    func_abs,
    func_max,
    func_min,
    func_round,
    register_function,
)


class TestFunctionRegistry:
    """Tests for the function registry."""

    def test_builtin_functions_registered(self):
        """Test that the math functions are registered."""
        assert {"MAX", "MIN", "ROUND", "ABS"} <= set(FORMULA_FUNCTIONS)

    def test_register_function_uppercases_name(self):
        """Test that registered names are stored upper case."""

        @register_function("double_it")
        def double_it(value):
            return value * 2

        try:
            assert FORMULA_FUNCTIONS["DOUBLE_IT"] is double_it
        finally:
            FORMULA_FUNCTIONS.pop("DOUBLE_IT")


class TestNumericFunctions:
    """Tests for numeric functions."""

    def test_max(self):
        assert func_max(10, 20, 5) == 20

    def test_max_single(self):
        assert func_max(-3) == -3

    def test_max_no_arguments(self):
        with pytest.raises(FormulaError):
            func_max()

    def test_min(self):
        assert func_min(10, 20, 5) == 5

    def test_min_no_arguments(self):
        with pytest.raises(FormulaError):
            func_min()

    @pytest.mark.parametrize(
        "value,expected",
        [
            (10.4, 10),
            (10.5, 11),
            (-10.5, -10),
            (-10.6, -11),
            (0, 0),
        ],
    )
    def test_round(self, value, expected):
        """Test that halves round toward positive infinity."""
        assert func_round(value) == expected

    def test_round_decimals(self):
        assert func_round(3.14159, 2) == 3.14

    @pytest.mark.parametrize("decimals", [-1, -400, 16, 1e10, 1.5])
    def test_round_decimals_out_of_range(self, decimals):
        """Test that unusable decimal places are rejected before computing."""
        with pytest.raises(FormulaError):
            func_round(1.0, decimals)

    def test_round_max_decimals(self):
        assert func_round(0.5, MAX_ROUND_DECIMALS) == 0.5

    def test_abs(self):
        assert func_abs(-5) == 5
        assert func_abs(5) == 5
