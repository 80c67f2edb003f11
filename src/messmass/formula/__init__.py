"""Formula engine for MessMass.

This module evaluates KPI formulas against event statistics:
- Arithmetic operations (+, -, *, /) with standard precedence
- Parentheses and unary minus
- Field references ([female], [stats.female])
- Parameter and manual data references ([PARAM:key], [MANUAL:key])
- Math functions (MAX, MIN, ROUND, ABS)

Evaluation never raises for formula problems; it returns NA instead.
"""

from messmass.formula.result import NA, EvaluationResult, NotApplicable, is_na
from messmass.formula.parser import FormulaParser
from messmass.formula.evaluator import FormulaEvaluator
from messmass.formula.functions import FORMULA_FUNCTIONS, register_function
from messmass.formula.dependencies import FormulaDependencyGraph
from messmass.formula.engine import (
    evaluate_formula,
    evaluate_formula_batch_safe,
    evaluate_formula_safe,
    evaluate_formulas_batch,
    extract_variables_from_formula,
    sample_formula,
    validate_formula,
    validate_stats_for_formula,
)

__all__ = [
    "NA",
    "EvaluationResult",
    "NotApplicable",
    "is_na",
    "FormulaParser",
    "FormulaEvaluator",
    "FORMULA_FUNCTIONS",
    "register_function",
    "FormulaDependencyGraph",
    "evaluate_formula",
    "evaluate_formula_batch_safe",
    "evaluate_formula_safe",
    "evaluate_formulas_batch",
    "extract_variables_from_formula",
    "sample_formula",
    "validate_formula",
    "validate_stats_for_formula",
]
