"""Formula engine entry points for MessMass.

Every function here accepts any formula string and never raises for
formula problems: unparseable formulas, zero divisors and non-numeric
values all come back as NA.
"""

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from messmass.core.config import settings
from messmass.core.exceptions import FormulaError, FormulaSyntaxError
from messmass.core.logging import get_logger
from messmass.formula.evaluator import FormulaEvaluator
from messmass.formula.parser import (
    MANUAL_PREFIX,
    PARAM_PREFIX,
    FormulaNode,
    FormulaParser,
    make_field_ref,
)
from messmass.formula.result import NA, EvaluationResult
from messmass.schemas.formula import (
    BatchEvaluationItem,
    FormulaValidationResult,
    SampleEvaluation,
    StatsValidationResult,
)
from messmass.stats.validator import DERIVED_METRICS, ensure_derived_metrics

logger = get_logger(__name__)

# [female], [stats.female], [PARAM:price], [MANUAL:total]
VARIABLE_PATTERN = re.compile(r"\[([a-zA-Z0-9_:.]+)\]")

# Realistic event record used by sample_formula()
SAMPLE_STATS: dict[str, float] = {
    "remoteImages": 10,
    "hostessImages": 25,
    "selfies": 15,
    "indoor": 50,
    "outdoor": 30,
    "stadium": 200,
    "female": 120,
    "male": 160,
    "genAlpha": 20,
    "genYZ": 100,
    "genX": 80,
    "boomer": 80,
    "merched": 40,
    "jersey": 15,
    "scarf": 8,
    "flags": 12,
    "baseballCap": 5,
    "other": 3,
    "approvedImages": 45,
    "rejectedImages": 5,
    "eventAttendees": 1000,
    "eventTicketPurchases": 850,
    "eventResultHome": 2,
    "eventResultVisitor": 1,
    "jerseyPrice": 85,
    "scarfPrice": 25,
    "flagsPrice": 15,
    "capPrice": 20,
    "otherPrice": 10,
}

_parser: FormulaParser | None = None


def _get_parser() -> FormulaParser:
    """Lazy load the shared parser."""
    global _parser
    if _parser is None:
        _parser = FormulaParser()
    return _parser


@lru_cache(maxsize=settings.formula_cache_size)
def parse_formula(formula: str) -> FormulaNode:
    """
    Parse a formula, caching the AST per formula string.

    Raises:
        FormulaSyntaxError: If formula syntax is invalid
    """
    return _get_parser().parse(formula)


def evaluate_formula(
    formula: str,
    stats: Mapping[str, Any],
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
) -> EvaluationResult:
    """
    Evaluate a formula against a statistics record.

    Args:
        formula: Formula with [field] references, e.g. "[indoor] + [outdoor]"
        stats: Statistics record; missing fields count as 0
        parameters: Values for [PARAM:key] references
        manual_data: Values for [MANUAL:key] references

    Returns:
        Finite float, or NA if the formula cannot produce a meaningful number
    """
    if not isinstance(formula, str):
        logger.debug("Formula evaluated to NA", extra={"formula": repr(formula)})
        return NA

    try:
        ast = parse_formula(formula)
        return FormulaEvaluator(stats, parameters, manual_data).evaluate(ast)
    except FormulaError as e:
        logger.debug(
            "Formula evaluated to NA",
            extra={"formula": formula, "reason": e.code},
        )
        return NA


def evaluate_formulas_batch(
    formulas: list[str],
    stats: Mapping[str, Any],
) -> list[EvaluationResult]:
    """Evaluate several formulas against the same record."""
    return [evaluate_formula(formula, stats) for formula in formulas]


def evaluate_formula_safe(
    formula: str,
    stats: Mapping[str, Any],
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
) -> EvaluationResult:
    """Evaluate after filling in allImages, remoteFans and totalFans."""
    enriched = ensure_derived_metrics(stats)
    return evaluate_formula(formula, enriched, parameters, manual_data)


def evaluate_formula_batch_safe(
    formulas: list[str],
    stats: Mapping[str, Any],
) -> list[BatchEvaluationItem]:
    """
    Evaluate several formulas against an enriched record.

    The record is enriched once; each item reports whether every stats
    variable its formula references was present.
    """
    enriched = ensure_derived_metrics(stats)
    items = []
    for formula in formulas:
        validation = validate_stats_for_formula(formula, enriched)
        items.append(
            BatchEvaluationItem(
                formula=formula,
                result=evaluate_formula(formula, enriched),
                valid=validation.valid,
            )
        )
    return items


def extract_variables_from_formula(formula: str) -> list[str]:
    """
    List the bracket tokens used in a formula.

    Works on text that does not parse, so editors can show the variables of
    a half-written formula.

    Returns:
        Tokens without brackets, deduplicated, in order of first appearance
    """
    return list(dict.fromkeys(VARIABLE_PATTERN.findall(formula)))


def _check_parentheses(formula: str) -> str | None:
    depth = 0
    for char in formula:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return "Unbalanced parentheses: closing parenthesis without opening"
    if depth > 0:
        return "Unbalanced parentheses: unclosed opening parenthesis"
    return None


def validate_formula(formula: str) -> FormulaValidationResult:
    """
    Validate a formula for syntax and evaluate it against test data.

    Every referenced stats field is set to 1 for the test evaluation, so a
    valid formula can still report NA (e.g. "[a] / ([b] - [c])").
    """
    used_variables = extract_variables_from_formula(formula)

    paren_error = _check_parentheses(formula)
    if paren_error:
        return FormulaValidationResult(
            is_valid=False, error=paren_error, used_variables=used_variables
        )

    try:
        parse_formula(formula)
    except FormulaSyntaxError as e:
        return FormulaValidationResult(
            is_valid=False, error=e.message, used_variables=used_variables
        )

    test_stats: dict[str, float] = {}
    test_parameters: dict[str, float] = {}
    test_manual: dict[str, float] = {}
    for token in used_variables:
        ref = make_field_ref(token)
        if ref.source == "param":
            test_parameters[ref.field_name] = 1
        elif ref.source == "manual":
            test_manual[ref.field_name] = 1
        else:
            test_stats[ref.field_name] = 1

    return FormulaValidationResult(
        is_valid=True,
        used_variables=used_variables,
        evaluated_result=evaluate_formula(formula, test_stats, test_parameters, test_manual),
    )


def validate_stats_for_formula(
    formula: str,
    stats: Mapping[str, Any],
) -> StatsValidationResult:
    """
    Check whether a record has every stats variable a formula references.

    PARAM and MANUAL tokens are resolved elsewhere and are ignored. Built-in
    derived metrics always count as available. The formula can always be
    evaluated, since missing fields default to 0.
    """
    missing: list[str] = []
    available: list[str] = []

    for token in extract_variables_from_formula(formula):
        if token.startswith((PARAM_PREFIX, MANUAL_PREFIX)):
            continue
        field_name = make_field_ref(token).field_name
        if field_name in DERIVED_METRICS or stats.get(field_name) is not None:
            available.append(token)
        else:
            missing.append(field_name)

    return StatsValidationResult(
        valid=not missing,
        missing_variables=missing,
        available_variables=available,
        can_evaluate=True,
    )


def sample_formula(formula: str) -> SampleEvaluation:
    """Evaluate a formula against the built-in sample event record."""
    sample = dict(SAMPLE_STATS)
    return SampleEvaluation(result=evaluate_formula(formula, sample), sample_data=sample)
