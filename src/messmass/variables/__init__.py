"""Variable catalogue and registry for MessMass."""

from messmass.variables.definitions import (
    BASE_STATS_VARIABLES,
    DERIVED_VARIABLES,
    TEXT_VARIABLES_STATIC,
    build_category_text_variables,
    build_dependency_graph,
    compute_derived_variables,
    get_affected_derived_variables,
    get_all_variable_definitions,
)
from messmass.variables.registry import VariablesRegistry

__all__ = [
    "BASE_STATS_VARIABLES",
    "DERIVED_VARIABLES",
    "TEXT_VARIABLES_STATIC",
    "VariablesRegistry",
    "build_category_text_variables",
    "build_dependency_graph",
    "compute_derived_variables",
    "get_affected_derived_variables",
    "get_all_variable_definitions",
]
