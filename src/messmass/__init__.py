"""
MessMass - event statistics KPI engine.

Evaluates bracket-notation formulas against an event's statistics record
and turns chart configurations into calculated report results.
"""

__version__ = "0.1.0"
__author__ = "MessMass Team"
__license__ = "MIT"

from messmass.formula import NA, evaluate_formula

__all__ = ["NA", "evaluate_formula", "__version__"]
