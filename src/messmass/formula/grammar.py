"""Lark grammar definition for MessMass formulas.

This grammar supports the KPI formula syntax:
- Arithmetic: +, -, *, / with standard precedence
- Unary minus and plus
- Parentheses
- Field references: [fieldName], [stats.fieldName], [PARAM:key], [MANUAL:key]
- Function calls: MAX(a, b), MIN(a, b), ROUND(x), ABS(x)
- Numeric literals
"""

# Lark grammar for formula parsing
FORMULA_GRAMMAR = r"""
    ?start: expression

    ?expression: additive

    ?additive: multiplicative
        | additive "+" multiplicative -> add
        | additive "-" multiplicative -> sub

    ?multiplicative: unary
        | multiplicative "*" unary -> mul
        | multiplicative "/" unary -> div

    ?unary: atom
        | "-" unary -> neg
        | "+" unary -> pos

    ?atom: NUMBER -> number
        | FIELD_REF -> field_ref
        | function_call
        | "(" expression ")"

    function_call: FUNCTION_NAME "(" [arguments] ")"

    arguments: expression ("," expression)*

    // Field reference: [female], [stats.female], [PARAM:price], [MANUAL:total]
    FIELD_REF: "[" /[A-Za-z0-9_:.]+/ "]"

    FUNCTION_NAME: /[A-Za-z_][A-Za-z0-9_]*/

    // Number literals (integer or decimal, with optional scientific notation)
    // Note: negative sign is handled by unary operator, not here
    NUMBER: /(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?/

    %import common.WS
    %ignore WS
"""
