"""
Mathematical Expression Solver

Evaluates mathematical expressions using SymPy's parser. Input is checked
against a small token grammar before parsing, and powers and factorials
are size-checked before anything is computed exactly.
Supports scientific calculator syntax including:
- Factorial notation: 5!
- Caret exponentiation: 2^16
- Degree notation: sin(30 degrees)
"""

import logging
import math
import re

from sympy import N, Pow, factorial, factorial2
from sympy.core.parameters import evaluate
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor,
    factorial_notation,
)

logger = logging.getLogger(__name__)

# Transformations for scientific calculator syntax
TRANSFORMATIONS = (
    standard_transformations
    + (implicit_multiplication_application,)
    + (convert_xor,)  # 2^16 -> 2**16
    + (factorial_notation,)  # 5! -> factorial(5)
)

# Names an expression may use; everything else is rejected before parsing
ALLOWED_NAMES = frozenset(
    {
        "sin", "cos", "tan", "asin", "acos", "atan", "atan2",
        "sinh", "cosh", "tanh",
        "sqrt", "cbrt", "root", "log", "ln", "exp",
        "Abs", "abs", "factorial", "ceiling", "floor",
        "pi", "E",
    }
)

MAX_EXPRESSION_LENGTH = 500
MAX_EXPONENT = 10_000
MAX_RESULT_DIGITS = 10_000
MAX_FACTORIAL = 1_000

_TOKEN = re.compile(
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z][A-Za-z0-9]*)"
    r"|(?P<op>\*\*|[+\-*/^(),!])"
    r"|(?P<space>\s+)"
)


def preprocess_expression(expression: str) -> str:
    """
    Preprocess expression for SymPy compatibility.

    Handles:
        - Degree notation: sin(30 degrees) -> sin(30 * pi / 180)
        - ceil function: ceil(x) -> ceiling(x) (SymPy naming)
    """
    degree_pattern = r"(\d+(?:\.\d+)?)\s*(?:degrees?|deg)\b"
    expression = re.sub(degree_pattern, r"(\1 * pi / 180)", expression, flags=re.IGNORECASE)

    expression = re.sub(r"\bceil\b", "ceiling", expression)

    return expression.strip()


def format_number(value: complex) -> str:
    """Render a numeric result: whole numbers without a decimal point."""
    if value.imag != 0:
        return str(value)
    real = value.real
    if real.is_integer():
        return str(int(real))
    return str(real)


def check_expression(expression: str) -> None:
    """
    Reject anything that is not plain calculator input.

    Only numbers, arithmetic operators, parentheses, commas and the names
    in ALLOWED_NAMES are accepted. There is no way to spell attribute
    access, subscripts, strings or dunder names.

    Raises:
        ValueError: If the expression contains anything else
    """
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ValueError(f"Expression longer than {MAX_EXPRESSION_LENGTH} characters")

    pos = 0
    while pos < len(expression):
        match = _TOKEN.match(expression, pos)
        if match is None:
            raise ValueError(f"Unsupported character {expression[pos]!r} at position {pos}")
        name = match.group("name")
        if name is not None and name not in ALLOWED_NAMES:
            raise ValueError(f"Unknown name: {name}")
        pos = match.end()


def _numeric_value(expr) -> float:
    return abs(complex(N(expr)))


def check_magnitude(expr) -> None:
    """
    Walk an unevaluated expression tree bottom-up and reject powers and
    factorials whose exact value would be too large to compute.

    Raises:
        ValueError: If a power or factorial exceeds the limits
    """
    for arg in expr.args:
        check_magnitude(arg)

    if isinstance(expr, Pow):
        exponent = _numeric_value(expr.exp)
        if exponent > MAX_EXPONENT:
            raise ValueError(f"Exponent too large (limit {MAX_EXPONENT})")
        base = _numeric_value(expr.base)
        if base > 1 and exponent * math.log10(base) > MAX_RESULT_DIGITS:
            raise ValueError(f"Result too large (limit {MAX_RESULT_DIGITS} digits)")
    elif isinstance(expr, (factorial, factorial2)):
        if _numeric_value(expr.args[0]) > MAX_FACTORIAL:
            raise ValueError(f"Factorial argument too large (limit {MAX_FACTORIAL})")


def calculate(expression: str) -> dict:
    """
    Evaluate a mathematical expression.

    Supports scientific calculator syntax:
    - Basic arithmetic: 2 + 2, 10 * 5
    - Exponentiation: 2^10 or 2**10
    - Factorial: 5! or factorial(5)
    - Trig functions: sin(30 degrees), cos(pi/4)
    - Math functions: sqrt(16), log(100), exp(2)
    - Constants: pi, E (Euler's number)

    Args:
        expression: Mathematical expression as a string

    Returns:
        ``{"result": "<number>"}`` or ``{"error": ..., "detail": ...}``
    """
    if not expression or not expression.strip():
        return {
            "error": "Expression is empty",
            "detail": 'Provide a math expression such as "2*(3+4)".',
        }

    try:
        prepared = preprocess_expression(expression)
        check_expression(prepared)
        # Build the tree without computing anything exact
        with evaluate(False):
            expr = parse_expr(prepared, transformations=TRANSFORMATIONS, evaluate=False)
        check_magnitude(expr)
        result = complex(N(expr.doit()))
    except SyntaxError as e:
        logger.debug("Syntax error parsing expression '%s': %s", expression, e)
        return {"error": "Calculation failed", "detail": f"Syntax error: {e}"}
    except ValueError as e:
        logger.warning("Rejected expression '%s': %s", expression, e)
        return {"error": "Calculation failed", "detail": str(e)}
    except Exception as e:
        logger.debug("Calculation error for '%s': %s", expression, e)
        return {"error": "Calculation failed", "detail": str(e)}

    return {"result": format_number(result)}


# Register tool with the registry
def _register():
    from .registry import ToolRegistry

    ToolRegistry.register(
        name="calculate",
        description="Evaluate a mathematical expression",
        input_hint='math expression, e.g. "2*(3+4)"',
        handler=calculate,
    )


_register()
