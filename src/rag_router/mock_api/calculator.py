"""Safe arithmetic evaluation and unit conversion for the mock backend."""

from __future__ import annotations

import ast
import math
import operator
from collections.abc import Callable
from typing import Any

ALLOWED_OPS: dict[type, Callable[..., Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

ALLOWED_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "abs": abs,
    "sqrt": math.sqrt,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
    "log10": math.log10,
    "exp": math.exp,
    "ceil": math.ceil,
    "floor": math.floor,
    "round": round,
    "max": max,
    "min": min,
    "pow": math.pow,
}

CONSTANTS = {"pi": math.pi, "e": math.e, "PI": math.pi, "E": math.e}

MAX_EXPONENT = 1000
# Integer results stay well below the digit limit of int-to-str conversion.
MAX_RESULT_BITS = 3322


class CalculationError(ValueError):
    """Expression is malformed or uses something other than arithmetic."""


def evaluate_expression(expression: str) -> int | float:
    """Evaluate an arithmetic expression without `eval`.

    `Math.` prefixes (as in `Math.sqrt(16)`) are accepted and `^` is read as
    exponentiation.
    """

    source = expression.replace("Math.", "").replace("^", "**").strip()
    if not source:
        raise CalculationError("empty expression")
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        raise CalculationError(f"invalid expression syntax: {expression}") from exc

    try:
        return _eval_node(tree.body)
    except (ArithmeticError, TypeError) as exc:
        raise CalculationError(str(exc)) from exc


def _eval_node(node: ast.AST) -> int | float:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise CalculationError(f"unsupported literal: {node.value!r}")
        return node.value
    if isinstance(node, ast.BinOp):
        op = ALLOWED_OPS.get(type(node.op))
        if op is None:
            raise CalculationError(f"operation {type(node.op).__name__} not allowed")
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        return _check_magnitude(op(left, right))
    if isinstance(node, ast.UnaryOp):
        op = ALLOWED_OPS.get(type(node.op))
        if op is None:
            raise CalculationError(f"unary operation {type(node.op).__name__} not allowed")
        return _check_magnitude(op(_eval_node(node.operand)))
    if isinstance(node, ast.Name):
        if node.id in CONSTANTS:
            return CONSTANTS[node.id]
        raise CalculationError(f"unknown name: {node.id}")
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in ALLOWED_FUNCTIONS:
            raise CalculationError("only basic math functions are allowed")
        if node.keywords:
            raise CalculationError("keyword arguments are not allowed")
        args = [_eval_node(arg) for arg in node.args]
        return _check_magnitude(ALLOWED_FUNCTIONS[node.func.id](*args))
    raise CalculationError(f"expression element {type(node).__name__} not allowed")


def _check_power(base: int | float, exponent: int | float) -> None:
    if abs(exponent) > MAX_EXPONENT:
        raise CalculationError("exponent too large")
    if isinstance(base, int) and isinstance(exponent, int) and exponent > 0:
        # |base| >= 2**(bits - 1), so the result has at least this many bits.
        if (abs(base).bit_length() - 1) * exponent > MAX_RESULT_BITS:
            raise CalculationError("result too large")


def _check_magnitude(value: int | float) -> int | float:
    if isinstance(value, int) and value.bit_length() > MAX_RESULT_BITS:
        raise CalculationError("result too large")
    if isinstance(value, float) and not math.isfinite(value):
        raise CalculationError("result is not a finite number")
    return value


CONVERSIONS: dict[str, dict[str, Callable[[float], float]]] = {
    "temperature": {
        "celsius_to_fahrenheit": lambda c: c * 9 / 5 + 32,
        "fahrenheit_to_celsius": lambda f: (f - 32) * 5 / 9,
    },
    "length": {
        "meters_to_feet": lambda m: m * 3.28084,
        "feet_to_meters": lambda ft: ft / 3.28084,
        "kilometers_to_miles": lambda km: km * 0.621371,
        "miles_to_kilometers": lambda mi: mi / 0.621371,
    },
    "currency": {
        "usd_to_cny": lambda usd: usd * 7.2,
        "cny_to_usd": lambda cny: cny / 7.2,
    },
}


def convert_units(value: float, from_unit: str, to_unit: str) -> tuple[float, str] | None:
    """Return `(result, category)` or None when the pair is unsupported."""

    key = f"{from_unit}_to_{to_unit}".lower()
    for category, functions in CONVERSIONS.items():
        if key in functions:
            return functions[key](value), category
    return None


def supported_conversions() -> list[dict[str, Any]]:
    return [
        {"category": category, "conversions": list(functions)}
        for category, functions in CONVERSIONS.items()
    ]
