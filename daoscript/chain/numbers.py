"""
Exact integer arithmetic for script numbers.

Script numbers are arbitrary-precision integers. Literals may use an
exponent (``121e18``), a decimal mantissa (``1.5e18``) as long as the
result is integral, and a time-unit suffix (``2d``).
"""

from __future__ import annotations

import re
from typing import Any, Union

TIME_UNITS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
    "mo": 2592000,
    "y": 31536000,
}


NUMBER_REGEX = re.compile(
    r"^(?P<sign>-)?(?P<int>\d+)(?:\.(?P<frac>\d+))?(?:e(?P<exp>\d+))?(?P<unit>mo|s|m|h|d|w|y)?$"
)

OPERATORS = ("+", "-", "*", "/", "^")


def is_numeric(value: Any) -> bool:
    """Only real integers count; bools are rejected even though they subclass int."""
    return isinstance(value, int) and not isinstance(value, bool)


def parse_number(value: Union[int, str]) -> int:
    """
    Parse a number literal into an exact integer.

    Raises:
        ValueError: malformed literal or non-integral result
    """
    if is_numeric(value):
        return value
    if not isinstance(value, str):
        raise ValueError(f"invalid number {value!r}")

    match = NUMBER_REGEX.match(value.strip())
    if not match:
        raise ValueError(f"invalid number {value!r}")

    frac = match.group("frac") or ""
    exp = int(match.group("exp") or 0)
    digits = int(match.group("int") + frac)
    scale = len(frac)

    if exp >= scale:
        result = digits * 10 ** (exp - scale)
    else:
        divisor = 10 ** (scale - exp)
        if digits % divisor:
            raise ValueError(f"{value} is not an integer amount")
        result = digits // divisor

    unit = match.group("unit")
    if unit:
        result *= TIME_UNITS[unit]
    return -result if match.group("sign") else result


def truncated_div(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left >= 0) == (right >= 0) else -quotient


def apply_operator(operator: str, left: int, right: int) -> int:
    if operator == "+":
        return left + right
    if operator == "-":
        return left - right
    if operator == "*":
        return left * right
    if operator == "/":
        if right == 0:
            raise ZeroDivisionError("division by zero")
        return truncated_div(left, right)
    if operator == "^":
        if right < 0:
            raise ValueError("negative exponent")
        return left ** right
    raise ValueError(f"unknown operator {operator}")
