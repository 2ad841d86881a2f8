"""Test arithmetic evaluation and number literals."""
import pytest

from daoscript.chain.numbers import (
    apply_operator,
    is_numeric,
    parse_number,
    truncated_div,
)
from daoscript.errors import ExpressionError

from builders import binop, boolean, num, string


class TestParseNumber:
    """Tests for number literal parsing."""

    def test_plain_integer(self):
        """Test a plain integer literal."""
        assert parse_number("120") == 120

    def test_exponent(self):
        """Test exponent notation stays exact."""
        assert parse_number("121e18") == 121 * 10 ** 18

    def test_decimal_mantissa(self):
        """Test a decimal mantissa with a large enough exponent."""
        assert parse_number("1.5e18") == 15 * 10 ** 17

    def test_non_integral_rejected(self):
        """Test a literal that doesn't denote an integer."""
        with pytest.raises(ValueError):
            parse_number("1.5")

    def test_time_units(self):
        """Test time-unit suffixes."""
        assert parse_number("2d") == 2 * 86400
        assert parse_number("1mo") == 2592000
        assert parse_number("3m") == 180
        assert parse_number("1y") == 31536000

    def test_negative(self):
        """Test a negative literal."""
        assert parse_number("-5") == -5

    def test_garbage(self):
        """Test malformed literals."""
        with pytest.raises(ValueError):
            parse_number("12abc")


class TestOperators:
    """Tests for integer operators."""

    def test_truncated_division(self):
        """Test division rounds toward zero."""
        assert truncated_div(7, 2) == 3
        assert truncated_div(-7, 2) == -3
        assert truncated_div(7, -2) == -3

    def test_power(self):
        """Test exponentiation."""
        assert apply_operator("^", 10, 18) == 10 ** 18

    def test_negative_exponent(self):
        """Test negative exponents are rejected."""
        with pytest.raises(ValueError):
            apply_operator("^", 10, -1)

    def test_bools_are_not_numeric(self):
        """Test bools don't count as numbers."""
        assert is_numeric(1)
        assert not is_numeric(True)
        assert not is_numeric("1")


class TestArithmeticExpressions:
    """Tests for BinaryExpression evaluation through the interpreter."""

    def test_precedence(self, interpreter):
        """Test (120 - 5 * 4 + 500) evaluates to 600."""
        expr = binop("+", binop("-", num(120), binop("*", num(5), num(4))), num(500))
        assert interpreter.interpret_node(expr) == 600

    def test_parenthesized(self, interpreter):
        """Test ((121e18 / 4) * (50 - 2) - 55e18) evaluates to 1397e18."""
        expr = binop(
            "-",
            binop("*", binop("/", num("121e18"), num(4)), binop("-", num(50), num(2))),
            num("55e18"),
        )
        assert interpreter.interpret_node(expr) == 1397 * 10 ** 18

    def test_exact_big_numbers(self, interpreter):
        """Test no precision is lost on large values."""
        expr = binop("+", num("1e30"), num(1))
        assert interpreter.interpret_node(expr) == 10 ** 30 + 1

    def test_invalid_left_operand(self, interpreter):
        """Test a non-numeric left operand is reported with its value."""
        with pytest.raises(ExpressionError) as exc_info:
            interpreter.interpret_node(binop("+", string("a"), num(1)))
        assert exc_info.value.name == "ArithmeticExpressionError"
        assert 'invalid left operand. Expected a number but got "a"' in str(exc_info.value)

    def test_invalid_right_operand(self, interpreter):
        """Test a non-numeric right operand is reported with its value."""
        with pytest.raises(ExpressionError) as exc_info:
            interpreter.interpret_node(binop("*", num(2), boolean(False)))
        assert 'invalid right operand. Expected a number but got "False"' in str(exc_info.value)

    def test_division_by_zero(self, interpreter):
        """Test division by zero fails with its own error."""
        with pytest.raises(ExpressionError) as exc_info:
            interpreter.interpret_node(binop("/", num(10), num(0)))
        assert "invalid operation. Can't divide by zero" in str(exc_info.value)

    def test_division_by_zero_checked_first(self, interpreter):
        """Test division by zero is reported even when the numerator is invalid."""
        with pytest.raises(ExpressionError) as exc_info:
            interpreter.interpret_node(binop("/", string("a"), binop("-", num(1), num(1))))
        assert "Can't divide by zero" in str(exc_info.value)

    def test_non_integral_literal(self, interpreter):
        """Test a fractional literal fails as an expression error."""
        with pytest.raises(ExpressionError):
            interpreter.interpret_node(num("0.5"))
