"""Tests for evaluation errors."""

import pytest

from canonic import (
    DivisionByZero, E, EvaluationError, IncompatibleOperands, Integer,
    InvalidOperand, Variable, ZeroToThePowerOfZero, evaluate,
)


def matrix():
    return E.matrix([[1, 2], [3, 4]])


class TestInvalidOperand:
    """Operators applied to types they are not defined for."""

    def test_boolean_in_arithmetic(self):
        """true + 1 names the boolean operand."""
        expr = E.op("+", True, 1)
        with pytest.raises(InvalidOperand) as info:
            evaluate(expr)
        assert info.value.expression == expr
        assert info.value.operand == E.boolean(True)

    def test_boolean_on_the_right(self):
        expr = E.op("*", 1, False)
        with pytest.raises(InvalidOperand) as info:
            evaluate(expr)
        assert info.value.operand == E.boolean(False)

    @pytest.mark.parametrize("symbol", ["+", "-", "*", "/", "%", "^"])
    def test_every_arithmetic_operator(self, symbol):
        with pytest.raises(InvalidOperand):
            evaluate(E.op(symbol, 2, True))

    def test_unresolved_comparison_in_arithmetic(self):
        """A still-symbolic comparison is boolean-typed."""
        comparison = E.op("==", "x", 1)
        with pytest.raises(InvalidOperand) as info:
            evaluate(E.op("+", comparison, 1))
        assert info.value.operand == comparison

    def test_left_operand_named_first(self):
        """When both operands are invalid, the left one is reported."""
        with pytest.raises(InvalidOperand) as info:
            evaluate(E.op("+", True, False))
        assert info.value.operand == E.boolean(True)

    def test_ordering_on_matrix(self):
        with pytest.raises(InvalidOperand) as info:
            evaluate(E.op("<", matrix(), 1))
        assert info.value.operand == matrix()

    def test_ordering_on_boolean(self):
        with pytest.raises(InvalidOperand) as info:
            evaluate(E.op(">=", 1, True))
        assert info.value.operand == E.boolean(True)

    @pytest.mark.parametrize("operand", [1, "x", E.vector([1])])
    def test_logic_on_non_boolean(self, operand):
        with pytest.raises(InvalidOperand) as info:
            evaluate(E.op("&&", True, operand))
        assert info.value.operand == E.coerce(operand)

    def test_logic_on_matrix(self):
        with pytest.raises(InvalidOperand):
            evaluate(E.op("||", matrix(), False))

    def test_negation_of_boolean(self):
        expr = E.neg(True)
        with pytest.raises(InvalidOperand) as info:
            evaluate(expr)
        assert info.value.expression == expr
        assert info.value.operand == E.boolean(True)

    @pytest.mark.parametrize("operand", [1, "x", E.matrix([[1]])])
    def test_not_of_non_boolean(self, operand):
        with pytest.raises(InvalidOperand):
            evaluate(E.not_(operand))

    def test_names_original_operand(self):
        """The error cites the operand as written, not its stepped value."""
        operand = E.op("==", 1, 1)
        with pytest.raises(InvalidOperand) as info:
            evaluate(E.op("-", 3, operand))
        assert info.value.operand == operand


class TestOrderingOnComplex:
    """Complex numbers have no order."""

    def test_left_imaginary(self):
        expr = E.op("<", "i", 1)
        with pytest.raises(InvalidOperand) as info:
            evaluate(expr)
        assert info.value.operand == Variable("i")

    def test_right_imaginary(self):
        expr = E.op(">", 1, E.complex(2, 3))
        with pytest.raises(InvalidOperand) as info:
            evaluate(expr)
        assert info.value.operand == E.complex(2, 3)


class TestIncompatibleOperands:
    """Operand types that cannot be combined."""

    @pytest.mark.parametrize("symbol", ["+", "-", "==", "!="])
    def test_number_and_matrix(self, symbol):
        expr = E.op(symbol, 1, matrix())
        with pytest.raises(IncompatibleOperands) as info:
            evaluate(expr)
        assert info.value.operand_1 == E.integer(1)
        assert info.value.operand_2 == matrix()

    def test_matrix_and_number(self):
        with pytest.raises(IncompatibleOperands):
            evaluate(E.op("+", matrix(), 1))

    def test_matrix_equals_boolean(self):
        with pytest.raises(IncompatibleOperands):
            evaluate(E.op("==", matrix(), True))

    def test_boolean_equals_number(self):
        with pytest.raises(IncompatibleOperands):
            evaluate(E.op("!=", True, 1))

    def test_product_of_number_and_matrix_is_deferred(self):
        """Scaling a matrix is not an error; it is left for later."""
        expr = E.op("*", 2, matrix())
        assert evaluate(expr) == expr


class TestDivisionByZero:
    """Exact zero divisors."""

    def test_quotient(self):
        expr = E.op("/", 1, 0)
        with pytest.raises(DivisionByZero) as info:
            evaluate(expr)
        assert info.value.expression == expr
        assert info.value.dividend == E.integer(1)
        assert info.value.divisor == E.integer(0)

    def test_remainder(self):
        with pytest.raises(DivisionByZero):
            evaluate(E.op("%", 5, E.decimal("0.0")))

    def test_names_original_operands(self):
        """x / (1 - 1) names x and 1 - 1, not their values."""
        divisor = E.op("-", 1, 1)
        expr = E.op("/", "x", divisor)
        with pytest.raises(DivisionByZero) as info:
            evaluate(expr, {"x": E.integer(5)})
        assert info.value.dividend == Variable("x")
        assert info.value.divisor == divisor

    def test_zero_to_negative_power(self):
        expr = E.op("^", 0, E.neg(1))
        with pytest.raises(DivisionByZero) as info:
            evaluate(expr)
        assert info.value.dividend == Integer(1)
        assert info.value.divisor == E.integer(0)

    def test_nested_error_aborts(self):
        """An error deep in the tree aborts the whole evaluation."""
        with pytest.raises(DivisionByZero):
            evaluate(E.op("+", "y", E.op("*", 2, E.op("/", 1, 0))))


class TestZeroToThePowerOfZero:
    def test_zero_power_zero(self):
        expr = E.op("^", 0, 0)
        with pytest.raises(ZeroToThePowerOfZero) as info:
            evaluate(expr)
        assert info.value.base == E.integer(0)
        assert info.value.exponent == E.integer(0)

    def test_computed_zeros(self):
        with pytest.raises(ZeroToThePowerOfZero):
            evaluate(E.op("^", E.op("-", 2, 2), E.decimal("0.0")))

    def test_zero_power_positive(self):
        assert evaluate(E.op("^", 0, 3)) == E.integer(0)

    def test_nonzero_power_zero(self):
        assert evaluate(E.op("^", E.complex(1, 1), 0)) == E.integer(1)


class TestErrorObjects:
    """Errors carry structured data."""

    def test_base_class(self):
        with pytest.raises(EvaluationError):
            evaluate(E.op("/", 1, 0))

    def test_to_dict(self):
        expr = E.op("^", 0, 0)
        error = ZeroToThePowerOfZero(expr, E.integer(0), E.integer(0))
        assert error.to_dict() == {
            "kind": "ZeroToThePowerOfZero",
            "expression": expr,
            "base": E.integer(0),
            "exponent": E.integer(0),
        }

    def test_equality(self):
        expr = E.op("+", True, 1)
        assert InvalidOperand(expr, E.boolean(True)) == InvalidOperand(expr, E.boolean(True))
        assert InvalidOperand(expr, E.boolean(True)) != InvalidOperand(expr, E.integer(1))

    def test_message(self):
        error = DivisionByZero(E.op("/", 1, 0), E.integer(1), E.integer(0))
        assert "Integer(0)" in str(error)
