"""
Exact Gaussian-rational arithmetic for the evaluation kernel.

Values handled here are sympy expressions of the form ``a + b*I`` where
``a`` and ``b`` are sympy ``Rational`` numbers. Every operation returns a
value in that expanded form, so equal values are also structurally equal
and nothing is ever rounded.
"""

from typing import Optional, Tuple

import sympy

ExactType = sympy.Expr

# Integer exponents must fit a signed 32-bit machine integer
MIN_EXPONENT = -2 ** 31
MAX_EXPONENT = 2 ** 31 - 1


def make(real, imaginary=0) -> ExactType:
    """
    Build an exact complex value from its real and imaginary parts.

    Examples:
        make(1, 2)                   # => 1 + 2*I
        make(sympy.Rational(1, 2))   # => 1/2
    """
    return sympy.Rational(real) + sympy.Rational(imaginary) * sympy.I


def split(value: ExactType) -> Tuple[sympy.Rational, sympy.Rational]:
    """Return the (real, imaginary) parts of an exact value as rationals."""
    return sympy.Rational(sympy.re(value)), sympy.Rational(sympy.im(value))


def is_zero(value: ExactType) -> bool:
    real, imaginary = split(value)
    return real == 0 and imaginary == 0


def negate(value: ExactType) -> ExactType:
    return sympy.expand(-value)


def add(a: ExactType, b: ExactType) -> ExactType:
    return sympy.expand(a + b)


def subtract(a: ExactType, b: ExactType) -> ExactType:
    return sympy.expand(a - b)


def multiply(a: ExactType, b: ExactType) -> ExactType:
    return sympy.expand(a * b)


def divide(a: ExactType, b: ExactType) -> ExactType:
    """
    Exact complex division.

    Multiplies through by the conjugate of the divisor so the denominator
    is the rational |b|^2.

    Raises:
        ZeroDivisionError: If b is zero
    """
    if is_zero(b):
        raise ZeroDivisionError("divide: divisor is zero")
    conjugate = sympy.conjugate(b)
    magnitude = sympy.expand(b * conjugate)
    return sympy.expand(a * conjugate / magnitude)


def truncate(value: sympy.Rational) -> sympy.Integer:
    """Round a rational toward zero."""
    whole = abs(value.p) // value.q
    return sympy.Integer(whole if value.p >= 0 else -whole)


def remainder(a: ExactType, b: ExactType) -> ExactType:
    """
    Truncated remainder: a - trunc(a/b) * b.

    The quotient is truncated toward zero on its real and imaginary parts
    separately, so the result takes the sign of the dividend:

        remainder(5, 2)   # => 1
        remainder(-5, 2)  # => -1
        remainder(-5, -2) # => -1
    """
    real, imaginary = split(divide(a, b))
    whole = make(truncate(real), truncate(imaginary))
    return subtract(a, multiply(b, whole))


def power(base: ExactType, exponent: int) -> ExactType:
    """
    Raise an exact value to an integer power by repeated squaring.

    Negative exponents give the exact reciprocal of the positive power.

    Raises:
        ZeroDivisionError: If base is zero and exponent is negative
    """
    if exponent < 0:
        return divide(sympy.Integer(1), power(base, -exponent))
    result = sympy.Integer(1)
    while exponent:
        if exponent & 1:
            result = multiply(result, base)
        exponent >>= 1
        if exponent:
            base = multiply(base, base)
    return result


def to_machine_int(value: ExactType) -> Optional[int]:
    """
    Convert an exact value to a machine integer if that loses nothing.

    Returns None when the value has an imaginary part, is not integral,
    or falls outside the signed 32-bit range.
    """
    real, imaginary = split(value)
    if imaginary != 0 or real.q != 1:
        return None
    result = int(real.p)
    if result < MIN_EXPONENT or result > MAX_EXPONENT:
        return None
    return result
