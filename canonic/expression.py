"""
Expression tree for the canonic evaluation kernel.

Expressions are immutable value objects. Two expressions are equal when
they have the same node class, the same payload and the same
representation hint; rewriting always builds new nodes rather than
changing existing ones.

Leaves:
    Variable, Function, Integer, Rational, Complex, Vector, Matrix, Boolean

Operators:
    Negation, Not                                      (unary)
    Sum, Difference, Product, Quotient, Remainder,     (binary)
    Power, Equal, NotEqual, LessThan, LessThanOrEqual,
    GreaterThan, GreaterThanOrEqual, And, Or
"""

import enum
from fractions import Fraction
from typing import Callable, Dict, Iterable, Tuple

import sympy


class Representation(enum.Enum):
    """How a number should be rendered. Never affects its value."""

    FRACTION = "fraction"
    DECIMAL = "decimal"

    def merge(self, other: "Representation") -> "Representation":
        """Combine the hints of two operands: any mismatch yields DECIMAL."""
        if self is other:
            return self
        return Representation.DECIMAL


def _rational(value) -> sympy.Rational:
    if isinstance(value, bool):
        raise TypeError("expected a rational number, got bool")
    if isinstance(value, Fraction):
        return sympy.Rational(value.numerator, value.denominator)
    return sympy.Rational(value)


def _integer(value) -> sympy.Integer:
    if isinstance(value, bool) or not isinstance(value, (int, sympy.Integer)):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return sympy.Integer(value)


def _expect_expression(value, role: str) -> "Expression":
    if not isinstance(value, Expression):
        raise TypeError(f"{role} must be an Expression, got {type(value).__name__}")
    return value


class Expression:
    """Base class for every node of an expression tree."""

    __slots__ = ()

    # True for node kinds whose value is a boolean once evaluated
    produces_boolean = False

    def _key(self) -> tuple:
        raise NotImplementedError

    def _set(self, **fields):
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self._key() == other._key()

    def __ne__(self, other) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))


# ============================================================
# Leaves
# ============================================================

class Variable(Expression):
    """Reference to an identifier, resolved through the evaluation context."""

    __slots__ = ('identifier',)

    def __init__(self, identifier: str):
        if not isinstance(identifier, str) or not identifier:
            raise ValueError("Variable identifier must be a non-empty string")
        self._set(identifier=identifier)

    def _key(self) -> tuple:
        return (self.identifier,)

    def __repr__(self) -> str:
        return f"Variable({self.identifier!r})"


class Function(Expression):
    """Call of a named function. Left unevaluated unless a handler is registered."""

    __slots__ = ('name', 'arguments')

    def __init__(self, name: str, arguments: Iterable[Expression] = ()):
        if not isinstance(name, str) or not name:
            raise ValueError("Function name must be a non-empty string")
        arguments = tuple(_expect_expression(a, "Function argument") for a in arguments)
        self._set(name=name, arguments=arguments)

    def _key(self) -> tuple:
        return (self.name, self.arguments)

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.arguments)
        return f"Function({self.name!r}, [{args}])"


class Integer(Expression):
    __slots__ = ('value',)

    def __init__(self, value):
        self._set(value=_integer(value))

    def _key(self) -> tuple:
        return (self.value,)

    def __repr__(self) -> str:
        return f"Integer({self.value})"


class Rational(Expression):
    """Exact rational number with a representation hint."""

    __slots__ = ('value', 'representation')

    def __init__(self, value, representation: Representation = Representation.FRACTION):
        self._set(value=_rational(value), representation=Representation(representation))

    def _key(self) -> tuple:
        return (self.value, self.representation)

    def __repr__(self) -> str:
        return f"Rational({self.value}, {self.representation.name})"


class Complex(Expression):
    """Exact complex number: a pair of rationals with a representation hint."""

    __slots__ = ('real', 'imaginary', 'representation')

    def __init__(self, real, imaginary=0,
                 representation: Representation = Representation.FRACTION):
        self._set(
            real=_rational(real),
            imaginary=_rational(imaginary),
            representation=Representation(representation),
        )

    def _key(self) -> tuple:
        return (self.real, self.imaginary, self.representation)

    def __repr__(self) -> str:
        return f"Complex({self.real}, {self.imaginary}, {self.representation.name})"


class Vector(Expression):
    __slots__ = ('elements',)

    def __init__(self, elements: Iterable[Expression]):
        elements = tuple(_expect_expression(e, "Vector element") for e in elements)
        self._set(elements=elements)

    def _key(self) -> tuple:
        return self.elements

    def __len__(self) -> int:
        return len(self.elements)

    def __repr__(self) -> str:
        return f"Vector([{', '.join(repr(e) for e in self.elements)}])"


class Matrix(Expression):
    """
    Rectangular matrix of expressions.

    Raises:
        ValueError: If there are no rows, or the rows differ in length
    """

    __slots__ = ('rows',)

    def __init__(self, rows: Iterable[Iterable[Expression]]):
        rows = tuple(
            tuple(_expect_expression(e, "Matrix element") for e in row)
            for row in rows
        )
        if not rows or not rows[0]:
            raise ValueError("Matrix must have at least one row and one column")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("Matrix rows must all have the same length")
        self._set(rows=rows)

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.rows), len(self.rows[0])

    def map(self, function: Callable[[Expression], Expression]) -> "Matrix":
        """Return a new matrix with function applied to every element."""
        return Matrix([[function(e) for e in row] for row in self.rows])

    def _key(self) -> tuple:
        return self.rows

    def __repr__(self) -> str:
        rows = ", ".join("[" + ", ".join(repr(e) for e in row) + "]" for row in self.rows)
        return f"Matrix([{rows}])"


class Boolean(Expression):
    __slots__ = ('value',)

    produces_boolean = True

    def __init__(self, value):
        self._set(value=bool(value))

    def _key(self) -> tuple:
        return (self.value,)

    def __repr__(self) -> str:
        return f"Boolean({self.value})"


# ============================================================
# Operators
# ============================================================

class UnaryOperation(Expression):
    """Operator applied to a single operand."""

    __slots__ = ('operand',)

    symbol = "?"

    def __init__(self, operand: Expression):
        self._set(operand=_expect_expression(operand, f"{type(self).__name__} operand"))

    def _key(self) -> tuple:
        return (self.operand,)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.operand!r})"


class BinaryOperation(Expression):
    """Operator applied to a left and a right operand."""

    __slots__ = ('left', 'right')

    symbol = "?"

    def __init__(self, left: Expression, right: Expression):
        name = type(self).__name__
        self._set(
            left=_expect_expression(left, f"{name} left operand"),
            right=_expect_expression(right, f"{name} right operand"),
        )

    def _key(self) -> tuple:
        return (self.left, self.right)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.left!r}, {self.right!r})"


class Negation(UnaryOperation):
    __slots__ = ()
    symbol = "-"


class Not(UnaryOperation):
    __slots__ = ()
    symbol = "!"
    produces_boolean = True


class Sum(BinaryOperation):
    __slots__ = ()
    symbol = "+"


class Difference(BinaryOperation):
    __slots__ = ()
    symbol = "-"


class Product(BinaryOperation):
    __slots__ = ()
    symbol = "*"


class Quotient(BinaryOperation):
    __slots__ = ()
    symbol = "/"


class Remainder(BinaryOperation):
    __slots__ = ()
    symbol = "%"


class Power(BinaryOperation):
    __slots__ = ()
    symbol = "^"


class Equal(BinaryOperation):
    __slots__ = ()
    symbol = "=="
    produces_boolean = True


class NotEqual(BinaryOperation):
    __slots__ = ()
    symbol = "!="
    produces_boolean = True


class LessThan(BinaryOperation):
    __slots__ = ()
    symbol = "<"
    produces_boolean = True


class LessThanOrEqual(BinaryOperation):
    __slots__ = ()
    symbol = "<="
    produces_boolean = True


class GreaterThan(BinaryOperation):
    __slots__ = ()
    symbol = ">"
    produces_boolean = True


class GreaterThanOrEqual(BinaryOperation):
    __slots__ = ()
    symbol = ">="
    produces_boolean = True


class And(BinaryOperation):
    __slots__ = ()
    symbol = "&&"
    produces_boolean = True


class Or(BinaryOperation):
    __slots__ = ()
    symbol = "||"
    produces_boolean = True


# Binary operator symbol -> node class
BINARY_OPERATORS: Dict[str, type] = {
    cls.symbol: cls
    for cls in (
        Sum, Difference, Product, Quotient, Remainder, Power,
        Equal, NotEqual, LessThan, LessThanOrEqual, GreaterThan, GreaterThanOrEqual,
        And, Or,
    )
}
