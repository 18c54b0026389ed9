"""
Core evaluation module for exact expression normalization.

This module classifies operands, applies one rewrite step to a tree, and
drives repeated steps to a fixed point:

    classify(expr)                  - coarse type tag used for dispatch
    evaluate_step(expr, context)    - one bottom-up rewrite of the whole tree
    evaluate(expr, bindings)        - rewrite until nothing changes

Operators that cannot be applied yet (unbound variables, function calls,
non-integer exponents) are rebuilt over their stepped operands instead of
failing, so rewriting makes partial progress and still terminates.
"""

import operator
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

from . import exact
from .errors import (
    DivisionByZero,
    IncompatibleOperands,
    InvalidOperand,
    ZeroToThePowerOfZero,
)
from .expression import (
    And, BinaryOperation, Boolean, Complex, Difference, Equal, Expression,
    Function, GreaterThan, GreaterThanOrEqual, Integer, LessThan,
    LessThanOrEqual, Matrix, Negation, Not, NotEqual, Or, Power, Product,
    Quotient, Rational, Remainder, Representation, Sum, UnaryOperation,
    Variable,
)

# Type aliases
ContextType = Dict[str, Expression]
BindingsType = Mapping[str, Expression]

# Function handler: receives the call's arguments, returns a replacement or
# None to leave the call as it is
FunctionHandler = Callable[[Tuple[Expression, ...]], Optional[Expression]]
FunctionsType = Mapping[str, FunctionHandler]


# ============================================================
# Type Tags
# ============================================================

class NumberTag:
    """Operand that is an exact number."""

    __slots__ = ('value', 'representation')

    def __init__(self, value: exact.ExactType, representation: Representation):
        self.value = value
        self.representation = representation

    def __eq__(self, other):
        return (isinstance(other, NumberTag)
                and exact.split(self.value) == exact.split(other.value)
                and self.representation is other.representation)

    def __repr__(self) -> str:
        return f"Number({self.value}, {self.representation.name})"


class BooleanTag:
    """
    Operand of boolean type.

    value is True or False for literals and None for boolean-valued nodes
    that have not been reduced to a literal yet.
    """

    __slots__ = ('value',)

    def __init__(self, value: Optional[bool]):
        self.value = value

    @property
    def concrete(self) -> bool:
        return self.value is not None

    def __eq__(self, other):
        return isinstance(other, BooleanTag) and self.value == other.value

    def __repr__(self) -> str:
        return f"Boolean({self.value})"


class MatrixTag:
    """Operand that is a matrix."""

    __slots__ = ('matrix',)

    def __init__(self, matrix: Matrix):
        self.matrix = matrix

    def __eq__(self, other):
        return isinstance(other, MatrixTag) and self.matrix == other.matrix

    def __repr__(self) -> str:
        return f"Matrix({self.matrix!r})"


class _Arithmetic:
    """
    Singleton tag for operands that are none of the above.

    Variables, function calls, vectors and unreduced arithmetic all land
    here.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Arithmetic"


ARITHMETIC = _Arithmetic()

TagType = Union[NumberTag, BooleanTag, MatrixTag, _Arithmetic]


def classify(expression: Expression) -> TagType:
    """
    Return the type tag of an expression.

    Examples:
        classify(Integer(2))                  # => Number(2, FRACTION)
        classify(Boolean(True))               # => Boolean(True)
        classify(Equal(Variable("x"), ...))   # => Boolean(None)
        classify(Variable("x"))               # => Arithmetic
    """
    if isinstance(expression, Boolean):
        return BooleanTag(expression.value)
    if isinstance(expression, Integer):
        return NumberTag(exact.make(expression.value), Representation.FRACTION)
    if isinstance(expression, Rational):
        return NumberTag(exact.make(expression.value), expression.representation)
    if isinstance(expression, Complex):
        return NumberTag(
            exact.make(expression.real, expression.imaginary),
            expression.representation,
        )
    if isinstance(expression, Matrix):
        return MatrixTag(expression)
    if expression.produces_boolean:
        return BooleanTag(None)
    return ARITHMETIC


# ============================================================
# Operator Tables
# ============================================================

ARITHMETIC_OPERATORS = (Sum, Difference, Product, Quotient, Remainder, Power)
ORDERING_OPERATORS = (LessThan, LessThanOrEqual, GreaterThan, GreaterThanOrEqual)
EQUALITY_OPERATORS = (Equal, NotEqual)
LOGICAL_OPERATORS = (And, Or)

# Operator family -> operand tags the family is not defined for
INVALID_OPERANDS = (
    (ARITHMETIC_OPERATORS, (BooleanTag,)),
    (ORDERING_OPERATORS, (MatrixTag, BooleanTag)),
    (LOGICAL_OPERATORS, (NumberTag, MatrixTag, _Arithmetic)),
)

# Operator family -> tag pairs (either order) that cannot be combined
INCOMPATIBLE_OPERANDS = (
    ((Sum, Difference) + EQUALITY_OPERATORS, NumberTag, (MatrixTag,)),
    (EQUALITY_OPERATORS, BooleanTag, (NumberTag, MatrixTag)),
)

NUMBER_ARITHMETIC = {
    Sum: exact.add,
    Difference: exact.subtract,
    Product: exact.multiply,
}

NUMBER_ORDERINGS = {
    LessThan: operator.lt,
    LessThanOrEqual: operator.le,
    GreaterThan: operator.gt,
    GreaterThanOrEqual: operator.ge,
}

EQUALITIES = {
    Equal: operator.eq,
    NotEqual: operator.ne,
}

BOOLEAN_OPERATIONS = {
    **EQUALITIES,
    And: lambda a, b: a and b,
    Or: lambda a, b: a or b,
}


def is_invalid_operand(node: BinaryOperation, tag: TagType) -> bool:
    """Check whether the operator of node is undefined for an operand tag."""
    return any(
        isinstance(node, family) and isinstance(tag, rejected)
        for family, rejected in INVALID_OPERANDS
    )


def are_incompatible(node: BinaryOperation, a: TagType, b: TagType) -> bool:
    """Check whether two operand tags cannot be combined by node's operator."""
    for family, first, others in INCOMPATIBLE_OPERANDS:
        if not isinstance(node, family):
            continue
        if isinstance(a, first) and isinstance(b, others):
            return True
        if isinstance(b, first) and isinstance(a, others):
            return True
    return False


# ============================================================
# Step Evaluation
# ============================================================

def _number(value: exact.ExactType, representation: Representation) -> Complex:
    real, imaginary = exact.split(value)
    return Complex(real, imaginary, representation)


def _step_unary(
    node: UnaryOperation,
    context: ContextType,
    functions: Optional[FunctionsType],
) -> Expression:
    """Apply one step to a Negation or Not node."""
    operand = evaluate_step(node.operand, context, functions)
    tag = classify(operand)

    if isinstance(node, Negation):
        if isinstance(tag, BooleanTag):
            raise InvalidOperand(node, node.operand)
        if isinstance(tag, NumberTag):
            return _number(exact.negate(tag.value), tag.representation)
        if isinstance(tag, MatrixTag):
            return tag.matrix.map(Negation)
        return Negation(operand)

    if not isinstance(tag, BooleanTag):
        raise InvalidOperand(node, node.operand)
    if tag.concrete:
        return Boolean(not tag.value)
    return Not(operand)


def _step_power(
    node: Power,
    base: NumberTag,
    exponent: NumberTag,
    stepped: Tuple[Expression, Expression],
    representation: Representation,
) -> Expression:
    if exact.is_zero(base.value) and exact.is_zero(exponent.value):
        raise ZeroToThePowerOfZero(node, node.left, node.right)

    n = exact.to_machine_int(exponent.value)
    if n is None:
        # Not an exact machine integer: leave the power symbolic
        return Power(*stepped)

    if n < 0 and exact.is_zero(base.value):
        raise DivisionByZero(node, Integer(1), node.left)
    return _number(exact.power(base.value, n), representation)


def _step_numbers(
    node: BinaryOperation,
    a: NumberTag,
    b: NumberTag,
    stepped: Tuple[Expression, Expression],
) -> Expression:
    """Apply a binary operator to two exact numbers."""
    representation = a.representation.merge(b.representation)
    kind = type(node)

    if kind in NUMBER_ARITHMETIC:
        return _number(NUMBER_ARITHMETIC[kind](a.value, b.value), representation)

    if kind is Quotient or kind is Remainder:
        if exact.is_zero(b.value):
            raise DivisionByZero(node, node.left, node.right)
        apply = exact.divide if kind is Quotient else exact.remainder
        return _number(apply(a.value, b.value), representation)

    if kind is Power:
        return _step_power(node, a, b, stepped, representation)

    if kind in EQUALITIES:
        return Boolean(EQUALITIES[kind](exact.split(a.value), exact.split(b.value)))

    a_real, a_imaginary = exact.split(a.value)
    b_real, b_imaginary = exact.split(b.value)
    if a_imaginary != 0:
        raise InvalidOperand(node, node.left)
    if b_imaginary != 0:
        raise InvalidOperand(node, node.right)
    return Boolean(NUMBER_ORDERINGS[kind](a_real, b_real))


def _step_binary(
    node: BinaryOperation,
    context: ContextType,
    functions: Optional[FunctionsType],
) -> Expression:
    """Apply one step to a binary operator node."""
    left = evaluate_step(node.left, context, functions)
    right = evaluate_step(node.right, context, functions)
    a = classify(left)
    b = classify(right)

    if is_invalid_operand(node, a):
        raise InvalidOperand(node, node.left)
    if is_invalid_operand(node, b):
        raise InvalidOperand(node, node.right)
    if are_incompatible(node, a, b):
        raise IncompatibleOperands(node, node.left, node.right)

    if isinstance(a, NumberTag) and isinstance(b, NumberTag):
        return _step_numbers(node, a, b, (left, right))

    if (isinstance(a, BooleanTag) and isinstance(b, BooleanTag)
            and a.concrete and b.concrete and type(node) in BOOLEAN_OPERATIONS):
        return Boolean(BOOLEAN_OPERATIONS[type(node)](a.value, b.value))

    # Operands not fully reduced: rebuild over the stepped operands
    return type(node)(left, right)


def _step_function(node: Function, functions: Optional[FunctionsType]) -> Expression:
    handler = functions.get(node.name) if functions else None
    if handler is None:
        return node
    result = handler(node.arguments)
    if result is None:
        return node
    if not isinstance(result, Expression):
        raise TypeError(
            f"handler for {node.name!r} returned {type(result).__name__}, "
            f"expected an Expression or None"
        )
    return result


def evaluate_step(
    expression: Expression,
    context: ContextType,
    functions: Optional[FunctionsType] = None,
) -> Expression:
    """
    Perform a single rewrite step on an expression.

    Operands are stepped before their operator is applied, so one call
    rewrites the tree bottom-up by one layer.

    Args:
        expression: The expression to step
        context: Identifier -> expression bindings for variables
        functions: Optional handlers for function calls, by name

    Returns:
        The rewritten expression (possibly equal to the input)

    Raises:
        EvaluationError: On the first operator that cannot be applied
    """
    if isinstance(expression, Variable):
        bound = context.get(expression.identifier)
        if bound is None:
            return expression
        return evaluate_step(bound, context, functions)

    if isinstance(expression, Function):
        return _step_function(expression, functions)

    if isinstance(expression, Rational):
        if expression.value.q == 1:
            return Integer(expression.value.p)
        return expression

    if isinstance(expression, Complex):
        if expression.imaginary == 0:
            return Rational(expression.real, expression.representation)
        return expression

    if isinstance(expression, UnaryOperation):
        return _step_unary(expression, context, functions)

    if isinstance(expression, BinaryOperation):
        return _step_binary(expression, context, functions)

    # Integer and Boolean are already normal. Vector and Matrix elements
    # are not evaluated.
    return expression


# ============================================================
# Fixed Point
# ============================================================

def default_context() -> ContextType:
    """Return a fresh context holding the built-in constants."""
    return {"i": Complex(0, 1, Representation.FRACTION)}


def build_context(*layers: Optional[BindingsType]) -> ContextType:
    """
    Merge binding layers over the built-in constants.

    Later layers override earlier ones, and every layer overrides the
    built-ins.

    Raises:
        TypeError: If a bound value is not an Expression
    """
    context = default_context()
    for layer in layers:
        if not layer:
            continue
        for identifier, value in layer.items():
            if not isinstance(value, Expression):
                raise TypeError(
                    f"binding for {identifier!r} must be an Expression, "
                    f"got {type(value).__name__}"
                )
            context[identifier] = value
    return context


def iterate_steps(
    expression: Expression,
    context: ContextType,
    functions: Optional[FunctionsType] = None,
) -> Iterator[Tuple[Expression, Expression]]:
    """
    Yield (before, after) for each step until a fixed point is reached.

    The last pair yielded has before == after.
    """
    current = expression
    while True:
        result = evaluate_step(current, context, functions)
        yield current, result
        if result == current:
            return
        current = result


def evaluate(
    expression: Expression,
    bindings: Optional[BindingsType] = None,
    functions: Optional[FunctionsType] = None,
) -> Expression:
    """
    Evaluate an expression to its normal form.

    Args:
        expression: The expression to evaluate
        bindings: Optional identifier -> expression bindings. These
            override the built-in constant i.
        functions: Optional handlers for function calls, by name

    Returns:
        The normal form: the first tree that one more step leaves unchanged

    Raises:
        EvaluationError: The first error met while stepping

    Examples:
        evaluate(Sum(Integer(1), Integer(2)))             # => Integer(3)
        evaluate(Power(Variable("i"), Integer(2)))        # => Integer(-1)
        evaluate(Sum(Variable("x"), Integer(1)), {"x": Integer(2)})
                                                          # => Integer(3)
    """
    context = build_context(bindings)
    result = expression
    for _, result in iterate_steps(expression, context, functions):
        pass
    return result
