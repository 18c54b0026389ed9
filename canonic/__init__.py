"""
canonic - exact evaluation of symbolic calculator expressions

Rewrites expression trees of integers, rationals, complex numbers,
booleans, matrices, variables and function calls to a canonical normal
form using exact arithmetic only.

Quick Start:
    from canonic import evaluate, E

    evaluate(E.op("+", E.rational(1, 2), E.decimal("0.5")))   # => Integer(1)
    evaluate(E.op("^", "i", 2))                               # => Integer(-1)
    evaluate(E.op("+", "x", 1), {"x": E.integer(2)})          # => Integer(3)

Normal form:
    Numbers are demoted to their simplest exact type (Complex -> Rational
    -> Integer). Operators that cannot be applied yet are kept with their
    operands simplified, so evaluate(E.op("+", "x", E.op("*", 2, 3)))
    gives Sum(Variable('x'), Integer(6)).

Errors:
    InvalidOperand        - operator applied to a type it is not defined for
    IncompatibleOperands  - two types the operator cannot combine
    DivisionByZero        - exact zero divisor
    ZeroToThePowerOfZero  - 0 ^ 0
"""

import logging

__version__ = "0.1.0"

# Expression tree
from .expression import (
    Representation,
    Expression,
    Variable,
    Function,
    Integer,
    Rational,
    Complex,
    Vector,
    Matrix,
    Boolean,
    UnaryOperation,
    BinaryOperation,
    Negation,
    Not,
    Sum,
    Difference,
    Product,
    Quotient,
    Remainder,
    Power,
    Equal,
    NotEqual,
    LessThan,
    LessThanOrEqual,
    GreaterThan,
    GreaterThanOrEqual,
    And,
    Or,
    BINARY_OPERATORS,
)

# Errors
from .errors import (
    EvaluationError,
    InvalidOperand,
    IncompatibleOperands,
    DivisionByZero,
    ZeroToThePowerOfZero,
)

# Evaluation kernel
from .evaluator import (
    evaluate,
    evaluate_step,
    classify,
    default_context,
    build_context,
    iterate_steps,
    NumberTag,
    BooleanTag,
    MatrixTag,
    ARITHMETIC,
    ContextType,
    BindingsType,
    FunctionHandler,
    FunctionsType,
)

# Evaluator and builder
from .engine import (
    Evaluator,
    EvaluationStep,
    EvaluationTrace,
    E,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [
    # Version
    "__version__",
    # Expression tree
    "Representation",
    "Expression",
    "Variable",
    "Function",
    "Integer",
    "Rational",
    "Complex",
    "Vector",
    "Matrix",
    "Boolean",
    "UnaryOperation",
    "BinaryOperation",
    "Negation",
    "Not",
    "Sum",
    "Difference",
    "Product",
    "Quotient",
    "Remainder",
    "Power",
    "Equal",
    "NotEqual",
    "LessThan",
    "LessThanOrEqual",
    "GreaterThan",
    "GreaterThanOrEqual",
    "And",
    "Or",
    "BINARY_OPERATORS",
    # Errors
    "EvaluationError",
    "InvalidOperand",
    "IncompatibleOperands",
    "DivisionByZero",
    "ZeroToThePowerOfZero",
    # Kernel
    "evaluate",
    "evaluate_step",
    "classify",
    "default_context",
    "build_context",
    "iterate_steps",
    # Type tags
    "NumberTag",
    "BooleanTag",
    "MatrixTag",
    "ARITHMETIC",
    # Types
    "ContextType",
    "BindingsType",
    "FunctionHandler",
    "FunctionsType",
    # Evaluator
    "Evaluator",
    "EvaluationStep",
    "EvaluationTrace",
    # Expression builder
    "E",
]
