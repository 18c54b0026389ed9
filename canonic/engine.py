"""
Evaluator and expression builder for canonic.

This module wraps the evaluation kernel in a reusable object that carries
default bindings and function handlers, and can record a trace of every
rewrite step.

Example:
    from canonic import Evaluator, E

    evaluator = Evaluator().bind("x", E.rational(1, 2))
    evaluator(E.op("+", "x", E.decimal("0.5")))   # => Integer(1)

    result, trace = evaluator(E.op("^", "i", 2), trace=True)
    print(trace.format("chain"))

Tracing:
    Use Evaluator.evaluate(expr, trace=True) to see every intermediate tree.
"""

import logging
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import EvaluationError
from .evaluator import (
    BindingsType,
    FunctionHandler,
    FunctionsType,
    build_context,
    evaluate_step,
    iterate_steps,
)
from .expression import (
    BINARY_OPERATORS,
    Boolean,
    Complex,
    Expression,
    Function,
    Integer,
    Matrix,
    Negation,
    Not,
    Rational,
    Representation,
    Variable,
    Vector,
)

logger = logging.getLogger(__name__)


# ============================================================
# Expression Builder
# ============================================================

class _ExprBuilder:
    """
    Expression builder for canonic.

    Plain Python values are coerced wherever an expression is expected:
    int -> Integer, bool -> Boolean, str -> Variable, Fraction -> Rational.

    Examples:
        from canonic import E

        E.op("+", "x", E.op("*", 2, "y"))   # x + 2*y
        E.decimal("0.25")                   # 1/4, rendered as a decimal
        E.complex(0, 1)                     # i
        E.matrix([[1, 2], [3, 4]])
        E.call("sin", "x")
    """

    def coerce(self, value) -> Expression:
        """
        Convert a Python value to an expression.

        Raises:
            TypeError: If the value has no expression counterpart
        """
        if isinstance(value, Expression):
            return value
        if isinstance(value, bool):
            return Boolean(value)
        if isinstance(value, int):
            return Integer(value)
        if isinstance(value, Fraction):
            return Rational(value)
        if isinstance(value, str):
            return Variable(value)
        raise TypeError(f"cannot build an expression from {type(value).__name__}")

    def var(self, name: str) -> Variable:
        return Variable(name)

    def vars(self, *names: str) -> Tuple[Variable, ...]:
        """
        Create multiple variables for unpacking.

        Example:
            x, y = E.vars("x", "y")
        """
        return tuple(Variable(name) for name in names)

    def integer(self, value: int) -> Integer:
        return Integer(value)

    def rational(self, numerator, denominator=1,
                 representation: Representation = Representation.FRACTION) -> Rational:
        """Create a rational numerator/denominator, reduced to lowest terms."""
        return Rational(Fraction(numerator, denominator), representation)

    def decimal(self, text: str) -> Rational:
        """
        Create the exact rational value of a decimal literal.

        Example:
            E.decimal("0.75")   # => Rational(3/4, DECIMAL)
        """
        return Rational(Fraction(text), Representation.DECIMAL)

    def complex(self, real, imaginary=0,
                representation: Representation = Representation.FRACTION) -> Complex:
        return Complex(Fraction(real), Fraction(imaginary), representation)

    def boolean(self, value: bool) -> Boolean:
        return Boolean(value)

    def vector(self, elements: Iterable) -> Vector:
        return Vector(self.coerce(e) for e in elements)

    def matrix(self, rows: Iterable[Iterable]) -> Matrix:
        return Matrix([[self.coerce(e) for e in row] for row in rows])

    def call(self, name: str, *args) -> Function:
        return Function(name, [self.coerce(a) for a in args])

    def neg(self, operand) -> Negation:
        return Negation(self.coerce(operand))

    def not_(self, operand) -> Not:
        return Not(self.coerce(operand))

    def op(self, symbol: str, left, right) -> Expression:
        """
        Build a binary operation from its symbol.

        Symbols: + - * / % ^ == != < <= > >= && ||

        Raises:
            ValueError: If the symbol is not a binary operator
        """
        if symbol not in BINARY_OPERATORS:
            raise ValueError(f"Unknown binary operator: {symbol!r}")
        return BINARY_OPERATORS[symbol](self.coerce(left), self.coerce(right))

    def __repr__(self) -> str:
        return "E (expression builder)"


# Singleton instance
E = _ExprBuilder()


# ============================================================
# Tracing
# ============================================================

class EvaluationStep:
    """A single rewrite of the whole tree."""

    def __init__(self, index: int, before: Expression, after: Expression):
        self.index = index
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        return f"step {self.index}: {self.before!r} -> {self.after!r}"


class EvaluationTrace:
    """
    A trace of every step taken on the way to the normal form.

    Formatting options:
        - Default repr: verbose multi-line format
        - format("compact"): single line with the step count
        - format("chain"): the sequence of intermediate trees
    """

    def __init__(self):
        self.steps: List[EvaluationStep] = []
        self.initial: Optional[Expression] = None
        self.final: Optional[Expression] = None

    def add_step(self, step: EvaluationStep):
        self.steps.append(step)

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace.

        Args:
            style: One of "verbose", "compact", "chain"

        Raises:
            ValueError: On an unknown style
        """
        if style == "verbose":
            return repr(self)
        if style == "compact":
            return f"{self.initial!r} --[{len(self.steps)} steps]--> {self.final!r}"
        if style == "chain":
            parts = [repr(self.initial)]
            for step in self.steps:
                parts.append(f"  --({step.index})-->")
                parts.append(repr(step.after))
            return "\n".join(parts)
        raise ValueError(f"Unknown trace style: {style}. "
                         f"Valid options: verbose, compact, chain")

    def __repr__(self) -> str:
        lines = [f"Initial: {self.initial!r}"]
        for step in self.steps:
            lines.append(f"  {step.index}. {step.after!r}")
        lines.append(f"Final: {self.final!r}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        """Iterate over evaluation steps."""
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if any rewriting was done."""
        return len(self.steps) > 0

    def summary(self) -> str:
        if not self.steps:
            return "Already in normal form"
        return f"{len(self.steps)} steps to normal form"


# ============================================================
# Evaluator
# ============================================================

class Evaluator:
    """
    Reusable evaluator with default bindings and function handlers.

    Bindings are layered on every call: the built-in constant i, then the
    evaluator's defaults, then the bindings passed to evaluate().

    Example:
        evaluator = (Evaluator()
            .bind("r", E.rational(1, 3))
            .with_functions({"double": lambda args: E.op("*", 2, args[0])}))

        evaluator(E.call("double", "r"))   # => Rational(2/3, FRACTION)
    """

    def __init__(self, bindings: Optional[BindingsType] = None,
                 functions: Optional[FunctionsType] = None):
        """
        Initialize an Evaluator.

        Args:
            bindings: Default identifier -> expression bindings
            functions: Handlers for function calls, keyed by function name.
                Default: None (function calls stay unevaluated)
        """
        self._bindings: Dict[str, Expression] = {}
        self._functions: Dict[str, FunctionHandler] = {}
        if bindings:
            self.with_bindings(bindings)
        if functions:
            self.with_functions(functions)

    def bind(self, identifier: str, value) -> 'Evaluator':
        """Bind an identifier; plain Python values are coerced with E."""
        self._bindings[identifier] = E.coerce(value)
        return self

    def unbind(self, identifier: str) -> 'Evaluator':
        self._bindings.pop(identifier, None)
        return self

    def with_bindings(self, bindings: BindingsType) -> 'Evaluator':
        """Add default bindings. Returns self for chaining."""
        for identifier, value in bindings.items():
            self.bind(identifier, value)
        return self

    def with_functions(self, functions: FunctionsType) -> 'Evaluator':
        """Register function handlers. Returns self for chaining."""
        for name, handler in functions.items():
            if not callable(handler):
                raise TypeError(f"handler for {name!r} is not callable")
            self._functions[name] = handler
        return self

    @property
    def bindings(self) -> Dict[str, Expression]:
        return dict(self._bindings)

    @property
    def functions(self) -> Dict[str, FunctionHandler]:
        return dict(self._functions)

    def _handlers(self, functions: Optional[FunctionsType]) -> Dict[str, FunctionHandler]:
        return {**self._functions, **(functions or {})}

    def step(self, expression: Expression,
             bindings: Optional[BindingsType] = None,
             functions: Optional[FunctionsType] = None) -> Expression:
        """Apply a single rewrite step to the expression."""
        context = build_context(self._bindings, bindings)
        return evaluate_step(expression, context, self._handlers(functions))

    def evaluate(
        self,
        expression: Expression,
        bindings: Optional[BindingsType] = None,
        trace: bool = False,
        functions: Optional[FunctionsType] = None,
    ):
        """
        Evaluate an expression to its normal form.

        Args:
            expression: Expression to evaluate
            bindings: Per-call bindings, overriding the evaluator's defaults
            trace: If True, return (result, trace) tuple
            functions: Per-call function handlers, overriding the defaults

        Returns:
            Normal form, or (normal form, trace) if trace=True

        Raises:
            EvaluationError: The first error met while stepping
        """
        context = build_context(self._bindings, bindings)
        trace_obj = EvaluationTrace()
        trace_obj.initial = expression

        result = expression
        try:
            for before, result in iterate_steps(expression, context, self._handlers(functions)):
                if result != before:
                    trace_obj.add_step(EvaluationStep(len(trace_obj) + 1, before, result))
        except EvaluationError as error:
            logger.debug("evaluation of %r failed after %d steps: %s",
                         expression, len(trace_obj), error)
            raise

        logger.debug("reached normal form in %d steps", len(trace_obj))
        trace_obj.final = result
        if trace:
            return result, trace_obj
        return result

    def copy(self) -> 'Evaluator':
        """Create a copy of this evaluator."""
        return Evaluator(bindings=self._bindings, functions=self._functions)

    def __call__(self, expression: Expression, **kwargs):
        """Make evaluator callable: evaluator(expr) is shorthand for evaluator.evaluate(expr)."""
        return self.evaluate(expression, **kwargs)

    def __contains__(self, identifier: str) -> bool:
        """Check if an identifier has a default binding: 'x' in evaluator."""
        return identifier in self._bindings

    def __repr__(self) -> str:
        return (f"Evaluator({len(self._bindings)} bindings, "
                f"{len(self._functions)} functions)")
