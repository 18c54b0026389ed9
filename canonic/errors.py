"""
Errors raised by the evaluation kernel.

Every error keeps the offending nodes as attributes so callers can render
their own diagnostics; the message is only a convenience built from the
nodes' reprs.
"""

from typing import Any, Dict, Tuple

from .expression import Expression


class EvaluationError(Exception):
    """Base class for failures that abort an evaluation."""

    _fields: Tuple[str, ...] = ("expression",)

    def fields(self) -> Dict[str, Expression]:
        return {name: getattr(self, name) for name in self._fields}

    def to_dict(self) -> Dict[str, Any]:
        """Return the error kind and its offending nodes."""
        return {"kind": type(self).__name__, **self.fields()}

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.fields() == other.fields()

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + tuple(self.fields().values()))


class InvalidOperand(EvaluationError):
    """Operator applied to an operand it is not defined for."""

    _fields = ("expression", "operand")

    def __init__(self, expression: Expression, operand: Expression):
        self.expression = expression
        self.operand = operand
        super().__init__(
            f"invalid operand {operand!r} for {type(expression).__name__} in {expression!r}"
        )


class IncompatibleOperands(EvaluationError):
    """Two operands that cannot be combined by the operator."""

    _fields = ("expression", "operand_1", "operand_2")

    def __init__(self, expression: Expression, operand_1: Expression, operand_2: Expression):
        self.expression = expression
        self.operand_1 = operand_1
        self.operand_2 = operand_2
        super().__init__(
            f"incompatible operands {operand_1!r} and {operand_2!r} "
            f"for {type(expression).__name__}"
        )


class DivisionByZero(EvaluationError):
    _fields = ("expression", "dividend", "divisor")

    def __init__(self, expression: Expression, dividend: Expression, divisor: Expression):
        self.expression = expression
        self.dividend = dividend
        self.divisor = divisor
        super().__init__(f"division of {dividend!r} by zero divisor {divisor!r}")


class ZeroToThePowerOfZero(EvaluationError):
    _fields = ("expression", "base", "exponent")

    def __init__(self, expression: Expression, base: Expression, exponent: Expression):
        self.expression = expression
        self.base = base
        self.exponent = exponent
        super().__init__(f"zero base {base!r} raised to zero exponent {exponent!r}")
