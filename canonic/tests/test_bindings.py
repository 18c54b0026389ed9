"""Tests for variable bindings and the evaluation context."""

import pytest

from canonic import (
    Complex, E, Representation, Sum, Variable, build_context,
    default_context, evaluate, evaluate_step,
)


class TestDefaultContext:
    """The built-in constant i."""

    def test_contains_imaginary_unit(self):
        assert default_context() == {"i": Complex(0, 1, Representation.FRACTION)}

    def test_fresh_per_call(self):
        """Changing one context never leaks into the next."""
        context = default_context()
        context["i"] = E.integer(7)
        assert default_context()["i"] == Complex(0, 1, Representation.FRACTION)

    def test_i_evaluates_to_complex(self):
        assert evaluate(Variable("i")) == E.complex(0, 1)


class TestBuildContext:
    """Layering of bindings."""

    def test_caller_overrides_builtin(self):
        context = build_context({"i": E.integer(5)})
        assert context["i"] == E.integer(5)

    def test_later_layers_win(self):
        context = build_context({"x": E.integer(1)}, {"x": E.integer(2)}, None)
        assert context["x"] == E.integer(2)
        assert "i" in context

    def test_rejects_non_expressions(self):
        with pytest.raises(TypeError):
            build_context({"x": 1})


class TestVariableSubstitution:
    """Variables are replaced by their bound expressions."""

    def test_simple(self):
        assert evaluate(E.op("+", "x", 1), {"x": E.integer(2)}) == E.integer(3)

    def test_bound_to_expression(self):
        bindings = {"x": E.op("+", 1, 2)}
        assert evaluate(E.op("*", "x", 2), bindings) == E.integer(6)

    def test_chained(self):
        """x -> y -> 3"""
        bindings = {"x": Variable("y"), "y": E.integer(3)}
        assert evaluate(E.op("+", "x", 1), bindings) == E.integer(4)

    def test_override_imaginary_unit(self):
        assert evaluate(E.op("^", "i", 2), {"i": E.integer(5)}) == E.integer(25)

    def test_unbound_left_alone(self):
        assert evaluate(Variable("x")) == Variable("x")

    def test_partial_binding(self):
        expr = E.op("+", "x", E.op("*", "y", 2))
        result = evaluate(expr, {"y": E.integer(3)})
        assert result == Sum(Variable("x"), E.integer(6))

    def test_bindings_not_mutated(self):
        bindings = {"x": E.integer(1)}
        evaluate(E.op("+", "x", "i"), bindings)
        assert bindings == {"x": E.integer(1)}

    def test_later_binding_completes_residual(self):
        """A symbolic residual finishes once the variable gets a value."""
        residual = evaluate(E.op("-", E.op("^", "x", 2), 1))
        assert evaluate(residual, {"x": E.integer(3)}) == E.integer(8)


class TestSingleStep:
    """evaluate_step rewrites one layer at a time."""

    def test_variable_steps_its_binding(self):
        context = build_context({"x": E.op("+", 1, 2)})
        assert evaluate_step(Variable("x"), context) == Complex(3)

    def test_demotion_takes_steps(self):
        context = build_context()
        first = evaluate_step(E.op("+", 1, 2), context)
        assert first == Complex(3, 0)
        second = evaluate_step(first, context)
        assert second == E.rational(3)
        assert evaluate_step(second, context) == E.integer(3)
