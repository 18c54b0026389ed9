#!/usr/bin/env python3
"""
canonic Feature Demonstration

This script demonstrates the major features of the canonic library.
"""

import logging

from canonic import E, EvaluationError, Evaluator, evaluate


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_basic_usage():
    """Demonstrate exact evaluation."""
    section("Basic Usage")

    examples = [
        ("1 + 2", E.op("+", 1, 2)),
        ("1/2 + 0.5", E.op("+", E.op("/", 1, 2), E.decimal("0.5"))),
        ("0.75 % 1/3", E.op("%", E.decimal("0.75"), E.op("/", 1, 3))),
        ("2 ^ -3", E.op("^", 2, E.neg(3))),
        ("i ^ 2", E.op("^", "i", 2)),
        ("(1 + i) * (1 + i)", E.op("*", E.op("+", 1, "i"), E.op("+", 1, "i"))),
        ("3 ^ 4 ^ 5 > 5 ^ 4 ^ 3", E.op(">", E.op("^", 3, E.op("^", 4, 5)),
                                      E.op("^", 5, E.op("^", 4, 3)))),
    ]

    for text, expr in examples:
        result = evaluate(expr)
        shown = repr(result)
        if len(shown) > 60:
            shown = shown[:57] + "..."
        print(f"  {text} => {shown}")


def demo_symbolic():
    """Demonstrate partial evaluation."""
    section("Symbolic Residuals")

    examples = [
        ("x + 2 * 3", E.op("+", "x", E.op("*", 2, 3))),
        ("2 ^ (1/2)", E.op("^", 2, E.op("/", 1, 2))),
        ("f(1 + 2)", E.call("f", E.op("+", 1, 2))),
        ("-[[1, 2]]", E.neg(E.matrix([[1, 2]]))),
        ("x == 1 && true", E.op("&&", E.op("==", "x", 1), True)),
    ]

    for text, expr in examples:
        print(f"  {text} => {evaluate(expr)!r}")


def demo_bindings():
    """Demonstrate variable bindings."""
    section("Bindings")

    evaluator = Evaluator().bind("x", E.rational(1, 3))
    expr = E.op("*", 3, "x")
    print(f"  {evaluator!r}")
    print(f"  3 * x with x = 1/3 => {evaluator(expr)!r}")
    print(f"  3 * x with x = 0.5 => {evaluator(expr, bindings={'x': E.decimal('0.5')})!r}")
    print(f"  i * i with i = 5   => {evaluate(E.op('*', 'i', 'i'), {'i': E.integer(5)})!r}")


def demo_functions():
    """Demonstrate function handlers."""
    section("Function Handlers")

    evaluator = Evaluator().with_functions({
        "double": lambda args: E.op("*", 2, args[0]),
        "abs": lambda args: None,
    })

    for text, expr in [
        ("double(21)", E.call("double", 21)),
        ("double(y)", E.call("double", "y")),
        ("abs(-1)", E.call("abs", E.neg(1))),
    ]:
        print(f"  {text} => {evaluator(expr)!r}")


def demo_tracing():
    """Demonstrate trace formatting."""
    section("Tracing")

    evaluator = Evaluator()
    result, trace = evaluator(E.op("-", E.op("^", "i", 2), E.decimal("0.5")), trace=True)

    print("  Verbose format (default):")
    for line in str(trace).split('\n'):
        print(f"    {line}")

    print(f"\n  Compact: {trace.format('compact')}")
    print(f"  Summary: {trace.summary()}")


def demo_errors():
    """Demonstrate evaluation errors."""
    section("Errors")

    examples = [
        ("true + 1", E.op("+", True, 1)),
        ("i < 1", E.op("<", "i", 1)),
        ("1 + [[1]]", E.op("+", 1, E.matrix([[1]]))),
        ("x / (1 - 1)", E.op("/", "x", E.op("-", 1, 1))),
        ("0 ^ 0", E.op("^", 0, 0)),
    ]

    for text, expr in examples:
        try:
            evaluate(expr)
        except EvaluationError as error:
            print(f"  {text} => {error.to_dict()['kind']}")
            print(f"      {error}")


def main():
    """Run all demonstrations."""
    logging.basicConfig(level=logging.INFO)

    print("canonic - exact symbolic evaluation")
    print("Feature Demonstration")

    demo_basic_usage()
    demo_symbolic()
    demo_bindings()
    demo_functions()
    demo_tracing()
    demo_errors()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
