"""Tests for expression nodes and smart constructors."""

import pytest

from errors import CASArithmeticError, MalformedExpression
from expression import (
    Constant,
    Function,
    Num,
    Symbol,
    contains,
    free_symbols,
    integer,
    rational,
    sin,
    size,
    substitute,
)


class TestConstructors:
    """Tests for the local folding done while building trees."""

    def test_literals_fold(self):
        """Two literals combine immediately."""
        assert integer(2) + integer(3) == integer(5)
        assert integer(1) / integer(2) == rational(1, 2)

    def test_identities_drop(self, x):
        """x + 0, 1*x and x^1 style identities."""
        assert x + 0 is x
        assert 1 * x is x
        assert x / 1 is x
        assert -(-x) is x

    def test_commutative_operands_sorted(self, x, y):
        """Operand order of + and * does not matter."""
        assert x + y == y + x
        assert x * y == y * x
        assert hash(x + y) == hash(y + x)

    def test_small_powers_fold(self):
        """Literal powers under the constructor limit are evaluated."""
        assert integer(2) ** 10 == integer(1024)
        assert integer(4) ** rational(1, 2) == integer(2)

    def test_large_powers_left_alone(self):
        """Constructors never compute huge powers."""
        e = integer(10) ** 10000
        assert not isinstance(e, Num)

    def test_division_by_literal_zero(self, x):
        """Dividing by a literal zero raises."""
        with pytest.raises(CASArithmeticError):
            x / 0


class TestValidation:
    """Tests for node-level checks."""

    def test_bad_symbol(self):
        """Symbols must be identifiers."""
        with pytest.raises(MalformedExpression):
            Symbol("2x")

    def test_bad_constant(self):
        """Only pi, e and i are constants."""
        with pytest.raises(MalformedExpression):
            Constant("tau")

    def test_function_args_must_be_expressions(self):
        """Raw Python values are rejected as function arguments."""
        with pytest.raises(MalformedExpression):
            Function("sin", (1,))


class TestRendering:
    """Tests for the plain-text form."""

    def test_basic_forms(self, x, y):
        """Operators print with minimal parentheses."""
        assert str(x ** 2) == "x^2"
        assert str(x - y) == "x - y"
        assert str(-(x + y)) == "-(x + y)"
        assert str(2 * (x + y)) == "2*(x + y)"
        assert str(sin(x)) == "sin(x)"


class TestInspection:
    """Tests for traversal helpers."""

    def test_free_symbols(self, x, y):
        """All symbol names are collected."""
        assert free_symbols(x * y + 1) == {"x", "y"}

    def test_contains(self, x, y):
        """contains looks through every level."""
        assert contains(sin(x) + 1, "x")
        assert not contains(sin(y) + 1, x)

    def test_substitute(self, x, y):
        """Substitution rebuilds through the constructors."""
        assert substitute(x ** 2 + y, {"x": 3}) == integer(9) + y

    def test_size(self, x):
        """size counts every node."""
        assert size(sin(x) + 1) == 4
