"""Tests for trigonometric normalization."""

import math

import pytest

from cache import RewriteCache
from config import SimplifyConfig
from engine import RewriteEngine
from errors import CASArithmeticError
from expression import (
    Num,
    acos,
    asin,
    atan,
    cos,
    cosh,
    integer,
    lift,
    pi,
    rational,
    sin,
    sinh,
    sqrt,
    tan,
)


class TestParity:
    """Tests for odd/even argument handling."""

    def test_odd(self, simp, x):
        """sin(-x) -> -sin(x), tan(-x) -> -tan(x)."""
        assert simp(sin(-x)) == -sin(x)
        assert simp(tan(-x)) == -tan(x)

    def test_even(self, simp, x):
        """cos(-x) -> cos(x)."""
        assert simp(cos(-x)) == cos(x)


class TestExactValues:
    """Tests for rational multiples of pi."""

    def test_sine_table(self, simp):
        """sin(pi/6) = 1/2, sin(pi/4) = sqrt(2)/2."""
        assert simp(sin(pi / 6)) == rational(1, 2)
        assert simp(sin(pi / 4)) == sqrt(2) / 2

    def test_cosine_through_shift(self, simp):
        """cos(pi/3) = 1/2, cos(pi) = -1."""
        assert simp(cos(pi / 3)) == rational(1, 2)
        assert simp(cos(pi)) == integer(-1)

    def test_sin_pi(self, simp):
        """sin(pi) = 0."""
        assert simp(sin(pi)) == integer(0)

    def test_tangent(self, simp):
        """tan(pi/4) = 1."""
        assert simp(tan(pi / 4)) == integer(1)

    def test_tangent_pole(self, simp):
        """tan(pi/2) is undefined."""
        with pytest.raises(CASArithmeticError):
            simp(tan(pi / 2))

    def test_beyond_one_period(self, simp):
        """sin(13*pi/6) = 1/2."""
        assert simp(sin(13 * pi / 6)) == rational(1, 2)

    def test_periodic_reduction_without_table_value(self, simp):
        """sin(7*pi/5) -> -sin(3*pi/5)."""
        assert simp(sin(7 * pi / 5)) == -sin(3 * pi / 5)


class TestInverses:
    """Tests for inverse trigonometric values."""

    def test_table_values(self, simp):
        """asin(1/2) = pi/6, acos(0) = pi/2, atan(1) = pi/4."""
        assert simp(asin(rational(1, 2))) == pi / 6
        assert simp(acos(0)) == pi / 2
        assert simp(atan(1)) == pi / 4

    def test_odd_inverse(self, simp):
        """asin(-1/2) = -pi/6."""
        assert simp(asin(rational(-1, 2))) == -(pi / 6)

    def test_composition(self, simp, x):
        """sin(asin(x)) -> x."""
        assert simp(sin(asin(x))) == x


class TestIdentities:
    """Tests for Pythagorean and quotient identities."""

    def test_pythagorean(self, simp, x):
        """sin^2 + cos^2 -> 1."""
        assert simp(sin(x) ** 2 + cos(x) ** 2) == integer(1)

    def test_pythagorean_with_coefficient(self, simp, x):
        """3*sin^2 + 3*cos^2 -> 3."""
        assert simp(3 * sin(x) ** 2 + 3 * cos(x) ** 2) == integer(3)

    def test_pythagorean_among_other_terms(self, simp, x, y):
        """y + sin^2 + cos^2 -> 1 + y."""
        assert simp(y + sin(x) ** 2 + cos(x) ** 2) == simp(1 + y)

    def test_sin_over_cos(self, simp, x):
        """sin/cos -> tan, keeping coefficients."""
        assert simp(sin(x) / cos(x)) == tan(x)
        assert simp(2 * sin(x) / cos(x)) == 2 * tan(x)

    def test_hyperbolic_at_zero(self, simp):
        """sinh(0) = 0, cosh(0) = 1."""
        assert simp(sinh(0)) == integer(0)
        assert simp(cosh(0)) == integer(1)


class TestApproximation:
    """Tests for decimal arguments."""

    def test_decimal_kept_by_default(self, simp):
        """sin(0.5) stays symbolic in exact mode."""
        assert simp(sin(0.5)) == sin(0.5)

    def test_decimal_evaluated_when_allowed(self):
        """With approximation on, sin(0.5) becomes a decimal."""
        engine = RewriteEngine(SimplifyConfig(allow_approximation=True), RewriteCache())
        out = engine.simplify(sin(lift(0.5)))
        assert isinstance(out, Num)
        assert out.value.to_float() == pytest.approx(math.sin(0.5), rel=1e-12)
