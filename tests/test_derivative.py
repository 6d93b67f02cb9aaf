"""Tests for symbolic differentiation."""

import pytest

from cache import RewriteCache
from config import SimplifyConfig
from derivative import derivative, gradient, nth_derivative, raw_derivative
from engine import RewriteEngine
from errors import MalformedExpression, NoDerivativeRule
from expression import (
    asin,
    atan,
    cos,
    exp,
    func,
    integer,
    ln,
    sin,
    sqrt,
    tan,
    tanh,
)
from numeric import evaluate


def _slope(f, x0, h=1e-6):
    return (evaluate(f, {"x": x0 + h}) - evaluate(f, {"x": x0 - h})) / (2 * h)


class TestRules:
    """Tests for the differentiation rules on simple inputs."""

    def test_polynomial(self, simp, x):
        """d/dx (x^3 + 2x^2 + x) = 3x^2 + 4x + 1."""
        f = x ** 3 + 2 * x ** 2 + x
        assert derivative(f, x, cache=RewriteCache()) == simp(3 * x ** 2 + 4 * x + 1)

    def test_trig(self, x):
        """d sin = cos, d cos = -sin."""
        assert derivative(sin(x), x) == cos(x)
        assert derivative(cos(x), x) == -sin(x)

    def test_chain_rule(self, simp, x):
        """d exp(2x) = 2 exp(2x)."""
        assert derivative(exp(2 * x), x) == simp(2 * exp(2 * x))

    def test_log(self, x):
        """d ln(x) = 1/x."""
        assert derivative(ln(x), x) == 1 / x

    def test_log_of_cos(self, x):
        """d ln(cos x) = -tan(x)."""
        assert derivative(ln(cos(x)), x) == -tan(x)

    def test_product_with_reciprocal(self, simp, x):
        """d (x ln x) = 1 + ln(x)."""
        assert derivative(x * ln(x), x) == simp(1 + ln(x))

    def test_string_variable(self, x):
        """The variable may be given by name."""
        assert derivative(x ** 2, "x") == 2 * x

    def test_constant_subtree(self, x, y):
        """Anything free of the variable differentiates to 0."""
        assert derivative(y ** 2 + sin(y), x) == integer(0)
        assert derivative(func("f", y), x) == integer(0)

    def test_raw_is_unsimplified(self, x):
        """raw_derivative skips the engine."""
        raw = raw_derivative(2 * x, x)
        assert raw != integer(2)
        assert derivative(2 * x, x) == integer(2)


class TestHigherOrder:
    """Tests for repeated and partial derivatives."""

    def test_second_derivative(self, simp, x):
        """d2/dx2 x^3 = 6x."""
        assert nth_derivative(x ** 3, x, 2) == simp(6 * x)

    def test_zeroth_derivative(self, x):
        """Order zero returns the input."""
        e = sin(x)
        assert nth_derivative(e, x, 0) is e

    def test_negative_order(self, x):
        """A negative order is rejected."""
        with pytest.raises(ValueError):
            nth_derivative(x, x, -1)

    def test_gradient(self, x, y):
        """grad(xy) = (y, x)."""
        assert gradient(x * y, [x, y]) == [y, x]


class TestErrors:
    """Tests for differentiation failures."""

    def test_unknown_function(self, x):
        """A function without a template raises with its name."""
        with pytest.raises(NoDerivativeRule) as info:
            derivative(func("foo", x), x)
        assert info.value.name == "foo"

    def test_bad_variable(self, x):
        """The variable must be a symbol or an identifier."""
        with pytest.raises(MalformedExpression):
            derivative(x, "1x")
        with pytest.raises(MalformedExpression):
            derivative(x, 3)


class TestNumericAgreement:
    """Spot checks against central differences."""

    @pytest.mark.parametrize(
        "build, x0",
        [
            (lambda x: sin(x) * exp(x), 0.7),
            (lambda x: x ** x, 1.3),
            (lambda x: atan(x) / x, 0.9),
            (lambda x: sqrt(x ** 2 + 1), -0.4),
            (lambda x: tanh(x), 0.2),
            (lambda x: x / (1 + x ** 2), 0.5),
            (lambda x: asin(x), 0.3),
            (lambda x: ln(cos(x)), 0.6),
        ],
    )
    def test_matches_finite_difference(self, build, x0, x):
        """The simplified derivative evaluates like the numeric slope."""
        f = build(x)
        engine = RewriteEngine(SimplifyConfig(), RewriteCache())
        d = engine.simplify(raw_derivative(f, x))
        assert evaluate(d, {"x": x0}) == pytest.approx(_slope(f, x0), rel=1e-5)
