"""Tests for the CAS facade, module-level helpers and configuration."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

import cas as cas_module
from cas import CAS
from config import DEFAULT_CONFIG, SimplifyConfig
from errors import (
    CASArithmeticError,
    CASError,
    ComplexityExceeded,
    ExponentTooLarge,
    MalformedExpression,
    NoDerivativeRule,
    NodeBudgetExceeded,
    TimeBudgetExceeded,
)
from expression import build_sum, integer, sin, sqrt


class TestCAS:
    """Tests for the instance API."""

    def test_simplify(self):
        """CAS.simplify runs the engine."""
        assert CAS().simplify(sqrt(8)) == 2 * sqrt(2)

    def test_plain_values_lifted(self):
        """Python numbers are accepted."""
        assert CAS().simplify(4) == integer(4)

    def test_report(self):
        """simplify_with_report exposes guard information."""
        report = CAS().simplify_with_report(integer(10) ** 10000)
        assert report.guard_tripped
        assert report.guard_reason == "exponent"

    def test_with_config(self):
        """Derived instances share the cache but not the options."""
        base = CAS()
        plain = base.with_config(enable_radical_rules=False)
        assert plain.simplify(sqrt(8)) == sqrt(8)
        assert base.simplify(sqrt(8)) == 2 * sqrt(2)
        assert plain.cache is base.cache
        assert base.config.enable_radical_rules

    def test_instances_isolated(self):
        """Separate instances keep separate caches."""
        a, b = CAS(), CAS()
        a.simplify(sqrt(8))
        assert a.cache_info().size > 0
        assert b.cache_info().size == 0

    def test_clear_cache(self):
        """clear_cache empties the private cache."""
        c = CAS()
        c.simplify(sqrt(8))
        c.clear_cache()
        assert c.cache_info().size == 0

    def test_differentiate(self, x):
        """Second derivative through the facade."""
        c = CAS()
        assert c.differentiate(x ** 3, "x", n=2) == c.simplify(6 * x)

    def test_substitute(self, x, y):
        """Substitution is followed by simplification."""
        c = CAS()
        assert c.substitute(x ** 2 + y + x, {"x": 3}) == c.simplify(12 + y)

    def test_expand(self, x, y):
        """Products of sums are multiplied out; quotients are not recombined."""
        c = CAS()
        assert c.expand((x + 1) * (x + 2)) == c.simplify(x ** 2 + 3 * x + 2)
        assert c.expand((x + 1) / y) == build_sum([x / y, 1 / y])

    def test_collect(self, x, y):
        """Terms are grouped by powers of the named variable."""
        c = CAS()
        assert c.collect(x * (x + y) + x, "x") == build_sum([(1 + y) * x, x ** 2])
        assert cas_module.collect(x * (x + y) + x, x) == build_sum([(1 + y) * x, x ** 2])

    def test_evaluate_and_lambdify(self, x):
        """Numeric helpers delegate to numpy evaluation."""
        c = CAS()
        assert c.evaluate(x ** 2, {"x": 3.0}) == 9.0
        assert c.lambdify(x + 1, [x])(1.0) == 2.0

    def test_gradient(self, x, y):
        """Gradient lists one partial per variable."""
        assert CAS().gradient(x * y, ["x", "y"]) == [y, x]


class TestModuleFunctions:
    """Tests for the process-wide helpers."""

    def test_shared_cache(self):
        """Module-level calls fill the shared cache."""
        cas_module.reset_cache()
        cas_module.simplify(sqrt(8))
        assert cas_module.cache_info().size > 0
        cas_module.reset_cache()
        assert cas_module.cache_info().size == 0

    def test_differentiate_and_evaluate(self, x):
        """Module-level differentiate and evaluate."""
        d = cas_module.differentiate(sin(x), x)
        assert cas_module.evaluate(d, {"x": 0.0}) == pytest.approx(1.0)


class TestConfig:
    """Tests for SimplifyConfig validation."""

    def test_defaults(self):
        """Defaults match the documented values."""
        c = SimplifyConfig()
        assert c.max_iterations == 10
        assert c.max_complexity_nodes == 200_000
        assert c.max_exponent_magnitude == 1000
        assert c.time_budget is None
        assert not c.allow_approximation

    def test_frozen(self):
        """Options cannot be changed in place."""
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.max_iterations = 3

    def test_bounds_checked(self):
        """A zero iteration cap is invalid."""
        with pytest.raises(ValidationError):
            SimplifyConfig(max_iterations=0)

    def test_fingerprint_ignores_trace(self):
        """Tracing does not split the cache."""
        assert SimplifyConfig(trace=True).fingerprint() == DEFAULT_CONFIG.fingerprint()
        assert SimplifyConfig(enable_trig_rules=False).fingerprint() != DEFAULT_CONFIG.fingerprint()

    def test_time_budget_seconds(self):
        """time_budget converts to seconds."""
        assert SimplifyConfig(time_budget=timedelta(milliseconds=500)).time_budget_seconds() == 0.5


class TestErrors:
    """Tests for the error hierarchy."""

    def test_hierarchy(self):
        """Every error derives from CASError."""
        for cls in (MalformedExpression, CASArithmeticError, ComplexityExceeded, NoDerivativeRule):
            assert issubclass(cls, CASError)
        for cls in (ExponentTooLarge, NodeBudgetExceeded, TimeBudgetExceeded):
            assert issubclass(cls, ComplexityExceeded)
        assert issubclass(MalformedExpression, ValueError)
        assert issubclass(CASArithmeticError, ArithmeticError)

    def test_reasons(self):
        """Guard errors carry a reason tag."""
        assert NodeBudgetExceeded("x").reason == "nodes"
        assert TimeBudgetExceeded().reason == "time"
