"""Trigonometric normalization.

Only symbolic rational multiples of pi are reduced and looked up in the
exact-value tables; decimal arguments are left alone unless approximation
is enabled. ``tan`` is never expanded into ``sin/cos``.
"""
from __future__ import annotations
from fractions import Fraction
from typing import Dict, List, Optional, Tuple

import number as nb
from errors import CASArithmeticError
from expression import (
    Expr,
    Function,
    Num,
    func,
    is_func,
    is_neg,
    is_op,
    neg,
    pi,
)
from monomial import Monomial
from polynomial import Polynomial, is_sum
from rules import RuleContext, RuleFn, RuleModule, approximate_call

_ODD = ("sin", "tan", "asin", "atan", "sinh", "tanh")
_EVEN = ("cos", "cosh")


def _surd(coeff: Fraction, radicand: int) -> Expr:
    """Canonical ``coeff*sqrt(radicand)``."""
    if radicand == 1:
        return Num(nb.from_fraction(coeff))
    return Monomial(nb.from_fraction(coeff), {func("sqrt", Num(nb.Integer(radicand))): Num(nb.ONE)}).to_expr()


# sin on [0, pi/2], in units of pi
_SIN: Dict[Fraction, Expr] = {
    Fraction(0): _surd(Fraction(0), 1),
    Fraction(1, 6): _surd(Fraction(1, 2), 1),
    Fraction(1, 4): _surd(Fraction(1, 2), 2),
    Fraction(1, 3): _surd(Fraction(1, 2), 3),
    Fraction(1, 2): _surd(Fraction(1), 1),
}

# tan on [0, pi/2), in units of pi
_TAN: Dict[Fraction, Expr] = {
    Fraction(0): _surd(Fraction(0), 1),
    Fraction(1, 6): _surd(Fraction(1, 3), 3),
    Fraction(1, 4): _surd(Fraction(1), 1),
    Fraction(1, 3): _surd(Fraction(1), 3),
}


def pi_multiple(e: Expr) -> Optional[Fraction]:
    """``q`` when ``e == q*pi`` for rational ``q`` (``0`` counts)."""
    if isinstance(e, Num):
        return Fraction(0) if e.value.is_exact() and e.value.is_zero() else None
    m = Monomial.from_expr(e)
    if m.factors != {pi: Num(nb.ONE)} or not m.coeff.is_exact():
        return None
    return m.coeff.to_fraction()


def _pi_times(q: Fraction) -> Expr:
    return Monomial(nb.from_fraction(q), {pi: Num(nb.ONE)}).to_expr()


def _sin_value(q: Fraction) -> Optional[Expr]:
    q = q % 2
    negative = q >= 1
    if negative:
        q -= 1
    if q > Fraction(1, 2):
        q = 1 - q
    v = _SIN.get(q)
    if v is None:
        return None
    return neg(v) if negative else v


def _tan_value(q: Fraction) -> Optional[Expr]:
    q = q % 1
    if q == Fraction(1, 2):
        raise CASArithmeticError("tan is undefined at odd multiples of pi/2")
    negative = q > Fraction(1, 2)
    if negative:
        q = 1 - q
    v = _TAN.get(q)
    if v is None:
        return None
    return neg(v) if negative else v


def _reduce(q: Fraction, period: int) -> Fraction:
    # representative in (-period/2, period/2]
    half = Fraction(period, 2)
    r = q % period
    return r - period if r > half else r


# inverse tables: canonical value -> angle in units of pi
_ASIN = {v: q for q, v in _SIN.items()}
_ATAN = {v: q for q, v in _TAN.items()}

_INVERSE_OF = {"sin": "asin", "cos": "acos", "tan": "atan"}


class TrigRules(RuleModule):
    name = "trig"
    flag = "enable_trig_rules"

    def rules(self) -> List[Tuple[str, RuleFn]]:
        return [
            ("parity", self.parity),
            ("exact_value", self.exact_value),
            ("periodic_reduction", self.periodic_reduction),
            ("inverse_value", self.inverse_value),
            ("inverse_composition", self.inverse_composition),
            ("hyperbolic_zero", self.hyperbolic_zero),
            ("pythagorean", self.pythagorean),
            ("sin_over_cos", self.sin_over_cos),
            ("approximate", self.approximate),
        ]

    @staticmethod
    def _unary(e: Expr) -> Optional[Tuple[str, Expr]]:
        if isinstance(e, Function) and len(e.args) == 1:
            return e.name, e.args[0]
        return None

    def parity(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        call = self._unary(e)
        if call is None or call[0] not in _ODD + _EVEN:
            return None
        name, u = call
        if is_neg(u):
            inner = u.operand
        elif isinstance(u, Num) and u.value.is_real() and u.value.is_negative():
            inner = Num(nb.negate(u.value))
        else:
            return None
        out = func(name, inner)
        return out if name in _EVEN else neg(out)

    def exact_value(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        call = self._unary(e)
        if call is None or call[0] not in ("sin", "cos", "tan"):
            return None
        name, u = call
        q = pi_multiple(u)
        if q is None:
            return None
        if name == "sin":
            return _sin_value(q)
        if name == "cos":
            return _sin_value(q + Fraction(1, 2))
        return _tan_value(q)

    def periodic_reduction(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """Shift ``q*pi`` into one period around zero (``2*pi`` or ``pi`` for tan)."""
        call = self._unary(e)
        if call is None or call[0] not in ("sin", "cos", "tan"):
            return None
        name, u = call
        q = pi_multiple(u)
        if q is None:
            return None
        r = _reduce(q, 1 if name == "tan" else 2)
        if r == q:
            return None
        return func(name, _pi_times(r))

    def inverse_value(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        call = self._unary(e)
        if call is None or call[0] not in ("asin", "acos", "atan"):
            return None
        name, u = call
        table = _ATAN if name == "atan" else _ASIN
        negative = is_neg(u) or (isinstance(u, Num) and u.value.is_real() and u.value.is_negative())
        if not negative:
            key = u
        elif is_neg(u):
            key = u.operand
        else:
            key = Num(nb.negate(u.value))
        q = table.get(key)
        if q is None:
            return None
        if negative:
            q = -q
        if name == "acos":
            q = Fraction(1, 2) - q
        return _pi_times(q)

    def inverse_composition(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``sin(asin(x)) -> x``; the other order is not an identity."""
        call = self._unary(e)
        if call is None or call[0] not in _INVERSE_OF:
            return None
        name, u = call
        if is_func(u, _INVERSE_OF[name]) and len(u.args) == 1:
            return u.args[0]
        return None

    def hyperbolic_zero(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        call = self._unary(e)
        if call is None or call[0] not in ("sinh", "cosh", "tanh"):
            return None
        name, u = call
        if isinstance(u, Num) and u.value.is_exact() and u.value.is_zero():
            return Num(nb.ONE if name == "cosh" else nb.ZERO)
        return None

    def pythagorean(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``k*sin(u)^2*r + k*cos(u)^2*r -> k*r`` for any pair of terms in a sum."""
        if not is_sum(e):
            return None
        p = Polynomial.from_expr(e)
        two = Num(nb.TWO)
        for i, t in enumerate(p.terms):
            for base, x in t.factors.items():
                if not (is_func(base, "sin") and x == two):
                    continue
                partner = dict(t.factors)
                del partner[base]
                rest = dict(partner)
                partner[func("cos", *base.args)] = two
                for j, other in enumerate(p.terms):
                    if j != i and other.factors == partner and other.coeff == t.coeff:
                        merged = [m for k, m in enumerate(p.terms) if k not in (i, j)]
                        merged.append(Monomial(t.coeff, rest))
                        return Polynomial.from_monomials(merged).to_expr()
        return None

    def sin_over_cos(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``sin(u)^k/cos(u)^k -> tan(u)^k`` inside a product or quotient; one direction only."""
        if not (is_op(e, "/") or is_op(e, "*")):
            return None
        m = Monomial.from_expr(e)
        for base, x in m.factors.items():
            if not (is_func(base, "sin") and len(base.args) == 1 and isinstance(x, Num)):
                continue
            if not (x.value.is_real() and x.value.is_positive()):
                continue
            u = base.args[0]
            c = func("cos", u)
            if m.factors.get(c) != Num(nb.negate(x.value)):
                continue
            factors = dict(m.factors)
            del factors[base]
            del factors[c]
            factors[func("tan", u)] = x
            return Monomial(m.coeff, factors).to_expr()
        return None

    def approximate(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        call = self._unary(e)
        if call is None or call[0] not in _ODD + _EVEN + ("acos",):
            return None
        return approximate_call(e, ctx)

