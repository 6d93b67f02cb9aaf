"""Algebraic normalization of sums, products and quotients.

Sums are collected through ``Polynomial`` (like terms grouped by their
non-numeric part), products and quotients through ``Monomial``
(coefficients multiplied, equal bases merged into powers, division stored as
negative exponents). Binomials are expanded for the difference-of-squares and
perfect-square shapes; the factoring direction is only used to cancel
``(a^2 - b^2)/(a + b)``.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import number as nb
from expression import (
    Expr,
    Num,
    div,
    is_neg,
    is_op,
    is_zero,
    mul,
)
from monomial import Monomial
from polynomial import Polynomial, is_sum
from power_rules import integer_value
from rules import RuleContext, RuleFn, RuleModule

logger = logging.getLogger(__name__)


def _binomial(e: Expr) -> Optional[Polynomial]:
    if not is_sum(e):
        return None
    p = Polynomial.from_expr(e)
    return p if p.term_count() == 2 else None


def _common_denominator(a: Monomial, b: Monomial) -> Monomial:
    """Least common multiple of two denominators; falls back to their product."""
    factors = dict(a.factors)
    for base, x in b.factors.items():
        if base not in factors or factors[base] == x:
            factors[base] = x
            continue
        i, j = integer_value(factors[base]), integer_value(x)
        if i is None or j is None:
            return a.mul_m(b)
        factors[base] = Num(nb.Integer(max(i, j)))
    return Monomial(nb.ONE, factors)


class AlgebraRules(RuleModule):
    name = "algebra"
    flag = "enable_algebra_rules"

    def rules(self) -> List[Tuple[str, RuleFn]]:
        return [
            ("zero_product", self.zero_product),
            ("self_difference", self.self_difference),
            ("self_quotient", self.self_quotient),
            ("zero_numerator", self.zero_numerator),
            ("cancel_binomial_quotient", self.cancel_binomial_quotient),
            ("difference_of_squares", self.difference_of_squares),
            ("square_binomial", self.square_binomial),
            ("collect_factors", self.collect_factors),
            ("add_fractions", self.add_fractions),
            ("collect_terms", self.collect_terms),
        ]

    def zero_product(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "*") and (is_zero(e.left) or is_zero(e.right)):
            return Num(nb.ZERO)
        return None

    def self_difference(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "-") and e.left == e.right:
            return Num(nb.ZERO)
        return None

    def self_quotient(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "/") and e.left == e.right and not is_zero(e.left):
            return Num(nb.ONE)
        return None

    def zero_numerator(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "/") and is_zero(e.left) and not is_zero(e.right):
            return Num(nb.ZERO)
        return None

    def cancel_binomial_quotient(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``(a^2 - b^2)/(a + b) -> a - b``."""
        if not is_op(e, "/"):
            return None
        den = _binomial(e.right)
        if den is None or not is_sum(e.left):
            return None
        num = Polynomial.from_expr(e.left)
        t1, t2 = den.terms
        for conj in (Polynomial.from_monomials([t1, -t2]), Polynomial.from_monomials([-t1, t2])):
            if (num - den * conj).is_zero():
                return conj.to_expr()
        return None

    def difference_of_squares(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not is_op(e, "*"):
            return None
        m = Monomial.from_expr(e)
        pairs = [(b, _binomial(b)) for b, x in m.factors.items() if x == Num(nb.ONE)]
        pairs = [(b, p) for b, p in pairs if p is not None]
        for i in range(len(pairs)):
            for j in range(i + 1, len(pairs)):
                prod = pairs[i][1] * pairs[j][1]
                if prod.term_count() != 2:
                    continue
                factors = {b: x for b, x in m.factors.items() if b not in (pairs[i][0], pairs[j][0])}
                rest = Monomial(m.coeff, factors)
                if rest.is_constant():
                    return prod.scalar_mul(m.coeff).to_expr()
                return mul(rest.to_expr(), prod.to_expr())
        return None

    def square_binomial(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_op(e, "^") and integer_value(e.right) == 2):
            return None
        p = _binomial(e.left)
        if p is None:
            return None
        return p.pow(2).to_expr()

    def collect_factors(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """Merge a product or quotient into ``(p*num)/(q*den)``; common factors cancel."""
        inner = e.operand if is_neg(e) else e
        if not (is_op(inner, "*") or is_op(inner, "/")):
            return None
        return Monomial.from_expr(e).to_expr()

    def add_fractions(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``a/b + c/d`` over the least common denominator of ``b`` and ``d``."""
        if not is_sum(e):
            return None
        p = Polynomial.from_expr(e)
        found = [i for i, t in enumerate(p.terms) if t.is_fraction()]
        if len(found) < 2:
            return None
        i, j = found[0], found[1]
        (n1, d1), (n2, d2) = p.terms[i].split(), p.terms[j].split()
        common = _common_denominator(d1, d2)
        top = Polynomial.from_monomials([
            n1.mul_m(common.mul_m(d1.reciprocal())),
            n2.mul_m(common.mul_m(d2.reciprocal())),
        ])
        combined = div(top.to_expr(), common.to_expr())
        logger.debug("adding fractions %s and %s", p.terms[i], p.terms[j])
        rest = [t for k, t in enumerate(p.terms) if k not in (i, j)]
        rest.append(Monomial.from_expr(combined))
        return Polynomial.from_monomials(rest).to_expr()

    def collect_terms(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_sum(e) or (is_neg(e) and is_sum(e.operand))):
            return None
        return Polynomial.from_expr(e).to_expr()
