"""Square-root normalization.

Canonical radicals are ``c*sqrt(s)`` with ``s`` squarefree. Products and
quotients of radicals merge only when both radicands are provably
non-negative, and denesting is limited to ``sqrt(a + b*sqrt(c))`` with
rational ``a, b, c`` where the candidate is checked by squaring back.
"""
from __future__ import annotations
import logging
from fractions import Fraction
from typing import List, Optional, Tuple

import interval
import number as nb
from expression import (
    Expr,
    Num,
    add,
    build_product,
    div,
    func,
    is_func,
    is_op,
    mul,
    power,
    sub,
)
from monomial import Monomial
from polynomial import Polynomial
from power_rules import integer_value, radical_parts
from rules import RuleContext, RuleFn, RuleModule, approximate_call

logger = logging.getLogger(__name__)


def _sqrt(e: Expr) -> Expr:
    return func("sqrt", e)


def _rational(e: Expr) -> Optional[Fraction]:
    if isinstance(e, Num) and e.value.is_exact():
        return e.value.to_fraction()
    return None


class RadicalRules(RuleModule):
    name = "radical"
    flag = "enable_radical_rules"

    def rules(self) -> List[Tuple[str, RuleFn]]:
        return [
            ("numeric_radicand", self.numeric_radicand),
            ("extract_square_factor", self.extract_square_factor),
            ("denest", self.denest),
            ("merge_product", self.merge_product),
            ("merge_quotient", self.merge_quotient),
            ("rationalize_denominator", self.rationalize_denominator),
        ]

    def numeric_radicand(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``sqrt(16) -> 4``, ``sqrt(8) -> 2*sqrt(2)``, ``sqrt(1/2) -> sqrt(2)/2``."""
        if not (is_func(e, "sqrt") and len(e.args) == 1 and isinstance(e.args[0], Num)):
            return None
        v = e.args[0].value
        if not v.is_exact():
            return approximate_call(e, ctx)
        if v.is_negative():
            # no complex promotion in exact mode
            return None
        root = nb.sqrt(v)
        if root is not None:
            return Num(root)
        f = v.to_fraction()
        if f.denominator != 1:
            return div(_sqrt(Num(nb.Integer(f.numerator * f.denominator))), Num(nb.Integer(f.denominator)))
        c, s = nb.square_factor(f.numerator)
        if c == 1:
            return None
        return mul(Num(nb.Integer(c)), _sqrt(Num(nb.Integer(s))))

    def extract_square_factor(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``sqrt(c^2*s*x) -> c*sqrt(s*x)`` and ``sqrt(x^2*y) -> abs(x)*sqrt(y)``."""
        if not (is_func(e, "sqrt") and len(e.args) == 1) or isinstance(e.args[0], Num):
            return None
        m = Monomial.from_expr(e.args[0])
        if not (isinstance(m.coeff, nb.Integer) and m.coeff.is_positive()):
            return None
        c, s = nb.square_factor(m.coeff.value)
        outside: List[Expr] = []
        inside = {}
        for base, exponent in m.factors.items():
            n = integer_value(exponent)
            if n is None or n < 2:
                inside[base] = exponent
                continue
            half = n // 2
            if half % 2 == 0 or interval.is_nonnegative(base):
                outside.append(power(base, Num(nb.Integer(half))))
            else:
                outside.append(power(func("abs", base), Num(nb.Integer(half))))
            if n % 2:
                inside[base] = Num(nb.ONE)
        if c == 1 and not outside:
            return None
        parts = [Num(nb.Integer(c))] + outside
        if s != 1 or inside:
            parts.append(_sqrt(Monomial(nb.Integer(s), inside).to_expr()))
        return build_product(parts)

    def denest(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``sqrt(a + b*sqrt(c)) -> sqrt(m) + sign(b)*sqrt(n)`` with ``m + n = a``, ``4mn = b^2 c``."""
        if not (is_func(e, "sqrt") and len(e.args) == 1):
            return None
        p = Polynomial.from_expr(e.args[0])
        if p.term_count() != 2:
            return None
        consts = [t for t in p.terms if t.is_constant()]
        surds = [t for t in p.terms if not t.is_constant()]
        if len(consts) != 1 or len(surds) != 1:
            return None
        a_num, term = consts[0].coeff, surds[0]
        if not (a_num.is_exact() and term.coeff.is_exact()):
            return None
        sig = term.signature()
        if len(sig) != 1 or not is_func(sig[0][0], "sqrt") or sig[0][1] != Num(nb.ONE):
            return None
        c = _rational(sig[0][0].args[0])
        if c is None or c <= 0:
            return None
        a, b = a_num.to_fraction(), term.coeff.to_fraction()
        disc = nb.sqrt(nb.from_fraction(a * a - b * b * c)) if a * a >= b * b * c else None
        if disc is None:
            return None
        d = disc.to_fraction()
        m, n = (a + d) / 2, (a - d) / 2
        if n < 0 or m + n != a or 4 * m * n != b * b * c:
            return None
        logger.debug("denested %s", e)
        left, right = _sqrt(Num(nb.from_fraction(m))), _sqrt(Num(nb.from_fraction(n)))
        return add(left, right) if b > 0 else sub(left, right)

    def merge_product(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not is_op(e, "*"):
            return None
        m = Monomial.from_expr(e)
        radicals = [
            b
            for b, x in m.factors.items()
            if is_func(b, "sqrt") and x == Num(nb.ONE) and interval.is_nonnegative(b.args[0])
        ]
        if len(radicals) < 2:
            return None
        factors = {b: x for b, x in m.factors.items() if b not in radicals}
        merged = _sqrt(build_product(r.args[0] for r in radicals))
        factors[merged] = Num(nb.ONE)
        return Monomial(m.coeff, factors).to_expr()

    def merge_quotient(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_op(e, "/") and is_func(e.left, "sqrt") and is_func(e.right, "sqrt")):
            return None
        x, y = e.left.args[0], e.right.args[0]
        if interval.is_nonnegative(x) and interval.is_positive(y):
            return _sqrt(div(x, y))
        return None

    def rationalize_denominator(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``a/(c*sqrt(n)) -> (a*sqrt(n))/(c*n)`` for a positive numeric radicand."""
        if not is_op(e, "/"):
            return None
        parts = radical_parts(e.right)
        if parts is None:
            return None
        c, r = parts
        if not (isinstance(r, Num) and r.value.is_exact() and r.value.is_positive()):
            return None
        return div(mul(e.left, _sqrt(r)), mul(c, r))
