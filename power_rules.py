"""Power-law normalization.

Handles ``^`` nodes plus the exponential family (``exp``, ``ln``, ``log``,
``abs``). Distribution over products and quotients only happens when it is
valid for every value of the free symbols: integer exponents, or bases that
range analysis proves non-negative.
"""
from __future__ import annotations
from typing import List, Optional, Tuple

import interval
import number as nb
from errors import CASArithmeticError, ExponentTooLarge
from expression import (
    Constant,
    Expr,
    Function,
    Num,
    div,
    func,
    is_func,
    is_neg,
    is_one,
    is_op,
    is_zero,
    mul,
    neg,
    power,
)
from rules import RuleContext, RuleFn, RuleModule, approximate_call


def integer_value(e: Expr) -> Optional[int]:
    if isinstance(e, Num) and isinstance(e.value, nb.Integer):
        return e.value.value
    return None


def radical_parts(e: Expr) -> Optional[Tuple[Expr, Expr]]:
    """``(c, r)`` when ``e`` is ``sqrt(r)`` or ``c*sqrt(r)`` with numeric ``c``."""
    if is_func(e, "sqrt") and len(e.args) == 1:
        return Num(nb.ONE), e.args[0]
    if is_op(e, "*"):
        if isinstance(e.left, Num) and is_func(e.right, "sqrt"):
            return e.left, e.right.args[0]
        if isinstance(e.right, Num) and is_func(e.left, "sqrt"):
            return e.right, e.left.args[0]
    return None


class PowerRules(RuleModule):
    name = "power"
    flag = "enable_power_rules"

    def rules(self) -> List[Tuple[str, RuleFn]]:
        return [
            ("fold_numeric_power", self.fold_numeric_power),
            ("zero_exponent", self.zero_exponent),
            ("unit_exponent", self.unit_exponent),
            ("zero_base", self.zero_base),
            ("unit_base", self.unit_base),
            ("radical_power", self.radical_power),
            ("nested_power", self.nested_power),
            ("negative_exponent", self.negative_exponent),
            ("negated_base", self.negated_base),
            ("distribute_product", self.distribute_product),
            ("distribute_quotient", self.distribute_quotient),
            ("exp_log", self.exp_log),
            ("abs_value", self.abs_value),
        ]

    def fold_numeric_power(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_op(e, "^") and isinstance(e.left, Num) and isinstance(e.right, Num)):
            return None
        try:
            out = nb.power(e.left.value, e.right.value, ctx.config.max_exponent_magnitude)
        except ExponentTooLarge:
            ctx.defer("exponent", e)
            return None
        if out is not None:
            return Num(out)
        # non-perfect square roots become radicals
        if e.right.value == nb.HALF and e.left.value.is_exact() and e.left.value.is_positive():
            return func("sqrt", e.left)
        return None

    def zero_exponent(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        # 0^0 stays
        if is_op(e, "^") and is_zero(e.right) and not is_zero(e.left):
            return Num(nb.ONE)
        return None

    def unit_exponent(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "^") and is_one(e.right):
            return e.left
        return None

    def zero_base(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "^") and is_zero(e.left) and interval.is_positive(e.right):
            return Num(nb.ZERO)
        return None

    def unit_base(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if is_op(e, "^") and is_one(e.left):
            return Num(nb.ONE)
        return None

    def radical_power(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        """``(c*sqrt(r))^n`` for integer ``n >= 2``: ``c^n * r^(n//2) * sqrt(r)^(n%2)``."""
        n = integer_value(e.right) if is_op(e, "^") else None
        if n is None or n < 2:
            return None
        parts = radical_parts(e.left)
        if parts is None:
            return None
        c, r = parts
        out = mul(power(c, Num(nb.Integer(n))), power(r, Num(nb.Integer(n // 2))))
        if n % 2:
            out = mul(out, func("sqrt", r))
        return out

    def nested_power(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        # (x^a)^b == x^(a*b) holds for integer b only
        if is_op(e, "^") and is_op(e.left, "^") and integer_value(e.right) is not None:
            return power(e.left.left, mul(e.left.right, e.right))
        return None

    def negative_exponent(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_op(e, "^") and isinstance(e.right, Num)):
            return None
        v = e.right.value
        if not (v.is_real() and v.is_negative()):
            return None
        return div(Num(nb.ONE), power(e.left, Num(nb.negate(v))))

    def negated_base(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        n = integer_value(e.right) if is_op(e, "^") else None
        if n is None or not is_neg(e.left):
            return None
        inner = power(e.left.operand, e.right)
        return inner if n % 2 == 0 else neg(inner)

    def _distributes(self, exponent: Expr, a: Expr, b: Expr) -> bool:
        if integer_value(exponent) is not None:
            return True
        return interval.is_nonnegative(a) and interval.is_nonnegative(b)

    def distribute_product(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_op(e, "^") and is_op(e.left, "*")):
            return None
        a, b = e.left.left, e.left.right
        if not self._distributes(e.right, a, b):
            return None
        return mul(power(a, e.right), power(b, e.right))

    def distribute_quotient(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_op(e, "^") and is_op(e.left, "/")):
            return None
        a, b = e.left.left, e.left.right
        if not self._distributes(e.right, a, b):
            return None
        return div(power(a, e.right), power(b, e.right))

    def exp_log(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (isinstance(e, Function) and len(e.args) == 1):
            return None
        u = e.args[0]
        if e.name == "exp":
            if is_zero(u):
                return Num(nb.ONE)
            if is_func(u, "ln", "log"):
                return u.args[0]
            return approximate_call(e, ctx)
        if e.name in ("ln", "log"):
            if isinstance(u, Num) and u.value.is_real():
                v = u.value
                if v.is_zero():
                    raise CASArithmeticError(f"{e.name}(0) is undefined")
                if v.is_negative() and v.is_exact():
                    raise CASArithmeticError(f"{e.name} of negative number {v}")
                if is_one(u):
                    return Num(nb.ZERO)
                return approximate_call(e, ctx)
            if u == Constant("e"):
                return Num(nb.ONE)
            # ln(exp(x)) == x for real x
            if is_func(u, "exp") and interval.bounds(u.args[0]) is not None:
                return u.args[0]
            if is_op(u, "^") and u.left == Constant("e") and interval.bounds(u.right) is not None:
                return u.right
        return None

    def abs_value(self, e: Expr, ctx: RuleContext) -> Optional[Expr]:
        if not (is_func(e, "abs") and len(e.args) == 1):
            return None
        u = e.args[0]
        if isinstance(u, Num) and u.value.is_real():
            return Num(nb.negate(u.value)) if u.value.is_negative() else u
        if is_neg(u):
            return func("abs", u.operand)
        if interval.is_nonnegative(u):
            return u
        if interval.is_negative(u):
            return neg(u)
        return None

