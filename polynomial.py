from __future__ import annotations
from typing import Dict, List, Iterable
from dataclasses import dataclass, field

import number as nb
from expression import Expr, Num, Symbol, build_sum, is_neg, is_one, is_op, is_zero, mul, power
from monomial import Monomial, Signature
from number import Number

# largest integer power of a sum that expand multiplies out
MAX_EXPAND_POWER = 64


def is_sum(e: Expr) -> bool:
    return is_op(e, "+") or is_op(e, "-")


@dataclass
class Polynomial:
    """Sum of monomials with like terms merged.

    Terms are generalized monomials, so ``3*sqrt(2) + sqrt(2)`` and
    ``2*x*sin(y) - x*sin(y)`` collect the same way ``x + x`` does.
    """

    terms: List[Monomial] = field(default_factory=list)

    def __post_init__(self):
        self.normalize()

    @staticmethod
    def from_monomials(monoms: Iterable[Monomial]) -> "Polynomial":
        p = Polynomial([])
        p.terms = list(monoms)
        p.normalize()
        return p

    @staticmethod
    def from_expr(e: Expr) -> "Polynomial":
        return Polynomial.from_monomials(_flatten(e, False))

    @staticmethod
    def constant(c: Number) -> "Polynomial":
        return Polynomial([Monomial(c, {})])

    def normalize(self) -> None:
        # combine like terms, keeping first-seen order
        acc: Dict[Signature, Number] = {}
        for m in self.terms:
            sig = m.signature()
            acc[sig] = nb.add(acc[sig], m.coefficient()) if sig in acc else m.coefficient()
        new_terms: List[Monomial] = []
        for sig, c in acc.items():
            if not (c.is_exact() and c.is_zero()):
                new_terms.append(Monomial(c, dict(sig)))
        self.terms = new_terms

    def is_zero(self) -> bool:
        return len(self.terms) == 0

    def is_constant(self) -> bool:
        return all(m.is_constant() for m in self.terms)

    def term_count(self) -> int:
        return len(self.terms)

    def __add__(self, rhs: "Polynomial") -> "Polynomial":
        return Polynomial.from_monomials(self.terms + rhs.terms)

    def __sub__(self, rhs: "Polynomial") -> "Polynomial":
        return Polynomial.from_monomials(self.terms + [-m for m in rhs.terms])

    def __neg__(self) -> "Polynomial":
        return Polynomial.from_monomials([-m for m in self.terms])

    def __mul__(self, rhs: "Polynomial") -> "Polynomial":
        prods: List[Monomial] = []
        for a in self.terms:
            for b in rhs.terms:
                prods.append(a.mul_m(b))
        return Polynomial.from_monomials(prods)

    def scalar_mul(self, r: Number) -> "Polynomial":
        return Polynomial.from_monomials([m.mul_r(r) for m in self.terms])

    def pow(self, exp: int) -> "Polynomial":
        if exp == 0:
            return Polynomial.constant(nb.ONE)
        res = Polynomial.from_monomials(self.terms)
        for _ in range(exp - 1):
            res = res * self
        return res

    def to_expr(self) -> Expr:
        return build_sum(m.to_expr() for m in self.terms)

    def __str__(self) -> str:
        return str(self.to_expr())


def _flatten(e: Expr, negate: bool) -> List[Monomial]:
    if is_op(e, "+"):
        return _flatten(e.left, negate) + _flatten(e.right, negate)
    if is_op(e, "-"):
        return _flatten(e.left, negate) + _flatten(e.right, not negate)
    if is_neg(e) and is_sum(e.operand):
        return _flatten(e.operand, not negate)
    m = Monomial.from_expr(e)
    return [-m if negate else m]


def expand(e: Expr) -> Polynomial:
    """Multiply out products and small non-negative integer powers of sums.

    Denominators are kept whole, so ``(x+1)/(x-1)`` expands to
    ``x/(x-1) + 1/(x-1)``.
    """
    if is_op(e, "+"):
        return expand(e.left) + expand(e.right)
    if is_op(e, "-"):
        return expand(e.left) - expand(e.right)
    if is_neg(e):
        return -expand(e.operand)
    if is_op(e, "*"):
        return expand(e.left) * expand(e.right)
    if is_op(e, "/"):
        return expand(e.left) * Polynomial([Monomial.from_expr(e.right).reciprocal()])
    if is_op(e, "^") and isinstance(e.right, Num) and isinstance(e.right.value, nb.Integer):
        n = e.right.value.value
        if 0 <= n <= MAX_EXPAND_POWER:
            return expand(e.left).pow(n)
    return Polynomial([Monomial.from_expr(e)])


def collect(e: Expr, var: Symbol) -> Expr:
    """Expand ``e`` and group its terms by the power of ``var``."""
    groups: Dict[Expr, List[Monomial]] = {}
    for m in expand(e).terms:
        rest = dict(m.factors)
        k = rest.pop(var, Num(nb.ZERO))
        groups.setdefault(k, []).append(Monomial(m.coeff, rest))
    parts: List[Expr] = []
    for k, monoms in groups.items():
        coeff = Polynomial.from_monomials(monoms).to_expr()
        if is_zero(k):
            parts.append(coeff)
        else:
            parts.append(mul(coeff, var if is_one(k) else power(var, k)))
    return build_sum(parts)
