from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import number as nb
from errors import CASArithmeticError
from expression import (
	Expr,
	Num,
	add,
	build_product,
	div,
	is_neg,
	is_one,
	is_op,
	is_zero,
	mul,
	neg,
	power,
)
from number import Number

Signature = Tuple[Tuple[Expr, Expr], ...]


def _negate_exponent(e: Expr) -> Expr:
	return Num(nb.negate(e.value)) if isinstance(e, Num) else neg(e)


def _is_negative_exponent(e: Expr) -> bool:
	return isinstance(e, Num) and e.value.is_real() and e.value.is_negative()


@dataclass
class Monomial:
	"""Numeric coefficient times a product of ``base^exponent`` factors.

	Bases are arbitrary expressions (symbols, radicals, sums, function
	calls); exponents are expressions, usually numeric literals. Division
	is stored as negative exponents, so ``x*y/x`` and ``y`` have the same
	monomial.
	"""

	coeff: Number = field(default_factory=lambda: nb.ZERO)
	factors: Dict[Expr, Expr] = field(default_factory=dict)

	@staticmethod
	def from_expr(e: Expr) -> "Monomial":
		if isinstance(e, Num):
			return Monomial(e.value, {})
		if is_neg(e):
			return -Monomial.from_expr(e.operand)
		if is_op(e, "*"):
			return Monomial.from_expr(e.left).mul_m(Monomial.from_expr(e.right))
		if is_op(e, "/"):
			return Monomial.from_expr(e.left).mul_m(Monomial.from_expr(e.right).reciprocal())
		if is_op(e, "^") and not isinstance(e.left, Num):
			return Monomial(nb.ONE, {e.left: e.right})
		return Monomial(nb.ONE, {e: Num(nb.ONE)})

	def coefficient(self) -> Number:
		return self.coeff

	def is_constant(self) -> bool:
		return len(self.factors) == 0

	def is_zero(self) -> bool:
		return self.coeff.is_zero()

	def signature(self) -> Signature:
		"""Key of the non-numeric part; like terms share a signature."""
		return tuple(sorted(self.factors.items(), key=lambda kv: kv[0].sort_key()))

	def mul_r(self, r: Number) -> "Monomial":
		return Monomial(nb.mul(self.coeff, r), dict(self.factors))

	def mul_m(self, other: "Monomial") -> "Monomial":
		v = dict(self.factors)
		for base, e in other.factors.items():
			v[base] = add(v[base], e) if base in v else e
		v = {b: e for b, e in v.items() if not is_zero(e)}
		return Monomial(nb.mul(self.coeff, other.coeff), v)

	def reciprocal(self) -> "Monomial":
		if self.coeff.is_zero():
			raise CASArithmeticError("division by zero")
		return Monomial(
			nb.div(nb.ONE, self.coeff),
			{b: _negate_exponent(e) for b, e in self.factors.items()},
		)

	def __neg__(self) -> "Monomial":
		return Monomial(nb.negate(self.coeff), dict(self.factors))

	def is_like_term(self, other: "Monomial") -> bool:
		return self.signature() == other.signature()

	def split(self) -> Tuple["Monomial", "Monomial"]:
		"""``(numerator, denominator)`` by exponent sign; the coefficient stays on top."""
		top: Dict[Expr, Expr] = {}
		bottom: Dict[Expr, Expr] = {}
		for b, e in self.factors.items():
			if _is_negative_exponent(e):
				bottom[b] = _negate_exponent(e)
			else:
				top[b] = e
		return Monomial(self.coeff, top), Monomial(nb.ONE, bottom)

	def is_fraction(self) -> bool:
		return any(_is_negative_exponent(e) for e in self.factors.values())

	def _product(self, factors: Dict[Expr, Expr]) -> Expr:
		parts: List[Expr] = []
		for base, e in sorted(factors.items(), key=lambda kv: kv[0].sort_key()):
			parts.append(base if is_one(e) else power(base, e))
		return build_product(parts)

	def to_expr(self) -> Expr:
		"""Canonical form ``(p*num)/(q*den)``, negated as a whole when the coefficient is negative."""
		if self.is_zero() or self.is_constant():
			return Num(self.coeff)
		top, bottom = self.split()
		c = self.coeff
		negative = c.is_real() and c.is_negative()
		if negative:
			c = nb.negate(c)
		if isinstance(c, nb.Rational):
			p, q = Num(nb.Integer(c.numerator())), Num(nb.Integer(c.denominator()))
		else:
			p, q = Num(c), Num(nb.ONE)
		out = mul(p, self._product(top.factors))
		den = mul(q, self._product(bottom.factors))
		if not is_one(den):
			out = div(out, den)
		return neg(out) if negative else out

	def __str__(self) -> str:
		return str(self.to_expr())
