from __future__ import annotations
from fractions import Fraction
from math import inf
from typing import Callable, Dict, Optional, Union

from expression import BinaryOp, Constant, Expr, Function, Num, Symbol, UnaryOp

Bound = Union[Fraction, float]

# enclosures of the transcendental constants
_PI = (Fraction(314159, 100000), Fraction(314160, 100000))
_E = (Fraction(271828, 100000), Fraction(271829, 100000))


def _mul(x: Bound, y: Bound) -> Bound:
    # 0 * inf counts as 0 for range purposes
    if x == 0 or y == 0:
        return Fraction(0)
    return x * y


class Interval:
    """Conservative real range with optional open ends.

    Used for sign questions ("is this provably positive?"), so every
    operation errs towards a wider interval.
    """

    a: Bound
    b: Bound
    left_open: bool
    right_open: bool

    @staticmethod
    def point(p: Bound) -> "Interval":
        return Interval(p, p, False, False)

    @staticmethod
    def open(l: Bound, r: Bound) -> "Interval":
        return Interval(l, r, True, True)

    @staticmethod
    def closed(l: Bound, r: Bound) -> "Interval":
        return Interval(l, r, False, False)

    @staticmethod
    def reals() -> "Interval":
        return Interval(-inf, inf, True, True)

    def __init__(self, l: Bound, r: Bound, lo: bool = False, ro: bool = False) -> None:
        self.a = l
        self.b = r
        self.left_open = lo or l == -inf
        self.right_open = ro or r == inf

    def is_positive(self) -> bool:
        return self.a > 0 or (self.a == 0 and self.left_open)

    def is_nonnegative(self) -> bool:
        return self.a >= 0

    def is_negative(self) -> bool:
        return self.b < 0 or (self.b == 0 and self.right_open)

    def contains_zero(self) -> bool:
        if self.a < 0 < self.b:
            return True
        return (self.a == 0 and not self.left_open) or (self.b == 0 and not self.right_open)

    def __add__(self, other: "Interval") -> "Interval":
        return Interval(
            self.a + other.a,
            self.b + other.b,
            self.left_open or other.left_open,
            self.right_open or other.right_open,
        )

    def __neg__(self) -> "Interval":
        return Interval(-self.b, -self.a, self.right_open, self.left_open)

    def __sub__(self, other: "Interval") -> "Interval":
        return self + (-other)

    def __mul__(self, other: "Interval") -> "Interval":
        cands = []
        for x, xo in ((self.a, self.left_open), (self.b, self.right_open)):
            for y, yo in ((other.a, other.left_open), (other.b, other.right_open)):
                v = _mul(x, y)
                # a closed zero endpoint makes the product attainable
                opened = (xo or yo) and not ((x == 0 and not xo) or (y == 0 and not yo))
                cands.append((v, opened))
        lo = min(v for v, _ in cands)
        hi = max(v for v, _ in cands)
        lo_open = all(o for v, o in cands if v == lo)
        hi_open = all(o for v, o in cands if v == hi)
        return Interval(lo, hi, lo_open, hi_open)

    def reciprocal(self) -> Optional["Interval"]:
        if self.contains_zero():
            return None
        if self.a == 0:
            # (0, b] -> [1/b, inf)
            return Interval(_inv(self.b), inf, self.right_open, True)
        if self.b == 0:
            return Interval(-inf, _inv(self.a), True, self.left_open)
        return Interval(_inv(self.b), _inv(self.a), self.right_open, self.left_open)

    def __truediv__(self, other: "Interval") -> Optional["Interval"]:
        r = other.reciprocal()
        return None if r is None else self * r

    def pow_int(self, n: int) -> Optional["Interval"]:
        if n == 0:
            return Interval.point(Fraction(1))
        if n < 0:
            base = self.pow_int(-n)
            return None if base is None else base.reciprocal()
        lo, hi = _pow(self.a, n), _pow(self.b, n)
        if n % 2:
            return Interval(lo, hi, self.left_open, self.right_open)
        if self.a >= 0:
            return Interval(lo, hi, self.left_open, self.right_open)
        if self.b <= 0:
            return Interval(hi, lo, self.right_open, self.left_open)
        top, top_open = (lo, self.left_open) if lo >= hi else (hi, self.right_open)
        return Interval(Fraction(0), top, False, top_open)

    def __str__(self) -> str:
        s = "(" if self.left_open else "["
        s += "-∞" if self.a == -inf else str(self.a)
        s += ", "
        s += "∞" if self.b == inf else str(self.b)
        s += ")" if self.right_open else "]"
        return s


def _inv(x: Bound) -> Bound:
    if x in (inf, -inf):
        return Fraction(0)
    return 1 / x


def _pow(x: Bound, n: int) -> Bound:
    if x in (inf, -inf):
        return inf if (x > 0 or n % 2 == 0) else -inf
    return x ** n


_FUNCTION_RANGES: Dict[str, Callable[[Interval], Optional[Interval]]] = {
    "sin": lambda iv: Interval.closed(Fraction(-1), Fraction(1)),
    "cos": lambda iv: Interval.closed(Fraction(-1), Fraction(1)),
    "tanh": lambda iv: Interval.open(Fraction(-1), Fraction(1)),
    "atan": lambda iv: Interval.open(-_PI[1] / 2, _PI[1] / 2),
    "exp": lambda iv: Interval(Fraction(0), inf, True, True),
    "cosh": lambda iv: Interval(Fraction(1), inf, False, True),
    "abs": lambda iv: Interval(Fraction(0), inf, False, True) if not iv.is_positive()
    else Interval(iv.a, inf, iv.left_open, True),
    "sqrt": lambda iv: None if iv.is_negative() else Interval(Fraction(0), inf, iv.is_positive(), True),
}


def bounds(expr: Expr) -> Optional[Interval]:
    """Real enclosure of ``expr`` or ``None`` when nothing useful is known."""
    if isinstance(expr, Num):
        v = expr.value
        if not v.is_real():
            return None
        return Interval.point(v.to_fraction())
    if isinstance(expr, Symbol):
        return Interval.reals()
    if isinstance(expr, Constant):
        if expr.name == "pi":
            return Interval.closed(*_PI)
        if expr.name == "e":
            return Interval.closed(*_E)
        return None
    if isinstance(expr, UnaryOp):
        inner = bounds(expr.operand)
        return None if inner is None else -inner
    if isinstance(expr, Function):
        if len(expr.args) != 1:
            return None
        inner = bounds(expr.args[0])
        rng = _FUNCTION_RANGES.get(expr.name)
        if rng is None or inner is None:
            return None
        return rng(inner)
    if isinstance(expr, BinaryOp):
        left, right = bounds(expr.left), bounds(expr.right)
        if expr.op == "^":
            return _power_bounds(left, expr.right)
        if left is None or right is None:
            return None
        if expr.op == "+":
            return left + right
        if expr.op == "-":
            return left - right
        if expr.op == "*":
            return left * right
        return left / right
    return None


def _power_bounds(base: Optional[Interval], exponent: Expr) -> Optional[Interval]:
    if base is None:
        return None
    if isinstance(exponent, Num) and exponent.value.is_exact():
        f = exponent.value.to_fraction()
        if f.denominator == 1:
            return base.pow_int(f.numerator)
        if base.a < 0:
            return None
        if f > 0:
            return Interval(Fraction(0), inf, base.is_positive(), True)
        return Interval(Fraction(0), inf, True, True) if base.is_positive() else None
    if base.is_positive():
        return Interval(Fraction(0), inf, True, True)
    return None


def is_positive(expr: Expr) -> bool:
    iv = bounds(expr)
    return iv is not None and iv.is_positive()


def is_nonnegative(expr: Expr) -> bool:
    iv = bounds(expr)
    return iv is not None and iv.is_nonnegative()


def is_negative(expr: Expr) -> bool:
    iv = bounds(expr)
    return iv is not None and iv.is_negative()


def is_nonzero(expr: Expr) -> bool:
    iv = bounds(expr)
    return iv is not None and not iv.contains_zero()
