"""Exact/approximate number tower.

Levels, lowest first:

- ``Integer``  arbitrary precision integer
- ``Rational`` reduced fraction, never integer valued
- ``Real``     ``decimal.Decimal`` with a precision budget (significant digits)
- ``Complex``  pair of the above, never with a zero imaginary part

Exact values stay exact: a result that cannot be represented exactly (an
irrational root, say) is reported as ``None`` so the caller keeps the
unevaluated expression. Nothing here silently turns an exact value into a
decimal.
"""
from __future__ import annotations
import decimal
import math
from fractions import Fraction
from typing import Optional, Tuple, Union

from errors import CASArithmeticError, ExponentTooLarge

DEFAULT_PRECISION = 28
DEFAULT_MAX_EXPONENT = 1000
# trial division bound used when splitting off square factors
SQUARE_TRIAL_LIMIT = 100_000
# bits an exact power may hold per unit of the exponent ceiling, i.e. the
# size of a one-byte base raised to the ceiling
RESULT_BITS_PER_UNIT = 8
# ints above 4300 digits cannot be converted to text by default
STR_MAX_BITS = 13_000


def _int_str(n: int) -> str:
    if n.bit_length() <= STR_MAX_BITS:
        return str(n)
    digits = int(n.bit_length() * math.log10(2)) + 1
    return f"{'-' if n < 0 else ''}<{digits}-digit integer>"


class Number:
    __slots__ = ()
    level = 0

    def is_exact(self) -> bool:
        return self.level == 0

    def is_real(self) -> bool:
        return self.level < 2

    def is_integer(self) -> bool:
        return False

    def is_zero(self) -> bool:
        return self.is_real() and self.to_fraction() == 0

    def is_one(self) -> bool:
        return self.is_real() and self.to_fraction() == 1

    def is_negative(self) -> bool:
        return self.is_real() and self.to_fraction() < 0

    def is_positive(self) -> bool:
        return self.is_real() and self.to_fraction() > 0

    def to_fraction(self) -> Fraction:
        raise NotImplementedError

    def to_float(self) -> float:
        return float(self.to_fraction())

    def sort_key(self) -> Tuple[int, Fraction, Fraction]:
        return (self.level, self.to_fraction(), Fraction(0))

    def __add__(self, other: Number) -> Number:
        return add(self, other)

    def __sub__(self, other: Number) -> Number:
        return sub(self, other)

    def __mul__(self, other: Number) -> Number:
        return mul(self, other)

    def __truediv__(self, other: Number) -> Number:
        return div(self, other)

    def __neg__(self) -> Number:
        return negate(self)

    def __pow__(self, other: Number) -> Optional[Number]:
        return power(self, other)

    def __lt__(self, other: Number) -> bool:
        return compare(self, other) < 0

    def __le__(self, other: Number) -> bool:
        return compare(self, other) <= 0

    def __gt__(self, other: Number) -> bool:
        return compare(self, other) > 0

    def __ge__(self, other: Number) -> bool:
        return compare(self, other) >= 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class Integer(Number):
    __slots__ = ("value",)

    def __init__(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Integer needs an int, got {type(value).__name__}")
        self.value = value

    def is_integer(self) -> bool:
        return True

    def to_fraction(self) -> Fraction:
        return Fraction(self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Integer) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("Integer", self.value))

    def __str__(self) -> str:
        return _int_str(self.value)


class Rational(Number):
    __slots__ = ("_f",)

    def __init__(self, num: int | Fraction, den: int | None = None) -> None:
        try:
            f = num if isinstance(num, Fraction) else Fraction(num, 1 if den is None else den)
        except ZeroDivisionError:
            raise CASArithmeticError("rational with zero denominator") from None
        if f.denominator == 1:
            raise ValueError("integer-valued rational must be an Integer; use rational()")
        self._f = f

    def to_fraction(self) -> Fraction:
        return self._f

    def numerator(self) -> int:
        return self._f.numerator

    def denominator(self) -> int:
        return self._f.denominator

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Rational) and self._f == other._f

    def __hash__(self) -> int:
        return hash(("Rational", self._f))

    def __str__(self) -> str:
        return f"{_int_str(self._f.numerator)}/{_int_str(self._f.denominator)}"


class Real(Number):
    __slots__ = ("value", "precision")
    level = 1

    def __init__(self, value: Union[int, str, decimal.Decimal], precision: int = DEFAULT_PRECISION) -> None:
        if precision < 1:
            raise ValueError("precision must be positive")
        with _context(precision):
            self.value = +decimal.Decimal(value)
        if not self.value.is_finite():
            raise CASArithmeticError(f"non-finite decimal {value}")
        self.precision = precision

    def is_integer(self) -> bool:
        return False

    def to_fraction(self) -> Fraction:
        return Fraction(self.value)

    def to_float(self) -> float:
        return float(self.value)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Real)
            and self.value == other.value
            and self.precision == other.precision
        )

    def __hash__(self) -> int:
        return hash(("Real", self.value, self.precision))

    def __str__(self) -> str:
        s = str(self.value.normalize())
        if "." not in s and "E" not in s:
            s += ".0"
        return s


class Complex(Number):
    __slots__ = ("real", "imag")
    level = 2

    def __init__(self, real: Number, imag: Number) -> None:
        if not (real.is_real() and imag.is_real()):
            raise TypeError("complex parts must be real numbers")
        if imag.is_zero():
            raise ValueError("complex with zero imaginary part; use complex_number()")
        self.real = real
        self.imag = imag

    def to_fraction(self) -> Fraction:
        raise CASArithmeticError("complex number has no real value")

    def to_float(self) -> float:
        raise CASArithmeticError("complex number has no real value")

    def to_complex(self) -> complex:
        return complex(self.real.to_float(), self.imag.to_float())

    def sort_key(self) -> Tuple[int, Fraction, Fraction]:
        return (self.level, self.real.to_fraction(), self.imag.to_fraction())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Complex) and self.real == other.real and self.imag == other.imag

    def __hash__(self) -> int:
        return hash(("Complex", self.real, self.imag))

    def __str__(self) -> str:
        sign = "-" if self.imag.is_negative() else "+"
        mag = negate(self.imag) if self.imag.is_negative() else self.imag
        return f"({self.real} {sign} {mag}*i)"


ZERO = Integer(0)
ONE = Integer(1)
NEG_ONE = Integer(-1)
TWO = Integer(2)
HALF = Rational(1, 2)


# -----------------
# Construction
# -----------------
def from_fraction(f: Fraction) -> Number:
    if f.denominator == 1:
        return Integer(f.numerator)
    return Rational(f)


def rational(num: int, den: int = 1) -> Number:
    if den == 0:
        raise CASArithmeticError("division by zero")
    return from_fraction(Fraction(num, den))


def complex_number(real: Number, imag: Number) -> Number:
    if imag.is_zero():
        return real
    return Complex(real, imag)


def as_number(value: Union[int, float, complex, Fraction, decimal.Decimal, Number]) -> Number:
    if isinstance(value, Number):
        return value
    if isinstance(value, bool):
        raise TypeError("booleans are not numbers here")
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, Fraction):
        return from_fraction(value)
    if isinstance(value, decimal.Decimal):
        return Real(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise CASArithmeticError(f"non-finite float {value}")
        return Real(repr(value))
    if isinstance(value, complex):
        return complex_number(as_number(value.real), as_number(value.imag))
    raise TypeError(f"cannot convert {type(value).__name__} to a number")


def approximate(n: Number, precision: int = DEFAULT_PRECISION) -> Number:
    """Decimal form of ``n``; only called when approximation is allowed."""
    if isinstance(n, Complex):
        return complex_number(approximate(n.real, precision), approximate(n.imag, precision))
    if isinstance(n, Real):
        return n if n.precision <= precision else Real(n.value, precision)
    return Real(_dec(n, precision), precision)


# -----------------
# Arithmetic
# -----------------
def _context(precision: int):
    ctx = decimal.Context(prec=precision, rounding=decimal.ROUND_HALF_EVEN)
    return decimal.localcontext(ctx)


def _precision(a: Number, b: Number) -> int:
    precs = [n.precision for n in (a, b) if isinstance(n, Real)]
    return min(precs) if precs else DEFAULT_PRECISION


def _dec(n: Number, precision: int) -> decimal.Decimal:
    if isinstance(n, Real):
        return n.value
    f = n.to_fraction()
    with _context(precision):
        return decimal.Decimal(f.numerator) / decimal.Decimal(f.denominator)


def _parts(n: Number) -> Tuple[Number, Number]:
    if isinstance(n, Complex):
        return n.real, n.imag
    return n, ZERO


def add(a: Number, b: Number) -> Number:
    if a.level == 2 or b.level == 2:
        ar, ai = _parts(a)
        br, bi = _parts(b)
        return complex_number(add(ar, br), add(ai, bi))
    if a.is_exact() and b.is_exact():
        return from_fraction(a.to_fraction() + b.to_fraction())
    p = _precision(a, b)
    with _context(p):
        return Real(_dec(a, p) + _dec(b, p), p)


def negate(a: Number) -> Number:
    if isinstance(a, Complex):
        return Complex(negate(a.real), negate(a.imag))
    if isinstance(a, Real):
        return Real(-a.value, a.precision)
    return from_fraction(-a.to_fraction())


def sub(a: Number, b: Number) -> Number:
    return add(a, negate(b))


def mul(a: Number, b: Number) -> Number:
    if a.level == 2 or b.level == 2:
        ar, ai = _parts(a)
        br, bi = _parts(b)
        return complex_number(sub(mul(ar, br), mul(ai, bi)), add(mul(ar, bi), mul(ai, br)))
    if a.is_exact() and b.is_exact():
        return from_fraction(a.to_fraction() * b.to_fraction())
    p = _precision(a, b)
    with _context(p):
        return Real(_dec(a, p) * _dec(b, p), p)


def div(a: Number, b: Number) -> Number:
    if b.is_zero():
        raise CASArithmeticError("division by zero")
    if a.level == 2 or b.level == 2:
        br, bi = _parts(b)
        denom = add(mul(br, br), mul(bi, bi))
        conj = complex_number(br, negate(bi))
        num = mul(a, conj)
        nr, ni = _parts(num)
        return complex_number(div(nr, denom), div(ni, denom))
    if a.is_exact() and b.is_exact():
        return from_fraction(a.to_fraction() / b.to_fraction())
    p = _precision(a, b)
    with _context(p):
        return Real(_dec(a, p) / _dec(b, p), p)


def compare(a: Number, b: Number) -> int:
    if not (a.is_real() and b.is_real()):
        raise CASArithmeticError("complex numbers are not ordered")
    fa, fb = a.to_fraction(), b.to_fraction()
    return (fa > fb) - (fa < fb)


def check_exponent(exponent: Number, max_exponent: int) -> None:
    """Raise ``ExponentTooLarge`` before any digits are computed.

    A rational exponent is bounded by both its numerator and its
    denominator, since the root degree drives the cost of ``integer_root``.
    """
    if isinstance(exponent, Complex):
        check_exponent(exponent.real, max_exponent)
        check_exponent(exponent.imag, max_exponent)
        return
    if isinstance(exponent, Real):
        too_big = abs(exponent.value) > max_exponent
    else:
        f = exponent.to_fraction()
        too_big = max(abs(f.numerator), f.denominator) > max_exponent
    if too_big:
        raise ExponentTooLarge(
            f"exponent {exponent} exceeds magnitude ceiling {max_exponent}", limit=max_exponent
        )


def power(base: Number, exponent: Number, max_exponent: int = DEFAULT_MAX_EXPONENT) -> Optional[Number]:
    """``base ** exponent`` or ``None`` when the result must stay symbolic."""
    check_exponent(exponent, max_exponent)
    if isinstance(exponent, Integer):
        return _integer_power(base, exponent.value, max_exponent)
    if isinstance(exponent, Complex) or isinstance(base, Complex):
        return None
    if isinstance(exponent, Rational) and base.is_exact():
        return _rational_power(base.to_fraction(), exponent.to_fraction(), max_exponent)
    return _decimal_power(base, exponent)


def check_result_size(base: Fraction, n: int, max_exponent: int) -> None:
    """Raise ``ExponentTooLarge`` when ``base ** n`` would outgrow the ceiling.

    Bounds ``(10^100)^100`` the same way as ``10^10000`` once the inner
    power has been folded to a literal.
    """
    bits = max(abs(base.numerator).bit_length(), base.denominator.bit_length())
    if abs(n) > 1 and bits > 1 and bits * abs(n) > RESULT_BITS_PER_UNIT * max_exponent:
        raise ExponentTooLarge(
            f"power of a {bits}-bit base to {n} exceeds the size ceiling", limit=max_exponent
        )


def _integer_power(base: Number, n: int, max_exponent: int = DEFAULT_MAX_EXPONENT) -> Number:
    if base.is_zero() and n < 0:
        raise CASArithmeticError("zero raised to a negative power")
    if isinstance(base, Complex):
        for part in (base.real, base.imag):
            if part.is_exact():
                check_result_size(part.to_fraction(), n, max_exponent)
        result: Number = ONE
        acc: Number = base
        k = abs(n)
        while k:
            if k & 1:
                result = mul(result, acc)
            acc = mul(acc, acc)
            k >>= 1
        return div(ONE, result) if n < 0 else result
    if isinstance(base, Real):
        with _context(base.precision):
            return Real(base.value ** n, base.precision)
    f = base.to_fraction()
    check_result_size(f, n, max_exponent)
    return from_fraction(f ** n)


def _rational_power(
    f: Fraction, q: Fraction, max_exponent: int = DEFAULT_MAX_EXPONENT
) -> Optional[Number]:
    p, k = q.numerator, q.denominator
    if f < 0:
        if k % 2 == 0:
            return None
        root = _exact_root(-f, k)
        if root is None:
            return None
        root = -root
    else:
        root = _exact_root(f, k)
        if root is None:
            return None
    if root == 0 and p < 0:
        raise CASArithmeticError("zero raised to a negative power")
    check_result_size(root, p, max_exponent)
    return from_fraction(root ** p)


def _decimal_power(base: Number, exponent: Number) -> Optional[Number]:
    p = _precision(base, exponent)
    b, e = _dec(base, p), _dec(exponent, p)
    if b == 0:
        if e > 0:
            return Real(0, p)
        raise CASArithmeticError("zero raised to a non-positive power")
    if b < 0 and e != e.to_integral_value():
        return None
    with _context(p):
        return Real(b ** e, p)


def _exact_root(f: Fraction, k: int) -> Optional[Fraction]:
    num, ok_n = integer_root(f.numerator, k)
    if not ok_n:
        return None
    den, ok_d = integer_root(f.denominator, k)
    if not ok_d:
        return None
    return Fraction(num, den)


def integer_root(n: int, k: int) -> Tuple[int, bool]:
    """Floor of the ``k``-th root of ``n >= 0`` and whether it is exact."""
    if n < 0:
        raise ValueError("integer_root of a negative number")
    if k < 1:
        raise ValueError("root degree must be positive")
    if n < 2 or k == 1:
        return n, True
    if k == 2:
        r = math.isqrt(n)
        return r, r * r == n
    x = 1 << ((n.bit_length() + k - 1) // k)
    while True:
        y = ((k - 1) * x + n // x ** (k - 1)) // k
        if y >= x:
            break
        x = y
    return x, x ** k == n


def sqrt(n: Number) -> Optional[Number]:
    """Exact square root, or ``None`` when it is irrational or complex."""
    if not n.is_exact():
        return None
    return _rational_power(n.to_fraction(), Fraction(1, 2))


def square_factor(n: int) -> Tuple[int, int]:
    """Split ``n >= 0`` into ``(c, s)`` with ``c*c*s == n`` and ``s`` squarefree.

    Trial division stops at ``SQUARE_TRIAL_LIMIT``; a leftover cofactor is
    only checked for being a perfect square, so huge inputs with two large
    repeated primes may keep a square in ``s``.
    """
    if n < 0:
        raise ValueError("square_factor of a negative number")
    if n < 4:
        return 1, n
    coeff, free, rest = 1, 1, n
    p = 2
    while p * p <= rest and p <= SQUARE_TRIAL_LIMIT:
        e = 0
        while rest % p == 0:
            rest //= p
            e += 1
        if e:
            coeff *= p ** (e // 2)
            if e % 2:
                free *= p
        p += 1 if p == 2 else 2
    if rest > 1:
        r = math.isqrt(rest)
        if r * r == rest:
            coeff *= r
        else:
            free *= rest
    return coeff, free
