"""Tests for the exact/approximate number tower."""

from fractions import Fraction

import pytest

import number as nb
from errors import CASArithmeticError, ComplexityExceeded, ExponentTooLarge
from number import Complex, Integer, Rational, Real


class TestConstruction:
    """Tests for building numbers at the right level."""

    def test_rational_reduces_to_integer(self):
        """An integer-valued rational comes back as an Integer."""
        assert nb.rational(6, 3) == Integer(2)
        assert nb.rational(2, 4) == Rational(1, 2)

    def test_integer_valued_rational_rejected(self):
        """Rational refuses to hold an integer value."""
        with pytest.raises(ValueError):
            Rational(4, 2)

    def test_zero_denominator(self):
        """A zero denominator is an arithmetic error."""
        with pytest.raises(CASArithmeticError):
            nb.rational(1, 0)

    def test_complex_with_zero_imaginary_collapses(self):
        """complex_number drops a zero imaginary part."""
        assert nb.complex_number(Integer(3), Integer(0)) == Integer(3)
        with pytest.raises(ValueError):
            Complex(Integer(3), Integer(0))

    def test_as_number_float(self):
        """Floats become decimals using their shortest repr."""
        r = nb.as_number(0.5)
        assert isinstance(r, Real)
        assert str(r) == "0.5"

    def test_as_number_rejects_bool(self):
        """Booleans are not numbers."""
        with pytest.raises(TypeError):
            nb.as_number(True)


class TestArithmetic:
    """Tests for arithmetic across levels."""

    def test_exact_sum_stays_exact(self):
        """Rationals add exactly."""
        assert nb.add(nb.rational(1, 3), nb.rational(2, 3)) == Integer(1)
        assert nb.add(Integer(1), Rational(1, 2)) == Rational(3, 2)

    def test_decimal_precision_is_minimum(self):
        """Mixed-precision decimals use the smaller budget."""
        out = nb.add(Real("1.5", 5), Real("2.25", 10))
        assert out.precision == 5
        assert out.to_fraction() == Fraction(15, 4)

    def test_complex_product_can_be_real(self):
        """(1+i)(1-i) is the integer 2."""
        a = Complex(Integer(1), Integer(1))
        b = Complex(Integer(1), Integer(-1))
        assert nb.mul(a, b) == Integer(2)

    def test_division_by_zero(self):
        """Dividing by zero raises."""
        with pytest.raises(CASArithmeticError):
            nb.div(Integer(1), Integer(0))

    def test_complex_not_ordered(self):
        """Complex values cannot be compared."""
        with pytest.raises(CASArithmeticError):
            nb.compare(Complex(Integer(0), Integer(1)), Integer(0))


class TestPower:
    """Tests for exact powers and the exponent ceiling."""

    def test_integer_power(self):
        """Integer exponents evaluate exactly."""
        assert nb.power(Integer(2), Integer(10)) == Integer(1024)
        assert nb.power(Integer(2), Integer(-2)) == Rational(1, 4)

    def test_irrational_root_stays_symbolic(self):
        """An irrational root is reported as None."""
        assert nb.power(Integer(2), nb.HALF) is None
        assert nb.power(Integer(-4), nb.HALF) is None

    def test_odd_root_of_negative(self):
        """Odd roots of negative perfect powers are real."""
        assert nb.power(Integer(-8), Rational(1, 3)) == Integer(-2)

    def test_exponent_ceiling(self):
        """Huge exponents are refused before any digits are computed."""
        with pytest.raises(ExponentTooLarge) as info:
            nb.power(Integer(10), Integer(10000))
        assert isinstance(info.value, ComplexityExceeded)
        assert info.value.reason == "exponent"
        assert info.value.limit == nb.DEFAULT_MAX_EXPONENT

    def test_root_degree_bounded(self):
        """The denominator of a rational exponent counts against the ceiling."""
        with pytest.raises(ExponentTooLarge):
            nb.check_exponent(Rational(1, 10 ** 6), 1000)
        nb.check_exponent(Rational(999, 1000), 1000)

    def test_result_size_bounded(self):
        """A large literal base cannot be raised past the size ceiling."""
        with pytest.raises(ExponentTooLarge):
            nb.power(Integer(10 ** 100), Integer(100))
        assert nb.power(Integer(10), Integer(1000)) == Integer(10 ** 1000)
        assert nb.power(Integer(10 ** 5000), Integer(1)) == Integer(10 ** 5000)

    def test_huge_integer_renders(self):
        """Integers past the text-conversion limit render abbreviated."""
        assert str(Integer(10 ** 5000)) == "<5001-digit integer>"
        assert str(Integer(-(10 ** 5000))) == "-<5001-digit integer>"
        assert str(Integer(10 ** 20)) == "1" + "0" * 20

    def test_zero_to_negative_power(self):
        """0^-1 is a division by zero."""
        with pytest.raises(CASArithmeticError):
            nb.power(nb.ZERO, nb.NEG_ONE)


class TestRoots:
    """Tests for roots and square factors."""

    def test_square_factor(self):
        """72 = 6^2 * 2."""
        assert nb.square_factor(72) == (6, 2)
        assert nb.square_factor(3) == (1, 3)

    def test_integer_root(self):
        """Integer cube root is exact for perfect cubes."""
        assert nb.integer_root(27, 3) == (3, True)
        assert nb.integer_root(28, 3)[1] is False

    def test_rational_sqrt(self):
        """sqrt(9/4) = 3/2; sqrt(2) has no exact value."""
        assert nb.sqrt(Rational(9, 4)) == Rational(3, 2)
        assert nb.sqrt(Integer(2)) is None

    def test_approximate(self):
        """Approximation honours the requested digits."""
        assert str(nb.approximate(nb.rational(1, 3), 10)) == "0.3333333333"
