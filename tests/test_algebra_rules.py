"""Tests for sums, products, quotients and binomials."""

from expression import integer, ln, sqrt


class TestLikeTerms:
    """Tests for collection of like terms."""

    def test_doubling(self, simp, x):
        """x + x -> 2*x."""
        assert simp(x + x) == 2 * x

    def test_difference(self, simp, x):
        """3x - x -> 2x and x - x -> 0."""
        assert simp(3 * x - x) == 2 * x
        assert simp(x - x) == integer(0)

    def test_commuted_products_collect(self, simp, x, y):
        """2xy + 3yx -> 5xy."""
        assert simp(2 * x * y + 3 * y * x) == simp(5 * x * y)

    def test_radical_terms(self, simp):
        """2*sqrt(3) - sqrt(3) -> sqrt(3)."""
        assert simp(2 * sqrt(3) - sqrt(3)) == sqrt(3)


class TestProducts:
    """Tests for product and quotient normalization."""

    def test_zero_product(self, simp, x):
        """0*x -> 0."""
        assert simp(0 * x) == integer(0)

    def test_merge_powers(self, simp, x):
        """x*x^2 -> x^3."""
        assert simp(x * x ** 2) == x ** 3

    def test_self_quotient(self, simp, x):
        """x/x -> 1 and 0/x -> 0."""
        assert simp(x / x) == integer(1)
        assert simp(0 / x) == integer(0)

    def test_cancel_common_factor(self, simp, x):
        """x^2/x -> x and x/(2x) -> 1/2."""
        assert simp(x ** 2 / x) == x
        assert simp(x / (2 * x)) == integer(1) / 2

    def test_reciprocal_product(self, simp, x):
        """x*(1/x) -> 1."""
        assert simp(x * (1 / x)) == integer(1)

    def test_opaque_sum_factor(self, simp, x):
        """ln(x)*(x+1)/(x+1) cancels the sum as a whole."""
        assert simp(ln(x) * (x + 1) / (x + 1)) == ln(x)


class TestBinomials:
    """Tests for binomial expansion and the factoring direction."""

    def test_difference_of_squares(self, simp, x):
        """(x+1)(x-1) -> x^2 - 1."""
        assert simp((x + 1) * (x - 1)) == simp(x ** 2 - 1)

    def test_square(self, simp, x):
        """(x+1)^2 -> x^2 + 2x + 1."""
        assert simp((x + 1) ** 2) == simp(x ** 2 + 2 * x + 1)

    def test_cancel_binomial_quotient(self, simp, x):
        """(x^2 - 1)/(x + 1) -> x - 1."""
        assert simp((x ** 2 - 1) / (x + 1)) == simp(x - 1)


class TestFractions:
    """Tests for fraction addition."""

    def test_distinct_denominators(self, simp, x, y):
        """1/x + 1/y -> (x + y)/(x*y)."""
        assert simp(1 / x + 1 / y) == (x + y) / (x * y)

    def test_shared_denominator(self, simp, x, y):
        """x/y + 2/y -> (2 + x)/y."""
        assert simp(x / y + 2 / y) == (2 + x) / y

    def test_least_common_denominator(self, simp, x):
        """1/x + 1/x^2 -> (1 + x)/x^2."""
        assert simp(1 / x + 1 / x ** 2) == (1 + x) / x ** 2

    def test_rational_coefficients_are_not_fractions(self, simp, x, y):
        """x/2 + y/3 keeps its two terms."""
        assert simp(x / 2 + y / 3) == x / 2 + y / 3
