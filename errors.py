from __future__ import annotations
from typing import Optional


class CASError(Exception):
    """Base class for every error raised by the algebra core."""


class MalformedExpression(CASError, ValueError):
    """An expression tree broke a structural invariant (unknown tag, bad child)."""


class CASArithmeticError(CASError, ArithmeticError):
    """Division by zero or a domain error under exact arithmetic."""


class ComplexityExceeded(CASError):
    """A configured guard tripped.

    The engine turns these into a tagged best-effort result, they never
    escape ``simplify``.
    """

    reason = "complexity"

    def __init__(self, message: str = "", limit: Optional[int] = None) -> None:
        super().__init__(message or self.reason)
        self.limit = limit


class ExponentTooLarge(ComplexityExceeded):
    reason = "exponent"


class NodeBudgetExceeded(ComplexityExceeded):
    reason = "nodes"


class TimeBudgetExceeded(ComplexityExceeded):
    reason = "time"


class NoDerivativeRule(CASError, LookupError):
    """Differentiation met a function with no derivative template."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no derivative rule for function '{name}'")
        self.name = name
