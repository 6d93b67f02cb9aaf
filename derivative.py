"""Symbolic differentiation.

The raw derivative is built with the smart constructors and always handed
to the rewrite engine before it is returned, so results come back in the
same canonical form ``simplify`` produces.
"""
from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

import number as nb
from cache import RewriteCache
from config import SimplifyConfig
from edag import validate
from engine import RewriteEngine
from errors import MalformedExpression, NoDerivativeRule
from expression import (
    BinaryOp,
    Constant,
    Expr,
    Function,
    Num,
    Symbol,
    UnaryOp,
    add,
    contains,
    div,
    func,
    mul,
    neg,
    power,
    sub,
)

logger = logging.getLogger(__name__)

Variable = Union[str, Symbol]

ONE = Num(nb.ONE)
TWO = Num(nb.TWO)


def _sqrt_one_minus_square(u: Expr) -> Expr:
    return func("sqrt", sub(ONE, power(u, TWO)))


# f'(u) for each known f, in terms of the argument u
TEMPLATES: Dict[str, Callable[[Expr], Expr]] = {
    "sin": lambda u: func("cos", u),
    "cos": lambda u: neg(func("sin", u)),
    "tan": lambda u: div(ONE, power(func("cos", u), TWO)),
    "exp": lambda u: func("exp", u),
    "ln": lambda u: div(ONE, u),
    "log": lambda u: div(ONE, u),
    "sqrt": lambda u: div(ONE, mul(TWO, func("sqrt", u))),
    "asin": lambda u: div(ONE, _sqrt_one_minus_square(u)),
    "acos": lambda u: neg(div(ONE, _sqrt_one_minus_square(u))),
    "atan": lambda u: div(ONE, add(ONE, power(u, TWO))),
    "sinh": lambda u: func("cosh", u),
    "cosh": lambda u: func("sinh", u),
    "tanh": lambda u: sub(ONE, power(func("tanh", u), TWO)),
    "abs": lambda u: div(u, func("abs", u)),
}


def _name(var: Variable) -> str:
    if isinstance(var, Symbol):
        return var.name
    if isinstance(var, str) and var.isidentifier():
        return var
    raise MalformedExpression(f"cannot differentiate with respect to {var!r}")


def raw_derivative(expr: Expr, var: Variable) -> Expr:
    """Unsimplified derivative of ``expr`` with respect to ``var``."""
    name = _name(var)
    validate(expr)

    def d(e: Expr) -> Expr:
        if not contains(e, name):
            return Num(nb.ZERO)
        if isinstance(e, Symbol):
            return ONE
        if isinstance(e, UnaryOp):
            return neg(d(e.operand))
        if isinstance(e, Function):
            rule = TEMPLATES.get(e.name)
            if rule is None or len(e.args) != 1:
                raise NoDerivativeRule(e.name)
            u = e.args[0]
            return mul(rule(u), d(u))
        if isinstance(e, BinaryOp):
            u, v = e.left, e.right
            if e.op == "+":
                return add(d(u), d(v))
            if e.op == "-":
                return sub(d(u), d(v))
            if e.op == "*":
                return add(mul(d(u), v), mul(u, d(v)))
            if e.op == "/":
                return div(sub(mul(d(u), v), mul(u, d(v))), power(v, TWO))
            if e.op == "^":
                if not contains(v, name):
                    # n*u^(n-1)*u'
                    return mul(mul(v, power(u, sub(v, ONE))), d(u))
                # logarithmic differentiation: u^v * (v'*ln(u) + v*u'/u)
                return mul(e, add(mul(d(v), func("ln", u)), div(mul(v, d(u)), u)))
        if isinstance(e, (Num, Constant)):
            return Num(nb.ZERO)
        raise MalformedExpression(f"unknown expression node {e!r}")

    return d(expr)


def derivative(
    expr: Expr,
    var: Variable,
    config: Optional[SimplifyConfig] = None,
    cache: Optional[RewriteCache] = None,
) -> Expr:
    raw = raw_derivative(expr, var)
    logger.debug("d/d%s %s = %s (raw)", _name(var), expr, raw)
    return RewriteEngine(config, cache).simplify(raw)


def nth_derivative(
    expr: Expr,
    var: Variable,
    n: int,
    config: Optional[SimplifyConfig] = None,
    cache: Optional[RewriteCache] = None,
) -> Expr:
    if n < 0:
        raise ValueError("derivative order must be non-negative")
    out = expr
    for _ in range(n):
        out = derivative(out, var, config, cache)
    return out


def gradient(
    expr: Expr,
    variables: Sequence[Variable],
    config: Optional[SimplifyConfig] = None,
    cache: Optional[RewriteCache] = None,
) -> List[Expr]:
    return [derivative(expr, v, config, cache) for v in variables]
