from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import numeric
import polynomial
from cache import DEFAULT_CACHE, DEFAULT_CAPACITY, CacheInfo, RewriteCache
from config import DEFAULT_CONFIG, SimplifyConfig
from derivative import Variable, derivative, gradient, nth_derivative
from engine import RewriteEngine, SimplifyResult
from expression import ExprLike, Expr, Symbol, build_sum, lift, substitute


class CAS:
    """Owns a config and a private rewrite cache.

    Independent ``CAS`` instances never share cache entries; the module
    level functions below use the process-wide cache instead.
    """

    def __init__(
        self, config: Optional[SimplifyConfig] = None, cache_capacity: int = DEFAULT_CAPACITY
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.cache = RewriteCache(cache_capacity)
        self.engine = RewriteEngine(self.config, self.cache)

    def with_config(self, **changes: Any) -> "CAS":
        """Copy with some options replaced; shares this instance's cache."""
        other = CAS.__new__(CAS)
        other.config = self.config.model_copy(update=changes)
        other.cache = self.cache
        other.engine = RewriteEngine(other.config, other.cache)
        return other

    def simplify(self, expr: ExprLike) -> Expr:
        return self.engine.simplify(lift(expr))

    def simplify_with_report(self, expr: ExprLike) -> SimplifyResult:
        return self.engine.run(lift(expr))

    def differentiate(self, expr: ExprLike, var: Variable, n: int = 1) -> Expr:
        return nth_derivative(lift(expr), var, n, self.config, self.cache)

    def gradient(self, expr: ExprLike, variables: Sequence[Variable]) -> List[Expr]:
        return gradient(lift(expr), variables, self.config, self.cache)

    def expand(self, expr: ExprLike) -> Expr:
        return _expand(self.engine, lift(expr))

    def collect(self, expr: ExprLike, var: Variable) -> Expr:
        return polynomial.collect(self.expand(expr), _symbol(var))

    def substitute(self, expr: ExprLike, mapping: Mapping[Any, ExprLike]) -> Expr:
        return self.simplify(substitute(lift(expr), mapping))

    def evaluate(self, expr: ExprLike, env: Optional[Dict[str, Any]] = None) -> Any:
        return numeric.evaluate(lift(expr), env)

    def lambdify(self, expr: ExprLike, variables: Sequence[Variable]) -> Callable[..., Any]:
        return numeric.lambdify(lift(expr), variables)

    def cache_info(self) -> CacheInfo:
        return self.cache.info()

    def clear_cache(self) -> None:
        self.cache.clear()


def _symbol(var: Variable) -> Symbol:
    return var if isinstance(var, Symbol) else Symbol(var)


def _expand(engine: RewriteEngine, expr: Expr) -> Expr:
    # terms are simplified one by one so fractions are not recombined
    poly = polynomial.expand(engine.simplify(expr))
    terms = [engine.simplify(m.to_expr()) for m in poly.terms]
    return polynomial.Polynomial.from_expr(build_sum(terms)).to_expr()


def simplify(expression: ExprLike, config: Optional[SimplifyConfig] = None) -> Expr:
    return RewriteEngine(config).simplify(lift(expression))


def simplify_with_report(expression: ExprLike, config: Optional[SimplifyConfig] = None) -> SimplifyResult:
    return RewriteEngine(config).run(lift(expression))


def differentiate(expression: ExprLike, variable: Variable, config: Optional[SimplifyConfig] = None) -> Expr:
    return derivative(lift(expression), variable, config)


def expand(expression: ExprLike, config: Optional[SimplifyConfig] = None) -> Expr:
    return _expand(RewriteEngine(config), lift(expression))


def collect(expression: ExprLike, variable: Variable, config: Optional[SimplifyConfig] = None) -> Expr:
    return polynomial.collect(expand(expression, config), _symbol(variable))


def evaluate(expression: ExprLike, env: Optional[Dict[str, Any]] = None) -> Any:
    return numeric.evaluate(lift(expression), env)


def cache_info() -> CacheInfo:
    return DEFAULT_CACHE.info()


def reset_cache() -> None:
    DEFAULT_CACHE.clear()
