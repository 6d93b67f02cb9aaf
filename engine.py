"""Bounded fixpoint rewriting.

One pass walks the tree bottom-up: children first, the node is rebuilt
through the smart constructors, then the rule modules are tried in priority
order (power, radical, trig, algebra). The first rewrite wins and its output
is simplified again before the walk continues upward, down to
``MAX_REWRITE_DEPTH`` nested rewrites. Passes repeat until nothing changes
or ``max_iterations`` is reached.

Node and time guards abort the pass and return the last completed tree,
tagged. The exponent guard is local: the power stays unevaluated, the
result is tagged, and the pass carries on.
"""
from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

from algebra_rules import AlgebraRules
from budget import Budget
from cache import DEFAULT_CACHE, RewriteCache
from config import DEFAULT_CONFIG, SimplifyConfig
from edag import validate
from errors import ComplexityExceeded
from expression import Expr, children, rebuild
from power_rules import PowerRules
from radical_rules import RadicalRules
from rules import RuleContext, RuleModule
from trig_rules import TrigRules

logger = logging.getLogger(__name__)

MAX_REWRITE_DEPTH = 64


def default_modules() -> List[RuleModule]:
    return [PowerRules(), RadicalRules(), TrigRules(), AlgebraRules()]


class RewriteStep:
    """A single rule application."""

    def __init__(self, module: str, rule: str, before: Expr, after: Expr):
        self.module = module
        self.rule = rule
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        return f"{self.module}.{self.rule}: {self.before} → {self.after}"

    def to_dict(self) -> Dict:
        return {
            "module": self.module,
            "rule": self.rule,
            "before": str(self.before),
            "after": str(self.after),
        }


class RewriteTrace:
    """Every rule application of one request, in order."""

    def __init__(self):
        self.steps: List[RewriteStep] = []
        self.initial: Optional[Expr] = None
        self.final: Optional[Expr] = None

    def add_step(self, step: RewriteStep):
        self.steps.append(step)

    def rules_applied(self) -> List[str]:
        return [f"{s.module}.{s.rule}" for s in self.steps]

    def rule_counts(self) -> Dict[str, int]:
        return dict(Counter(self.rules_applied()))

    def summary(self) -> str:
        if not self.steps:
            return f"{self.initial} (no rewrites)"
        counts = ", ".join(f"{k} x{v}" for k, v in sorted(self.rule_counts().items()))
        return f"{self.initial} → {self.final} in {len(self.steps)} step(s): {counts}"

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[RewriteStep]:
        return iter(self.steps)

    def __repr__(self) -> str:
        lines = [f"RewriteTrace({len(self.steps)} steps)"]
        for i, s in enumerate(self.steps, 1):
            lines.append(f"  {i}. {s!r}")
        return "\n".join(lines)


@dataclass
class SimplifyResult:
    expression: Expr
    guard_tripped: bool = False
    guard_reason: Optional[str] = None
    iterations: int = 0
    converged: bool = True
    trace: Optional[RewriteTrace] = None

    def __str__(self) -> str:
        return str(self.expression)


class RewriteEngine:
    """Runs the rule modules to a fixpoint under a config and a cache.

    ``cache=None`` uses the process-wide cache; pass a fresh ``RewriteCache``
    to isolate an engine. ``config.cache_enabled=False`` bypasses caching.
    """

    def __init__(
        self,
        config: Optional[SimplifyConfig] = None,
        cache: Optional[RewriteCache] = None,
        modules: Optional[Sequence[RuleModule]] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.cache = (cache if cache is not None else DEFAULT_CACHE) if self.config.cache_enabled else None
        mods = list(modules) if modules is not None else default_modules()
        self.modules = [m for m in mods if m.enabled(self.config)]
        self._key_prefix = (self.config.fingerprint(), tuple(type(m).__name__ for m in self.modules))

    def simplify(self, expr: Expr) -> Expr:
        return self.run(expr).expression

    def run(self, expr: Expr) -> SimplifyResult:
        validate(expr)
        budget = Budget.from_config(self.config)
        ctx = RuleContext(self.config)
        trace = RewriteTrace() if self.config.trace else None
        if trace is not None:
            trace.initial = expr

        current = expr
        iterations = 0
        converged = False
        while iterations < self.config.max_iterations:
            iterations += 1
            try:
                out = self._simplify(current, ctx, budget, trace, 0)
            except ComplexityExceeded as exc:
                logger.info("guard tripped (%s) in pass %d: %s", exc.reason, iterations, exc)
                if trace is not None:
                    trace.final = current
                return SimplifyResult(current, True, exc.reason, iterations, False, trace)
            if out == current:
                converged = True
                break
            current = out
        if not converged:
            logger.warning("no fixpoint after %d passes for %s", iterations, expr)
        logger.debug("simplified in %d pass(es), %d node(s) visited", iterations, budget.nodes)

        if trace is not None:
            trace.final = current
        reason = ctx.deferred[0] if ctx.deferred else None
        return SimplifyResult(current, reason is not None, reason, iterations, converged, trace)

    def _simplify(
        self,
        node: Expr,
        ctx: RuleContext,
        budget: Budget,
        trace: Optional[RewriteTrace],
        depth: int,
    ) -> Expr:
        key = None
        if self.cache is not None:
            key = self._key_prefix + (node,)
            # a traced request re-derives everything so the trace is complete
            entry = self.cache.get(key) if trace is None else None
            if entry is not None:
                result, notes, cost = entry
                # a hit costs what the cold computation did, so guards trip alike
                budget.charge(cost)
                ctx.deferred.extend(notes)
                return result

        start = budget.nodes
        budget.charge()
        mark = len(ctx.deferred)
        kids = children(node)
        cur = rebuild(node, [self._simplify(c, ctx, budget, trace, depth) for c in kids]) if kids else node
        for module in self.modules:
            rw = module.attempt(cur, ctx)
            if rw is None:
                continue
            logger.debug("%s.%s: %s -> %s", module.name, rw.rule, cur, rw.expression)
            if trace is not None:
                trace.add_step(RewriteStep(module.name, rw.rule, cur, rw.expression))
            if depth < MAX_REWRITE_DEPTH:
                cur = self._simplify(rw.expression, ctx, budget, trace, depth + 1)
            else:
                cur = rw.expression
            break

        if key is not None:
            self.cache.put(key, (cur, tuple(ctx.deferred[mark:]), budget.nodes - start))
        return cur


def simplify(expr: Expr, config: Optional[SimplifyConfig] = None, cache: Optional[RewriteCache] = None) -> Expr:
    return RewriteEngine(config, cache).simplify(expr)
