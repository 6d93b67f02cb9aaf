from __future__ import annotations
import logging
from collections import namedtuple
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import number as nb
import numeric
from config import DEFAULT_CONFIG, SimplifyConfig
from expression import Expr, Function, Num

logger = logging.getLogger(__name__)

Rewrite = namedtuple("Rewrite", ["expression", "rule"])


@dataclass
class RuleContext:
    """Per-request state handed to every rule.

    Rules read options from ``config`` and report locally deferred work
    (a power left unevaluated by the magnitude guard) through ``defer``.
    """

    config: SimplifyConfig = DEFAULT_CONFIG
    deferred: List[str] = field(default_factory=list)

    def defer(self, reason: str, detail: object = "") -> None:
        # one entry per deferral so the cache can replay a subtree's notes
        logger.info("deferred (%s): %s", reason, detail)
        self.deferred.append(reason)


RuleFn = Callable[[Expr, RuleContext], Optional[Expr]]


class RuleModule:
    """An ordered family of rewrite rules.

    Subclasses list ``(name, method)`` pairs in ``rules()``; ``attempt``
    returns the first rewrite that changes the node, or ``None``.
    """

    name = "rules"
    # attribute of SimplifyConfig switching the module on and off
    flag: str = ""

    def enabled(self, config: SimplifyConfig) -> bool:
        return not self.flag or bool(getattr(config, self.flag))

    def rules(self) -> List[Tuple[str, RuleFn]]:
        return []

    def attempt(self, node: Expr, ctx: RuleContext) -> Optional[Rewrite]:
        for rule_name, fn in self.rules():
            out = fn(node, ctx)
            if out is not None and out != node:
                return Rewrite(out, rule_name)
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def approximate_call(e: Function, ctx: RuleContext) -> Optional[Expr]:
    """Evaluate ``f(decimal literal)`` when approximation is allowed."""
    if not ctx.config.allow_approximation or len(e.args) != 1:
        return None
    u = e.args[0]
    if not (isinstance(u, Num) and isinstance(u.value, nb.Real)):
        return None
    value = numeric.apply_function(e.name, u.value.to_float())
    if value is None:
        return None
    logger.debug("approximated %s", e)
    return Num(nb.approximate(nb.as_number(value), ctx.config.decimal_precision))
