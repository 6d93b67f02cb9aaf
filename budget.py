from __future__ import annotations
import time
from typing import Optional

from config import SimplifyConfig
from errors import NodeBudgetExceeded, TimeBudgetExceeded


class Budget:
    """Work allowance of one simplification request.

    ``charge()`` is called before a node is expanded and raises the matching
    ``ComplexityExceeded`` subclass once the node count or elapsed time runs
    out. The exponent magnitude ceiling lives in the config and is checked by
    the power rules.
    """

    def __init__(self, max_nodes: int, time_limit: Optional[float] = None) -> None:
        self.max_nodes = max_nodes
        self.time_limit = time_limit
        self.nodes = 0
        self.started = time.monotonic()

    @staticmethod
    def from_config(config: SimplifyConfig) -> "Budget":
        return Budget(config.max_complexity_nodes, config.time_budget_seconds())

    def elapsed(self) -> float:
        return time.monotonic() - self.started

    def charge(self, n: int = 1) -> None:
        self.nodes += n
        if self.nodes > self.max_nodes:
            raise NodeBudgetExceeded(
                f"expanded more than {self.max_nodes} nodes", limit=self.max_nodes
            )
        if self.time_limit is not None and self.elapsed() > self.time_limit:
            raise TimeBudgetExceeded(f"time budget of {self.time_limit}s exhausted")
