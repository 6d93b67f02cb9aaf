"""Simplification options.

The engine reads every tunable from a single frozen ``SimplifyConfig``.
Rule families toggle independently; the three guards bound the work a
single request may do:

- ``max_iterations``: fixpoint passes before giving up (not an error)
- ``max_complexity_nodes``: nodes expanded per request
- ``max_exponent_magnitude``: largest exponent evaluated to digits
- ``time_budget``: wall-clock limit per request (optional)
"""
from __future__ import annotations
from datetime import timedelta
from typing import Optional, Tuple

from pydantic import BaseModel, Field


class SimplifyConfig(BaseModel):
    enable_radical_rules: bool = Field(True, description="Radical normalization and denesting")
    enable_trig_rules: bool = Field(True, description="Trigonometric normalization")
    enable_algebra_rules: bool = Field(True, description="Like terms, binomials, fractions")
    enable_power_rules: bool = Field(True, description="Power-law normalization")

    max_iterations: int = Field(10, ge=1, description="Fixpoint pass cap")
    max_complexity_nodes: int = Field(200_000, ge=1, description="Nodes expanded per request")
    max_exponent_magnitude: int = Field(
        1000, ge=0, description="Largest |exponent| evaluated to digits"
    )
    time_budget: Optional[timedelta] = Field(None, description="Wall-clock limit per request")

    allow_approximation: bool = Field(
        False, description="Permit exact values to become decimals"
    )
    decimal_precision: int = Field(28, ge=1, description="Digits used when approximating")
    cache_enabled: bool = Field(True, description="Consult the shared rewrite cache")
    trace: bool = Field(False, description="Record every rule application")

    model_config = {"frozen": True}

    def fingerprint(self) -> Tuple:
        """Key for the options that change rewrite output.

        ``trace`` and ``cache_enabled`` do not alter results, so requests
        that differ only in those share cache entries.
        """
        return (
            self.enable_radical_rules,
            self.enable_trig_rules,
            self.enable_algebra_rules,
            self.enable_power_rules,
            self.max_exponent_magnitude,
            self.allow_approximation,
            self.decimal_precision,
        )

    def time_budget_seconds(self) -> Optional[float]:
        if self.time_budget is None:
            return None
        return self.time_budget.total_seconds()


DEFAULT_CONFIG = SimplifyConfig()
