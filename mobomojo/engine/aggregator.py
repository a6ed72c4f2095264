"""Whole-configuration summary: total price and per-slot violations."""

from __future__ import annotations

from typing import Dict, List

from mobomojo.engine.compatibility import evaluate
from mobomojo.models.build import AggregateSummary, Configuration
from mobomojo.models.components import CATEGORY_ORDER, ComponentType


def total_price(configuration: Configuration) -> int:
    """Exact sum of the occupied slots' prices."""
    return sum(c.price for c in configuration.components())


def collect_violations(configuration: Configuration) -> Dict[str, List[str]]:
    """Violations of every occupant against the rest of the configuration.

    Each occupant is evaluated with its own slot removed, so a component
    is never checked against itself. Slots without violations are omitted.
    """
    violations: Dict[str, List[str]] = {}
    for component in configuration.components():
        rest = configuration.without(component.type)
        issues = evaluate(component, rest)
        if issues:
            violations[component.category] = issues
    return violations


def summarize(configuration: Configuration) -> AggregateSummary:
    """Recompute the full summary of a configuration from scratch."""
    return AggregateSummary(
        total_price=total_price(configuration),
        violations=collect_violations(configuration),
    )


def missing_categories(configuration: Configuration) -> List[ComponentType]:
    """Empty slots, in canonical order."""
    return [c for c in CATEGORY_ORDER if c not in configuration]
