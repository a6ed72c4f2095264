"""Catalog query layer: search, attribute filters, sort, and facets.

Queries never hide incompatible components. Compatibility marking is a
separate pass (`mark_compatibility`) layered on top of the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from mobomojo.catalog.store import Catalog
from mobomojo.engine.compatibility import evaluate
from mobomojo.models.build import Configuration
from mobomojo.models.components import Component, ComponentType, category_name

logger = logging.getLogger(__name__)

# Facet keys offered per category (camelCase, as in catalog JSON)
FILTERABLE_SPECS: Dict[ComponentType, List[str]] = {
    ComponentType.CPU: ["socket"],
    ComponentType.MOTHERBOARD: ["socket", "formFactor", "memoryType"],
    ComponentType.RAM: ["ramType", "speed", "size"],
    ComponentType.CASE: ["supportedFormFactors"],
    ComponentType.PSU: ["efficiency"],
}


class SortDirective(BaseModel):
    """Sort key and direction. Ties always keep catalog order."""

    key: Literal["price", "name"] = "price"
    order: Literal["asc", "desc"] = "asc"


@dataclass
class CandidateView:
    """A queried component paired with its violations."""

    component: Component
    violations: List[str] = field(default_factory=list)

    @property
    def compatible(self) -> bool:
        return not self.violations


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────


def filterable_specs(category: Any) -> List[str]:
    """Facet keys valid for a category (empty for unfaceted categories)."""
    try:
        return FILTERABLE_SPECS.get(ComponentType(category_name(category)), [])
    except ValueError:
        return []


def _facet_key(key: str) -> str:
    """Facet keys are camelCase; snake_case input is accepted too."""
    return to_camel(key) if "_" in key else key


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def matches_filter(component: Component, key: str, value: str) -> bool:
    """Array specs match by membership, scalar specs by string equality."""
    spec_value = component.spec(key)
    if spec_value is None:
        return False
    if isinstance(spec_value, (list, tuple, set, frozenset)):
        return value in {_as_text(v) for v in spec_value}
    return _as_text(spec_value) == value


def _sort(components: List[Component], sort: SortDirective) -> List[Component]:
    # sorted() is stable, also with reverse=True
    if sort.key == "name":
        return sorted(components, key=lambda c: c.name.casefold(), reverse=sort.order == "desc")
    return sorted(components, key=lambda c: c.price, reverse=sort.order == "desc")


# ──────────────────────────────────────────────
# Query
# ──────────────────────────────────────────────


def query(
    catalog: Iterable[Component],
    category: Any,
    search_term: str = "",
    filters: Optional[Mapping[str, str]] = None,
    sort: Optional[SortDirective] = None,
) -> List[Component]:
    """Components of one category matching search and filters, sorted.

    Empty filter values and an empty search term are no-ops. Filter keys
    that are not facets of the category are ignored.
    """
    name = category_name(category)
    components = [c for c in catalog if c.category == name]

    allowed = filterable_specs(category)
    for key, value in (filters or {}).items():
        if not value:
            continue
        key = _facet_key(key)
        if key not in allowed:
            logger.debug("Ignoring filter %r for category %s", key, name)
            continue
        components = [c for c in components if matches_filter(c, key, value)]

    if search_term:
        needle = search_term.lower()
        components = [c for c in components if needle in c.name.lower()]

    return _sort(components, sort or SortDirective())


def available_filters(catalog: Catalog, category: Any) -> Dict[str, List[str]]:
    """Sorted distinct values per facet key for one category."""
    keys = filterable_specs(category)
    if not keys:
        return {}

    options: Dict[str, set] = {key: set() for key in keys}
    for component in catalog.by_category(category):
        for key in keys:
            value = component.spec(key)
            if value is None or value == "":
                continue
            if isinstance(value, (list, tuple, set, frozenset)):
                options[key].update(_as_text(v) for v in value)
            else:
                options[key].add(_as_text(value))

    return {key: sorted(values) for key, values in options.items()}


def mark_compatibility(
    candidates: Iterable[Component], configuration: Configuration
) -> List[CandidateView]:
    """Pair each candidate with its violations against a configuration."""
    return [CandidateView(c, evaluate(c, configuration)) for c in candidates]
