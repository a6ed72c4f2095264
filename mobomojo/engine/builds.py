"""Saved-build records and recommendation picks.

Pure helpers around the Configuration value: turning it into the record
the external store persists, restoring it from one, and applying
structured picks from the recommendation service. No I/O happens here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from mobomojo.catalog.store import Catalog
from mobomojo.engine.aggregator import total_price
from mobomojo.models.build import Configuration, SavedBuild, Suggestion

logger = logging.getLogger(__name__)


def to_saved_build(
    configuration: Configuration,
    build_name: str,
    created_at: Optional[datetime] = None,
) -> SavedBuild:
    """Record of a configuration: slot ids, name, total, timestamp.

    Raises ValueError for a blank name or an empty configuration.
    """
    name = build_name.strip()
    if not name:
        raise ValueError("Build name cannot be blank")
    if len(configuration) == 0:
        raise ValueError("Cannot save a build without components")

    return SavedBuild(
        build_name=name,
        components={c.category: c.id for c in configuration.components()},
        total_price=total_price(configuration),
        created_at=created_at or datetime.now(timezone.utc),
    )


def restore_configuration(saved: SavedBuild, catalog: Catalog) -> Configuration:
    """Resolve a saved record's ids back into a Configuration.

    Ids missing from the catalog (discontinued parts) are skipped.
    """
    components = []
    for category, component_id in saved.components.items():
        component = catalog.get(component_id)
        if component is None:
            logger.warning(
                "Saved build %r: unknown %s id %s, slot left empty",
                saved.build_name, category, component_id,
            )
            continue
        if component.category.casefold() != category.casefold():
            logger.warning(
                "Saved build %r: id %s is a %s, not a %s, slot left empty",
                saved.build_name, component_id, component.category, category,
            )
            continue
        components.append(component)
    return Configuration.of(*components)


def apply_suggestions(
    configuration: Configuration,
    suggestions: Iterable[Suggestion],
    catalog: Catalog,
) -> Tuple[Configuration, int]:
    """Apply recommendation picks to a configuration.

    A single pick only fills an empty slot. Several picks form a full
    build and replace occupants. Picks are matched by exact (type, name);
    names missing from the catalog are skipped.

    Returns the new configuration and the number of picks applied.
    """
    picks: List[Suggestion] = list(suggestions)
    full_build = len(picks) > 1
    applied = 0

    for pick in picks:
        if pick.type in configuration and not full_build:
            continue
        component = catalog.find(pick.type, pick.name)
        if component is None:
            logger.info("Suggested %s %r not in catalog", pick.type.value, pick.name)
            continue
        configuration = configuration.with_component(component)
        applied += 1

    return configuration, applied
