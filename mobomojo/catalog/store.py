"""Catalog store: the immutable, ordered set of components.

The catalog is loaded once and injected wherever it is needed, so tests
can swap in small synthetic catalogs.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from mobomojo.models.components import Component, category_name

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.json"

_COMPONENT_LIST = TypeAdapter(List[Component])


class CatalogError(Exception):
    """The catalog could not be loaded or is inconsistent."""


# ──────────────────────────────────────────────
# Catalog
# ──────────────────────────────────────────────


class Catalog:
    """Read-only, ordered sequence of components.

    Catalog order is preserved everywhere (queries use it to break ties).
    """

    def __init__(self, components: Iterable[Component]) -> None:
        self._components: Tuple[Component, ...] = tuple(components)
        self._by_id: Dict[str, Component] = {}
        for component in self._components:
            if component.id in self._by_id:
                raise CatalogError(f"Duplicate component id: {component.id}")
            self._by_id[component.id] = component
        self._fingerprint: Optional[str] = None

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._by_id

    @property
    def components(self) -> Tuple[Component, ...]:
        return self._components

    @property
    def fingerprint(self) -> str:
        """Content hash of every record (prices and specs included).

        Two catalogs sharing ids but differing in any field get different
        fingerprints.
        """
        if self._fingerprint is None:
            records = [
                c.model_dump(mode="json", by_alias=True) for c in self._components
            ]
            raw = json.dumps(records, sort_keys=True)
            self._fingerprint = hashlib.sha256(raw.encode()).hexdigest()[:16]
        return self._fingerprint

    def get(self, component_id: str) -> Optional[Component]:
        """Component by id, or None."""
        return self._by_id.get(component_id)

    def by_category(self, category: Any) -> List[Component]:
        """All components of one category, in catalog order."""
        name = category_name(category)
        return [c for c in self._components if c.category == name]

    def find(self, category: Any, name: str) -> Optional[Component]:
        """First component of a category whose name matches exactly."""
        for component in self.by_category(category):
            if component.name == name:
                return component
        return None

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "Catalog":
        """Validate raw catalog records (camelCase or snake_case keys)."""
        try:
            components = _COMPONENT_LIST.validate_python(list(records))
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog records: {e}") from e
        return cls(components)


# ──────────────────────────────────────────────
# Loader
# ──────────────────────────────────────────────


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Load a catalog from a JSON array of component records.

    Falls back to MOBOMOJO_CATALOG_PATH, then to the bundled catalog.
    """
    if path is None:
        path = os.getenv("MOBOMOJO_CATALOG_PATH") or DEFAULT_CATALOG_PATH
    path = Path(path)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    if not isinstance(raw, list):
        raise CatalogError(f"Catalog {path} must be a JSON array of components")

    catalog = Catalog.from_records(raw)
    logger.info("Loaded catalog: %d components from %s", len(catalog), path)
    return catalog
