"""Builder API gateway.

Routes under /api/*: catalog queries, compatibility checks, summaries,
and saved-build records. Thin wrappers around the pure engine; the only
state here is the injected catalog and the optional summary cache.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from mobomojo.api.schemas import (
    CandidateQuery,
    ConfigurationRequest,
    EvaluateRequest,
    RecordRequest,
    SuggestionRequest,
)
from mobomojo.cache.redis_cache import SummaryCache, summary_cache_key
from mobomojo.catalog.query import (
    SortDirective,
    available_filters,
    mark_compatibility,
    query,
)
from mobomojo.catalog.store import Catalog
from mobomojo.engine.aggregator import missing_categories, summarize
from mobomojo.engine.builds import apply_suggestions, restore_configuration, to_saved_build
from mobomojo.engine.compatibility import check_component
from mobomojo.models.build import AggregateSummary, Configuration, SavedBuild
from mobomojo.models.components import CATEGORY_ORDER, ComponentType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Builder"])

# Set by app lifespan: shared resources
_catalog: Optional[Catalog] = None
_cache: Optional[SummaryCache] = None


def set_catalog(catalog: Optional[Catalog]) -> None:
    """Called during app startup to inject the catalog."""
    global _catalog
    _catalog = catalog


def set_cache(cache: Optional[SummaryCache]) -> None:
    """Called during app startup to inject the cache."""
    global _cache
    _cache = cache


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────


def _require_catalog() -> Catalog:
    if _catalog is None:
        raise HTTPException(status_code=503, detail="Catalog not loaded")
    return _catalog


def _resolve_category(name: str) -> ComponentType:
    """Path segment to category, case-insensitive. 404 when unknown."""
    for category in CATEGORY_ORDER:
        if category.value.casefold() == name.casefold():
            return category
    raise HTTPException(status_code=404, detail=f"Unknown category: {name}")


def _resolve_configuration(request: ConfigurationRequest) -> Configuration:
    """Turn {category: id} into a Configuration, 422 on bad references."""
    catalog = _require_catalog()
    errors: List[str] = []
    components = []
    for category, component_id in request.components.items():
        component = catalog.get(component_id)
        if component is None:
            errors.append(f"Unknown component id: {component_id}")
        elif component.category.casefold() != category.casefold():
            errors.append(
                f"Component {component_id} is a {component.category}, "
                f"not a {category}"
            )
        else:
            components.append(component)
    if errors:
        raise HTTPException(status_code=422, detail=errors)
    return Configuration.of(*components)


def _slot_ids(configuration: Configuration) -> Dict[str, str]:
    return {c.category: c.id for c in configuration.components()}


async def _cached_summary(configuration: Configuration) -> AggregateSummary:
    """Summary of a configuration, served from the cache when possible."""
    key = summary_cache_key(configuration, _require_catalog().fingerprint)
    if _cache is not None:
        cached = await _cache.get(key)
        if cached:
            return AggregateSummary.model_validate_json(cached)

    summary = summarize(configuration)

    if _cache is not None:
        await _cache.set(key, summary.model_dump_json(by_alias=True))
    return summary


async def _summary_payload(configuration: Configuration) -> dict:
    """Summary JSON plus the slots still to fill."""
    summary = await _cached_summary(configuration)
    return {
        **_dump(summary),
        "missingCategories": [c.value for c in missing_categories(configuration)],
    }


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


# ──────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────


@router.get("/health")
async def health():
    """Health check for monitoring."""
    cache_stats = await _cache.stats() if _cache is not None else {"available": False}
    return {
        "status": "healthy",
        "catalog_size": len(_catalog) if _catalog is not None else 0,
        "cache_available": cache_stats["available"],
        "cached_summaries": cache_stats.get("keys", 0),
    }


@router.get("/catalog/{category}")
async def list_components(
    category: str,
    search: str = "",
    sort: str = Query(default="price", pattern="^(price|name)$"),
    order: str = Query(default="asc", pattern="^(asc|desc)$"),
    filter_: List[str] = Query(default=[], alias="filter", description="Repeated key:value pairs"),
):
    """Search, filter, and sort one category of the catalog."""
    resolved = _resolve_category(category)
    filters: Dict[str, str] = {}
    for item in filter_:
        key, sep, value = item.partition(":")
        if not sep:
            raise HTTPException(status_code=422, detail=f"Bad filter {item!r}, expected key:value")
        filters[key] = value

    results = query(
        _require_catalog(), resolved, search, filters,
        SortDirective(key=sort, order=order),
    )
    return [_dump(c) for c in results]


@router.get("/catalog/{category}/filters")
async def list_filters(category: str):
    """Facet options for one category."""
    return available_filters(_require_catalog(), _resolve_category(category))


@router.post("/catalog/{category}/candidates")
async def list_candidates(category: str, request: CandidateQuery):
    """Queried components, each marked against the given configuration.

    Incompatible candidates are included, with their violations.
    """
    resolved = _resolve_category(category)
    configuration = _resolve_configuration(request)
    results = query(
        _require_catalog(), resolved, request.search, request.filters, request.sort,
    )
    return [
        {
            "component": _dump(view.component),
            "compatible": view.compatible,
            "violations": view.violations,
        }
        for view in mark_compatibility(results, configuration)
    ]


@router.post("/compatibility/evaluate")
async def evaluate_candidate(request: EvaluateRequest):
    """Check one catalog component against a configuration."""
    candidate = _require_catalog().get(request.candidate_id)
    if candidate is None:
        raise HTTPException(
            status_code=404, detail=f"Unknown component id: {request.candidate_id}"
        )
    configuration = _resolve_configuration(request)
    violations = check_component(candidate, configuration)
    return {
        "compatible": not violations,
        "violations": [v.message for v in violations],
        "rules": [v.rule for v in violations],
    }


@router.post("/builds/summary")
async def build_summary(request: ConfigurationRequest):
    """Total price, per-slot violations, and empty slots of a configuration."""
    configuration = _resolve_configuration(request)
    payload = await _summary_payload(configuration)
    logger.info(
        "Summary: %d slots, %d with violations, total %d",
        len(configuration), len(payload["violations"]), payload["totalPrice"],
    )
    return payload


@router.post("/builds/record")
async def build_record(request: RecordRequest):
    """The persisted-build record for a configuration (not stored here)."""
    configuration = _resolve_configuration(request)
    try:
        record = to_saved_build(configuration, request.build_name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    logger.info("Build record %r: %d components", record.build_name, len(record.components))
    return _dump(record)


@router.post("/builds/restore")
async def build_restore(saved: SavedBuild):
    """Resolve a saved record back into a configuration and summarize it."""
    configuration = restore_configuration(saved, _require_catalog())
    return {
        "components": _slot_ids(configuration),
        "summary": await _summary_payload(configuration),
    }


@router.post("/builds/suggestions")
async def build_suggestions(request: SuggestionRequest):
    """Apply recommendation picks to a configuration."""
    configuration = _resolve_configuration(request)
    updated, applied = apply_suggestions(
        configuration, request.suggestions, _require_catalog()
    )
    logger.info("Applied %d of %d suggestions", applied, len(request.suggestions))
    return {
        "components": _slot_ids(updated),
        "applied": applied,
        "summary": await _summary_payload(updated),
    }
