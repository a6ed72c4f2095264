"""MoboMojo build engine: FastAPI application.

Mounts the builder gateway (/api/*): catalog queries, compatibility
checks, configuration summaries, and saved-build records.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mobomojo.api.builder import router as builder_router
from mobomojo.api.builder import set_cache, set_catalog
from mobomojo.cache.redis_cache import SummaryCache
from mobomojo.catalog.store import Catalog, load_catalog

logger = logging.getLogger(__name__)

ENGINE_VERSION = "0.1.0"


# ──────────────────────────────────────────────
# App
# ──────────────────────────────────────────────


def create_app(
    catalog: Optional[Catalog] = None,
    cache: Optional[SummaryCache] = None,
) -> FastAPI:
    """Factory function: creates and configures the FastAPI app.

    `catalog` and `cache` override the defaults (bundled or
    MOBOMOJO_CATALOG_PATH catalog, Redis at REDIS_URL), mainly for tests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load shared resources on startup, release them on shutdown."""
        active_catalog = catalog if catalog is not None else load_catalog()

        active_cache = cache if cache is not None else SummaryCache()
        cache_connected = await active_cache.connect()

        set_catalog(active_catalog)
        set_cache(active_cache if cache_connected else None)

        logger.info("Catalog ready: %d components", len(active_catalog))
        if cache_connected:
            logger.info("Summary cache connected")
        else:
            logger.warning("Redis unavailable, summary caching disabled")

        yield

        await active_cache.disconnect()
        set_catalog(None)
        set_cache(None)
        logger.info("Shutting down MoboMojo engine")

    app = FastAPI(
        title="MoboMojo Build Engine",
        description=(
            "PC build compatibility engine.\n\n"
            "- **Catalog** (`/api/catalog/*`): search, filter, sort, facets\n"
            "- **Compatibility** (`/api/compatibility/*`): per-candidate violations\n"
            "- **Builds** (`/api/builds/*`): summaries and saved-build records\n"
        ),
        version=ENGINE_VERSION,
        lifespan=lifespan,
    )

    # CORS: allow the builder frontend
    allowed_origins = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in allowed_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(builder_router)

    # Root health check
    @app.get("/", tags=["Root"])
    async def root():
        return {
            "engine": "MoboMojo",
            "version": ENGINE_VERSION,
            "gateways": {"builder": "/api"},
        }

    return app


# ──────────────────────────────────────────────
# Entrypoint
# ──────────────────────────────────────────────

app = create_app()

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    uvicorn.run(
        "mobomojo.api.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
