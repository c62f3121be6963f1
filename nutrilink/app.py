"""
FastAPI application factory.

Builds the process-wide cache and the source clients from settings, opens
the clients' HTTP sessions for the lifetime of the app and exposes the
services on ``app.state``.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import structlog
from fastapi import FastAPI

from nutrilink import __version__
from nutrilink.api.food_router import router as food_router
from nutrilink.application.barcode.resolver_service import BarcodeResolverService
from nutrilink.application.search.fusion_service import FoodSearchService
from nutrilink.config import Settings
from nutrilink.infrastructure.cache.ttl_cache import TTLCache
from nutrilink.infrastructure.openfoodfacts.api_client import OpenFoodFactsClient
from nutrilink.infrastructure.usda.api_client import RateLimiter, USDAApiClient
from nutrilink.logging_config import configure_logging

logger = structlog.get_logger(__name__)


def build_clients(settings: Settings, cache: TTLCache) -> tuple[USDAApiClient, OpenFoodFactsClient]:
    """Create (uninitialized) source clients sharing one cache."""
    usda = USDAApiClient(
        api_key=settings.usda_api_key,
        cache=cache,
        base_url=settings.usda_base_url,
        timeout_seconds=settings.http_timeout_seconds,
        search_ttl_seconds=settings.search_cache_ttl_seconds,
        item_ttl_seconds=settings.item_cache_ttl_seconds,
        not_found_ttl_seconds=settings.not_found_cache_ttl_seconds,
        rate_limiter=RateLimiter(requests_per_hour=settings.usda_requests_per_hour),
    )
    off = OpenFoodFactsClient(
        cache=cache,
        base_url=settings.off_base_url,
        user_agent=settings.off_user_agent,
        timeout_seconds=settings.http_timeout_seconds,
        search_ttl_seconds=settings.search_cache_ttl_seconds,
        item_ttl_seconds=settings.item_cache_ttl_seconds,
        not_found_ttl_seconds=settings.not_found_cache_ttl_seconds,
    )
    return usda, off


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Settings to use (default: read from the environment)
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cache = TTLCache(default_ttl_seconds=settings.search_cache_ttl_seconds)
        usda_client, off_client = build_clients(settings, cache)

        async with usda_client as usda, off_client as off:
            # Priority order: first source wins on dedup and on barcode fallback
            app.state.cache = cache
            app.state.search_service = FoodSearchService(
                sources=[usda, off],
                enrichment_provider=off,
            )
            app.state.barcode_service = BarcodeResolverService(
                chain=[usda, off],
                enrichment_provider=off,
            )

            logger.info(
                "Application ready",
                usda_key_present=bool(settings.usda_api_key),
                version=__version__,
            )
            yield
            logger.info("Application shutdown")

    app = FastAPI(title="Nutrilink", version=__version__, lifespan=lifespan)
    app.include_router(food_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "version": __version__}

    return app
