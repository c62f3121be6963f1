"""REST endpoints for food search and barcode lookup.

Thin layer over the application services: parses query parameters and
maps domain errors to status codes. Services are read from ``app.state``
(see ``nutrilink.app``).
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from nutrilink.application.barcode.resolver_service import BarcodeResolverService
from nutrilink.application.search.fusion_service import (
    DEFAULT_LIMIT,
    FoodSearchService,
)
from nutrilink.domain.shared.errors import ExternalServiceError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/food", tags=["food"])


def get_search_service(request: Request) -> FoodSearchService:
    return request.app.state.search_service


def get_barcode_service(request: Request) -> BarcodeResolverService:
    return request.app.state.barcode_service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def parse_limit(raw: Optional[str]) -> int:
    """Parse the ``limit`` parameter; non-numeric falls back to the default.

    Example:
        >>> parse_limit("5"), parse_limit("abc"), parse_limit(None)
        (5, 20, 20)
    """
    if raw is None:
        return DEFAULT_LIMIT
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_LIMIT
    return value if value != 0 else DEFAULT_LIMIT


def parse_sources(raw: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated ``sources`` parameter (None when absent)."""
    if raw is None:
        return None
    names = [name.strip() for name in raw.split(",") if name.strip()]
    return names or None


@router.get("/search")
async def search_foods(
    query: Optional[str] = Query(None, description="Free-text search"),
    limit: Optional[str] = Query(None, description="Page size (1-100, default 20)"),
    sources: Optional[str] = Query(None, description="Comma-separated source names"),
    service: FoodSearchService = Depends(get_search_service),
) -> JSONResponse:
    """Search every enabled source and return one ranked page.

    Example:
        ```bash
        curl "http://localhost:8080/api/food/search?query=apple&limit=10&sources=usda"
        ```
    """
    if query is None or not query.strip():
        return _error(400, "Query parameter is required")

    try:
        response = await service.search(
            query,
            limit=parse_limit(limit),
            sources=parse_sources(sources),
        )
    except ValidationError as e:
        return _error(400, str(e))
    except ExternalServiceError as e:
        logger.error("Food search failed", query=query, error=str(e))
        return _error(500, "Failed to search foods")

    return JSONResponse(content=response.to_wire())


@router.get("/barcode/{code}")
async def lookup_barcode(
    code: str,
    service: BarcodeResolverService = Depends(get_barcode_service),
) -> JSONResponse:
    """Resolve one product by barcode.

    Example:
        ```bash
        curl "http://localhost:8080/api/food/barcode/3017620422003"
        ```
    """
    try:
        result = await service.resolve(code)
    except ValidationError as e:
        return _error(400, str(e))
    except ExternalServiceError as e:
        logger.error("Barcode lookup failed", barcode=code, error=str(e))
        return _error(500, "Failed to lookup barcode")

    return JSONResponse(content=result.to_wire())
