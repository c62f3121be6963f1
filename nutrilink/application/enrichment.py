"""
Cross-source enrichment.

Backfills image and quality labels on items from other sources by looking
their barcode up in the enrichment provider. Never fails the caller.
"""

import asyncio
import time
from typing import Optional

import structlog

from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    ProductEnrichment,
    apply_enrichment,
)
from nutrilink.domain.food.ports import IEnrichmentProvider
from nutrilink.domain.food.scoring import data_completeness

logger = structlog.get_logger(__name__)


def _needs_enrichment(item: CanonicalFoodItem, provider: IEnrichmentProvider) -> bool:
    return bool(item.gtin_upc) and item.source != provider.source


async def _safe_lookup(
    provider: IEnrichmentProvider, barcode: str
) -> Optional[ProductEnrichment]:
    try:
        return await provider.lookup_enrichment(barcode)
    except Exception as e:  # noqa: BLE001
        logger.warning("Enrichment lookup failed", barcode=barcode, error=str(e))
        return None


async def enrich_items(
    items: list[CanonicalFoodItem],
    provider: Optional[IEnrichmentProvider],
) -> list[CanonicalFoodItem]:
    """Enrich every eligible item concurrently, preserving order.

    Items without a barcode, or coming from the provider's own source, are
    returned untouched without a lookup. Each distinct barcode is looked up
    once. Enriched items get their completeness recomputed.

    Args:
        items: Final, already ranked items
        provider: Enrichment provider (None disables enrichment)

    Returns:
        Items in the same order, enriched where data was found
    """
    if provider is None:
        return items

    barcodes: list[str] = []
    for item in items:
        if _needs_enrichment(item, provider) and item.gtin_upc not in barcodes:
            barcodes.append(item.gtin_upc)

    if not barcodes:
        return items

    start_time = time.time()
    found = await asyncio.gather(*(_safe_lookup(provider, code) for code in barcodes))
    by_barcode = dict(zip(barcodes, found))

    logger.info(
        "Enrichment completed",
        lookups=len(barcodes),
        hits=sum(1 for e in found if e is not None),
        time_ms=round((time.time() - start_time) * 1000, 2),
    )

    enriched_items: list[CanonicalFoodItem] = []
    for item in items:
        if _needs_enrichment(item, provider):
            enriched = apply_enrichment(item, by_barcode.get(item.gtin_upc))
            if enriched is not item:
                enriched = enriched.model_copy(
                    update={"data_completeness": data_completeness(enriched)}
                )
            item = enriched
        enriched_items.append(item)
    return enriched_items
