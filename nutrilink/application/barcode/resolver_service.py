"""
Barcode resolver service.

Resolves one product by barcode through a fixed fallback chain of sources
and enriches the winner from the enrichment provider.
"""

import time
from typing import Optional, Sequence

import structlog

from nutrilink.application.enrichment import enrich_items
from nutrilink.domain.food.models import BarcodeResult
from nutrilink.domain.food.ports import IEnrichmentProvider, IFoodSourceClient
from nutrilink.domain.food.scoring import data_completeness
from nutrilink.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)

BARCODE_RELEVANCE = 100


class BarcodeResolverService:
    """Resolve products by barcode.

    Flow:
    1. Clean the barcode to digits only
    2. Ask each source in chain order; first mappable hit wins
    3. Stamp id, relevance and completeness on the winner
    4. Backfill image and quality labels from the enrichment provider

    Upstream failures are not swallowed: they propagate as
    ExternalServiceError so the caller can report them.
    """

    def __init__(
        self,
        chain: Sequence[IFoodSourceClient],
        enrichment_provider: Optional[IEnrichmentProvider] = None,
    ) -> None:
        """Initialize service.

        Args:
            chain: Source clients in fallback order (USDA, then OpenFoodFacts)
            enrichment_provider: Barcode enrichment provider (optional)
        """
        self.chain = list(chain)
        self.enrichment_provider = enrichment_provider

    async def resolve(self, raw_barcode: str) -> BarcodeResult:
        """Resolve a barcode.

        Args:
            raw_barcode: Barcode as typed or scanned (separators allowed)

        Returns:
            BarcodeResult, ``found=False`` when every source misses

        Raises:
            ValidationError: If the barcode contains no digits
            ExternalServiceError: If a source lookup fails

        Example:
            >>> async def example(usda, off):
            ...     service = BarcodeResolverService([usda, off], enrichment_provider=off)
            ...     result = await service.resolve("301-762-042-2003")
            ...     return result.item.id if result.found else None
        """
        barcode = Barcode.parse(raw_barcode)
        start_time = time.time()

        logger.info("Starting barcode resolution", barcode=barcode.value)

        for client in self.chain:
            raw = await client.lookup_barcode(barcode)
            if raw is None:
                logger.debug("Barcode miss", barcode=barcode.value, source=client.source.value)
                continue

            try:
                item = client.to_canonical(raw)
            except Exception as e:  # noqa: BLE001
                logger.warning(
                    "Barcode hit failed mapping",
                    barcode=barcode.value,
                    source=client.source.value,
                    error=str(e),
                )
                item = None
            if item is None:
                logger.info(
                    "Barcode hit not mappable",
                    barcode=barcode.value,
                    source=client.source.value,
                )
                continue

            item = item.model_copy(
                update={
                    "id": f"{client.source.id_prefix}-{barcode.value}",
                    "relevance_score": BARCODE_RELEVANCE,
                    "gtin_upc": item.gtin_upc or barcode.value,
                }
            )
            item = item.model_copy(update={"data_completeness": data_completeness(item)})
            (item,) = await enrich_items([item], self.enrichment_provider)

            logger.info(
                "Barcode resolved",
                barcode=barcode.value,
                source=client.source.value,
                name=item.name,
                time_ms=round((time.time() - start_time) * 1000, 2),
            )
            return BarcodeResult(found=True, source=client.source, item=item)

        logger.info(
            "Barcode not found",
            barcode=barcode.value,
            time_ms=round((time.time() - start_time) * 1000, 2),
        )
        return BarcodeResult.not_found()
