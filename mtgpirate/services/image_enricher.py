"""
Card image enrichment from Scryfall.

Variants are looked up one at a time, paced by a RateLimiter owned by
the enricher. Lookup failures never propagate: the variant is returned
unchanged and the failure is logged.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from mtgpirate.config import settings
from mtgpirate.models.card import CardVariant
from mtgpirate.scrapers.scryfall import (
    DEFAULT_IMAGE_SIZE,
    FetchError,
    ScryfallClient,
    extract_image_url,
)

logger = logging.getLogger(__name__)

PROGRESS_LOG_INTERVAL = 10


class RateLimiter:
    """
    Enforces a minimum interval between calls.

    Args:
        min_interval: Seconds that must separate two acquisitions
        clock: Monotonic clock, injectable for tests
        sleep: Async sleep, injectable for tests
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None

    async def acquire(self) -> None:
        """Wait until min_interval has passed since the previous acquisition."""
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < self.min_interval:
                await self._sleep(self.min_interval - elapsed)
        self._last_call = self._clock()


class ImageEnricher:
    """Attaches Scryfall image URLs to catalog variants."""

    def __init__(
        self,
        client: ScryfallClient | None = None,
        rate_limiter: RateLimiter | None = None,
        image_size: str = DEFAULT_IMAGE_SIZE,
    ) -> None:
        self.client = client or ScryfallClient()
        self.rate_limiter = rate_limiter or RateLimiter(settings.scryfall_rate_limit_delay)
        self.image_size = image_size

    async def enrich_variant(self, variant: CardVariant) -> CardVariant:
        """
        Look up one variant's image.

        Uses the exact printing when the collector number is known,
        otherwise a name search within the variant's set.

        Returns:
            Copy with image_url set, or the original variant if it already
            had an image or the lookup found nothing or failed.
        """
        if variant.image_url:
            return variant

        await self.rate_limiter.acquire()
        try:
            if variant.collector_number:
                card = await self.client.get_card(variant.set_code, variant.collector_number)
            else:
                card = await self.client.search_card(variant.name_original, variant.set_code)
        except FetchError as e:
            logger.warning(
                "Image lookup failed for %s (%s): %s", variant.sku, variant.name_original, e
            )
            return variant

        if card is None:
            logger.debug("No Scryfall card for %s (%s)", variant.sku, variant.name_original)
            return variant

        image_url = extract_image_url(card, self.image_size)
        if image_url is None:
            return variant
        return variant.with_image_url(image_url)

    async def enrich_variants(self, variants: Sequence[CardVariant]) -> list[CardVariant]:
        """Enrich variants sequentially, order preserved."""
        enriched: list[CardVariant] = []
        total = len(variants)
        for i, variant in enumerate(variants, start=1):
            enriched.append(await self.enrich_variant(variant))
            if i % PROGRESS_LOG_INTERVAL == 0:
                logger.info("Enriched %d/%d variants", i, total)

        found = sum(1 for v in enriched if v.image_url)
        logger.info(
            "variants_enriched",
            extra={"variant_count": total, "with_image": found},
        )
        return enriched

    async def enrich_missing_images(self, variants: Sequence[CardVariant]) -> list[CardVariant]:
        """Enrich only variants without an image; the rest pass through untouched."""
        missing = [v for v in variants if not v.image_url]
        logger.info("Enriching %d of %d variants missing images", len(missing), len(variants))

        looked_up = iter(await self.enrich_variants(missing))
        return [v if v.image_url else next(looked_up) for v in variants]
