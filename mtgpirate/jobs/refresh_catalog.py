"""
Job to refresh the reseller catalog.

Loads the catalog through RemoteCatalogSource and logs a per-type
summary. Optionally looks up Scryfall images for the loaded variants.

Run from the command line this is a check of the reseller feed: the
API keeps its own in-process store, so the loaded catalog is only
reported, and the exit status says whether a catalog could be loaded.
Callers holding a CatalogStore pass it to run_refresh to install the
result.

Usage:
    python -m mtgpirate.jobs.refresh_catalog [--images]
"""

import argparse
import asyncio
import logging
import sys

from mtgpirate.models.card import Catalog
from mtgpirate.scrapers.catalog_source import RemoteCatalogSource
from mtgpirate.services.catalog_store import CatalogStore
from mtgpirate.services.image_enricher import ImageEnricher

logger = logging.getLogger(__name__)


async def run_refresh(
    source: RemoteCatalogSource | None = None,
    enricher: ImageEnricher | None = None,
    store: CatalogStore | None = None,
) -> Catalog | None:
    """
    Load the catalog, optionally enriching it with images.

    Args:
        source: Catalog source. Defaults to one built from settings.
        enricher: When given, variants missing an image are looked up.
        store: When given, the loaded catalog is installed in it. A failed
            load leaves the store untouched.

    Returns:
        The loaded catalog, or None if no strategy produced one
    """
    source = source or RemoteCatalogSource()

    catalog = await source.load()
    if catalog is None:
        logger.error("No catalog could be loaded")
        return None

    if enricher is not None:
        variants = await enricher.enrich_missing_images(catalog.variants)
        catalog = Catalog(tuple(variants))

    counts = catalog.count_by_type()
    for variant_type, count in sorted(counts.items()):
        logger.info("  %s: %d", variant_type, count)
    logger.info(
        "catalog_refreshed",
        extra={"variant_count": len(catalog), "counts_by_type": counts},
    )

    if store is not None:
        store.replace(catalog)
    return catalog


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for refreshing the catalog."""
    parser = argparse.ArgumentParser(description="Refresh the reseller card catalog")
    parser.add_argument(
        "--images",
        action="store_true",
        help="Look up Scryfall images for variants without one",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    enricher = ImageEnricher() if args.images else None
    catalog = asyncio.run(run_refresh(enricher=enricher))
    return 0 if catalog is not None else 1


if __name__ == "__main__":
    sys.exit(main())
