"""
MtgPirate services.

Matching, pricing and catalog lifecycle.
"""

from mtgpirate.services.catalog_store import CatalogStore
from mtgpirate.services.image_enricher import ImageEnricher, RateLimiter
from mtgpirate.services.matcher import (
    match_all,
    match_entry,
    select_by_priority,
    select_variant,
    summarize_matches,
)
from mtgpirate.services.normalizer import levenshtein, normalize
from mtgpirate.services.pricing import calculate, format_price

__all__ = [
    "CatalogStore",
    "ImageEnricher",
    "RateLimiter",
    "calculate",
    "format_price",
    "levenshtein",
    "match_all",
    "match_entry",
    "normalize",
    "select_by_priority",
    "select_variant",
    "summarize_matches",
]
