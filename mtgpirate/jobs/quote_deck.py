"""
Offline quote for a decklist file against a catalog CSV file.

Usage:
    python -m mtgpirate.jobs.quote_deck DECK_FILE --catalog CSV_FILE
        [--sideboard] [--commanders] [--no-fuzzy]
        [--variant-priority Regular Foil Holo] [--set-priority SLD MMQ]
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from mtgpirate.config import DEFAULT_TYPE_PRICES
from mtgpirate.models.card import Catalog
from mtgpirate.models.match import DeckEntryMatch
from mtgpirate.models.preferences import DEFAULT_VARIANT_PRIORITY, Preferences
from mtgpirate.models.pricing import PricingResult
from mtgpirate.parsers import parse_catalog_csv, parse_decklist
from mtgpirate.scrapers.catalog_source import canonicalize_price_map, fill_zero_prices
from mtgpirate.services.matcher import match_all, summarize_matches
from mtgpirate.services.pricing import calculate, format_price

logger = logging.getLogger(__name__)


def load_catalog_file(path: Path) -> Catalog:
    """Parse a catalog CSV file with default type prices and backfilled zero prices."""
    text = path.read_text(encoding="utf-8")
    catalog = parse_catalog_csv(text, canonicalize_price_map(DEFAULT_TYPE_PRICES))
    return fill_zero_prices(catalog)


def build_quote(
    deck_text: str,
    catalog: Catalog,
    preferences: Preferences,
) -> tuple[list[DeckEntryMatch], PricingResult]:
    entries = parse_decklist(
        deck_text,
        include_sideboard=preferences.include_sideboard,
        include_commanders=preferences.include_commanders,
    )
    matches = match_all(entries, catalog, preferences.match_config())
    return matches, calculate(matches)


def format_quote(matches: Sequence[DeckEntryMatch], pricing: PricingResult) -> str:
    """Plain-text quote: one line per entry, then the totals."""
    lines: list[str] = []
    for match in matches:
        entry = match.deck_entry
        variant = match.selected_variant
        if variant is not None:
            detail = (
                f"{variant.set_code} {variant.variant_type.value} "
                f"{variant.sku} @ ${format_price(variant.price_in_cents)} "
                f"= ${format_price(match.line_total_cents)}"
            )
        else:
            detail = match.notes
            if match.candidates:
                names = ", ".join(
                    f"{c.variant.name_original} ({c.variant.set_code})"
                    for c in match.candidates[:3]
                )
                detail += f": {names}"
        lines.append(
            f"{entry.qty:>3} {entry.card_name} [{entry.section.value}] "
            f"{match.status.value} - {detail}"
        )

    summary = summarize_matches(matches)
    lines.append("")
    lines.append(", ".join(f"{status.value}: {count}" for status, count in summary.items()))
    lines.append(f"Base total:  ${format_price(pricing.base_total_cents)}")
    lines.append(
        f"Discount:    {pricing.discount_percent}% "
        f"(-${format_price(pricing.discount_amount_cents)})"
    )
    lines.append(f"Subtotal:    ${format_price(pricing.subtotal_after_discount_cents)}")
    lines.append(
        f"Shipping:    {pricing.shipping_type.value} "
        f"${format_price(pricing.shipping_cost_cents)}"
    )
    lines.append(f"Grand total: ${format_price(pricing.grand_total_cents)}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Quote a decklist against a catalog CSV")
    parser.add_argument("deck_file", type=Path, help="Decklist text file")
    parser.add_argument("--catalog", type=Path, required=True, help="Catalog CSV file")
    parser.add_argument("--sideboard", action="store_true", help="Include sideboard entries")
    parser.add_argument("--commanders", action="store_true", help="Include commander entries")
    parser.add_argument("--no-fuzzy", action="store_true", help="Disable fuzzy candidates")
    parser.add_argument(
        "--variant-priority",
        nargs="+",
        default=list(DEFAULT_VARIANT_PRIORITY),
        help="Variant types, most preferred first (default: Regular Foil Holo)",
    )
    parser.add_argument(
        "--set-priority",
        nargs="+",
        default=[],
        help="Set codes, most preferred first",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for an offline quote."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    catalog = load_catalog_file(args.catalog)
    if catalog.is_empty:
        logger.error("Catalog %s contained no usable rows", args.catalog)
        return 1

    preferences = Preferences(
        include_sideboard=args.sideboard,
        include_commanders=args.commanders,
        variant_priority=tuple(args.variant_priority),
        set_priority=tuple(args.set_priority),
        fuzzy_enabled=not args.no_fuzzy,
    )

    deck_text = args.deck_file.read_text(encoding="utf-8")
    matches, pricing = build_quote(deck_text, catalog, preferences)
    print(format_quote(matches, pricing))
    return 0


if __name__ == "__main__":
    sys.exit(main())
