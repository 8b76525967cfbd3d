"""
Fallback parser for the catalog HTML page.

Used when no usable CSV could be fetched. The page comes in two shapes:

1. Card blocks with labelled fields:
       <div><p><strong>SKU:</strong> SKU101</p>
            <p><strong>Card Name:</strong> Brainstorm</p> ...</div>
2. A plain <table> whose header row uses the same column names as the CSV.

The page may also embed the data the CSV would have carried:
    CARD_TYPE_PRICES = { "Regular": 2.2, "Foil": 3.5 }
    EXAMPLE_CSV = `SKU,Card Name,...`
Both are pulled out with regular expressions on the raw text.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag

from mtgpirate.models.card import CardVariant, Catalog, VariantType
from mtgpirate.parsers.catalog_csv import resolve_price_cents
from mtgpirate.services.normalizer import normalize

logger = logging.getLogger(__name__)

# Compacted header (letters only) -> field
TABLE_HEADER_ALIASES: dict[str, str] = {
    "cardname": "name",
    "name": "name",
    "sku": "sku",
    "set": "set",
    "cardtype": "type",
    "type": "type",
    "baseprice": "price",
    "price": "price",
    "collectornumber": "collector_number",
    "collector": "collector_number",
    "number": "collector_number",
}

REQUIRED_FIELDS = ("sku", "name", "set", "type")

BLOCK_LABELS: dict[str, str] = {
    "sku": "SKU:",
    "name": "Card Name:",
    "set": "Set:",
    "type": "Card Type:",
    "price": "Base Price:",
}

_LABEL_ALTERNATION = "|".join(re.escape(label) for label in BLOCK_LABELS.values())
# The value is the text right after the label, up to the next label or line
# break. The label's own node usually ends with a line break, so leading
# whitespace (newlines included) is skipped first.
_LABEL_VALUE_PATTERNS: dict[str, re.Pattern[str]] = {
    field: re.compile(
        rf"(?<![A-Za-z]){re.escape(label)}\s*(.*?)[ \t]*(?=(?:{_LABEL_ALTERNATION})|\n|$)"
    )
    for field, label in BLOCK_LABELS.items()
}

_NON_LETTERS = re.compile(r"[^a-z]")

# CARD_TYPE_PRICES = { "Regular": 2.2, "Holo": 3.0 }
_TYPE_PRICES_PATTERN = re.compile(r"CARD_TYPE_PRICES\s*=\s*\{([^}]+)\}")
# EXAMPLE_CSV = `...`
_EXAMPLE_CSV_PATTERN = re.compile(r"EXAMPLE_CSV\s*=\s*`([\s\S]*?)`")
_NON_PRICE_CHARS = re.compile(r"[^0-9.]")


def extract_type_prices(html: str) -> dict[str, float]:
    """
    Extract the CARD_TYPE_PRICES object literal from page source.

    Returns:
        Dict of type label -> dollar price. Empty if the literal is absent.
        Entries that are not `"key": number` pairs are skipped.
    """
    match = _TYPE_PRICES_PATTERN.search(html)
    if not match:
        return {}

    prices: dict[str, float] = {}
    for entry in match.group(1).split(","):
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) != 2:
            continue
        key = parts[0].strip("\"'")
        value = _NON_PRICE_CHARS.sub("", parts[1])
        if not key or not value:
            continue
        try:
            prices[key] = float(value)
        except ValueError:
            continue
    return prices


def extract_example_csv(html: str) -> str | None:
    """Extract the backtick-delimited EXAMPLE_CSV block, or None."""
    match = _EXAMPLE_CSV_PATTERN.search(html)
    if not match:
        return None
    return match.group(1).strip()


def _make_variant(
    name: str,
    set_code: str,
    sku: str,
    type_raw: str,
    price_raw: str,
    collector_number: str | None = None,
) -> CardVariant:
    variant_type = VariantType.from_raw(type_raw)
    return CardVariant(
        name_original=name,
        name_normalized=normalize(name),
        set_code=set_code,
        sku=sku,
        variant_type=variant_type,
        price_in_cents=resolve_price_cents(price_raw, variant_type, {}),
        collector_number=collector_number or None,
    )


# =============================================================================
# LABELLED CARD BLOCKS
# =============================================================================


def _is_card_block(element: Tag) -> bool:
    text = element.get_text("\n")
    return text.count(BLOCK_LABELS["sku"]) == 1 and BLOCK_LABELS["name"] in text


def find_card_blocks(soup: BeautifulSoup) -> list[Tag]:
    """
    Innermost elements holding exactly one labelled card.

    An element qualifies when its text has one "SKU:" label and a
    "Card Name:" label, and none of its child elements qualify.
    """
    blocks: list[Tag] = []
    for element in soup.find_all(True):
        if not _is_card_block(element):
            continue
        if any(_is_card_block(child) for child in element.find_all(True, recursive=False)):
            continue
        blocks.append(element)
    return blocks


def parse_card_block(block: Tag) -> CardVariant | None:
    """Read the labelled fields of one block. None if a required field is blank."""
    text = block.get_text("\n")
    values: dict[str, str] = {}
    for field, pattern in _LABEL_VALUE_PATTERNS.items():
        match = pattern.search(text)
        values[field] = match.group(1).strip() if match else ""

    if any(not values[field] for field in REQUIRED_FIELDS):
        return None

    return _make_variant(
        name=values["name"],
        set_code=values["set"],
        sku=values["sku"],
        type_raw=values["type"],
        price_raw=values["price"],
    )


# =============================================================================
# TABLE
# =============================================================================


def _compact_header(text: str) -> str:
    compact = _NON_LETTERS.sub("", text.lower())
    return TABLE_HEADER_ALIASES.get(compact, compact)


def _row_cells(row: Tag) -> list[str]:
    return [cell.get_text(" ", strip=True) for cell in row.find_all(["td", "th"])]


def dedupe_lowest_price(variants: list[CardVariant]) -> list[CardVariant]:
    """
    Collapse duplicates of (normalized name, set, type).

    Keeps the lowest non-zero price; if every duplicate is zero-priced,
    the first one seen wins. Group order follows first appearance.
    """
    groups: dict[tuple[str, str, VariantType], list[CardVariant]] = {}
    for variant in variants:
        key = (variant.name_normalized, variant.set_code, variant.variant_type)
        groups.setdefault(key, []).append(variant)

    result: list[CardVariant] = []
    for group in groups.values():
        priced = [v for v in group if v.price_in_cents > 0]
        result.append(min(priced, key=lambda v: v.price_in_cents) if priced else group[0])
    return result


def parse_catalog_table(soup: BeautifulSoup) -> Catalog:
    """Parse the largest <table> in the document."""
    tables = soup.find_all("table")
    if not tables:
        return Catalog.empty()

    table = max(tables, key=lambda t: len(t.find_all("tr")))
    rows = table.find_all("tr")
    if not rows:
        return Catalog.empty()

    headers = [_compact_header(text) for text in _row_cells(rows[0])]
    missing = [name for name in REQUIRED_FIELDS if name not in headers]
    if missing:
        logger.warning("Catalog table missing required columns: %s", ", ".join(missing))
        return Catalog.empty()

    idx = {name: headers.index(name) for name in headers if name in TABLE_HEADER_ALIASES.values()}

    variants: list[CardVariant] = []
    for row in rows[1:]:
        cells = _row_cells(row)
        if len(cells) < len(headers):
            continue

        sku = cells[idx["sku"]]
        name = cells[idx["name"]]
        set_code = cells[idx["set"]]
        if not sku or not name or not set_code:
            continue

        variants.append(
            _make_variant(
                name=name,
                set_code=set_code,
                sku=sku,
                type_raw=cells[idx["type"]],
                price_raw=cells[idx["price"]] if "price" in idx else "",
                collector_number=(
                    cells[idx["collector_number"]] if "collector_number" in idx else None
                ),
            )
        )

    return Catalog(tuple(dedupe_lowest_price(variants)))


def parse_catalog_html(html: str) -> Catalog:
    """
    Parse a catalog HTML page.

    Labelled card blocks are preferred; the largest table is the fallback.

    Returns:
        Catalog, empty when neither shape yields a usable variant.
    """
    if not html or not html.strip():
        return Catalog.empty()

    soup = BeautifulSoup(html, "html.parser")

    blocks = find_card_blocks(soup)
    if blocks:
        variants = [v for v in (parse_card_block(b) for b in blocks) if v is not None]
        logger.debug("Parsed %d of %d card blocks", len(variants), len(blocks))
        return Catalog(tuple(variants))

    return parse_catalog_table(soup)
