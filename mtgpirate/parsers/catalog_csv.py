"""
Parser for the upstream catalog CSV export.

Expected header (aliases accepted, any order):
    SKU,Card Name,Set,Card Type,Base Price[,Collector Number]

Example:
    SKU,Card Name,Set,Card Type,Base Price
    SKU101,Brainstorm,MMQ,Regular,2.50
    SKU102,"Sheoldred, the Apocalypse",DMU,Foil,$4.00

The export is untrusted and varies between runs. This parser never raises
on bad data: it repairs what it can and drops rows it cannot use.
Handles:
    - Collapsed single-line exports (rows re-split on "SKU<digits>," tokens)
    - Quoted fields with escaped quotes
    - Unquoted commas inside names (columns realigned heuristically)
    - HTML fragments inside cells
    - Set code or "#collector" suffixes embedded in the name cell
"""

import logging
import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

from mtgpirate.config import DEFAULT_TYPE_PRICES
from mtgpirate.models.card import CardVariant, Catalog, VariantType
from mtgpirate.services.normalizer import normalize

logger = logging.getLogger(__name__)

HEADER_ALIASES: dict[str, str] = {
    "card name": "name",
    "name": "name",
    "sku": "sku",
    "set": "set",
    "card type": "type",
    "type": "type",
    "base price": "price",
    "price": "price",
    "collector number": "collector_number",
    "collector": "collector_number",
    "number": "collector_number",
}

REQUIRED_FIELDS = ("sku", "name", "set", "type")

# "...Card Type SKU1,..." -> header and first row were joined
_HEADER_JOIN = re.compile(r"(Card Type)\s+(SKU\d+,)")
# Whitespace followed by a row-start token
_ROW_START = re.compile(r"\s+(SKU\d+,)")

_HTML_TAG = re.compile(r"<[^>]+>")
_NBSP = re.compile(r"&nbsp;", re.IGNORECASE)
_AMP = re.compile(r"&amp;", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

SET_CODE_PATTERN = re.compile(r"^[A-Z0-9]{2,5}$")
# "An Offer You Can't Refuse SLP" -> trailing set code
_TRAILING_SET_CODE = re.compile(r" ([A-Z0-9]{2,5})$")
# "Sol Ring #1234" -> trailing collector number
_TRAILING_COLLECTOR = re.compile(r" #([0-9A-Za-z]+)$")

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")

_DEFAULT_PRICES_LOWER = {k.lower(): v for k, v in DEFAULT_TYPE_PRICES.items()}


def preprocess(raw: str) -> str:
    """
    Restore row boundaries in a possibly collapsed export.

    Some exports put every row on one line. Rows always start with an
    "SKU<digits>," token, so a newline is inserted before each one.
    """
    text = raw.replace("\r", "")
    text = _HEADER_JOIN.sub(r"\1\n\2", text)
    return _ROW_START.sub(r"\n\1", text)


def split_csv_line(line: str) -> list[str]:
    """
    Split one CSV line into raw cells.

    A double quote toggles quoted mode, a doubled quote inside quotes is
    a literal quote, and a comma outside quotes separates fields.
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    cells.append("".join(current))
    return cells


def sanitize_cell(cell: str) -> str:
    """Strip HTML tags, decode &nbsp;/&amp;, collapse whitespace."""
    text = _HTML_TAG.sub(" ", cell)
    text = _NBSP.sub(" ", text)
    text = _AMP.sub("&", text)
    return _WHITESPACE.sub(" ", text).strip()


def resolve_header(cells: list[str]) -> list[str]:
    """Map raw header cells to canonical field names (unknown names kept lowercased)."""
    resolved = []
    for cell in cells:
        key = sanitize_cell(cell).lower()
        resolved.append(HEADER_ALIASES.get(key, key))
    return resolved


def is_variant_type_cell(cell: str) -> bool:
    text = cell.lower()
    return "foil" in text or "holo" in text or "regular" in text


def parse_price_cell(raw: str) -> Decimal:
    """
    Parse a price cell as dollars.

    Everything except digits and dots is stripped first, so "$2.50"
    and "2.50 USD" both parse. Unparseable cells are zero.
    """
    cleaned = _NON_PRICE_CHARS.sub("", raw)
    if not cleaned:
        return Decimal(0)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal(0)


def dollars_to_cents(dollars: Decimal) -> int:
    """Whole cents, truncated toward zero."""
    return int(dollars * 100)


def resolve_price_cents(
    price_cell: str,
    variant_type: VariantType,
    type_prices: Mapping[str, float],
) -> int:
    """
    Price for a row in cents.

    Falls back to the type price map, then to the fixed defaults,
    when the cell is missing or zero.
    """
    dollars = parse_price_cell(price_cell)
    if dollars > 0:
        return dollars_to_cents(dollars)

    key = variant_type.value.lower()
    fallback = type_prices.get(key)
    if fallback is None:
        fallback = _DEFAULT_PRICES_LOWER.get(key, 0.0)
    return dollars_to_cents(Decimal(str(fallback)))


def realign_row(raw_cells: list[str], headers: list[str]) -> list[str]:
    """
    Repair a row whose unquoted commas split the name across cells.

    Scans forward from the name column for a set-code-shaped cell followed
    by a variant-type cell. The cells skipped on the way are the pieces of
    the name. Columns before the name keep their position; the cells after
    the type fill the remaining columns in header order. Returns the row
    unchanged when the pattern is not found, or when the row is not longer
    than the header.
    """
    if len(raw_cells) <= len(headers):
        return raw_cells

    idx_name = headers.index("name")
    idx_set = headers.index("set")
    idx_type = headers.index("type")
    trailing_columns = [
        j for j in range(idx_name + 1, len(headers)) if j not in (idx_set, idx_type)
    ]

    for i in range(idx_name + 1, len(raw_cells) - 1):
        candidate = sanitize_cell(raw_cells[i])
        if not SET_CODE_PATTERN.match(candidate):
            continue
        if not is_variant_type_cell(sanitize_cell(raw_cells[i + 1])):
            continue

        aligned = [""] * len(headers)
        aligned[:idx_name] = raw_cells[:idx_name]
        aligned[idx_name] = ",".join(raw_cells[idx_name:i])
        aligned[idx_set] = raw_cells[i]
        aligned[idx_type] = raw_cells[i + 1]
        for column, cell in zip(trailing_columns, raw_cells[i + 2 :], strict=False):
            aligned[column] = cell
        return aligned

    # No type cell to anchor on; returned as is
    return raw_cells


def _cell(cells: list[str], index: int) -> str:
    if 0 <= index < len(cells):
        return cells[index]
    return ""


def _split_name_suffixes(name: str, set_code: str) -> tuple[str, str, str | None]:
    """
    Pull a "#collector" suffix and a trailing set code out of a name.

    The set code only moves when the row's set is blank or already
    equal to it.

    Returns:
        (name, set_code, collector_number_from_name)
    """
    collector: str | None = None
    match = _TRAILING_COLLECTOR.search(name)
    if match:
        collector = match.group(1)
        name = name[: match.start()].strip()

    match = _TRAILING_SET_CODE.search(name)
    if match:
        token = match.group(1)
        if not set_code or set_code.lower() == token.lower():
            set_code = token
            name = name[: match.start()].strip()

    return name, set_code, collector


def parse_catalog_csv(
    raw_text: str,
    type_price_map: Mapping[str, float] | None = None,
) -> Catalog:
    """
    Parse a catalog CSV export into a Catalog.

    Args:
        raw_text: Raw CSV text (possibly collapsed onto one line)
        type_price_map: Dollar price per variant type, used when a row's
            price is missing or zero. Keys are matched case-insensitively.

    Returns:
        Catalog with one variant per usable row. Empty when the text is
        blank or the header lacks any of SKU, name, set or type.
    """
    lines = [line for line in preprocess(raw_text).strip().split("\n") if line.strip()]
    if not lines:
        return Catalog.empty()

    headers = resolve_header(split_csv_line(lines[0]))
    missing = [name for name in REQUIRED_FIELDS if name not in headers]
    if missing:
        logger.warning("Catalog CSV header missing required columns: %s", ", ".join(missing))
        return Catalog.empty()

    idx_sku = headers.index("sku")
    idx_name = headers.index("name")
    idx_set = headers.index("set")
    idx_type = headers.index("type")
    idx_price = headers.index("price") if "price" in headers else -1
    idx_collector = headers.index("collector_number") if "collector_number" in headers else -1

    type_prices = {k.strip().lower(): v for k, v in (type_price_map or {}).items()}

    variants: list[CardVariant] = []
    dropped = 0

    for line in lines[1:]:
        cells = [sanitize_cell(c) for c in realign_row(split_csv_line(line), headers)]

        sku = _cell(cells, idx_sku)
        set_code = _cell(cells, idx_set)
        variant_type = VariantType.from_raw(_cell(cells, idx_type))
        name, set_code, collector_from_name = _split_name_suffixes(
            _cell(cells, idx_name), set_code
        )
        collector_number = _cell(cells, idx_collector) or collector_from_name

        if not sku or not name or not set_code:
            dropped += 1
            continue

        variants.append(
            CardVariant(
                name_original=name,
                name_normalized=normalize(name),
                set_code=set_code,
                sku=sku,
                variant_type=variant_type,
                price_in_cents=resolve_price_cents(
                    _cell(cells, idx_price), variant_type, type_prices
                ),
                collector_number=collector_number,
            )
        )

    logger.debug(
        "Parsed catalog CSV",
        extra={"variant_count": len(variants), "dropped_rows": dropped},
    )
    return Catalog(tuple(variants))
