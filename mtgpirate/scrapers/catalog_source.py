"""
Remote catalog loader.

Fetches the reseller's catalog and hands the text to the parsers.
Strategies, in order:

1. Direct CSV download
2. Paginated CSV download (?page=N), bounded and loop-guarded
3. HTML page: embedded EXAMPLE_CSV block, then card blocks / table

A failed strategy is logged and the next one runs; nothing raises out
of `load()`. Web exports are inherently fragile, so every parsed
catalog has zero prices backfilled from the per-type defaults.
"""

import hashlib
import logging
from collections.abc import Callable, Mapping
from dataclasses import replace

import httpx

from mtgpirate.config import DEFAULT_TYPE_PRICE_CENTS, DEFAULT_TYPE_PRICES, Settings
from mtgpirate.config import settings as default_settings
from mtgpirate.models.card import CardVariant, Catalog, VariantType
from mtgpirate.parsers.catalog_csv import parse_catalog_csv
from mtgpirate.parsers.catalog_html import (
    extract_example_csv,
    extract_type_prices,
    parse_catalog_html,
)

logger = logging.getLogger(__name__)

LogCallback = Callable[[str], None]


def canonicalize_price_map(prices: Mapping[str, float]) -> dict[str, float]:
    """
    Fold arbitrary type labels onto Regular/Foil/Holo.

    When several labels land on the same type the highest price wins,
    e.g. {"Foil": 3.5, "Etched Foil": 4.0} -> {"Foil": 4.0}.
    """
    result: dict[str, float] = {}
    for label, price in prices.items():
        key = VariantType.from_raw(label).value
        if key not in result or price > result[key]:
            result[key] = price
    return result


def fill_zero_prices(catalog: Catalog) -> Catalog:
    """Backfill every variant priced at or below zero from the default cents table."""
    filled: list[CardVariant] = []
    for variant in catalog.variants:
        if variant.price_in_cents <= 0:
            cents = DEFAULT_TYPE_PRICE_CENTS.get(variant.variant_type.value, 0)
            variant = replace(variant, price_in_cents=cents)
        filled.append(variant)
    return Catalog(tuple(filled))


def body_hash(lines: list[str]) -> str:
    """Hash of a CSV page's data rows (header excluded)."""
    return hashlib.sha256("\n".join(lines[1:]).encode("utf-8")).hexdigest()


class RemoteCatalogSource:
    """
    Loads the catalog over HTTP.

    Args:
        client: Optional httpx client for connection reuse (and tests).
            When omitted, a client is created for each load.
        settings: Settings carrying URLs, limits and timeouts.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or default_settings

    async def load(self, log: LogCallback | None = None) -> Catalog | None:
        """
        Fetch and parse the catalog.

        Args:
            log: Optional callback receiving progress and failure messages

        Returns:
            Catalog with zero prices backfilled, or None when every
            strategy failed to produce a variant.
        """

        def emit(message: str) -> None:
            logger.info(message)
            if log is not None:
                log(message)

        try:
            if self._client is not None:
                return await self._load_with(self._client, emit)

            async with httpx.AsyncClient(
                headers={"User-Agent": self._settings.user_agent},
                follow_redirects=True,
                timeout=self._settings.http_timeout,
            ) as client:
                return await self._load_with(client, emit)
        except Exception as e:
            logger.exception("Catalog load failed")
            emit(f"Error fetching/parsing catalog: {e}")
            return None

    async def _load_with(self, client: httpx.AsyncClient, emit: LogCallback) -> Catalog | None:
        csv_text = await self.fetch_all_csv_pages(client, emit)
        if csv_text.strip():
            catalog = parse_catalog_csv(csv_text, canonicalize_price_map(DEFAULT_TYPE_PRICES))
            if not catalog.is_empty:
                emit(f"Loaded {len(catalog)} variants from CSV")
                return fill_zero_prices(catalog)
            emit("CSV contained no usable rows")

        html_url = self._settings.catalog_html_url
        emit(f"Attempting HTML fetch: {html_url}")
        try:
            html = await self._fetch_text(client, html_url, emit)
        except httpx.HTTPError as e:
            emit(f"HTML fetch failed: {e}")
            return None

        type_prices = canonicalize_price_map(extract_type_prices(html) or DEFAULT_TYPE_PRICES)

        example_csv = extract_example_csv(html)
        if example_csv:
            emit("Parsing embedded example CSV block")
            catalog = parse_catalog_csv(example_csv, type_prices)
            if not catalog.is_empty:
                return fill_zero_prices(catalog)

        catalog = parse_catalog_html(html)
        if catalog.is_empty:
            emit("HTML page contained no usable catalog data")
            return None

        emit(f"Loaded {len(catalog)} variants from HTML")
        return fill_zero_prices(catalog)

    async def fetch_all_csv_pages(self, client: httpx.AsyncClient, emit: LogCallback) -> str:
        """
        Download the CSV, directly or page by page.

        Pagination stops at `csv_max_pages`, on a failed or empty page,
        when a page repeats one already seen (servers that ignore the
        page parameter), or after a short page.

        Returns:
            CSV text with a single header line, or "" if nothing came back.
        """
        url = self._settings.catalog_csv_url

        emit(f"Attempting direct CSV fetch: {url}")
        try:
            csv_text = await self._fetch_text(client, url, emit)
            if csv_text.strip():
                return csv_text
        except httpx.HTTPError as e:
            emit(f"Direct CSV fetch failed: {e}")

        header: str | None = None
        rows: list[str] = []
        seen_hashes: set[str] = set()

        for page in range(1, self._settings.csv_max_pages + 1):
            emit(f"Fetching CSV page: {url}?page={page}")
            try:
                page_text = await self._fetch_text(client, url, emit, params={"page": page})
            except httpx.HTTPError as e:
                emit(f"CSV page {page} failed: {e}")
                break

            lines = [line for line in page_text.splitlines() if line.strip()]
            if not lines:
                break

            digest = body_hash(lines)
            if digest in seen_hashes:
                emit(f"Duplicate CSV page detected at page={page}; stopping pagination")
                break
            seen_hashes.add(digest)

            if header is None:
                header = lines[0]
                rows.append(header)
            rows.extend(lines[1:])

            if len(lines) < self._settings.csv_min_page_rows:
                break

        return "\n".join(rows)

    async def _fetch_text(
        self,
        client: httpx.AsyncClient,
        url: str,
        emit: LogCallback,
        params: dict[str, int] | None = None,
    ) -> str:
        response = await client.get(url, params=params)
        emit(f"HTTP GET {response.url} -> {response.status_code}")
        response.raise_for_status()
        return response.text
