"""Tests for the remote catalog loader."""

import httpx
import pytest
import respx

from mtgpirate.config import Settings
from mtgpirate.models.card import CardVariant, Catalog, VariantType
from mtgpirate.scrapers.catalog_source import (
    RemoteCatalogSource,
    canonicalize_price_map,
    fill_zero_prices,
)

CSV_URL = "https://catalog.test/single-card-list.csv"
HTML_URL = "https://catalog.test/singlecardslist.html"
HEADER = "SKU,Card Name,Set,Card Type,Base Price"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(catalog_csv_url=CSV_URL, catalog_html_url=HTML_URL)


def _page(start: int, rows: int) -> str:
    lines = [HEADER]
    lines.extend(f"SKU{n},Card {n},SET,Regular,1.00" for n in range(start, start + rows))
    return "\n".join(lines)


def _page_param(request: httpx.Request) -> int | None:
    page = request.url.params.get("page")
    return int(page) if page else None


class TestCanonicalizePriceMap:
    def test_folds_labels(self) -> None:
        """Labels map onto canonical types, highest price kept."""
        prices = {"Regular": 2.2, "Foil": 3.5, "Foil Etched": 4.0, "Reverse Holo": 3.0}

        assert canonicalize_price_map(prices) == {"Regular": 2.2, "Foil": 4.0, "Holo": 3.0}


class TestFillZeroPrices:
    def test_backfills_zero(self) -> None:
        """Zero-priced variants get the default for their type."""
        variant = CardVariant(
            name_original="Opt",
            name_normalized="opt",
            set_code="XLN",
            sku="SKU1",
            variant_type=VariantType.HOLO,
            price_in_cents=0,
        )
        priced = CardVariant(
            name_original="Opt",
            name_normalized="opt",
            set_code="XLN",
            sku="SKU2",
            variant_type=VariantType.REGULAR,
            price_in_cents=25,
        )

        catalog = fill_zero_prices(Catalog((variant, priced)))

        assert catalog.variants[0].price_in_cents == 300
        assert catalog.variants[1].price_in_cents == 25


class TestRemoteCatalogSource:
    @respx.mock
    async def test_direct_csv(self, test_settings: Settings) -> None:
        """A direct CSV download is used as-is."""
        route = respx.get(CSV_URL).mock(return_value=httpx.Response(200, text=_page(1, 3)))

        catalog = await RemoteCatalogSource(settings=test_settings).load()

        assert catalog is not None
        assert len(catalog) == 3
        assert route.call_count == 1

    @respx.mock
    async def test_paginates_until_short_page(self, test_settings: Settings) -> None:
        """Pages are fetched until one is shorter than a full page."""

        def handler(request: httpx.Request) -> httpx.Response:
            page = _page_param(request)
            if page is None:
                return httpx.Response(404)
            if page == 1:
                return httpx.Response(200, text=_page(1, 20))
            return httpx.Response(200, text=_page(21, 2))

        route = respx.get(CSV_URL).mock(side_effect=handler)

        catalog = await RemoteCatalogSource(settings=test_settings).load()

        assert catalog is not None
        assert len(catalog) == 22
        assert route.call_count == 3

    @respx.mock
    async def test_duplicate_page_stops_pagination(self, test_settings: Settings) -> None:
        """A server that ignores the page parameter is detected."""

        def handler(request: httpx.Request) -> httpx.Response:
            if _page_param(request) is None:
                return httpx.Response(200, text="")
            return httpx.Response(200, text=_page(1, 20))

        route = respx.get(CSV_URL).mock(side_effect=handler)
        messages: list[str] = []

        catalog = await RemoteCatalogSource(settings=test_settings).load(log=messages.append)

        assert catalog is not None
        assert len(catalog) == 20
        assert route.call_count == 3
        assert any("Duplicate CSV page" in m for m in messages)

    @respx.mock
    async def test_page_ceiling(self, test_settings: Settings) -> None:
        """Pagination stops after the configured number of pages."""

        def handler(request: httpx.Request) -> httpx.Response:
            page = _page_param(request)
            if page is None:
                return httpx.Response(500)
            return httpx.Response(200, text=_page(page * 100, 20))

        route = respx.get(CSV_URL).mock(side_effect=handler)

        catalog = await RemoteCatalogSource(settings=test_settings).load()

        assert catalog is not None
        assert len(catalog) == 200
        assert route.call_count == 11

    @respx.mock
    async def test_html_example_csv(self, test_settings: Settings) -> None:
        """Without a CSV, the page's embedded example CSV is used with its type prices."""
        respx.get(CSV_URL).mock(return_value=httpx.Response(404))
        html = (
            "<script>\n"
            'const CARD_TYPE_PRICES = { "Regular": 2.0, "Foil Etched": 4.5 };\n'
            f"const EXAMPLE_CSV = `{HEADER}\nSKU1,Opt,XLN,Foil,0\nSKU2,Ponder,M12,Regular,1.10`;\n"
            "</script>"
        )
        respx.get(HTML_URL).mock(return_value=httpx.Response(200, text=html))

        catalog = await RemoteCatalogSource(settings=test_settings).load()

        assert catalog is not None
        assert [v.price_in_cents for v in catalog] == [450, 110]

    @respx.mock
    async def test_html_table(self, test_settings: Settings) -> None:
        """The HTML table is the last resort."""
        respx.get(CSV_URL).mock(return_value=httpx.Response(503))
        html = (
            "<table><tr><th>SKU</th><th>Card Name</th><th>Set</th><th>Card Type</th></tr>"
            "<tr><td>SKU9</td><td>Opt</td><td>XLN</td><td>Holo</td></tr></table>"
        )
        respx.get(HTML_URL).mock(return_value=httpx.Response(200, text=html))

        catalog = await RemoteCatalogSource(settings=test_settings).load()

        assert catalog is not None
        assert catalog.variants[0].sku == "SKU9"
        assert catalog.variants[0].price_in_cents == 300

    @respx.mock
    async def test_everything_fails(self, test_settings: Settings) -> None:
        """When every strategy fails, load returns None and reports why."""
        respx.get(CSV_URL).mock(return_value=httpx.Response(500))
        respx.get(HTML_URL).mock(return_value=httpx.Response(500))
        messages: list[str] = []

        catalog = await RemoteCatalogSource(settings=test_settings).load(log=messages.append)

        assert catalog is None
        assert any("HTML fetch failed" in m for m in messages)

    @respx.mock
    async def test_network_error(self, test_settings: Settings) -> None:
        """Connection errors are handled like HTTP errors."""
        respx.get(CSV_URL).mock(side_effect=httpx.ConnectError("refused"))
        respx.get(HTML_URL).mock(side_effect=httpx.ConnectError("refused"))

        assert await RemoteCatalogSource(settings=test_settings).load() is None

    @respx.mock
    async def test_injected_client(self, test_settings: Settings) -> None:
        """An injected client is used for every request."""
        respx.get(CSV_URL).mock(return_value=httpx.Response(200, text=_page(1, 1)))

        async with httpx.AsyncClient() as client:
            source = RemoteCatalogSource(client=client, settings=test_settings)
            catalog = await source.load()

        assert catalog is not None
        assert catalog.variants[0].sku == "SKU1"
