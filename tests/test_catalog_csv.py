"""Tests for the catalog CSV parser."""

from mtgpirate.models.card import Catalog, VariantType
from mtgpirate.parsers.catalog_csv import (
    parse_catalog_csv,
    parse_price_cell,
    preprocess,
    realign_row,
    sanitize_cell,
    split_csv_line,
)

HEADER = "SKU,Card Name,Set,Card Type,Base Price"


def _only(catalog: Catalog):
    assert len(catalog) == 1
    return catalog.variants[0]


class TestParseCatalogCsv:
    def test_parses_fixture(self, sample_catalog: Catalog) -> None:
        """Usable rows become variants in file order."""
        skus = [v.sku for v in sample_catalog]

        assert skus == [
            "SKU101",
            "SKU102",
            "SKU103",
            "SKU104",
            "SKU105",
            "SKU106",
            "SKU107",
            "SKU109",
        ]

    def test_drops_rows_without_sku_or_set(self, sample_catalog: Catalog) -> None:
        """Rows with a blank SKU or set are skipped."""
        names = {v.name_original for v in sample_catalog}

        assert "Counterspell" not in names
        assert "Orphan Card" not in names

    def test_quoted_name_with_comma(self, sample_catalog: Catalog) -> None:
        """Quoted names keep their commas."""
        variant = sample_catalog.by_sku("SKU104")

        assert variant is not None
        assert variant.name_original == "Sheoldred, the Apocalypse"
        assert variant.name_normalized == "sheoldred the apocalypse"
        assert variant.variant_type == VariantType.FOIL
        assert variant.price_in_cents == 400

    def test_dollar_sign_price(self, sample_catalog: Catalog) -> None:
        """Currency symbols are stripped before parsing."""
        variant = sample_catalog.by_sku("SKU103")

        assert variant is not None
        assert variant.price_in_cents == 375

    def test_missing_and_zero_prices_use_defaults(self, sample_catalog: Catalog) -> None:
        """Blank or zero prices fall back to the per-type defaults."""
        bolt = sample_catalog.by_sku("SKU105")
        jace = sample_catalog.by_sku("SKU106")

        assert bolt is not None and bolt.price_in_cents == 220
        assert jace is not None and jace.price_in_cents == 300

    def test_collector_suffix_moved_out_of_name(self, sample_catalog: Catalog) -> None:
        """'Sol Ring #263' becomes name 'Sol Ring' with collector number 263."""
        variant = sample_catalog.by_sku("SKU107")

        assert variant is not None
        assert variant.name_original == "Sol Ring"
        assert variant.collector_number == "263"

    def test_split_card_normalized_to_first_face(self, sample_catalog: Catalog) -> None:
        """Split card names keep the full original but index by the first face."""
        variant = sample_catalog.by_sku("SKU109")

        assert variant is not None
        assert variant.name_original == "Fire // Ice"
        assert variant.name_normalized == "fire"

    def test_blank_input(self) -> None:
        """Blank text gives an empty catalog."""
        assert parse_catalog_csv("").is_empty
        assert parse_catalog_csv("   \n  ").is_empty

    def test_missing_required_header(self) -> None:
        """A header without a set column gives an empty catalog."""
        text = "SKU,Card Name,Card Type,Base Price\nSKU1,Brainstorm,Regular,2.50"

        assert parse_catalog_csv(text).is_empty

    def test_header_aliases(self) -> None:
        """Short header names and any column order are accepted."""
        text = "price,type,set,name,sku\n2.50,Regular,MMQ,Brainstorm,SKU1"

        variant = _only(parse_catalog_csv(text))

        assert variant.sku == "SKU1"
        assert variant.name_original == "Brainstorm"
        assert variant.set_code == "MMQ"
        assert variant.price_in_cents == 250

    def test_collapsed_single_line_export(self) -> None:
        """Rows collapsed onto one line are split on SKU tokens."""
        text = f"{HEADER} SKU1,Brainstorm,MMQ,Regular,2.50 SKU2,Counterspell,MMQ,Foil,3.50"

        catalog = parse_catalog_csv(text)

        assert [v.sku for v in catalog] == ["SKU1", "SKU2"]
        assert catalog.variants[1].variant_type == VariantType.FOIL

    def test_header_joined_to_first_row(self) -> None:
        """A header ending in 'Card Type' glued to the first row is separated."""
        text = "SKU,Card Name,Set,Card Type SKU1,Brainstorm,MMQ,Regular"

        variant = _only(parse_catalog_csv(text))

        assert variant.sku == "SKU1"
        assert variant.price_in_cents == 220

    def test_crlf_line_endings(self) -> None:
        """Windows line endings are tolerated."""
        text = f"{HEADER}\r\nSKU1,Brainstorm,MMQ,Regular,2.50\r\n"

        assert _only(parse_catalog_csv(text)).name_original == "Brainstorm"

    def test_escaped_quotes(self) -> None:
        """Doubled quotes inside a quoted cell are literal quotes."""
        text = f'{HEADER}\nSKU1,"Kongming, ""Sleeping Dragon""",PTK,Regular,2.00'

        variant = _only(parse_catalog_csv(text))

        assert variant.name_original == 'Kongming, "Sleeping Dragon"'
        assert variant.name_normalized == "kongming sleeping dragon"

    def test_html_in_cells(self) -> None:
        """Tags and entities are stripped from cells."""
        text = (
            f"{HEADER}\n"
            "SKU1,<b>Brainstorm</b>&nbsp;,MMQ,Regular,2.50\n"
            'SKU2,"Minsc &amp; Boo, Timeless Heroes",CLB,Foil,3.50'
        )

        catalog = parse_catalog_csv(text)

        assert catalog.variants[0].name_original == "Brainstorm"
        assert catalog.variants[1].name_original == "Minsc & Boo, Timeless Heroes"

    def test_unquoted_comma_realigned(self) -> None:
        """An unquoted comma in the name no longer shifts the columns."""
        text = f"{HEADER}\nSKU1,Sheoldred, the Apocalypse,DMU,Foil,4.00"

        variant = _only(parse_catalog_csv(text))

        assert variant.name_original == "Sheoldred, the Apocalypse"
        assert variant.set_code == "DMU"
        assert variant.variant_type == VariantType.FOIL
        assert variant.price_in_cents == 400

    def test_realigned_row_keeps_collector_number(self) -> None:
        """Columns after the price survive realignment."""
        text = (
            "SKU,Card Name,Set,Card Type,Base Price,Collector Number\n"
            "SKU1,Borrowing 100,000 Arrows,ARN,Regular,2.50,12"
        )

        variant = _only(parse_catalog_csv(text))

        assert variant.name_original == "Borrowing 100,000 Arrows"
        assert variant.price_in_cents == 250
        assert variant.collector_number == "12"

    def test_trailing_set_code_fills_blank_set(self) -> None:
        """A set code at the end of the name fills a blank set column."""
        text = f"{HEADER}\nSKU1,An Offer You Can't Refuse SNC,,Regular,2.00"

        variant = _only(parse_catalog_csv(text))

        assert variant.name_original == "An Offer You Can't Refuse"
        assert variant.set_code == "SNC"

    def test_trailing_set_code_matching_set_removed(self) -> None:
        """A set code repeated at the end of the name is dropped from it."""
        text = (
            f"{HEADER}\n"
            "SKU1,Brainstorm mmq,MMQ,Regular,2.00\n"
            "SKU2,Brainstorm MMQ,mmq,Regular,2.00"
        )

        catalog = parse_catalog_csv(text)

        assert catalog.variants[0].name_original == "Brainstorm mmq"
        assert catalog.variants[1].name_original == "Brainstorm"
        assert catalog.variants[1].set_code == "MMQ"

    def test_trailing_token_kept_when_set_differs(self) -> None:
        """A trailing code that disagrees with the set column stays in the name."""
        text = f"{HEADER}\nSKU1,Brainstorm MMQ,ICE,Regular,2.00"

        variant = _only(parse_catalog_csv(text))

        assert variant.name_original == "Brainstorm MMQ"
        assert variant.set_code == "ICE"

    def test_collector_column_wins_over_name_suffix(self) -> None:
        """A non-blank collector number column beats a '#' suffix."""
        text = (
            "SKU,Card Name,Set,Card Type,Base Price,Collector Number\n"
            "SKU1,Sol Ring #999,C21,Regular,1.50,263"
        )

        variant = _only(parse_catalog_csv(text))

        assert variant.name_original == "Sol Ring"
        assert variant.collector_number == "263"

    def test_type_price_map_case_insensitive(self) -> None:
        """Fallback prices come from the map before the fixed defaults."""
        text = f"{HEADER}\nSKU1,Brainstorm,MMQ,Foil,0\nSKU2,Counterspell,MMQ,Holo,"

        catalog = parse_catalog_csv(text, {"FOIL": 5.0})

        assert catalog.variants[0].price_in_cents == 500
        assert catalog.variants[1].price_in_cents == 300

    def test_cents_are_exact(self) -> None:
        """Prices convert to cents without float rounding loss."""
        text = f"{HEADER}\nSKU1,Brainstorm,MMQ,Regular,0.29\nSKU2,Opt,XLN,Regular,1.005"

        catalog = parse_catalog_csv(text)

        assert catalog.variants[0].price_in_cents == 29
        assert catalog.variants[1].price_in_cents == 100

    def test_variant_type_canonicalized(self) -> None:
        """Free-form type labels map onto Regular/Foil/Holo."""
        text = (
            f"{HEADER}\n"
            "SKU1,Brainstorm,MMQ,Foil Etched,2.00\n"
            "SKU2,Brainstorm,ICE,Reverse Holo,2.00\n"
            "SKU3,Brainstorm,5ED,Normal,2.00"
        )

        types = [v.variant_type for v in parse_catalog_csv(text)]

        assert types == [VariantType.FOIL, VariantType.HOLO, VariantType.REGULAR]

    def test_name_index(self, sample_catalog: Catalog) -> None:
        """The name index groups printings of the same card."""
        brainstorms = sample_catalog.index_by_name["brainstorm"]

        assert [v.sku for v in brainstorms] == ["SKU101", "SKU102", "SKU103"]


class TestHelpers:
    def test_preprocess_splits_rows(self) -> None:
        """Whitespace before an SKU token becomes a newline."""
        assert preprocess("A,B SKU1,x SKU2,y") == "A,B\nSKU1,x\nSKU2,y"

    def test_split_csv_line(self) -> None:
        """Quote-aware split."""
        assert split_csv_line('a,"b,c",d') == ["a", "b,c", "d"]
        assert split_csv_line('"say ""hi""",x') == ['say "hi"', "x"]
        assert split_csv_line("a,,b") == ["a", "", "b"]

    def test_sanitize_cell(self) -> None:
        """Tags stripped, entities decoded, whitespace collapsed."""
        assert sanitize_cell("  <i>Opt</i>&NBSP; ") == "Opt"
        assert sanitize_cell("Fish &AMP; Chips") == "Fish & Chips"

    def test_parse_price_cell(self) -> None:
        """Unparseable prices are zero."""
        assert parse_price_cell("$2.50") == parse_price_cell("2.50 USD")
        assert parse_price_cell("") == 0
        assert parse_price_cell("1.2.3") == 0

    def test_realign_row_without_pattern(self) -> None:
        """Rows without a set/type pair pass through unchanged."""
        headers = ["sku", "name", "set", "type", "price"]
        cells = ["SKU1", "a", "b", "c", "d", "e"]

        assert realign_row(cells, headers) == cells

    def test_realign_row_fills_trailing_columns(self) -> None:
        """Cells after the type fill the remaining columns in header order."""
        headers = ["sku", "name", "set", "type", "price", "collector_number"]
        cells = ["SKU1", "Sheoldred", " the Apocalypse", "DMU", "Foil", "4.00", "107"]

        assert realign_row(cells, headers) == [
            "SKU1",
            "Sheoldred, the Apocalypse",
            "DMU",
            "Foil",
            "4.00",
            "107",
        ]
