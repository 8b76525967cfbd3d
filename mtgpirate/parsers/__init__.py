from mtgpirate.parsers.catalog_csv import parse_catalog_csv
from mtgpirate.parsers.catalog_html import (
    extract_example_csv,
    extract_type_prices,
    parse_catalog_html,
)
from mtgpirate.parsers.decklist import parse_decklist

__all__ = [
    "extract_example_csv",
    "extract_type_prices",
    "parse_catalog_csv",
    "parse_catalog_html",
    "parse_decklist",
]
