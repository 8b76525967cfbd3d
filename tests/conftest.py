from pathlib import Path

import pytest

from mtgpirate.models import failure as failure_module
from mtgpirate.models.card import Catalog
from mtgpirate.parsers import parse_catalog_csv

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    This prevents test isolation issues where Python reuses memory
    addresses for new objects, causing id() collisions with previously
    finalized responses.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


@pytest.fixture
def catalog_csv() -> str:
    """Catalog CSV export with quoting, blanks and name suffixes."""
    return (FIXTURES / "catalog_sample.csv").read_text()


@pytest.fixture
def sample_catalog(catalog_csv: str) -> Catalog:
    return parse_catalog_csv(catalog_csv)


@pytest.fixture
def sample_decklist() -> str:
    """Decklist with main deck, sideboard and commander sections."""
    return (FIXTURES / "decklist_sample.txt").read_text()
