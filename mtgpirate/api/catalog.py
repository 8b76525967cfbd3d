"""
Catalog API endpoints.

Inspect the loaded catalog, reload it from the reseller, or install one
from pasted CSV/HTML.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from mtgpirate.config import DEFAULT_TYPE_PRICES
from mtgpirate.models.card import Catalog
from mtgpirate.models.failure import ApiResponse, FailureKind, KnownError, create_success
from mtgpirate.parsers import parse_catalog_csv, parse_catalog_html
from mtgpirate.scrapers.catalog_source import (
    RemoteCatalogSource,
    canonicalize_price_map,
    fill_zero_prices,
)
from mtgpirate.services.catalog_store import CatalogStore

router = APIRouter(prefix="/catalog", tags=["catalog"])


def get_catalog_store(request: Request) -> CatalogStore:
    """The app-wide catalog store, created in the lifespan handler."""
    store: CatalogStore = request.app.state.catalog_store
    return store


def get_catalog_source() -> RemoteCatalogSource:
    return RemoteCatalogSource()


class CatalogSummary(BaseModel):
    """Response model describing the loaded catalog."""

    variant_count: int
    loaded_at: datetime | None = None
    counts_by_type: dict[str, int] = Field(default_factory=dict)


class CatalogImportRequest(BaseModel):
    """Catalog text pasted by the user. CSV wins when both are given."""

    csv: str | None = None
    html: str | None = None
    type_prices: dict[str, float] | None = None


def _summary(store: CatalogStore) -> CatalogSummary:
    catalog = store.current()
    if catalog is None:
        return CatalogSummary(variant_count=0)
    return CatalogSummary(
        variant_count=len(catalog),
        loaded_at=store.loaded_at,
        counts_by_type=catalog.count_by_type(),
    )


@router.get("", response_model=ApiResponse[CatalogSummary])
async def get_catalog(
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
) -> ApiResponse[Any]:
    """Summary of the catalog currently loaded (count 0 when none is)."""
    return create_success(_summary(store))


@router.post("/refresh", response_model=ApiResponse[CatalogSummary])
async def refresh_catalog(
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    source: Annotated[RemoteCatalogSource, Depends(get_catalog_source)],
) -> ApiResponse[Any]:
    """
    Reload the catalog from the reseller.

    On failure the previous catalog stays installed and a known
    failure is returned.
    """
    messages: list[str] = []
    catalog = await source.load(log=messages.append)
    if catalog is None:
        raise KnownError(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="The catalog could not be loaded from the reseller.",
            detail=messages[-1] if messages else None,
            suggestion="Try again later, or import a catalog CSV.",
            status_code=status.HTTP_502_BAD_GATEWAY,
        )

    store.replace(catalog)
    return create_success(_summary(store))


@router.post("/import", response_model=ApiResponse[CatalogSummary])
async def import_catalog(
    request: CatalogImportRequest,
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
) -> ApiResponse[Any]:
    """Parse pasted catalog CSV or HTML and install it."""
    catalog: Catalog
    if request.csv and request.csv.strip():
        type_prices = canonicalize_price_map(request.type_prices or DEFAULT_TYPE_PRICES)
        catalog = parse_catalog_csv(request.csv, type_prices)
    elif request.html and request.html.strip():
        catalog = parse_catalog_html(request.html)
    else:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="No catalog text was provided.",
            suggestion="Send the catalog as 'csv' or 'html'.",
        )

    if catalog.is_empty:
        raise KnownError(
            kind=FailureKind.EMPTY_RESULT,
            message="The catalog contained no usable rows.",
            detail="Rows need a SKU, card name, set and card type.",
            suggestion="Check the header row and column layout.",
        )

    store.replace(fill_zero_prices(catalog))
    return create_success(_summary(store))
