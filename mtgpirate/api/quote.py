"""
Quote API endpoint.

Parses a pasted decklist, matches it against the loaded catalog and
prices the order.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mtgpirate.api.catalog import get_catalog_source, get_catalog_store
from mtgpirate.config import settings
from mtgpirate.models.card import CardVariant
from mtgpirate.models.failure import (
    ApiResponse,
    CatalogUnavailableError,
    FailureKind,
    KnownError,
    create_success,
)
from mtgpirate.models.match import DeckEntryMatch
from mtgpirate.models.preferences import DEFAULT_VARIANT_PRIORITY, Preferences
from mtgpirate.models.pricing import PricingResult
from mtgpirate.parsers import parse_decklist
from mtgpirate.scrapers.catalog_source import RemoteCatalogSource
from mtgpirate.services.catalog_store import CatalogStore
from mtgpirate.services.matcher import match_all, summarize_matches
from mtgpirate.services.pricing import calculate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quote", tags=["quote"])


class PreferencesModel(BaseModel):
    """Matching preferences; every field optional."""

    include_sideboard: bool = False
    include_commanders: bool = False
    variant_priority: list[str] = Field(default_factory=lambda: list(DEFAULT_VARIANT_PRIORITY))
    set_priority: list[str] = Field(default_factory=list)
    fuzzy_enabled: bool = True

    def to_preferences(self) -> Preferences:
        return Preferences(
            include_sideboard=self.include_sideboard,
            include_commanders=self.include_commanders,
            variant_priority=tuple(self.variant_priority),
            set_priority=tuple(self.set_priority),
            fuzzy_enabled=self.fuzzy_enabled,
        )


class QuoteRequest(BaseModel):
    """Request model for a quote."""

    deck_text: str
    preferences: PreferencesModel | None = None


class VariantResponse(BaseModel):
    sku: str
    name: str
    set_code: str
    variant_type: str
    price_cents: int
    collector_number: str | None = None
    image_url: str | None = None

    @classmethod
    def from_variant(cls, variant: CardVariant) -> "VariantResponse":
        return cls(
            sku=variant.sku,
            name=variant.name_original,
            set_code=variant.set_code,
            variant_type=variant.variant_type.value,
            price_cents=variant.price_in_cents,
            collector_number=variant.collector_number,
            image_url=variant.image_url,
        )


class CandidateResponse(BaseModel):
    variant: VariantResponse
    score: int
    reason: str


class MatchResponse(BaseModel):
    """One decklist line and how it was resolved."""

    card_name: str
    qty: int
    section: str
    include: bool
    set_code_hint: str | None = None
    status: str
    selected: VariantResponse | None = None
    candidates: list[CandidateResponse] = Field(default_factory=list)
    notes: str = ""
    line_total_cents: int = 0

    @classmethod
    def from_match(cls, match: DeckEntryMatch) -> "MatchResponse":
        entry = match.deck_entry
        return cls(
            card_name=entry.card_name,
            qty=entry.qty,
            section=entry.section.value,
            include=entry.include,
            set_code_hint=entry.set_code_hint,
            status=match.status.value,
            selected=(
                VariantResponse.from_variant(match.selected_variant)
                if match.selected_variant is not None
                else None
            ),
            candidates=[
                CandidateResponse(
                    variant=VariantResponse.from_variant(c.variant),
                    score=c.score,
                    reason=c.reason,
                )
                for c in match.candidates
            ],
            notes=match.notes,
            line_total_cents=match.line_total_cents,
        )


class PricingResponse(BaseModel):
    base_total_cents: int
    discount_percent: int
    discount_amount_cents: int
    subtotal_after_discount_cents: int
    shipping_type: str
    shipping_cost_cents: int
    grand_total_cents: int

    @classmethod
    def from_result(cls, result: PricingResult) -> "PricingResponse":
        return cls(
            base_total_cents=result.base_total_cents,
            discount_percent=result.discount_percent,
            discount_amount_cents=result.discount_amount_cents,
            subtotal_after_discount_cents=result.subtotal_after_discount_cents,
            shipping_type=result.shipping_type.value,
            shipping_cost_cents=result.shipping_cost_cents,
            grand_total_cents=result.grand_total_cents,
        )


class QuoteResponse(BaseModel):
    """Response model for a quote."""

    matches: list[MatchResponse]
    summary: dict[str, int]
    pricing: PricingResponse


@router.post("", response_model=ApiResponse[QuoteResponse])
async def quote(
    request: QuoteRequest,
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    source: Annotated[RemoteCatalogSource, Depends(get_catalog_source)],
) -> ApiResponse[Any]:
    """
    Quote a decklist against the loaded catalog.

    A missing or stale catalog is reloaded from the reseller first; when
    that fails the previous snapshot is used if there is one.
    Ambiguous and not-found lines are returned with their candidates
    and excluded from the totals.
    """
    catalog = await store.get_or_load(source, settings.catalog_max_age_hours)
    if catalog is None or catalog.is_empty:
        raise CatalogUnavailableError()

    preferences = (request.preferences or PreferencesModel()).to_preferences()
    entries = parse_decklist(
        request.deck_text,
        include_sideboard=preferences.include_sideboard,
        include_commanders=preferences.include_commanders,
    )
    if not entries:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="No card lines were found in the decklist.",
            detail="Lines must start with a quantity, e.g. '4 Lightning Bolt'.",
            suggestion="Paste the decklist one card per line.",
        )

    matches = match_all(entries, catalog, preferences.match_config())
    pricing = calculate(matches)

    logger.info(
        "Quoted %d entries: %s total",
        len(entries),
        pricing.grand_total_cents,
    )

    return create_success(
        QuoteResponse(
            matches=[MatchResponse.from_match(m) for m in matches],
            summary={k.value: v for k, v in summarize_matches(matches).items()},
            pricing=PricingResponse.from_result(pricing),
        )
    )
