from mtgpirate.models.card import CardVariant, Catalog, VariantType
from mtgpirate.models.deck import DeckEntry, Section
from mtgpirate.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    CatalogUnavailableError,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from mtgpirate.models.match import (
    SELECTED_STATUSES,
    DeckEntryMatch,
    MatchCandidate,
    MatchStatus,
)
from mtgpirate.models.preferences import DEFAULT_VARIANT_PRIORITY, MatchConfig, Preferences
from mtgpirate.models.pricing import PricingResult, ShippingType

__all__ = [
    "ApiResponse",
    "CardVariant",
    "Catalog",
    "CatalogUnavailableError",
    "DEFAULT_VARIANT_PRIORITY",
    "DeckEntry",
    "DeckEntryMatch",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "MatchCandidate",
    "MatchConfig",
    "MatchStatus",
    "OutcomeType",
    "Preferences",
    "PricingResult",
    "SELECTED_STATUSES",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "Section",
    "ShippingType",
    "VariantType",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
