from dataclasses import dataclass, field
from enum import Enum

from mtgpirate.models.card import CardVariant
from mtgpirate.models.deck import DeckEntry


class MatchStatus(str, Enum):
    """Resolution outcome for one deck entry."""

    UNRESOLVED = "Unresolved"
    AUTO_MATCHED = "AutoMatched"
    AMBIGUOUS = "Ambiguous"
    NOT_FOUND = "NotFound"
    MANUAL_SELECTED = "ManualSelected"


SELECTED_STATUSES = frozenset({MatchStatus.AUTO_MATCHED, MatchStatus.MANUAL_SELECTED})


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    """
    A catalog variant considered for a deck entry.

    score is 0 for the exact, ci and normalized tiers and the
    edit distance for fuzzy candidates. reason names the tier:
    "exact", "ci", "normalized" or "lev:N".
    """

    variant: CardVariant
    score: int
    reason: str


@dataclass(frozen=True, slots=True)
class DeckEntryMatch:
    """
    Result of matching one DeckEntry against a Catalog.

    INVARIANTS:
    - status is AutoMatched or ManualSelected iff selected_variant is set
    - status is Unresolved only for excluded entries
    """

    deck_entry: DeckEntry
    status: MatchStatus
    selected_variant: CardVariant | None = None
    candidates: tuple[MatchCandidate, ...] = field(default_factory=tuple)
    notes: str = ""

    def __post_init__(self) -> None:
        has_selection = self.selected_variant is not None
        if (self.status in SELECTED_STATUSES) != has_selection:
            raise ValueError(
                f"{self.status.value} match must "
                f"{'have' if self.status in SELECTED_STATUSES else 'not have'} a selected variant"
            )
        if self.status == MatchStatus.UNRESOLVED and self.deck_entry.include:
            raise ValueError("Only excluded entries may be Unresolved")

    @property
    def line_total_cents(self) -> int:
        """Price of this line, 0 when nothing is selected."""
        if self.selected_variant is None:
            return 0
        return self.selected_variant.price_in_cents * self.deck_entry.qty
