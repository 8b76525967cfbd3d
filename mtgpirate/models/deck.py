from dataclasses import dataclass
from enum import Enum


class Section(str, Enum):
    """Decklist section a line was read from."""

    MAIN = "Main"
    SIDEBOARD = "Sideboard"
    COMMANDER = "Commander"


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """
    A single card line from a pasted decklist.

    Attributes:
        original_line: The trimmed source line
        qty: Number of copies requested (always > 0)
        card_name: Card name with hints and annotations removed
        section: Section the line belongs to
        include: Whether the entry should be matched and priced
        set_code_hint: Upper-cased set code from "(SET)" or "(SET 123)"
        collector_number_hint: Collector number from "(SET 123)"
        raw_set_hint: Raw parenthetical contents, before interpretation
    """

    original_line: str
    qty: int
    card_name: str
    section: Section
    include: bool
    set_code_hint: str | None = None
    collector_number_hint: str | None = None
    raw_set_hint: str | None = None
