"""
Deck entry to catalog variant matching.

Each entry walks a ladder of name tiers against its candidate pool:

    exact       name_original == card_name
    ci          case-insensitive equality
    normalized  normalize() keys equal
    fuzzy       edit distance on normalized names (optional)

The first tier that finds anything decides the outcome. One candidate is
auto-matched; several are broken by the user's set and variant priorities,
which always yields a winner. Fuzzy candidates are never auto-selected.

INVARIANTS:
1. One DeckEntryMatch per DeckEntry, in input order
2. Matching never raises on catalog or decklist content
3. A set code hint restricts the pool before any tier runs
"""

import logging
from collections.abc import Sequence

from mtgpirate.models.card import CardVariant, Catalog
from mtgpirate.models.deck import DeckEntry
from mtgpirate.models.match import DeckEntryMatch, MatchCandidate, MatchStatus
from mtgpirate.models.preferences import MatchConfig
from mtgpirate.services.normalizer import levenshtein, normalize

logger = logging.getLogger(__name__)

# Normalized names up to this length allow FUZZY_SHORT_THRESHOLD edits
FUZZY_SHORT_NAME_LENGTH = 15
FUZZY_SHORT_THRESHOLD = 2
FUZZY_LONG_THRESHOLD = 3

TIER_EXACT = "exact"
TIER_CASE_INSENSITIVE = "ci"
TIER_NORMALIZED = "normalized"


def _priority_index(priority: Sequence[str], value: str) -> int:
    """Position of value in priority (case-insensitive); unlisted values sort last."""
    lowered = value.lower()
    for i, item in enumerate(priority):
        if item.lower() == lowered:
            return i
    return len(priority)


def select_by_priority(
    variants: Sequence[CardVariant],
    config: MatchConfig,
    set_code_hint: str | None = None,
) -> CardVariant | None:
    """
    Pick one variant from several tied candidates.

    Keeps only the hinted set when that leaves anything, then sorts by
    set priority and afterwards by variant priority. Both sorts are
    stable, so variant priority ends up the primary key and set priority
    breaks ties within a variant type. Catalog order breaks what is left.

    Returns:
        The winning variant, or None only for an empty input.
    """
    pool = list(variants)
    if set_code_hint:
        hinted = [v for v in pool if v.set_code.lower() == set_code_hint.lower()]
        pool = hinted or pool

    pool.sort(key=lambda v: _priority_index(config.set_priority, v.set_code))
    pool.sort(key=lambda v: _priority_index(config.variant_priority, v.variant_type.value))
    return pool[0] if pool else None


def fuzzy_candidates(target_normalized: str, pool: Sequence[CardVariant]) -> list[MatchCandidate]:
    """
    Edit-distance candidates for a normalized name.

    Threshold is 2 edits for names of up to 15 characters, 3 beyond.
    Sorted by distance, then price.
    """
    threshold = (
        FUZZY_SHORT_THRESHOLD
        if len(target_normalized) <= FUZZY_SHORT_NAME_LENGTH
        else FUZZY_LONG_THRESHOLD
    )

    candidates: list[MatchCandidate] = []
    for variant in pool:
        distance = levenshtein(target_normalized, variant.name_normalized)
        if distance <= threshold:
            candidates.append(MatchCandidate(variant, distance, f"lev:{distance}"))

    candidates.sort(key=lambda c: (c.score, c.variant.price_in_cents))
    return candidates


def _candidate_pool(entry: DeckEntry, catalog: Catalog) -> list[CardVariant]:
    if entry.set_code_hint:
        hint = entry.set_code_hint.lower()
        return [v for v in catalog.variants if v.set_code.lower() == hint]
    return list(catalog.variants)


def match_entry(entry: DeckEntry, catalog: Catalog, config: MatchConfig) -> DeckEntryMatch:
    """Resolve a single deck entry. See module docstring for the tier ladder."""
    if not entry.include:
        return DeckEntryMatch(entry, MatchStatus.UNRESOLVED, notes="Excluded")

    pool = _candidate_pool(entry, catalog)
    target_normalized = normalize(entry.card_name)
    target_folded = entry.card_name.casefold()

    tiers = (
        (TIER_EXACT, lambda v: v.name_original == entry.card_name),
        (TIER_CASE_INSENSITIVE, lambda v: v.name_original.casefold() == target_folded),
        (TIER_NORMALIZED, lambda v: v.name_normalized == target_normalized),
    )

    for reason, predicate in tiers:
        found = [v for v in pool if predicate(v)]
        if not found:
            continue

        candidates = tuple(MatchCandidate(v, 0, reason) for v in found)
        if len(found) == 1:
            return DeckEntryMatch(
                entry,
                MatchStatus.AUTO_MATCHED,
                selected_variant=found[0],
                candidates=candidates,
                notes=f"Matched by {reason}",
            )

        selected = select_by_priority(found, config, entry.set_code_hint)
        return DeckEntryMatch(
            entry,
            MatchStatus.AUTO_MATCHED,
            selected_variant=selected,
            candidates=candidates,
            notes=f"Selected by priority from {len(found)} {reason} candidates",
        )

    if config.fuzzy_enabled:
        fuzzy = fuzzy_candidates(target_normalized, pool)
        if fuzzy:
            return DeckEntryMatch(
                entry,
                MatchStatus.AMBIGUOUS,
                candidates=tuple(fuzzy),
                notes=f"{len(fuzzy)} fuzzy candidates",
            )

    return DeckEntryMatch(entry, MatchStatus.NOT_FOUND, notes="No catalog match")


def match_all(
    entries: Sequence[DeckEntry],
    catalog: Catalog,
    config: MatchConfig,
) -> list[DeckEntryMatch]:
    """
    Match every deck entry against the catalog.

    Args:
        entries: Parsed deck entries
        catalog: Catalog snapshot
        config: Priorities and fuzzy switch

    Returns:
        One DeckEntryMatch per entry, in input order
    """
    matches = []
    for entry in entries:
        match = match_entry(entry, catalog, config)
        logger.debug("Matched %r -> %s", entry.card_name, match.status.value)
        matches.append(match)

    logger.info(
        "deck_matched",
        extra={
            "entry_count": len(entries),
            "catalog_size": len(catalog),
            "statuses": {k.value: v for k, v in summarize_matches(matches).items()},
        },
    )
    return matches


def select_variant(match: DeckEntryMatch, variant: CardVariant) -> DeckEntryMatch:
    """
    Record a user's manual choice for a deck entry.

    Any variant may be chosen, not only one of the candidates.

    Raises:
        ValueError: If the entry is excluded from the order
    """
    if not match.deck_entry.include:
        raise ValueError(
            f"Cannot select a variant for excluded entry {match.deck_entry.card_name!r}"
        )

    return DeckEntryMatch(
        match.deck_entry,
        MatchStatus.MANUAL_SELECTED,
        selected_variant=variant,
        candidates=match.candidates,
        notes="Selected manually",
    )


def summarize_matches(matches: Sequence[DeckEntryMatch]) -> dict[MatchStatus, int]:
    """Number of matches per status (statuses with no matches included as 0)."""
    counts = {status: 0 for status in MatchStatus}
    for match in matches:
        counts[match.status] += 1
    return counts
