"""
Parser for pasted decklists.

Line format:
    <qty> <card name>[ (SET[ NUM])][ - free text]

Examples:
    4 Lightning Bolt
    4 Brainstorm (MMQ)
    1 Sol Ring (C21 263)
    2x Island - foil please
    SB: 2 Duress

Sections:
    Main       initial section
    Sideboard  entered by a line reading "SIDEBOARD:"
    Commander  entered when a blank line inside the sideboard is
               followed by another non-blank line

Lines that do not start with a quantity are skipped silently.
"""

import re
from dataclasses import replace

from mtgpirate.models.deck import DeckEntry, Section

SIDEBOARD_MARKER = "sideboard:"

# Groups: (sb_prefix, quantity, rest)
CARD_LINE_PATTERN = re.compile(r"^(SB:\s*)?(\d+)x?\s+(.+)$", re.IGNORECASE)

# Trailing "(...)" group
TRAILING_PARENS_PATTERN = re.compile(r"\s*\(([^()]*)\)\s*$")

# "MMQ 123", "C21-263a"
SET_AND_NUMBER_PATTERN = re.compile(r"^([A-Za-z0-9]{2,5})[ -](\d+[A-Za-z]?)$")

# "MMQ"
BARE_SET_PATTERN = re.compile(r"^[A-Za-z0-9]{2,5}$")

# " - foil please"
ANNOTATION_PATTERN = re.compile(r"\s+-\s+.*$")


def _extract_set_hint(name: str) -> tuple[str, str | None, str | None, str | None]:
    """
    Pull a trailing parenthetical hint off a card name.

    Returns:
        (name, set_code_hint, collector_number_hint, raw_set_hint)
    """
    match = TRAILING_PARENS_PATTERN.search(name)
    if not match:
        return name, None, None, None

    raw = match.group(1).strip()
    name = name[: match.start()].strip()

    full = SET_AND_NUMBER_PATTERN.match(raw)
    if full:
        return name, full.group(1).upper(), full.group(2), raw
    if BARE_SET_PATTERN.match(raw):
        return name, raw.upper(), None, raw
    return name, None, None, raw


def parse_card_line(
    line: str,
    section: Section,
    include: bool,
) -> tuple[DeckEntry, bool] | None:
    """
    Parse one trimmed card line.

    Returns:
        (entry, has_sb_prefix), or None when the line has no leading
        quantity or no name.
    """
    match = CARD_LINE_PATTERN.match(line)
    if not match:
        return None

    sb_prefix, qty_text, rest = match.groups()
    qty = int(qty_text)
    if qty <= 0:
        return None

    name, set_hint, collector_hint, raw_hint = _extract_set_hint(rest.strip())
    name = ANNOTATION_PATTERN.sub("", name).strip()
    if raw_hint is None:
        # "Island (MMQ) - foil": the hint sat before the annotation
        name, set_hint, collector_hint, raw_hint = _extract_set_hint(name)
    if not name:
        return None

    entry = DeckEntry(
        original_line=line,
        qty=qty,
        card_name=name,
        section=section,
        include=include,
        set_code_hint=set_hint,
        collector_number_hint=collector_hint,
        raw_set_hint=raw_hint,
    )
    return entry, sb_prefix is not None


def parse_decklist(
    text: str,
    include_sideboard: bool = False,
    include_commanders: bool = False,
) -> list[DeckEntry]:
    """
    Parse decklist text into entries, input order preserved.

    Entries from excluded sections are still returned with
    include=False; filtering them is the matcher's job.

    Args:
        text: Raw decklist text (clipboard paste)
        include_sideboard: Whether sideboard entries are included
        include_commanders: Whether commander entries are included

    Returns:
        List of DeckEntry. Empty list if input is empty/whitespace.
    """
    if not text or not text.strip():
        return []

    include_for = {
        Section.MAIN: True,
        Section.SIDEBOARD: include_sideboard,
        Section.COMMANDER: include_commanders,
    }

    entries: list[DeckEntry] = []
    section = Section.MAIN
    blank_after_sideboard = False

    for raw_line in text.splitlines():
        line = raw_line.strip()

        if not line:
            if section == Section.SIDEBOARD:
                blank_after_sideboard = True
            continue

        if line.lower() == SIDEBOARD_MARKER:
            section = Section.SIDEBOARD
            blank_after_sideboard = False
            continue

        if blank_after_sideboard:
            section = Section.COMMANDER
            blank_after_sideboard = False

        parsed = parse_card_line(line, section, include_for[section])
        if parsed is None:
            continue

        entry, has_sb_prefix = parsed
        if has_sb_prefix and entry.section != Section.SIDEBOARD:
            # MTGO style "SB: 2 Duress" marks a sideboard card inline
            entry = replace(entry, section=Section.SIDEBOARD, include=include_sideboard)
        entries.append(entry)

    return entries
