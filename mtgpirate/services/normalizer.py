"""
Card name normalization and edit distance.

normalize() produces the comparison key shared by catalog ingestion
and matching. Both sides must go through the same function, otherwise
the normalized tier silently stops matching.
"""

import re

# Apostrophes (straight and curly), backtick and comma are dropped outright
_DROPPED_PUNCTUATION = re.compile(r"[,'`’]")

# Hyphen, en dash, em dash
_DASHES = re.compile(r"[-–—]")

# Separator between the faces of double-faced and split cards
FACE_SEPARATOR = " // "

_DISALLOWED = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(name: str) -> str:
    """
    Canonicalize a card name for equality comparisons.

    Examples:
        "Jace's Ingenuity"        -> "jaces ingenuity"
        "Fire // Ice"             -> "fire"
        "Lim-Dûl's Vault"         -> "lim dls vault"

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    text = name.lower()
    text = _DROPPED_PUNCTUATION.sub("", text)
    text = _DASHES.sub(" ", text)
    text = text.replace('"', "")
    text = text.split(FACE_SEPARATOR, 1)[0]
    text = _DISALLOWED.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit-cost insertion, deletion and substitution."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]
