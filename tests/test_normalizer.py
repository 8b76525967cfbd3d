import pytest

from mtgpirate.services.normalizer import levenshtein, normalize


class TestNormalize:
    def test_lowercases(self) -> None:
        """Names are lowercased."""
        assert normalize("Lightning Bolt") == "lightning bolt"

    def test_drops_apostrophes_and_commas(self) -> None:
        """Straight and curly apostrophes and commas disappear without a gap."""
        assert normalize("Jace's Ingenuity") == "jaces ingenuity"
        assert normalize("Urza’s Saga") == "urzas saga"
        assert normalize("Sheoldred, the Apocalypse") == "sheoldred the apocalypse"

    def test_dashes_become_spaces(self) -> None:
        """Hyphen, en dash and em dash separate words."""
        assert normalize("Lim-Dûl's Vault") == "lim dls vault"
        assert normalize("Boros Reckoner–Token") == "boros reckoner token"
        assert normalize("Borrowing—Arrows") == "borrowing arrows"

    def test_keeps_first_face(self) -> None:
        """Split and double-faced cards normalize to their first face."""
        assert normalize("Fire // Ice") == "fire"
        assert normalize("Delver of Secrets // Insectile Aberration") == "delver of secrets"

    def test_strips_quotes_and_symbols(self) -> None:
        """Quotes and other symbols are removed."""
        assert normalize('"Ach! Hans, Run!"') == "ach hans run"

    def test_collapses_whitespace(self) -> None:
        """Whitespace runs, tabs included, become single spaces."""
        assert normalize("  Lightning \t  Bolt  ") == "lightning bolt"

    def test_empty_name(self) -> None:
        """Empty input stays empty."""
        assert normalize("") == ""

    @pytest.mark.parametrize(
        "name",
        [
            "Jace's Ingenuity",
            "Fire // Ice",
            "Lim-Dûl's Vault",
            '"Ach! Hans, Run!"',
            "Kongming, \"Sleeping Dragon\"",
            "  Sol   Ring ",
        ],
    )
    def test_idempotent(self, name: str) -> None:
        """Normalizing twice gives the same result as once."""
        once = normalize(name)
        assert normalize(once) == once


class TestLevenshtein:
    def test_identical(self) -> None:
        """Identical strings have distance 0."""
        assert levenshtein("brainstorm", "brainstorm") == 0

    def test_empty(self) -> None:
        """Distance to the empty string is the other string's length."""
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3

    def test_classic_examples(self) -> None:
        """Textbook distances."""
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("flaw", "lawn") == 2

    def test_transposition_costs_two(self) -> None:
        """Swapped letters count as two substitutions."""
        assert levenshtein("brainstorm", "brainstrom") == 2

    def test_symmetric(self) -> None:
        """Argument order does not matter."""
        assert levenshtein("counterspell", "countrspel") == levenshtein(
            "countrspel", "counterspell"
        )
