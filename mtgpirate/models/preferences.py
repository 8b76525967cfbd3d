from dataclasses import dataclass

DEFAULT_VARIANT_PRIORITY: tuple[str, ...] = ("Regular", "Foil", "Holo")


@dataclass(frozen=True, slots=True)
class MatchConfig:
    """The matching-relevant subset of Preferences."""

    variant_priority: tuple[str, ...] = DEFAULT_VARIANT_PRIORITY
    set_priority: tuple[str, ...] = ()
    fuzzy_enabled: bool = True


@dataclass(frozen=True, slots=True)
class Preferences:
    """
    User preferences for parsing and matching a decklist.

    Attributes:
        include_sideboard: Price sideboard entries
        include_commanders: Price commander entries
        variant_priority: Preferred variant types, most preferred first
        set_priority: Preferred set codes, most preferred first
        fuzzy_enabled: Offer edit-distance candidates when no name tier matches
    """

    include_sideboard: bool = False
    include_commanders: bool = False
    variant_priority: tuple[str, ...] = DEFAULT_VARIANT_PRIORITY
    set_priority: tuple[str, ...] = ()
    fuzzy_enabled: bool = True

    def match_config(self) -> MatchConfig:
        return MatchConfig(
            variant_priority=self.variant_priority,
            set_priority=self.set_priority,
            fuzzy_enabled=self.fuzzy_enabled,
        )
