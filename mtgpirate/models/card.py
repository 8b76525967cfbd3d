from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property


class VariantType(str, Enum):
    """Printing finish of a catalog card."""

    REGULAR = "Regular"
    FOIL = "Foil"
    HOLO = "Holo"

    @classmethod
    def from_raw(cls, raw: str) -> "VariantType":
        """
        Canonicalize a free-form type label.

        Substring match, case-insensitive, checked in order:
        "foil" -> Foil, "holo" -> Holo, anything else -> Regular.
        So "Foil Etched" is Foil and "Reverse Holo" is Holo.
        """
        text = raw.strip().lower()
        if "foil" in text:
            return cls.FOIL
        if "holo" in text:
            return cls.HOLO
        return cls.REGULAR


@dataclass(frozen=True, slots=True)
class CardVariant:
    """
    One priced, SKU-identified printing of a card.

    Attributes:
        name_original: Card name as listed in the catalog
        name_normalized: Canonical form of name_original (see services.normalizer)
        set_code: Set code as listed in the catalog (e.g., "MMQ", "SLD")
        sku: Catalog-unique stock keeping unit
        variant_type: Regular, Foil or Holo
        price_in_cents: Unit price, never negative
        collector_number: Collector number within the set, when known
        image_url: Card image, filled in by the image enricher
    """

    name_original: str
    name_normalized: str
    set_code: str
    sku: str
    variant_type: VariantType
    price_in_cents: int
    collector_number: str | None = None
    image_url: str | None = None

    def with_image_url(self, image_url: str) -> "CardVariant":
        """Copy of this variant carrying an image URL."""
        return replace(self, image_url=image_url)


@dataclass(frozen=True)
class Catalog:
    """
    Ordered collection of purchasable card variants.

    Rebuilt wholesale on every ingestion. The name index is derived
    lazily and never mutated.
    """

    variants: tuple[CardVariant, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "Catalog":
        return cls(())

    @cached_property
    def index_by_name(self) -> dict[str, list[CardVariant]]:
        """Variants grouped by normalized name, catalog order kept within a group."""
        index: dict[str, list[CardVariant]] = {}
        for variant in self.variants:
            index.setdefault(variant.name_normalized, []).append(variant)
        return index

    @property
    def is_empty(self) -> bool:
        return not self.variants

    def by_sku(self, sku: str) -> CardVariant | None:
        """Look up a variant by SKU."""
        for variant in self.variants:
            if variant.sku == sku:
                return variant
        return None

    def count_by_type(self) -> dict[str, int]:
        """Number of variants per variant type."""
        counts: dict[str, int] = {}
        for variant in self.variants:
            key = variant.variant_type.value
            counts[key] = counts.get(key, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.variants)

    def __iter__(self) -> Iterator[CardVariant]:
        return iter(self.variants)
