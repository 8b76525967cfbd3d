"""
Order pricing: tiered discount and shipping.

Thresholds are fixed business rules, expressed in cents and compared
with strict greater-than.
"""

from collections.abc import Sequence

from mtgpirate.models.match import DeckEntryMatch
from mtgpirate.models.pricing import PricingResult, ShippingType

# (threshold_cents, discount_percent), highest first
DISCOUNT_TIERS: tuple[tuple[int, int], ...] = (
    (400_00, 50),
    (300_00, 35),
    (200_00, 30),
    (160_00, 25),
    (100_00, 15),
    (60_00, 5),
)

EXPRESS_SHIPPING_THRESHOLD_CENTS = 300_00
FREE_SHIPPING_THRESHOLD_CENTS = 100_00
STANDARD_SHIPPING_CENTS = 10_00


def discount_percent_for(base_total_cents: int) -> int:
    for threshold, percent in DISCOUNT_TIERS:
        if base_total_cents > threshold:
            return percent
    return 0


def shipping_for(subtotal_cents: int) -> tuple[ShippingType, int]:
    """Shipping type and cost for a discounted subtotal."""
    if subtotal_cents > EXPRESS_SHIPPING_THRESHOLD_CENTS:
        return ShippingType.EXPRESS, 0
    if subtotal_cents > FREE_SHIPPING_THRESHOLD_CENTS:
        return ShippingType.NORMAL, 0
    return ShippingType.NORMAL, STANDARD_SHIPPING_CENTS


def calculate(matches: Sequence[DeckEntryMatch]) -> PricingResult:
    """
    Price an order from its matches.

    Only matches with a selected variant count; excluded, ambiguous
    and not-found lines contribute nothing.
    """
    base_total_cents = sum(m.line_total_cents for m in matches if m.selected_variant is not None)

    discount_percent = discount_percent_for(base_total_cents)
    discount_amount_cents = base_total_cents * discount_percent // 100
    subtotal_cents = base_total_cents - discount_amount_cents

    shipping_type, shipping_cost_cents = shipping_for(subtotal_cents)

    return PricingResult(
        base_total_cents=base_total_cents,
        discount_percent=discount_percent,
        discount_amount_cents=discount_amount_cents,
        subtotal_after_discount_cents=subtotal_cents,
        shipping_type=shipping_type,
        shipping_cost_cents=shipping_cost_cents,
        grand_total_cents=subtotal_cents + shipping_cost_cents,
    )


def format_price(cents: int) -> str:
    """Render cents as dollars, e.g. 1234 -> "12.34"."""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}{dollars}.{remainder:02d}"
