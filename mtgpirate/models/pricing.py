from dataclasses import dataclass
from enum import Enum


class ShippingType(str, Enum):
    NORMAL = "Normal"
    EXPRESS = "Express"


@dataclass(frozen=True, slots=True)
class PricingResult:
    """Discount, shipping and total breakdown for an order. All amounts in cents."""

    base_total_cents: int
    discount_percent: int  # 0, 5, 15, 25, 30, 35 or 50
    discount_amount_cents: int
    subtotal_after_discount_cents: int
    shipping_type: ShippingType
    shipping_cost_cents: int
    grand_total_cents: int
