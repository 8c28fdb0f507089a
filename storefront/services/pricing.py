# storefront/services/pricing.py
"""
Pricing calculator.

Pure functions only: the same lines and coupon always give the same breakdown.
Amounts stay exact Decimals until `PriceBreakdown.rounded()` is called at the
boundary (persistence, HTTP).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional, Protocol, Sequence

from storefront.utils.settings import FREE_SHIPPING_THRESHOLD, FLAT_SHIPPING_FEE

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

PERCENTAGE = "percentage"
FLAT = "flat"


class PricedLine(Protocol):
    price: Decimal
    quantity: int


class DiscountTerms(Protocol):
    discount_type: str
    discount_value: Decimal


def quantize(amount: Decimal) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


class PriceBreakdown(NamedTuple):
    subtotal: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal

    def rounded(self) -> "PriceBreakdown":
        """Round each part once, then derive the total from the rounded parts so they always add up."""
        subtotal = quantize(self.subtotal)
        shipping = quantize(self.shipping)
        discount = min(quantize(self.discount), subtotal)
        total = max(ZERO, subtotal - discount) + shipping
        return PriceBreakdown(subtotal=subtotal, shipping=shipping, discount=discount, total=total)


def subtotal_of(lines: Sequence[PricedLine]) -> Decimal:
    return sum((Decimal(str(line.price)) * line.quantity for line in lines), ZERO)


def shipping_for(subtotal: Decimal) -> Decimal:
    # threshold applies to the pre-discount subtotal
    return ZERO if subtotal >= FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE


def discount_for(subtotal: Decimal, coupon: Optional[DiscountTerms]) -> Decimal:
    if coupon is None:
        return ZERO

    value = Decimal(str(coupon.discount_value))
    if coupon.discount_type == PERCENTAGE:
        discount = subtotal * value / Decimal(100)
    elif coupon.discount_type == FLAT:
        discount = value
    else:
        raise ValueError(f"Unknown discount type: {coupon.discount_type}")

    return min(discount, subtotal)


def calculate(lines: Sequence[PricedLine], coupon: Optional[DiscountTerms] = None) -> PriceBreakdown:
    """
    `coupon` must already be known to be applicable; pass None otherwise.
    Shipping uses the pre-discount subtotal.
    """
    subtotal = subtotal_of(lines)
    shipping = shipping_for(subtotal)
    discount = discount_for(subtotal, coupon)
    total = max(ZERO, subtotal - discount) + shipping
    return PriceBreakdown(subtotal=subtotal, shipping=shipping, discount=discount, total=total)


def amount_to_free_shipping(subtotal: Decimal) -> Decimal:
    return max(ZERO, FREE_SHIPPING_THRESHOLD - subtotal)
