# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, ValidationError, model_validator
from typing import Any, Dict, List, Literal, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.errors import ValidationFailed
from storefront.utils.settings import PHONE_MIN_LENGTH


def field_errors(errors: List[Dict[str, Any]]) -> Dict[str, str]:
    """Flatten pydantic error entries into {"field": "message"}, first message per field wins."""
    fields: Dict[str, str] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "__root__"
        fields.setdefault(key, err.get("msg", "Invalid value"))
    return fields


# ---------------------------------------------------------------- catalog

class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: Decimal
    stock: int
    category_id: Optional[int] = None
    is_featured: bool
    image_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- cart

class CartItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product id (must be > 0)")
    quantity: int = Field(1, gt=0, description="Units to add (must be > 0)")


class CartItemUpdate(BaseModel):
    """Schema for changing a line's quantity. Removal goes through DELETE, never quantity 0."""

    quantity: int = Field(..., ge=1)


class CartLineOut(BaseModel):
    id: int
    product_id: int
    name: str
    slug: str
    price: Decimal
    stock: int
    quantity: int
    line_total: Decimal


class PriceBreakdownOut(BaseModel):
    subtotal: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal


class CouponStatusOut(BaseModel):
    code: str
    applicable: bool
    reason: Optional[str] = None


class CartOut(BaseModel):
    """Schema for the cart view: live lines plus the pricing summary."""

    user_id: int
    items: List[CartLineOut]
    summary: PriceBreakdownOut
    amount_to_free_shipping: Decimal
    coupon: Optional[CouponStatusOut] = None


# ---------------------------------------------------------------- checkout

class ShippingAddress(BaseModel):
    """Shipping address snapshot stored with the order. Every field is trimmed before checks."""

    full_name: str = Field(..., min_length=2, description="Full name is required")
    address: str = Field(..., min_length=5, description="Street address is required")
    city: str = Field(..., min_length=2, description="City is required")
    postal_code: str = Field(..., min_length=3, description="Postal code is required")
    phone: str = Field(..., min_length=PHONE_MIN_LENGTH, description="Phone number is required")

    model_config = ConfigDict(str_strip_whitespace=True)


class CheckoutIn(BaseModel):
    """Schema for placing an order from the current cart."""

    shipping_address: ShippingAddress
    payment_method: str = "cod"
    coupon_code: Optional[str] = Field(None, max_length=64)

    model_config = ConfigDict(str_strip_whitespace=True)


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    user_id: int
    status: str
    payment_method: str
    shipping_address: Dict[str, str]
    subtotal: Decimal
    shipping_fee: Decimal
    discount: Decimal
    total_amount: Decimal
    coupon_code: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- coupons (admin)

class CouponIn(BaseModel):
    """Schema for creating or replacing a coupon. used_count is never writable here."""

    code: str = Field(..., min_length=1, max_length=64)
    discount_type: Literal["percentage", "flat"]
    discount_value: Decimal = Field(..., ge=0)
    min_order_amount: Decimal = Field(Decimal("0"), ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    expire_at: Optional[datetime] = None
    is_active: bool = True

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="after")
    def _percentage_in_range(self):
        if self.discount_type == "percentage" and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponOut(BaseModel):
    id: int
    code: str
    discount_type: str
    discount_value: Decimal
    min_order_amount: Decimal
    max_uses: Optional[int] = None
    used_count: int
    expire_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def parse_checkout(payload: Dict[str, Any]) -> CheckoutIn:
    """Validate a raw checkout form without touching the backend."""
    try:
        return CheckoutIn.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed("Checkout form is invalid", fields=field_errors(e.errors()))
