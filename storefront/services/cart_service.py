# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict, List, NamedTuple, Optional

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.context import ShopperContext
from storefront.domain.errors import (
    CartLineNotFound,
    CouponNotFound,
    CouponRejected,
    ProductNotFound,
    StockChanged,
    ValidationFailed,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services import pricing
from storefront.services.coupon_service import CouponService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartLine(NamedTuple):
    """Cart line joined with the product's live price and stock."""

    id: int
    product_id: int
    name: str
    slug: str
    price: Decimal
    stock: int
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CartService:
    """
    Cart of one shopper, scoped by the ShopperContext it is built with.
    commands (add_line, set_quantity, remove_line, clear) re-read stock before writing,
    queries (lines, total, summary) always price against the live product record.
    """

    def __init__(self, ctx: ShopperContext):
        self.ctx = ctx
        self.repo = CartRepo(ctx.db)
        self.products = ProductRepo(ctx.db)

    # query
    def lines(self) -> List[CartLine]:
        return [
            CartLine(
                id=item.id,
                product_id=item.product_id,
                name=item.product.name,
                slug=item.product.slug,
                price=Decimal(str(item.product.price)),
                stock=item.product.stock,
                quantity=item.quantity,
            )
            for item in self.repo.get_lines(self.ctx.user_id)
        ]

    def total(self) -> Decimal:
        return pricing.subtotal_of(self.lines())

    def summary(self, coupon_code: Optional[str] = None) -> Dict[str, Any]:
        """
        Cart view: lines + pricing. A coupon given here is only previewed,
        a rejected one is reported and priced as no discount.
        """
        lines = self.lines()
        subtotal = pricing.subtotal_of(lines)

        coupon = None
        coupon_status = None
        if coupon_code:
            coupons = CouponService(self.ctx.db)
            try:
                coupon = coupons.resolve(coupon_code, subtotal, self.ctx.now())
                coupon_status = {"code": coupon.code, "applicable": True, "reason": None}
            except (CouponRejected, CouponNotFound) as e:
                coupon_status = {"code": coupon_code, "applicable": False, "reason": e.code.value}

        breakdown = pricing.calculate(lines, coupon).rounded()

        return {
            "user_id": self.ctx.user_id,
            "items": [
                {**line._asdict(), "line_total": pricing.quantize(line.line_total)}
                for line in lines
            ],
            "summary": breakdown._asdict(),
            "amount_to_free_shipping": pricing.quantize(pricing.amount_to_free_shipping(subtotal)),
            "coupon": coupon_status,
        }

    # commands
    def add_line(self, product_id: int, quantity: int = 1) -> Optional[CartItemModel]:
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1", fields={"quantity": "Must be at least 1"})

        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFound("Product does not exist", product_id=product_id)

        if product.stock <= 0:
            logger.info(f"Product {product_id} is sold out, nothing added for user {self.ctx.user_id}")
            return None

        existing = self.repo.get_line_for_product(self.ctx.user_id, product_id)

        if existing:
            new_quantity = min(existing.quantity + quantity, product.stock)
            logger.info(
                f"Product {product_id} already in cart of user {self.ctx.user_id}, "
                f"quantity {existing.quantity} -> {new_quantity}"
            )
            existing.quantity = new_quantity
            line = self.repo.add_line(existing)
        else:
            new_quantity = min(quantity, product.stock)
            logger.info(f"Adding product {product_id} x{new_quantity} to cart of user {self.ctx.user_id}")
            line = self.repo.add_line(
                CartItemModel(
                    user_id=self.ctx.user_id,
                    product_id=product_id,
                    quantity=new_quantity,
                )
            )

        self.repo.commit()
        return line

    def set_quantity(self, line_id: int, quantity: int) -> CartItemModel:
        if quantity < 1:
            raise ValidationFailed(
                "Quantity must be at least 1, remove the line instead",
                fields={"quantity": "Must be at least 1"},
            )

        line = self._own_line(line_id)
        product = self.products.get_product(line.product_id)

        if product.stock <= 0:
            raise StockChanged(
                "Product is sold out, remove it from the cart",
                product_ids=[line.product_id],
            )

        clamped = min(quantity, product.stock)
        if clamped != quantity:
            logger.info(f"Quantity {quantity} for line {line_id} clamped to stock {product.stock}")

        line.quantity = clamped
        self.repo.add_line(line)
        self.repo.commit()
        return line

    def remove_line(self, line_id: int) -> None:
        line = self._own_line(line_id)
        logger.info(f"Removing line {line_id} (product {line.product_id}) from cart of user {self.ctx.user_id}")
        self.repo.delete_line(line)
        self.repo.commit()

    def clear(self, commit: bool = True) -> int:
        """Delete every line of the shopper. With commit=False the caller owns the transaction."""
        removed = self.repo.clear(self.ctx.user_id)
        if commit:
            self.repo.commit()
        logger.info(f"Cleared {removed} line(s) from cart of user {self.ctx.user_id}")
        return removed

    def _own_line(self, line_id: int) -> CartItemModel:
        line = self.repo.get_line(line_id)
        # another shopper's line looks exactly like a missing one
        if not line or line.user_id != self.ctx.user_id:
            raise CartLineNotFound("Cart line does not exist", line_id=line_id)
        return line
