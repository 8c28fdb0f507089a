# storefront/services/order_service.py
from typing import List, Optional

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.checkout import CheckoutAttempt
from storefront.domain.context import ShopperContext
from storefront.domain.errors import (
    BackendUnavailable,
    CheckoutInProgress,
    EmptyCart,
    ErrorCode,
    OrderNotFound,
    PartialWrite,
    StockChanged,
    StoreError,
    UnsupportedPaymentMethod,
)
from storefront.domain.schemas import CheckoutIn
from storefront.repos.coupon_repo import CouponRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services import pricing
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponService, RejectionReason, rejection_error
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import ACCEPTED_PAYMENT_METHODS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_PENDING = "pending"


class OrderService:
    """
    Order assembly: turns the shopper's cart into an immutable order.
    Separate from CartService, the cart is only read and cleared from here.
    """

    def __init__(
        self,
        ctx: ShopperContext,
        lock_service: LockService,
        notifier: Optional[NotificationService] = None,
    ):
        self.ctx = ctx
        self.repo = OrderRepo(ctx.db)
        self.products = ProductRepo(ctx.db)
        self.coupon_repo = CouponRepo(ctx.db)
        self.coupons = CouponService(ctx.db)
        self.cart = CartService(ctx)
        self.lock_service = lock_service
        self.notifier = notifier or NotificationService()
        self.last_attempt: Optional[CheckoutAttempt] = None

    # command
    def place_order(self, checkout: CheckoutIn) -> OrderModel:
        """
        Use Case: placing an order from the cart.

        1. payment method and checkout lock, before anything touches the store
        2. stock re-check of every line against current stock
        3. re-pricing, coupon re-validated now
        4. order, items, stock decrement, coupon use, cart clear in one transaction
        5. confirmation queued after commit
        """
        attempt = CheckoutAttempt(self.ctx.user_id)
        self.last_attempt = attempt
        attempt.validate()

        token = None
        try:
            self._check_payment_method(checkout.payment_method)
            token = self._acquire_lock()
            order = self._assemble(attempt, checkout)
        except StoreError as e:
            attempt.fail(e.code)
            logger.warning(f"Checkout of user {self.ctx.user_id} failed: {e.code.value} {e.message}")
            raise
        except Exception:
            attempt.fail(ErrorCode.BACKEND_UNAVAILABLE)
            logger.exception(f"Checkout of user {self.ctx.user_id} failed unexpectedly")
            raise
        finally:
            if token:
                self._release_lock(token)

        attempt.succeed(order.id)
        self._notify(order)
        return order

    # query
    def list_orders(self) -> List[OrderModel]:
        return self.repo.list_orders(self.ctx.user_id)

    def get_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order or order.user_id != self.ctx.user_id:
            raise OrderNotFound("Order does not exist", order_id=order_id)
        return order

    # steps
    def _check_payment_method(self, payment_method: str) -> None:
        if payment_method not in ACCEPTED_PAYMENT_METHODS:
            raise UnsupportedPaymentMethod(
                "Payment method is not supported",
                payment_method=payment_method,
                accepted=list(ACCEPTED_PAYMENT_METHODS),
            )

    def _acquire_lock(self) -> str:
        try:
            token = self.lock_service.acquire_checkout_lock(self.ctx.user_id)
        except RedisError as e:
            logger.error(f"Checkout lock unavailable for user {self.ctx.user_id}: {e}")
            raise BackendUnavailable("Checkout is temporarily unavailable, please try again")
        if not token:
            raise CheckoutInProgress("A checkout for this cart is already being submitted")
        return token

    def _release_lock(self, token: str) -> None:
        try:
            self.lock_service.release_checkout_lock(self.ctx.user_id, token)
        except RedisError as e:
            # the TTL frees it anyway
            logger.warning(f"Failed to release checkout lock of user {self.ctx.user_id}: {e}")

    def _assemble(self, attempt: CheckoutAttempt, checkout: CheckoutIn) -> OrderModel:
        committing = False
        try:
            lines = self.cart.lines()
            if not lines:
                raise EmptyCart("Your cart is empty")

            # stock may have dropped since the cart was last rendered
            short = [line.product_id for line in lines if line.quantity > line.stock]
            if short:
                raise StockChanged(
                    "Some products no longer have enough stock, please adjust your cart",
                    product_ids=short,
                )

            subtotal = pricing.subtotal_of(lines)
            coupon = None
            if checkout.coupon_code:
                coupon = self.coupons.resolve(checkout.coupon_code, subtotal, self.ctx.now())

            breakdown = pricing.calculate(lines, coupon).rounded()

            attempt.submit()

            order = self.repo.add_order(
                OrderModel(
                    user_id=self.ctx.user_id,
                    shipping_address=checkout.shipping_address.model_dump(),
                    payment_method=checkout.payment_method,
                    subtotal=breakdown.subtotal,
                    shipping_fee=breakdown.shipping,
                    discount=breakdown.discount,
                    total_amount=breakdown.total,
                    coupon_code=coupon.code if coupon else None,
                    status=ORDER_PENDING,
                )
            )

            self.repo.add_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        unit_price=line.price,
                    )
                    for line in lines
                ]
            )

            for line in lines:
                if self.products.decrement_stock(line.product_id, line.quantity) == 0:
                    raise StockChanged(
                        "Some products no longer have enough stock, please adjust your cart",
                        product_ids=[line.product_id],
                    )

            if coupon and self.coupon_repo.increment_usage(coupon.id) == 0:
                raise rejection_error(coupon.code, RejectionReason.EXHAUSTED)

            self.cart.clear(commit=False)

            committing = True
            self.repo.commit()

        except StoreError:
            self.repo.rollback()
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            if committing:
                logger.error(
                    f"[{ErrorCode.PARTIAL_WRITE.value}] commit of order for user {self.ctx.user_id} failed, "
                    f"store state unknown, needs manual check: {e}"
                )
                raise PartialWrite("Your order could not be confirmed, please check your orders before retrying")
            logger.error(f"Checkout of user {self.ctx.user_id} aborted by store error: {e}")
            raise BackendUnavailable("Could not place the order, please try again")
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {order.id} created for user {self.ctx.user_id}: "
            f"{len(lines)} item(s), total {breakdown.total}"
            + (f", coupon {coupon.code}" if coupon else "")
        )
        return order

    def _notify(self, order: OrderModel) -> None:
        try:
            self.notifier.send_order_confirmation(self.ctx.user_id, order.id)
        except Exception as e:
            logger.warning(f"Failed to queue confirmation for order {order.id}: {e}")
