"""Tests for the per-shopper cart."""

from decimal import Decimal

import pytest

from storefront.data.models import CartItemModel
from storefront.domain.context import ShopperContext
from storefront.domain.errors import (
    CartLineNotFound,
    ProductNotFound,
    StockChanged,
    ValidationFailed,
)
from storefront.services.cart_service import CartService

from helpers import NOW


class TestAddLine:
    def test_creates_line(self, ctx, make_product):
        product = make_product(stock=5)
        CartService(ctx).add_line(product.id, 2)

        lines = CartService(ctx).lines()
        assert len(lines) == 1
        assert lines[0].product_id == product.id
        assert lines[0].quantity == 2

    def test_default_quantity_is_one(self, ctx, make_product):
        product = make_product()
        line = CartService(ctx).add_line(product.id)
        assert line.quantity == 1

    def test_new_line_clamped_to_stock(self, ctx, make_product):
        product = make_product(stock=3)
        line = CartService(ctx).add_line(product.id, 10)
        assert line.quantity == 3

    def test_existing_line_is_incremented(self, ctx, make_product):
        product = make_product(stock=10)
        svc = CartService(ctx)
        svc.add_line(product.id, 2)
        svc.add_line(product.id, 3)

        lines = svc.lines()
        assert len(lines) == 1
        assert lines[0].quantity == 5

    def test_increment_clamped_to_stock(self, ctx, make_product):
        product = make_product(stock=4)
        svc = CartService(ctx)
        svc.add_line(product.id, 3)
        svc.add_line(product.id, 3)
        assert svc.lines()[0].quantity == 4

    def test_sold_out_is_silent_noop(self, ctx, make_product):
        product = make_product(stock=0)
        assert CartService(ctx).add_line(product.id, 1) is None
        assert CartService(ctx).lines() == []

    def test_rejects_quantity_below_one(self, ctx, make_product):
        product = make_product()
        with pytest.raises(ValidationFailed):
            CartService(ctx).add_line(product.id, 0)

    def test_unknown_product(self, ctx):
        with pytest.raises(ProductNotFound):
            CartService(ctx).add_line(999, 1)

    def test_reads_current_stock(self, ctx, db, make_product):
        product = make_product(stock=10)
        svc = CartService(ctx)
        svc.add_line(product.id, 1)

        product.stock = 2
        db.commit()

        svc.add_line(product.id, 5)
        assert svc.lines()[0].quantity == 2


class TestSetQuantity:
    def test_updates_quantity(self, ctx, make_product):
        product = make_product(stock=10)
        svc = CartService(ctx)
        line = svc.add_line(product.id, 1)
        assert svc.set_quantity(line.id, 7).quantity == 7

    def test_clamped_to_stock(self, ctx, make_product):
        product = make_product(stock=3)
        svc = CartService(ctx)
        line = svc.add_line(product.id, 1)
        assert svc.set_quantity(line.id, 50).quantity == 3

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_below_one_rejected(self, ctx, make_product, quantity):
        product = make_product()
        svc = CartService(ctx)
        line = svc.add_line(product.id, 2)
        with pytest.raises(ValidationFailed):
            svc.set_quantity(line.id, quantity)
        assert svc.lines()[0].quantity == 2

    def test_sold_out_product(self, ctx, db, make_product):
        product = make_product(stock=5)
        svc = CartService(ctx)
        line = svc.add_line(product.id, 2)

        product.stock = 0
        db.commit()

        with pytest.raises(StockChanged):
            svc.set_quantity(line.id, 1)

    def test_missing_line(self, ctx):
        with pytest.raises(CartLineNotFound):
            CartService(ctx).set_quantity(123, 1)


class TestRemoveAndClear:
    def test_remove_line(self, ctx, make_product):
        svc = CartService(ctx)
        keep = svc.add_line(make_product().id)
        drop = svc.add_line(make_product().id)

        svc.remove_line(drop.id)
        assert [l.id for l in svc.lines()] == [keep.id]

    def test_clear(self, ctx, make_product):
        svc = CartService(ctx)
        svc.add_line(make_product().id)
        svc.add_line(make_product().id)

        assert svc.clear() == 2
        assert svc.lines() == []


class TestIsolation:
    def test_lines_of_other_shoppers_are_invisible(self, db, ctx, other_user, make_product):
        product = make_product()
        theirs = ShopperContext(user_id=other_user.id, db=db, clock=lambda: NOW)
        their_line = CartService(theirs).add_line(product.id, 1)

        mine = CartService(ctx)
        assert mine.lines() == []
        with pytest.raises(CartLineNotFound):
            mine.remove_line(their_line.id)
        with pytest.raises(CartLineNotFound):
            mine.set_quantity(their_line.id, 2)

    def test_clear_only_touches_own_cart(self, db, ctx, other_user, make_product):
        product = make_product()
        theirs = ShopperContext(user_id=other_user.id, db=db, clock=lambda: NOW)
        CartService(theirs).add_line(product.id, 1)
        CartService(ctx).add_line(product.id, 1)

        CartService(ctx).clear()
        assert len(CartService(theirs).lines()) == 1

    def test_one_line_per_product(self, db, ctx, make_product):
        product = make_product()
        svc = CartService(ctx)
        svc.add_line(product.id)
        svc.add_line(product.id)
        assert db.query(CartItemModel).filter_by(user_id=ctx.user_id).count() == 1


class TestTotal:
    def test_total_uses_live_prices(self, ctx, db, make_product):
        a = make_product(price="20.00")
        b = make_product(price="5.50")
        svc = CartService(ctx)
        svc.add_line(a.id, 2)
        svc.add_line(b.id, 1)
        assert svc.total() == Decimal("45.50")

        a.price = Decimal("25.00")
        db.commit()

        assert svc.total() == Decimal("55.50")

    def test_empty_cart_total(self, ctx):
        assert CartService(ctx).total() == Decimal("0")


class TestSummary:
    def test_scenario_threshold(self, ctx, make_product):
        product = make_product(price="20.00", stock=10)
        svc = CartService(ctx)
        svc.add_line(product.id, 2)

        summary = svc.summary()["summary"]
        assert summary == {
            "subtotal": Decimal("40.00"),
            "shipping": Decimal("5.00"),
            "discount": Decimal("0.00"),
            "total": Decimal("45.00"),
        }
        assert svc.summary()["amount_to_free_shipping"] == Decimal("10.00")

        svc.add_line(product.id, 1)
        summary = svc.summary()["summary"]
        assert summary["subtotal"] == Decimal("60.00")
        assert summary["shipping"] == Decimal("0.00")
        assert summary["total"] == Decimal("60.00")

    def test_coupon_preview(self, ctx, make_product, make_coupon):
        make_coupon(code="TEN", discount_value="10")
        svc = CartService(ctx)
        svc.add_line(make_product(price="60.00").id, 1)

        result = svc.summary("ten")
        assert result["coupon"] == {"code": "TEN", "applicable": True, "reason": None}
        assert result["summary"]["discount"] == Decimal("6.00")
        assert result["summary"]["total"] == Decimal("54.00")

    def test_rejected_coupon_is_reported_not_applied(self, ctx, make_product, make_coupon):
        make_coupon(code="BIG", min_order_amount="100")
        svc = CartService(ctx)
        svc.add_line(make_product(price="60.00").id, 1)

        result = svc.summary("BIG")
        assert result["coupon"]["applicable"] is False
        assert result["coupon"]["reason"] == "COUPON_BELOW_MINIMUM"
        assert result["summary"]["discount"] == Decimal("0.00")

    def test_unknown_coupon_is_reported(self, ctx, make_product):
        svc = CartService(ctx)
        svc.add_line(make_product().id, 1)
        assert svc.summary("GHOST")["coupon"]["reason"] == "COUPON_NOT_FOUND"
