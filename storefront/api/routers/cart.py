# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, Query

from storefront.api import http_error
from storefront.api.deps import get_shopper
from storefront.domain.context import ShopperContext
from storefront.domain.errors import StoreError
from storefront.domain.schemas import CartItemIn, CartItemUpdate, CartOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    coupon: str | None = Query(None, max_length=64, description="Coupon code to preview"),
    ctx: ShopperContext = Depends(get_shopper),
):
    return CartService(ctx).summary(coupon)


@router.post("/items", response_model=CartOut)
def add_item(payload: CartItemIn, ctx: ShopperContext = Depends(get_shopper)):
    svc = CartService(ctx)
    try:
        svc.add_line(payload.product_id, payload.quantity)
    except StoreError as e:
        raise http_error(e)
    return svc.summary()


@router.patch("/items/{line_id}", response_model=CartOut)
def update_item(line_id: int, payload: CartItemUpdate, ctx: ShopperContext = Depends(get_shopper)):
    svc = CartService(ctx)
    try:
        svc.set_quantity(line_id, payload.quantity)
    except StoreError as e:
        raise http_error(e)
    return svc.summary()


@router.delete("/items/{line_id}", response_model=CartOut)
def remove_item(line_id: int, ctx: ShopperContext = Depends(get_shopper)):
    svc = CartService(ctx)
    try:
        svc.remove_line(line_id)
    except StoreError as e:
        raise http_error(e)
    return svc.summary()


@router.delete("", response_model=CartOut)
def clear_cart(ctx: ShopperContext = Depends(get_shopper)):
    svc = CartService(ctx)
    svc.clear()
    return svc.summary()
