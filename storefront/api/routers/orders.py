# storefront/api/routers/orders.py
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from storefront.api import http_error
from storefront.api.deps import get_lock_service, get_notifier, get_shopper
from storefront.domain.context import ShopperContext
from storefront.domain.errors import StoreError
from storefront.domain.schemas import CheckoutIn, OrderOut, parse_checkout
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    ctx: ShopperContext = Depends(get_shopper),
    lock_service: LockService = Depends(get_lock_service),
    notifier: NotificationService = Depends(get_notifier),
) -> OrderService:
    return OrderService(ctx, lock_service=lock_service, notifier=notifier)


def checkout_form(payload: Dict[str, Any] = Body(...)) -> CheckoutIn:
    # declared first on POST /orders so a bad form is rejected before the user lookup
    try:
        return parse_checkout(payload)
    except StoreError as e:
        raise http_error(e)


@router.post("", response_model=OrderOut, status_code=201)
def place_order(
    checkout: CheckoutIn = Depends(checkout_form),
    svc: OrderService = Depends(get_service),
):
    """
    Places an order from the shopper's cart.
    Confirmation is queued asynchronously.
    """
    try:
        return svc.place_order(checkout)
    except StoreError as e:
        raise http_error(e)


@router.get("", response_model=List[OrderOut])
def list_orders(svc: OrderService = Depends(get_service)):
    return svc.list_orders()


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: OrderService = Depends(get_service)):
    try:
        return svc.get_order(order_id)
    except StoreError as e:
        raise http_error(e)
