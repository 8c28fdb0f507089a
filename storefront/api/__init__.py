# storefront/api/__init__.py
from fastapi import HTTPException

from storefront.domain.errors import ErrorCode, StoreError

_STATUS = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.EMPTY_CART: 400,
    ErrorCode.UNSUPPORTED_PAYMENT_METHOD: 400,
    ErrorCode.COUPON_INACTIVE: 400,
    ErrorCode.COUPON_EXPIRED: 400,
    ErrorCode.COUPON_EXHAUSTED: 400,
    ErrorCode.COUPON_BELOW_MINIMUM: 400,
    ErrorCode.COUPON_NOT_FOUND: 404,
    ErrorCode.PRODUCT_NOT_FOUND: 404,
    ErrorCode.CART_LINE_NOT_FOUND: 404,
    ErrorCode.ORDER_NOT_FOUND: 404,
    ErrorCode.STOCK_CHANGED: 409,
    ErrorCode.COUPON_CODE_TAKEN: 409,
    ErrorCode.CHECKOUT_IN_PROGRESS: 409,
    ErrorCode.BACKEND_UNAVAILABLE: 503,
    ErrorCode.PARTIAL_WRITE: 503,
}


def http_error(e: StoreError) -> HTTPException:
    """Domain error -> HTTPException with {"code", "message", ...details} as detail."""
    return HTTPException(status_code=_STATUS.get(e.code, 400), detail=e.to_dict())
