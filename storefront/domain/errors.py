# storefront/domain/errors.py
from enum import Enum
from typing import Any, Dict


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    EMPTY_CART = "EMPTY_CART"
    STOCK_CHANGED = "STOCK_CHANGED"
    COUPON_NOT_FOUND = "COUPON_NOT_FOUND"
    COUPON_INACTIVE = "COUPON_INACTIVE"
    COUPON_EXPIRED = "COUPON_EXPIRED"
    COUPON_EXHAUSTED = "COUPON_EXHAUSTED"
    COUPON_BELOW_MINIMUM = "COUPON_BELOW_MINIMUM"
    COUPON_CODE_TAKEN = "COUPON_CODE_TAKEN"
    UNSUPPORTED_PAYMENT_METHOD = "UNSUPPORTED_PAYMENT_METHOD"
    CHECKOUT_IN_PROGRESS = "CHECKOUT_IN_PROGRESS"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    CART_LINE_NOT_FOUND = "CART_LINE_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    PARTIAL_WRITE = "PARTIAL_WRITE"


class StoreError(Exception):
    """Base class for every failure a use case reports to its caller."""

    code: ErrorCode = ErrorCode.BACKEND_UNAVAILABLE

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, **self.details}


class ValidationFailed(StoreError):
    code = ErrorCode.VALIDATION_ERROR


class Unauthenticated(StoreError):
    code = ErrorCode.UNAUTHENTICATED


class EmptyCart(StoreError):
    code = ErrorCode.EMPTY_CART


class StockChanged(StoreError):
    code = ErrorCode.STOCK_CHANGED


class UnsupportedPaymentMethod(StoreError):
    code = ErrorCode.UNSUPPORTED_PAYMENT_METHOD


class CheckoutInProgress(StoreError):
    code = ErrorCode.CHECKOUT_IN_PROGRESS


class BackendUnavailable(StoreError):
    code = ErrorCode.BACKEND_UNAVAILABLE


class PartialWrite(StoreError):
    code = ErrorCode.PARTIAL_WRITE


class NotFound(StoreError):
    pass


class ProductNotFound(NotFound):
    code = ErrorCode.PRODUCT_NOT_FOUND


class CartLineNotFound(NotFound):
    code = ErrorCode.CART_LINE_NOT_FOUND


class OrderNotFound(NotFound):
    code = ErrorCode.ORDER_NOT_FOUND


class CouponNotFound(NotFound):
    code = ErrorCode.COUPON_NOT_FOUND


class CouponCodeTaken(StoreError):
    code = ErrorCode.COUPON_CODE_TAKEN


class CouponRejected(StoreError):
    """Raised with one of the COUPON_* codes picked from the validator's reason."""

    def __init__(self, code: ErrorCode, message: str, **details: Any):
        super().__init__(message, **details)
        self.code = code
