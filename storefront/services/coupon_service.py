# storefront/services/coupon_service.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain.errors import (
    CouponCodeTaken,
    CouponNotFound,
    CouponRejected,
    ErrorCode,
    ValidationFailed,
)
from storefront.domain.schemas import CouponIn
from storefront.repos.coupon_repo import CouponRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class RejectionReason(str, Enum):
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"
    EXHAUSTED = "EXHAUSTED"
    BELOW_MINIMUM = "BELOW_MINIMUM"


_REASON_CODES = {
    RejectionReason.INACTIVE: ErrorCode.COUPON_INACTIVE,
    RejectionReason.EXPIRED: ErrorCode.COUPON_EXPIRED,
    RejectionReason.EXHAUSTED: ErrorCode.COUPON_EXHAUSTED,
    RejectionReason.BELOW_MINIMUM: ErrorCode.COUPON_BELOW_MINIMUM,
}

_REASON_MESSAGES = {
    RejectionReason.INACTIVE: "This coupon is not active",
    RejectionReason.EXPIRED: "This coupon has expired",
    RejectionReason.EXHAUSTED: "This coupon has reached its usage limit",
    RejectionReason.BELOW_MINIMUM: "Order total is below the coupon minimum",
}


class CouponVerdict(NamedTuple):
    applicable: bool
    reason: Optional[RejectionReason] = None


APPLICABLE = CouponVerdict(True)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def validate_coupon(coupon, subtotal: Decimal, now: datetime) -> CouponVerdict:
    """
    Classify a coupon against an order subtotal. Checks run in a fixed order and
    the first failing one wins, so shoppers always see the same message:
    inactive, expired, exhausted, below minimum.
    Never mutates the coupon.
    """
    if not coupon.is_active:
        return CouponVerdict(False, RejectionReason.INACTIVE)

    if coupon.expire_at is not None and _as_utc(now) > _as_utc(coupon.expire_at):
        return CouponVerdict(False, RejectionReason.EXPIRED)

    if coupon.max_uses is not None and coupon.used_count >= coupon.max_uses:
        return CouponVerdict(False, RejectionReason.EXHAUSTED)

    if Decimal(str(subtotal)) < Decimal(str(coupon.min_order_amount or 0)):
        return CouponVerdict(False, RejectionReason.BELOW_MINIMUM)

    return APPLICABLE


def rejection_error(coupon_code: str, reason: RejectionReason) -> CouponRejected:
    return CouponRejected(
        _REASON_CODES[reason],
        _REASON_MESSAGES[reason],
        coupon_code=coupon_code,
    )


class CouponService:
    """
    Lookup + validation used by the cart and checkout,
    and the admin CRUD for coupon records.
    """

    def __init__(self, db: Session):
        self.repo = CouponRepo(db)

    # query
    def find(self, code: str) -> CouponModel:
        coupon = self.repo.get_by_code(code)
        if not coupon:
            raise CouponNotFound("Coupon does not exist", coupon_code=code)
        return coupon

    def resolve(self, code: str, subtotal: Decimal, now: datetime) -> CouponModel:
        """Return the coupon if it applies to `subtotal`, raise CouponRejected otherwise."""
        coupon = self.find(code)
        verdict = validate_coupon(coupon, subtotal, now)
        if not verdict.applicable:
            logger.warning(f"Coupon {coupon.code} rejected: {verdict.reason.value}")
            raise rejection_error(coupon.code, verdict.reason)
        return coupon

    def list_coupons(self) -> List[CouponModel]:
        return self.repo.list_coupons()

    def get_coupon(self, coupon_id: int) -> CouponModel:
        coupon = self.repo.get_coupon(coupon_id)
        if not coupon:
            raise CouponNotFound("Coupon does not exist", coupon_id=coupon_id)
        return coupon

    # commands
    def create_coupon(self, payload: CouponIn) -> CouponModel:
        code = payload.code.upper()
        if self.repo.get_by_code(code):
            raise CouponCodeTaken("Coupon code already exists", coupon_code=code)

        coupon = CouponModel(
            code=code,
            discount_type=payload.discount_type,
            discount_value=payload.discount_value,
            min_order_amount=payload.min_order_amount,
            max_uses=payload.max_uses,
            used_count=0,
            expire_at=payload.expire_at,
            is_active=payload.is_active,
        )
        self._save(lambda: self.repo.add_coupon(coupon), code)
        logger.info(f"Created coupon {coupon.code} ({coupon.discount_type} {coupon.discount_value})")
        return coupon

    def update_coupon(self, coupon_id: int, payload: CouponIn) -> CouponModel:
        coupon = self.get_coupon(coupon_id)
        code = payload.code.upper()

        other = self.repo.get_by_code(code)
        if other and other.id != coupon.id:
            raise CouponCodeTaken("Coupon code already exists", coupon_code=code)

        if payload.max_uses is not None and payload.max_uses < coupon.used_count:
            raise ValidationFailed(
                "max_uses cannot be lower than the current use count",
                fields={"max_uses": f"Coupon was already used {coupon.used_count} times"},
            )

        coupon.code = code
        coupon.discount_type = payload.discount_type
        coupon.discount_value = payload.discount_value
        coupon.min_order_amount = payload.min_order_amount
        coupon.max_uses = payload.max_uses
        coupon.expire_at = payload.expire_at
        coupon.is_active = payload.is_active

        self._save(lambda: self.repo.add_coupon(coupon), code)
        logger.info(f"Updated coupon {coupon.id} ({coupon.code})")
        return coupon

    def delete_coupon(self, coupon_id: int) -> None:
        coupon = self.get_coupon(coupon_id)
        self.repo.delete_coupon(coupon)
        self.repo.commit()
        logger.info(f"Deleted coupon {coupon_id}")

    def _save(self, write, code: str) -> None:
        try:
            write()
            self.repo.commit()
        except IntegrityError:
            # unique code taken by a concurrent write
            self.repo.rollback()
            raise CouponCodeTaken("Coupon code already exists", coupon_code=code)
