# storefront/repos/coupon_repo.py
from typing import List

from sqlalchemy import select, update, func, or_
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_coupon(self, coupon_id: int) -> CouponModel | None:
        return self.db.get(CouponModel, coupon_id)

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(func.upper(CouponModel.code) == code.strip().upper())
        ).scalar_one_or_none()

    def list_coupons(self) -> List[CouponModel]:
        return list(
            self.db.execute(
                select(CouponModel).order_by(CouponModel.created_at.desc(), CouponModel.id.desc())
            ).scalars().all()
        )

    def add_coupon(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.flush()
        return coupon

    def delete_coupon(self, coupon: CouponModel) -> None:
        self.db.delete(coupon)
        self.db.flush()

    def increment_usage(self, coupon_id: int) -> int:
        # the cap is part of the WHERE clause, so concurrent checkouts cannot overshoot max_uses
        result = self.db.execute(
            update(CouponModel)
            .where(
                CouponModel.id == coupon_id,
                CouponModel.is_active.is_(True),
                or_(CouponModel.max_uses.is_(None), CouponModel.used_count < CouponModel.max_uses),
            )
            .values(used_count=CouponModel.used_count + 1)
        )
        return result.rowcount

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
