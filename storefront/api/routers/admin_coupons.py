# storefront/api/routers/admin_coupons.py
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from storefront.api import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StoreError
from storefront.domain.schemas import CouponIn, CouponOut
from storefront.services.coupon_service import CouponService

# admin role is enforced by the auth provider in front of /admin
router = APIRouter(prefix="/admin/coupons", tags=["admin"])


def get_service(db: Session = Depends(get_db)) -> CouponService:
    return CouponService(db)


@router.get("", response_model=List[CouponOut])
def list_coupons(svc: CouponService = Depends(get_service)):
    return svc.list_coupons()


@router.post("", response_model=CouponOut, status_code=201)
def create_coupon(payload: CouponIn, svc: CouponService = Depends(get_service)):
    try:
        return svc.create_coupon(payload)
    except StoreError as e:
        raise http_error(e)


@router.put("/{coupon_id}", response_model=CouponOut)
def update_coupon(coupon_id: int, payload: CouponIn, svc: CouponService = Depends(get_service)):
    try:
        return svc.update_coupon(coupon_id, payload)
    except StoreError as e:
        raise http_error(e)


@router.delete("/{coupon_id}", status_code=204)
def delete_coupon(coupon_id: int, svc: CouponService = Depends(get_service)):
    try:
        svc.delete_coupon(coupon_id)
    except StoreError as e:
        raise http_error(e)
    return Response(status_code=204)
