# storefront/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.api import http_error
from storefront.data.database import get_db
from storefront.domain.context import ShopperContext
from storefront.domain.errors import Unauthenticated
from storefront.repos.user_repo import UserRepo
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService


def get_current_user_id(
    x_user_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> int:
    """
    Identity comes from the auth provider in front of this service,
    which forwards the signed-in user as X-User-Id.
    """
    if x_user_id is None or not UserRepo(db).get_user(x_user_id):
        raise http_error(Unauthenticated("You must be signed in"))
    return x_user_id


def get_shopper(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ShopperContext:
    return ShopperContext(user_id=user_id, db=db)


def get_lock_service() -> LockService:
    return LockService()


def get_notifier() -> NotificationService:
    return NotificationService()
