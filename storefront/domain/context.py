# storefront/domain/context.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ShopperContext:
    """
    Everything a cart or checkout use case needs about the current request:
    who is shopping, which DB session to use and what time it is.
    Built per request and passed explicitly, never stored globally.
    """

    user_id: int
    db: Session
    clock: Callable[[], datetime] = field(default=utc_now)

    def now(self) -> datetime:
        return self.clock()
