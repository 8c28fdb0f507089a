import os

# settings are read at import time, so the test environment goes in first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.data.database import init_db, get_db
from storefront.data.models import CategoryModel, CouponModel, ProductModel, UserModel
from storefront.domain.context import ShopperContext

from helpers import NOW, FakeLockService, FakeNotifier


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture()
def user(db):
    u = UserModel(id=1, name="Alice")
    db.add(u)
    db.commit()
    return u


@pytest.fixture()
def other_user(db):
    u = UserModel(id=2, name="Bob")
    db.add(u)
    db.commit()
    return u


@pytest.fixture()
def ctx(db, user):
    return ShopperContext(user_id=user.id, db=db, clock=lambda: NOW)


@pytest.fixture()
def make_product(db):
    counter = {"n": 0}

    def _make(price="20.00", stock=10, name=None, category=None, is_featured=False):
        counter["n"] += 1
        n = counter["n"]
        product = ProductModel(
            name=name or f"Product {n}",
            slug=(name or f"product-{n}").lower().replace(" ", "-"),
            price=Decimal(price),
            stock=stock,
            category=category,
            is_featured=is_featured,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture()
def make_category(db):
    def _make(name, slug):
        category = CategoryModel(name=name, slug=slug)
        db.add(category)
        db.commit()
        return category

    return _make


@pytest.fixture()
def make_coupon(db):
    def _make(
        code="SAVE10",
        discount_type="percentage",
        discount_value="10",
        min_order_amount="0",
        max_uses=None,
        used_count=0,
        expire_at=None,
        is_active=True,
    ):
        coupon = CouponModel(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            min_order_amount=Decimal(min_order_amount),
            max_uses=max_uses,
            used_count=used_count,
            expire_at=expire_at,
            is_active=is_active,
        )
        db.add(coupon)
        db.commit()
        return coupon

    return _make


@pytest.fixture()
def lock_service():
    return FakeLockService()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def client(db, lock_service, notifier):
    from storefront.api.deps import get_lock_service, get_notifier
    from storefront.main import create_app

    app = create_app(create_tables=False)

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notifier] = lambda: notifier
    return TestClient(app)

