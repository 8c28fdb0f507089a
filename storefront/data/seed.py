# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import CategoryModel, CouponModel, ProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CATEGORIES = [
    {"name": "Keyboards", "slug": "keyboards"},
    {"name": "Accessories", "slug": "accessories"},
]

PRODUCTS = [
    {"name": "Keyboard", "slug": "keyboard", "price": Decimal("199.99"), "stock": 12, "category": "keyboards", "is_featured": True},
    {"name": "Mouse", "slug": "mouse", "price": Decimal("49.50"), "stock": 40, "category": "accessories", "is_featured": False},
    {"name": "Mouse Pad", "slug": "mouse-pad", "price": Decimal("9.99"), "stock": 3, "category": "accessories", "is_featured": False},
]

COUPONS = [
    {"code": "WELCOME10", "discount_type": "percentage", "discount_value": Decimal("10"), "min_order_amount": Decimal("20")},
    {"code": "FIVEOFF", "discount_type": "flat", "discount_value": Decimal("5"), "min_order_amount": Decimal("0"), "max_uses": 100},
]


def seed(db=None) -> bool:
    """Loads a demo shopper, catalog and coupons into an empty database. Returns False when data is already there."""
    own_session = db is None
    if own_session:
        init_db()
        db = SessionLocal()
    try:
        if db.query(ProductModel).first():
            logger.info("Database already seeded")
            return False

        db.add(UserModel(id=1, name="Demo Shopper"))

        categories = {c["slug"]: CategoryModel(**c) for c in CATEGORIES}
        db.add_all(categories.values())

        for p in PRODUCTS:
            data = dict(p)
            db.add(ProductModel(category=categories[data.pop("category")], **data))

        db.add_all(CouponModel(**c) for c in COUPONS)
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products and {len(COUPONS)} coupons")
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    seed()
