# storefront/repos/product_repo.py
from decimal import Decimal
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel

_SORTS = {
    "newest": (ProductModel.created_at.desc(), ProductModel.id.desc()),
    "price-asc": (ProductModel.price.asc(), ProductModel.id.asc()),
    "price-desc": (ProductModel.price.desc(), ProductModel.id.asc()),
    "name": (ProductModel.name.asc(), ProductModel.id.asc()),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        # stock is a live value, never trust the identity map copy
        return self.db.get(ProductModel, product_id, populate_existing=True)

    def get_by_slug(self, slug: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.slug == slug)
        ).scalar_one_or_none()

    def list_products(
        self,
        search: str | None = None,
        category_id: int | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        featured: bool | None = None,
        sort: str = "newest",
        limit: int = 50,
        offset: int = 0,
    ) -> List[ProductModel]:
        query = select(ProductModel)

        if search:
            query = query.where(ProductModel.name.ilike(f"%{search}%"))
        if category_id is not None:
            query = query.where(ProductModel.category_id == category_id)
        if min_price is not None:
            query = query.where(ProductModel.price >= min_price)
        if max_price is not None:
            query = query.where(ProductModel.price <= max_price)
        if featured is not None:
            query = query.where(ProductModel.is_featured == featured)

        query = query.order_by(*_SORTS.get(sort, _SORTS["newest"]))
        return list(self.db.execute(query.limit(limit).offset(offset)).scalars().all())

    def list_categories(self) -> List[CategoryModel]:
        return list(
            self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars().all()
        )

    def get_category_by_slug(self, slug: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.slug == slug)
        ).scalar_one_or_none()

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        """Compare-and-swap: UPDATE products SET stock = stock - q WHERE id = ? AND stock >= q"""
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
        )
        return result.rowcount
