# storefront/services/catalog_service.py
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import ProductNotFound
from storefront.repos.product_repo import ProductRepo


class CatalogService:
    """Read-only product and category queries for the shop pages."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(
        self,
        search: str | None = None,
        category_slug: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        featured: bool | None = None,
        sort: str = "newest",
        limit: int = 50,
        offset: int = 0,
    ) -> List[ProductModel]:
        category_id = None
        if category_slug:
            category = self.repo.get_category_by_slug(category_slug)
            if not category:
                return []
            category_id = category.id

        return self.repo.list_products(
            search=search,
            category_id=category_id,
            min_price=min_price,
            max_price=max_price,
            featured=featured,
            sort=sort,
            limit=limit,
            offset=offset,
        )

    def get_product(self, slug: str) -> ProductModel:
        product = self.repo.get_by_slug(slug)
        if not product:
            raise ProductNotFound("Product does not exist", slug=slug)
        return product

    def list_categories(self) -> List[CategoryModel]:
        return self.repo.list_categories()
