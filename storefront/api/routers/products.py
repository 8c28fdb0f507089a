# storefront/api/routers/products.py
from decimal import Decimal
from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StoreError
from storefront.domain.schemas import CategoryOut, ProductOut
from storefront.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


@router.get("/products", response_model=List[ProductOut])
def list_products(
    search: str | None = Query(None, max_length=100),
    category: str | None = Query(None, description="Category slug"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    featured: bool | None = None,
    sort: Literal["newest", "price-asc", "price-desc", "name"] = "newest",
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return CatalogService(db).list_products(
        search=search,
        category_slug=category,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.get("/products/{slug}", response_model=ProductOut)
def get_product(slug: str, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).get_product(slug)
    except StoreError as e:
        raise http_error(e)


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return CatalogService(db).list_categories()
