# storefront/repos/cart_repo.py
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_line(self, line_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, line_id)

    def get_line_for_product(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_lines(self, user_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .options(joinedload(CartItemModel.product))
                .where(CartItemModel.user_id == user_id)
                .order_by(CartItemModel.id)
                .execution_options(populate_existing=True)
            ).scalars().all()
        )

    def add_line(self, line: CartItemModel) -> CartItemModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartItemModel) -> None:
        self.db.delete(line)
        self.db.flush()

    def clear(self, user_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.user_id == user_id)
        )
        return result.rowcount

    def get_lines_over_stock(self) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .join(ProductModel, CartItemModel.product_id == ProductModel.id)
                .options(joinedload(CartItemModel.product))
                .where(CartItemModel.quantity > ProductModel.stock)
            ).scalars().all()
        )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
