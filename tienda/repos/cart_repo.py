# tienda/repos/cart_repo.py
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from tienda.data.models.cart import CartModel
from tienda.data.models.cart_item import CartItemModel
from tienda.utils.clock import utcnow


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    # carts

    def get_active_cart_by_user(self, user_id: int) -> CartModel | None:
        stmt = select(CartModel).where(CartModel.user_id == user_id, CartModel.active.is_(True))
        return self.db.execute(stmt).scalars().first()

    def add_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def deactivate_carts_of_user(self, user_id: int) -> int:
        stmt = (
            update(CartModel)
            .where(CartModel.user_id == user_id, CartModel.active.is_(True))
            .values(active=False, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        # flushed before the insert of the next active cart
        result = self.db.execute(stmt)
        self.db.flush()
        return result.rowcount

    def delete_inactive_before(self, cutoff: datetime) -> int:
        ids = select(CartModel.id).where(CartModel.active.is_(False), CartModel.updated_at < cutoff)
        # items first, sqlite does not enforce the FK cascade by default
        self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(
            delete(CartModel)
            .where(CartModel.active.is_(False), CartModel.updated_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # items

    def get_item(self, item_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def find_item_by_product(self, cart_id: int, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.cart_id == cart_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalars().first()

    # transaction

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
