# tienda/data/models/cart_item.py
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship, validates

from tienda.data.database import Base
from tienda.utils.clock import utcnow


class CartItemModel(Base):
    __tablename__ = "items_carrito"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carritos.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)

    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    cart = relationship("CartModel", back_populates="items")

    @validates("unit_price", "quantity")
    def _recalculate_on_change(self, key, value):
        # subtotal follows every assignment of price or quantity
        price = value if key == "unit_price" else self.unit_price
        quantity = value if key == "quantity" else self.quantity
        if price is not None and quantity is not None:
            self.subtotal = Decimal(str(price)) * quantity
        return value

    def change_quantity(self, quantity: int) -> None:
        self.quantity = quantity
