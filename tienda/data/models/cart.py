# tienda/data/models/cart.py
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, text
from sqlalchemy.orm import relationship

from tienda.data.database import Base
from tienda.utils.clock import utcnow


class CartModel(Base):
    __tablename__ = "carritos"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)

    total = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )

    # at most one active cart per user, enforced by the store as well
    __table_args__ = (
        Index(
            "uq_carritos_usuario_activo",
            "user_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
    )

    def recalculate_total(self) -> Decimal:
        self.total = sum((i.subtotal for i in self.items), Decimal("0.00"))
        return self.total

    def clear(self) -> None:
        self.items.clear()
        self.total = Decimal("0.00")

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.items)
