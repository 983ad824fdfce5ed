# tienda/data/models/product.py
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from tienda.data.database import Base
from tienda.utils.clock import utcnow


class ProductModel(Base):
    __tablename__ = "productos"

    id = Column(Integer, primary_key=True)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(1000))
    long_description = Column(String(2000))

    price = Column(Numeric(10, 2), nullable=False)
    offer_price = Column(Numeric(10, 2))
    stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=0)

    active = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    is_new = Column(Boolean, nullable=False, default=True)

    sku = Column(String(100), index=True)
    color = Column(String(50))
    material = Column(String(50))
    size = Column(String(50))

    sold = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    slug = Column(String(200), index=True)

    category_id = Column(Integer, ForeignKey("categorias.id"), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("marcas.id"), index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    category = relationship("CategoryModel", back_populates="products")
    brand = relationship("BrandModel", back_populates="products")

    @property
    def on_offer(self) -> bool:
        return self.offer_price is not None and self.offer_price < self.price

    @property
    def final_price(self) -> Decimal:
        return self.offer_price if self.on_offer else self.price

    @property
    def discount(self) -> Decimal:
        if not self.on_offer:
            return Decimal("0.00")
        return self.price - self.offer_price

    @property
    def discount_percentage(self) -> Decimal:
        if not self.on_offer:
            return Decimal("0.00")
        ratio = (self.price - self.offer_price) / self.price
        return (ratio * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def stock_status(self) -> str:
        if self.stock <= 0:
            return "AGOTADO"
        if self.stock <= self.min_stock:
            return "BAJO_STOCK"
        return "DISPONIBLE"

    @property
    def available(self) -> bool:
        return bool(self.active and self.stock > 0)

    def adjust_stock(self, delta: int) -> None:
        if self.stock + delta < 0:
            raise ValueError("Stock insuficiente")
        self.stock += delta
