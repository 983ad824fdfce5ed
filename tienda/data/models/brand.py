# tienda/data/models/brand.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from tienda.data.database import Base
from tienda.utils.clock import utcnow


class BrandModel(Base):
    __tablename__ = "marcas"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(500))
    logo = Column(String(200))
    website = Column(String(200))
    country = Column(String(100), index=True)
    active = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    slug = Column(String(200), index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    products = relationship("ProductModel", back_populates="brand")

    @property
    def can_be_deleted(self) -> bool:
        return not self.products
