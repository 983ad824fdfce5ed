# tienda/data/models/category.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from tienda.data.database import Base
from tienda.utils.clock import utcnow


class CategoryModel(Base):
    __tablename__ = "categorias"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(500))
    image = Column(String(200))
    icon = Column(String(200))
    active = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    slug = Column(String(200), index=True)

    parent_id = Column(Integer, ForeignKey("categorias.id"))

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    parent = relationship("CategoryModel", remote_side=[id], back_populates="children")
    children = relationship("CategoryModel", back_populates="parent")
    products = relationship("ProductModel", back_populates="category")

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def level(self) -> int:
        return 0 if self.parent is None else self.parent.level + 1

    @property
    def full_path(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.full_path} > {self.name}"

    @property
    def can_be_deleted(self) -> bool:
        return not self.children and not self.products
