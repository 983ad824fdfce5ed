# tienda/repos/product_repo.py
from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.orm import Session

from tienda.data.models.brand import BrandModel
from tienda.data.models.category import CategoryModel
from tienda.data.models.product import ProductModel
from tienda.domain.schemas.catalog import ProductFilter
from tienda.repos.pagination import paginate

ON_OFFER = and_(ProductModel.offer_price.is_not(None), ProductModel.offer_price < ProductModel.price)
OUT_OF_STOCK = ProductModel.stock <= 0
LOW_STOCK = and_(ProductModel.stock > 0, ProductModel.stock <= ProductModel.min_stock)


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def _first(self, *criteria) -> ProductModel | None:
        return self.db.execute(select(ProductModel).where(*criteria)).scalars().first()

    def get_by_code(self, code: str) -> ProductModel | None:
        return self._first(ProductModel.code == code)

    def get_by_sku(self, sku: str) -> ProductModel | None:
        return self._first(ProductModel.sku == sku)

    def get_by_slug(self, slug: str) -> ProductModel | None:
        return self._first(ProductModel.slug == slug)

    def code_exists(self, code: str, exclude_id: int | None = None) -> bool:
        product = self.get_by_code(code)
        return product is not None and product.id != exclude_id

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)

    # listings

    def page(self, page: int, size: int, *criteria) -> Tuple[List[ProductModel], int]:
        stmt = select(ProductModel).where(*criteria).order_by(ProductModel.id)
        return paginate(self.db, stmt, page, size)

    def page_ordered(self, stmt: Select, page: int, size: int) -> Tuple[List[ProductModel], int]:
        return paginate(self.db, stmt, page, size)

    def search_criteria(self, text: str):
        pattern = f"%{text.strip().lower()}%"
        return or_(
            func.lower(ProductModel.name).like(pattern),
            func.lower(ProductModel.description).like(pattern),
            func.lower(ProductModel.code).like(pattern),
        )

    def filter_criteria(self, f: ProductFilter) -> list:
        criteria = []
        if f.text:
            criteria.append(self.search_criteria(f.text))
        if f.category_ids:
            criteria.append(ProductModel.category_id.in_(f.category_ids))
        if f.brand_ids:
            criteria.append(ProductModel.brand_id.in_(f.brand_ids))
        if f.min_price is not None:
            criteria.append(ProductModel.price >= f.min_price)
        if f.max_price is not None:
            criteria.append(ProductModel.price <= f.max_price)
        if f.featured is not None:
            criteria.append(ProductModel.featured.is_(f.featured))
        if f.is_new is not None:
            criteria.append(ProductModel.is_new.is_(f.is_new))
        if f.on_offer is not None:
            criteria.append(ON_OFFER if f.on_offer else ~ON_OFFER)
        if f.in_stock is not None:
            criteria.append(ProductModel.stock > 0 if f.in_stock else OUT_OF_STOCK)
        if f.active is not None:
            criteria.append(ProductModel.active.is_(f.active))
        return criteria

    # statistics

    def count(self, *criteria) -> int:
        return self.db.execute(select(func.count(ProductModel.id)).where(*criteria)).scalar_one()

    def price_summary(self) -> Dict[str, Decimal | int]:
        row = self.db.execute(
            select(
                func.coalesce(func.sum(ProductModel.price * ProductModel.stock), 0),
                func.coalesce(func.avg(ProductModel.price), 0),
                func.coalesce(func.min(ProductModel.price), 0),
                func.coalesce(func.max(ProductModel.price), 0),
                func.coalesce(func.sum(ProductModel.sold), 0),
                func.coalesce(func.sum(ProductModel.views), 0),
            )
        ).one()
        inventory, average, minimum, maximum, sold, views = row
        return {
            "inventory_value": Decimal(str(inventory)),
            "average_price": Decimal(str(average)),
            "min_price": Decimal(str(minimum)),
            "max_price": Decimal(str(maximum)),
            "total_sold": int(sold),
            "total_views": int(views),
        }

    def count_by_category(self) -> Dict[str, int]:
        stmt = (
            select(CategoryModel.name, func.count(ProductModel.id))
            .join(ProductModel, ProductModel.category_id == CategoryModel.id)
            .group_by(CategoryModel.name)
        )
        return {name: count for name, count in self.db.execute(stmt).all()}

    def count_by_brand(self) -> Dict[str, int]:
        stmt = (
            select(BrandModel.name, func.count(ProductModel.id))
            .join(ProductModel, ProductModel.brand_id == BrandModel.id)
            .group_by(BrandModel.name)
        )
        return {name: count for name, count in self.db.execute(stmt).all()}

    def commit(self) -> None:
        self.db.commit()
