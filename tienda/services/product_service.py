# tienda/services/product_service.py
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.orm import Session

from tienda.data.models.product import ProductModel
from tienda.domain.errors import BusinessError, NotFoundError, ValidationError
from tienda.domain.schemas.catalog import (
    ProductFilter,
    ProductIn,
    ProductOut,
    ProductStatisticsOut,
)
from tienda.domain.schemas.common import Page
from tienda.repos.brand_repo import BrandRepo
from tienda.repos.category_repo import CategoryRepo
from tienda.repos.product_repo import LOW_STOCK, ON_OFFER, OUT_OF_STOCK, ProductRepo
from tienda.utils.clock import utcnow
from tienda.utils.logging import get_logger
from tienda.utils.text import slugify

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.categories = CategoryRepo(db)
        self.brands = BrandRepo(db)

    # commands

    def create_product(self, payload: ProductIn) -> ProductOut:
        logger.info(f"Creando producto {payload.code}")
        if self.repo.code_exists(payload.code):
            raise BusinessError(f"Ya existe un producto con el código {payload.code}", status_code=409)

        product = ProductModel(sold=0, views=0)
        self._apply(product, payload)
        self.repo.add_product(product)
        self.repo.commit()
        logger.info(f"Producto creado: {product.id}")
        return ProductOut.model_validate(product)

    def update_product(self, product_id: int, payload: ProductIn) -> ProductOut:
        product = self._by_id(product_id)
        if self.repo.code_exists(payload.code, exclude_id=product.id):
            raise BusinessError(f"Ya existe un producto con el código {payload.code}", status_code=409)

        self._apply(product, payload)
        self.repo.commit()
        logger.info(f"Producto actualizado: {product_id}")
        return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        product = self._by_id(product_id)
        self.repo.delete_product(product)
        self.repo.commit()
        logger.info(f"Producto eliminado: {product_id}")

    def set_flag(self, product_id: int, flag: str, value: bool) -> ProductOut:
        """flag is one of active / featured / is_new."""
        product = self._by_id(product_id)
        setattr(product, flag, value)
        self.repo.commit()
        logger.info(f"Producto {product_id}: {flag}={value}")
        return ProductOut.model_validate(product)

    def adjust_stock(self, product_id: int, delta: int) -> ProductOut:
        product = self._by_id(product_id)
        try:
            product.adjust_stock(delta)
        except ValueError as e:
            logger.warning(f"Ajuste de stock rechazado para producto {product_id}: stock {product.stock}, delta {delta}")
            raise BusinessError(str(e)) from e
        self.repo.commit()
        logger.info(f"Stock del producto {product_id} ajustado en {delta}, nuevo stock {product.stock}")
        return ProductOut.model_validate(product)

    # queries

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._by_id(product_id))

    def get_by_code(self, code: str) -> ProductOut:
        return self._found(self.repo.get_by_code(code))

    def get_by_sku(self, sku: str) -> ProductOut:
        return self._found(self.repo.get_by_sku(sku))

    def get_by_slug(self, slug: str) -> ProductOut:
        return self._found(self.repo.get_by_slug(slug))

    def list_products(self, page: int, size: int, *criteria) -> Page[ProductOut]:
        return self._to_page(*self.repo.page(page, size, *criteria), page, size)

    def list_active(self, page: int, size: int, active: bool = True) -> Page[ProductOut]:
        return self.list_products(page, size, ProductModel.active.is_(active))

    def search(self, text: str, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, ProductModel.active.is_(True), self.repo.search_criteria(text))

    def by_category(self, category_id: int, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, ProductModel.active.is_(True), ProductModel.category_id == category_id)

    def by_brand(self, brand_id: int, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, ProductModel.active.is_(True), ProductModel.brand_id == brand_id)

    def filter(self, f: ProductFilter, page: int, size: int) -> Page[ProductOut]:
        if f.min_price is not None and f.max_price is not None and f.min_price > f.max_price:
            raise ValidationError(
                "El precio mínimo no puede ser mayor al precio máximo",
                details={"precio_min": str(f.min_price), "precio_max": str(f.max_price)},
            )
        return self.list_products(page, size, *self.repo.filter_criteria(f))

    def offers(self, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, ProductModel.active.is_(True), ON_OFFER)

    def featured(self, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, ProductModel.active.is_(True), ProductModel.featured.is_(True))

    def new_arrivals(self, page: int, size: int) -> Page[ProductOut]:
        stmt = (
            select(ProductModel)
            .where(ProductModel.active.is_(True), ProductModel.is_new.is_(True))
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        )
        return self._to_page(*self.repo.page_ordered(stmt, page, size), page, size)

    def low_stock(self, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, LOW_STOCK)

    def out_of_stock(self, page: int, size: int) -> Page[ProductOut]:
        return self.list_products(page, size, OUT_OF_STOCK)

    def count(self, *criteria) -> int:
        return self.repo.count(*criteria)

    def statistics(self) -> ProductStatisticsOut:
        total = self.repo.count()
        active = self.repo.count(ProductModel.active.is_(True))
        prices = self.repo.price_summary()
        return ProductStatisticsOut(
            total_products=total,
            active_products=active,
            inactive_products=total - active,
            featured_products=self.repo.count(ProductModel.featured.is_(True)),
            new_products=self.repo.count(ProductModel.is_new.is_(True)),
            products_on_offer=self.repo.count(ON_OFFER),
            out_of_stock=self.repo.count(OUT_OF_STOCK),
            low_stock=self.repo.count(LOW_STOCK),
            total_categories=self.categories.count(),
            total_brands=self.brands.count(),
            inventory_value=_money(prices["inventory_value"]),
            average_price=_money(prices["average_price"]),
            min_price=_money(prices["min_price"]),
            max_price=_money(prices["max_price"]),
            total_sold=prices["total_sold"],
            total_views=prices["total_views"],
            products_by_category=self.repo.count_by_category(),
            products_by_brand=self.repo.count_by_brand(),
            generated_at=utcnow(),
        )

    # helpers

    def _apply(self, product: ProductModel, payload: ProductIn) -> None:
        if self.categories.get_category(payload.category_id) is None:
            raise NotFoundError(f"Categoría {payload.category_id} no encontrada")
        if payload.brand_id is not None and self.brands.get_brand(payload.brand_id) is None:
            raise NotFoundError(f"Marca {payload.brand_id} no encontrada")

        for field, value in payload.model_dump().items():
            setattr(product, field, value)
        product.slug = payload.slug or slugify(payload.name)

    def _by_id(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Producto {product_id} no encontrado")
        return product

    @staticmethod
    def _found(product: ProductModel | None) -> ProductOut:
        if product is None:
            raise NotFoundError("Producto no encontrado")
        return ProductOut.model_validate(product)

    @staticmethod
    def _to_page(products, total: int, page: int, size: int) -> Page[ProductOut]:
        return Page[ProductOut].of([ProductOut.model_validate(p) for p in products], page, size, total)


def _money(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
