# tienda/domain/schemas/catalog.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CategoryIn(BaseModel):
    """Schema para crear o actualizar una categoria."""

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(None, max_length=500)
    image: str | None = Field(None, max_length=200)
    icon: str | None = Field(None, max_length=200)
    active: bool = True
    featured: bool = False
    sort_order: int = Field(0, ge=0)
    slug: str | None = Field(None, max_length=200)
    parent_id: int | None = Field(None, gt=0, description="ID de la categoria padre")


class CategoryOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    image: str | None = None
    icon: str | None = None
    active: bool
    featured: bool
    sort_order: int
    slug: str | None = None
    parent_id: int | None = None
    is_root: bool
    level: int
    full_path: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BrandIn(BaseModel):
    """Schema para crear o actualizar una marca."""

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(None, max_length=500)
    logo: str | None = Field(None, max_length=200)
    website: str | None = Field(None, max_length=200)
    country: str | None = Field(None, max_length=100)
    active: bool = True
    featured: bool = False
    sort_order: int = Field(0, ge=0)
    slug: str | None = Field(None, max_length=200)


class BrandOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    logo: str | None = None
    website: str | None = None
    country: str | None = None
    active: bool
    featured: bool
    sort_order: int
    slug: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductIn(BaseModel):
    """Schema para crear o actualizar un producto."""

    code: str = Field(..., min_length=1, max_length=50, description="Codigo unico")
    name: str = Field(..., min_length=2, max_length=200)
    description: str | None = Field(None, max_length=1000)
    long_description: str | None = Field(None, max_length=2000)
    price: Decimal = Field(..., ge=Decimal("0.01"), max_digits=10, decimal_places=2)
    offer_price: Decimal | None = Field(None, ge=Decimal("0.01"), max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    active: bool = True
    featured: bool = False
    is_new: bool = True
    sku: str | None = Field(None, max_length=100)
    color: str | None = Field(None, max_length=50)
    material: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=50)
    slug: str | None = Field(None, max_length=200)
    category_id: int = Field(..., gt=0)
    brand_id: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def offer_below_price(self):
        if self.offer_price is not None and self.offer_price >= self.price:
            raise ValueError("El precio de oferta debe ser menor al precio")
        return self


class ProductOut(BaseModel):
    id: int
    code: str
    name: str
    description: str | None = None
    long_description: str | None = None
    price: Decimal
    offer_price: Decimal | None = None
    final_price: Decimal
    on_offer: bool
    discount: Decimal
    discount_percentage: Decimal
    stock: int
    min_stock: int
    stock_status: str
    available: bool
    active: bool
    featured: bool
    is_new: bool
    sku: str | None = None
    color: str | None = None
    material: str | None = None
    size: str | None = None
    sold: int
    views: int
    slug: str | None = None
    category_id: int
    brand_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class StockAdjustIn(BaseModel):
    delta: int = Field(..., description="Unidades a sumar (positivo) o restar (negativo)")


class ProductFilter(BaseModel):
    """Filtros combinables del listado de productos."""

    text: str | None = None
    category_ids: List[int] | None = None
    brand_ids: List[int] | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)
    featured: bool | None = None
    is_new: bool | None = None
    on_offer: bool | None = None
    in_stock: bool | None = None
    active: bool | None = True


class ProductStatisticsOut(BaseModel):
    total_products: int
    active_products: int
    inactive_products: int
    featured_products: int
    new_products: int
    products_on_offer: int
    out_of_stock: int
    low_stock: int
    total_categories: int
    total_brands: int
    inventory_value: Decimal
    average_price: Decimal
    min_price: Decimal
    max_price: Decimal
    total_sold: int
    total_views: int
    products_by_category: Dict[str, int]
    products_by_brand: Dict[str, int]
    generated_at: datetime
