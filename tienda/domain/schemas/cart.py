# tienda/domain/schemas/cart.py
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ItemIn(BaseModel):
    """Schema para agregar un producto al carrito."""

    product_id: int = Field(..., gt=0, description="ID del producto (debe ser > 0)")
    product_name: str = Field(..., min_length=1, max_length=255, description="Nombre del producto")
    unit_price: Decimal = Field(
        ...,
        ge=Decimal("0.01"),
        max_digits=10,
        decimal_places=2,
        description="Precio unitario (max 8 enteros y 2 decimales)",
    )
    quantity: int = Field(..., ge=1, le=999, description="Cantidad (1..999)")


class CartItemOut(BaseModel):
    """Schema de un item del carrito (response)."""

    id: int
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema del carrito (response)."""

    id: int
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    active: bool
    total_quantity: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderLineOut(BaseModel):
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class CheckoutSummaryOut(BaseModel):
    """Pedido listo para enviarse por WhatsApp."""

    whatsapp_number: str
    message: str
    products: List[OrderLineOut]
    total: Decimal
    whatsapp_url: str


class FinalizeOut(BaseModel):
    whatsapp_url: str
