# tienda/api/routers/carts.py
from functools import lru_cache

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tienda.api.security import Principal, ensure_self_or, get_current_principal
from tienda.data.database import get_db
from tienda.domain.schemas.cart import CartOut, CheckoutSummaryOut, FinalizeOut, ItemIn
from tienda.security.roles import Permission
from tienda.services.cart_service import CartService
from tienda.services.checkout_formatter import CheckoutFormatter
from tienda.utils.settings import checkout_config

router = APIRouter(prefix="/carrito", tags=["carrito"])


@lru_cache
def get_formatter() -> CheckoutFormatter:
    return CheckoutFormatter(checkout_config())


def get_service(
    db: Session = Depends(get_db),
    formatter: CheckoutFormatter = Depends(get_formatter),
) -> CartService:
    return CartService(db=db, formatter=formatter)


def cart_owner(user_id: int, principal: Principal = Depends(get_current_principal)) -> int:
    """Path user id, once the caller is known to own it (or may manage any cart)."""
    ensure_self_or(principal, user_id, Permission.MANAGE_ANY_CART)
    return user_id


@router.get("/usuario/{user_id}", response_model=CartOut)
def get_cart(user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return svc.get_or_create_active_cart(user_id)


@router.post("/usuario/{user_id}", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def create_cart(user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return svc.create_new_cart(user_id)


@router.post("/usuario/{user_id}/items", response_model=CartOut)
def add_item(payload: ItemIn, user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return svc.add_item(
        user_id=user_id,
        product_id=payload.product_id,
        product_name=payload.product_name,
        unit_price=payload.unit_price,
        quantity=payload.quantity,
    )


@router.put("/usuario/{user_id}/items/{item_id}", response_model=CartOut)
def update_quantity(
    item_id: int,
    cantidad: int = Query(..., ge=1, le=999, description="Nueva cantidad"),
    user_id: int = Depends(cart_owner),
    svc: CartService = Depends(get_service),
):
    return svc.update_quantity(user_id, item_id, cantidad)


@router.delete("/usuario/{user_id}/items/{item_id}", response_model=CartOut)
def remove_item(item_id: int, user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return svc.remove_item(user_id, item_id)


@router.delete("/usuario/{user_id}", response_model=CartOut)
def clear_cart(user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return svc.clear_cart(user_id)


@router.get("/usuario/{user_id}/pedido-whatsapp", response_model=CheckoutSummaryOut)
def checkout_summary(user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return svc.checkout_summary(user_id)


@router.post("/usuario/{user_id}/finalizar-compra", response_model=FinalizeOut)
def finalize_checkout(user_id: int = Depends(cart_owner), svc: CartService = Depends(get_service)):
    return FinalizeOut(whatsapp_url=svc.finalize_checkout(user_id))
