# tienda/api/routers/products.py
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tienda.api.params import PageParams
from tienda.api.security import require_permission
from tienda.data.database import get_db
from tienda.data.models.product import ProductModel
from tienda.domain.schemas.catalog import (
    ProductFilter,
    ProductIn,
    ProductOut,
    ProductStatisticsOut,
    StockAdjustIn,
)
from tienda.domain.schemas.common import Page
from tienda.repos.product_repo import LOW_STOCK, ON_OFFER, OUT_OF_STOCK
from tienda.security.roles import Permission
from tienda.services.product_service import ProductService

router = APIRouter(prefix="/productos", tags=["productos"])
public_router = APIRouter(prefix="/productos/public", tags=["productos"])
statistics_router = APIRouter(prefix="/productos/estadisticas", tags=["estadisticas"])

can_edit = [Depends(require_permission(Permission.MANAGE_CATALOG))]


def get_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


# =====================================================
# storefront, no token
# =====================================================

@public_router.get("", response_model=Page[ProductOut])
def public_list(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.list_active(p.page, p.size)


@public_router.get("/destacados", response_model=Page[ProductOut])
def public_featured(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.featured(p.page, p.size)


@public_router.get("/ofertas", response_model=Page[ProductOut])
def public_offers(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.offers(p.page, p.size)


@public_router.get("/{product_id}", response_model=ProductOut)
def public_get(product_id: int, svc: ProductService = Depends(get_service)):
    return svc.get_product(product_id)


@statistics_router.get("", response_model=ProductStatisticsOut)
def product_statistics(svc: ProductService = Depends(get_service)):
    return svc.statistics()


# =====================================================
# catalog
# =====================================================

@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED, dependencies=can_edit)
def create_product(payload: ProductIn, svc: ProductService = Depends(get_service)):
    return svc.create_product(payload)


@router.get("", response_model=Page[ProductOut])
def list_products(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.list_products(p.page, p.size)


@router.get("/activos", response_model=Page[ProductOut])
def list_active(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.list_active(p.page, p.size)


@router.get("/inactivos", response_model=Page[ProductOut])
def list_inactive(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.list_active(p.page, p.size, active=False)


@router.get("/buscar", response_model=Page[ProductOut])
def search(
    texto: str = Query(..., min_length=1),
    p: PageParams = Depends(),
    svc: ProductService = Depends(get_service),
):
    return svc.search(texto, p.page, p.size)


@router.get("/filtros", response_model=Page[ProductOut])
def filter_products(
    texto: str | None = Query(None),
    categorias: List[int] | None = Query(None),
    marcas: List[int] | None = Query(None),
    precio_min: Decimal | None = Query(None, ge=0),
    precio_max: Decimal | None = Query(None, ge=0),
    destacado: bool | None = Query(None),
    nuevo: bool | None = Query(None),
    en_oferta: bool | None = Query(None),
    con_stock: bool | None = Query(None),
    p: PageParams = Depends(),
    svc: ProductService = Depends(get_service),
):
    f = ProductFilter(
        text=texto,
        category_ids=categorias,
        brand_ids=marcas,
        min_price=precio_min,
        max_price=precio_max,
        featured=destacado,
        is_new=nuevo,
        on_offer=en_oferta,
        in_stock=con_stock,
    )
    return svc.filter(f, p.page, p.size)


@router.get("/ofertas", response_model=Page[ProductOut])
def offers(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.offers(p.page, p.size)


@router.get("/destacados", response_model=Page[ProductOut])
def featured(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.featured(p.page, p.size)


@router.get("/nuevos", response_model=Page[ProductOut])
def new_arrivals(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.new_arrivals(p.page, p.size)


@router.get("/stock-bajo", response_model=Page[ProductOut], dependencies=can_edit)
def low_stock(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.low_stock(p.page, p.size)


@router.get("/sin-stock", response_model=Page[ProductOut], dependencies=can_edit)
def out_of_stock(p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.out_of_stock(p.page, p.size)


@router.get("/contar")
def count(svc: ProductService = Depends(get_service)):
    return {
        "total": svc.count(),
        "activos": svc.count(ProductModel.active.is_(True)),
        "destacados": svc.count(ProductModel.featured.is_(True)),
        "nuevos": svc.count(ProductModel.is_new.is_(True)),
        "ofertas": svc.count(ON_OFFER),
        "sin_stock": svc.count(OUT_OF_STOCK),
        "stock_bajo": svc.count(LOW_STOCK),
    }


@router.get("/categoria/{category_id}", response_model=Page[ProductOut])
def by_category(category_id: int, p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.by_category(category_id, p.page, p.size)


@router.get("/marca/{brand_id}", response_model=Page[ProductOut])
def by_brand(brand_id: int, p: PageParams = Depends(), svc: ProductService = Depends(get_service)):
    return svc.by_brand(brand_id, p.page, p.size)


@router.get("/codigo/{code}", response_model=ProductOut)
def get_by_code(code: str, svc: ProductService = Depends(get_service)):
    return svc.get_by_code(code)


@router.get("/sku/{sku}", response_model=ProductOut)
def get_by_sku(sku: str, svc: ProductService = Depends(get_service)):
    return svc.get_by_sku(sku)


@router.get("/slug/{slug}", response_model=ProductOut)
def get_by_slug(slug: str, svc: ProductService = Depends(get_service)):
    return svc.get_by_slug(slug)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: ProductService = Depends(get_service)):
    return svc.get_product(product_id)


@router.put("/{product_id}", response_model=ProductOut, dependencies=can_edit)
def update_product(product_id: int, payload: ProductIn, svc: ProductService = Depends(get_service)):
    return svc.update_product(product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=can_edit)
def delete_product(product_id: int, svc: ProductService = Depends(get_service)):
    svc.delete_product(product_id)


@router.patch("/{product_id}/stock", response_model=ProductOut, dependencies=can_edit)
def adjust_stock(product_id: int, payload: StockAdjustIn, svc: ProductService = Depends(get_service)):
    return svc.adjust_stock(product_id, payload.delta)


# flag toggles: path suffix -> (column, value)
FLAG_ROUTES = {
    "activar": ("active", True),
    "desactivar": ("active", False),
    "destacado": ("featured", True),
    "quitar-destacado": ("featured", False),
    "nuevo": ("is_new", True),
    "quitar-nuevo": ("is_new", False),
}


def _flag_endpoint(flag: str, value: bool):
    def endpoint(product_id: int, svc: ProductService = Depends(get_service)):
        return svc.set_flag(product_id, flag, value)

    return endpoint


for suffix, (flag, value) in FLAG_ROUTES.items():
    router.add_api_route(
        f"/{{product_id}}/{suffix}",
        _flag_endpoint(flag, value),
        methods=["PATCH"],
        response_model=ProductOut,
        dependencies=can_edit,
        name=f"product_{flag}_{value}".lower(),
    )
