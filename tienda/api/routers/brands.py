# tienda/api/routers/brands.py
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tienda.api.security import require_permission
from tienda.data.database import get_db
from tienda.data.models.brand import BrandModel
from tienda.domain.schemas.catalog import BrandIn, BrandOut
from tienda.security.roles import Permission
from tienda.services.brand_service import BrandService

router = APIRouter(prefix="/productos/marcas", tags=["marcas"])

can_edit = [Depends(require_permission(Permission.MANAGE_CATALOG))]


def get_service(db: Session = Depends(get_db)) -> BrandService:
    return BrandService(db)


@router.post("", response_model=BrandOut, status_code=status.HTTP_201_CREATED, dependencies=can_edit)
def create_brand(payload: BrandIn, svc: BrandService = Depends(get_service)):
    return svc.create_brand(payload)


@router.get("", response_model=List[BrandOut])
def list_brands(svc: BrandService = Depends(get_service)):
    return svc.list_brands()


@router.get("/activas", response_model=List[BrandOut])
def list_active(svc: BrandService = Depends(get_service)):
    return svc.list_active()


@router.get("/buscar", response_model=List[BrandOut])
def search(termino: str = Query(..., min_length=1), svc: BrandService = Depends(get_service)):
    return svc.search(termino)


@router.get("/pais/{country}", response_model=List[BrandOut])
def by_country(country: str, svc: BrandService = Depends(get_service)):
    return svc.by_country(country)


@router.get("/contar")
def count(svc: BrandService = Depends(get_service)):
    return {
        "total": svc.count(),
        "activas": svc.count(BrandModel.active.is_(True)),
        "destacadas": svc.count(BrandModel.featured.is_(True)),
    }


@router.get("/slug/{slug}", response_model=BrandOut)
def get_by_slug(slug: str, svc: BrandService = Depends(get_service)):
    return svc.get_by_slug(slug)


@router.get("/{brand_id}", response_model=BrandOut)
def get_brand(brand_id: int, svc: BrandService = Depends(get_service)):
    return svc.get_brand(brand_id)


@router.put("/{brand_id}", response_model=BrandOut, dependencies=can_edit)
def update_brand(brand_id: int, payload: BrandIn, svc: BrandService = Depends(get_service)):
    return svc.update_brand(brand_id, payload)


@router.delete("/{brand_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=can_edit)
def delete_brand(brand_id: int, svc: BrandService = Depends(get_service)):
    svc.delete_brand(brand_id)


@router.patch("/{brand_id}/activar", response_model=BrandOut, dependencies=can_edit)
def activate(brand_id: int, svc: BrandService = Depends(get_service)):
    return svc.set_flag(brand_id, "active", True)


@router.patch("/{brand_id}/desactivar", response_model=BrandOut, dependencies=can_edit)
def deactivate(brand_id: int, svc: BrandService = Depends(get_service)):
    return svc.set_flag(brand_id, "active", False)


@router.patch("/{brand_id}/destacada", response_model=BrandOut, dependencies=can_edit)
def feature(brand_id: int, svc: BrandService = Depends(get_service)):
    return svc.set_flag(brand_id, "featured", True)


@router.patch("/{brand_id}/quitar-destacada", response_model=BrandOut, dependencies=can_edit)
def unfeature(brand_id: int, svc: BrandService = Depends(get_service)):
    return svc.set_flag(brand_id, "featured", False)
