# tienda/api/routers/categories.py
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tienda.api.security import require_permission
from tienda.data.database import get_db
from tienda.data.models.category import CategoryModel
from tienda.domain.schemas.catalog import CategoryIn, CategoryOut
from tienda.security.roles import Permission
from tienda.services.category_service import CategoryService

router = APIRouter(prefix="/productos/categorias", tags=["categorias"])

can_edit = [Depends(require_permission(Permission.MANAGE_CATALOG))]


def get_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED, dependencies=can_edit)
def create_category(payload: CategoryIn, svc: CategoryService = Depends(get_service)):
    return svc.create_category(payload)


@router.get("", response_model=List[CategoryOut])
def list_categories(svc: CategoryService = Depends(get_service)):
    return svc.list_categories()


@router.get("/activas", response_model=List[CategoryOut])
def list_active(svc: CategoryService = Depends(get_service)):
    return svc.list_active()


@router.get("/raiz", response_model=List[CategoryOut])
def list_roots(activas: bool = Query(False), svc: CategoryService = Depends(get_service)):
    return svc.list_roots(only_active=activas)


@router.get("/buscar", response_model=List[CategoryOut])
def search(termino: str = Query(..., min_length=1), svc: CategoryService = Depends(get_service)):
    return svc.search(termino)


@router.get("/contar")
def count(svc: CategoryService = Depends(get_service)):
    return {
        "total": svc.count(),
        "activas": svc.count(CategoryModel.active.is_(True)),
        "destacadas": svc.count(CategoryModel.featured.is_(True)),
        "raiz": svc.count(CategoryModel.parent_id.is_(None)),
    }


@router.get("/slug/{slug}", response_model=CategoryOut)
def get_by_slug(slug: str, svc: CategoryService = Depends(get_service)):
    return svc.get_by_slug(slug)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, svc: CategoryService = Depends(get_service)):
    return svc.get_category(category_id)


@router.get("/{category_id}/subcategorias", response_model=List[CategoryOut])
def list_subcategories(category_id: int, activas: bool = Query(False), svc: CategoryService = Depends(get_service)):
    return svc.list_subcategories(category_id, only_active=activas)


@router.put("/{category_id}", response_model=CategoryOut, dependencies=can_edit)
def update_category(category_id: int, payload: CategoryIn, svc: CategoryService = Depends(get_service)):
    return svc.update_category(category_id, payload)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=can_edit)
def delete_category(category_id: int, svc: CategoryService = Depends(get_service)):
    svc.delete_category(category_id)


@router.patch("/{category_id}/activar", response_model=CategoryOut, dependencies=can_edit)
def activate(category_id: int, svc: CategoryService = Depends(get_service)):
    return svc.set_flag(category_id, "active", True)


@router.patch("/{category_id}/desactivar", response_model=CategoryOut, dependencies=can_edit)
def deactivate(category_id: int, svc: CategoryService = Depends(get_service)):
    return svc.set_flag(category_id, "active", False)


@router.patch("/{category_id}/destacada", response_model=CategoryOut, dependencies=can_edit)
def feature(category_id: int, svc: CategoryService = Depends(get_service)):
    return svc.set_flag(category_id, "featured", True)


@router.patch("/{category_id}/quitar-destacada", response_model=CategoryOut, dependencies=can_edit)
def unfeature(category_id: int, svc: CategoryService = Depends(get_service)):
    return svc.set_flag(category_id, "featured", False)
