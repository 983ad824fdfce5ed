# tienda/api/routers/roles.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tienda.api.security import require_permission
from tienda.data.database import get_db
from tienda.domain.schemas.user import RoleOut, RoleUpdateIn
from tienda.security.roles import Permission
from tienda.services.role_service import RoleService

router = APIRouter(prefix="/users/roles", tags=["roles"])


def get_service(db: Session = Depends(get_db)) -> RoleService:
    return RoleService(db)


@router.get("", response_model=List[RoleOut], dependencies=[Depends(require_permission(Permission.VIEW_USERS))])
def list_roles(svc: RoleService = Depends(get_service)):
    return svc.list_roles()


@router.get("/{role_id}", response_model=RoleOut, dependencies=[Depends(require_permission(Permission.VIEW_USERS))])
def get_role(role_id: int, svc: RoleService = Depends(get_service)):
    return svc.get_role(role_id)


@router.put("/{role_id}", response_model=RoleOut, dependencies=[Depends(require_permission(Permission.MANAGE_ROLES))])
def update_role(role_id: int, payload: RoleUpdateIn, svc: RoleService = Depends(get_service)):
    return svc.update_role(role_id, payload)
