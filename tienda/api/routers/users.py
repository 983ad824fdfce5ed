# tienda/api/routers/users.py
from fastapi import APIRouter, Depends, Query, status

from tienda.api.routers.auth import get_service
from tienda.api.security import Principal, ensure_self_or, get_current_principal, require_permission
from tienda.domain.schemas.common import MessageOut, Page
from tienda.domain.schemas.user import (
    AdminUserUpdateIn,
    ChangePasswordIn,
    ProfileUpdateIn,
    UserOut,
    UserStatisticsOut,
)
from tienda.security.roles import Permission
from tienda.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])

can_view = require_permission(Permission.VIEW_USERS)
can_manage = require_permission(Permission.MANAGE_USERS)


# profile

@router.get("/profile", response_model=UserOut)
def get_profile(principal: Principal = Depends(get_current_principal), svc: UserService = Depends(get_service)):
    return svc.get_profile(principal.email)


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdateIn,
    principal: Principal = Depends(get_current_principal),
    svc: UserService = Depends(get_service),
):
    return svc.update_profile(principal.email, payload)


@router.post("/profile/change-password", response_model=MessageOut)
def change_password(
    payload: ChangePasswordIn,
    principal: Principal = Depends(get_current_principal),
    svc: UserService = Depends(get_service),
):
    svc.change_password(principal.email, payload.current_password, payload.new_password)
    return MessageOut(message="Contraseña cambiada exitosamente")


# administration, fixed paths before /users/{user_id}

@router.get("/users", response_model=Page[UserOut], dependencies=[Depends(can_view)])
def list_users(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    svc: UserService = Depends(get_service),
):
    return svc.list_users(page, size)


@router.get("/users/search", response_model=Page[UserOut], dependencies=[Depends(can_view)])
def search_users(
    term: str = Query(..., min_length=1),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    svc: UserService = Depends(get_service),
):
    return svc.search_users(term, page, size)


@router.get("/users/active", response_model=Page[UserOut], dependencies=[Depends(can_view)])
def list_active_users(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    svc: UserService = Depends(get_service),
):
    return svc.list_active_users(page, size)


@router.get("/users/by-role/{role_name}", response_model=Page[UserOut], dependencies=[Depends(can_view)])
def list_users_by_role(
    role_name: str,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    svc: UserService = Depends(get_service),
):
    return svc.list_users_by_role(role_name, page, size)


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: UserService = Depends(get_service),
):
    ensure_self_or(principal, user_id, Permission.VIEW_USERS)
    return svc.get_user(user_id)


@router.put("/users/{user_id}", response_model=UserOut, dependencies=[Depends(can_manage)])
def update_user(user_id: int, payload: AdminUserUpdateIn, svc: UserService = Depends(get_service)):
    return svc.update_user(user_id, payload)


@router.post("/users/{user_id}/activate", response_model=UserOut, dependencies=[Depends(can_manage)])
def activate_user(user_id: int, svc: UserService = Depends(get_service)):
    return svc.set_active(user_id, True)


@router.post("/users/{user_id}/deactivate", response_model=UserOut, dependencies=[Depends(can_manage)])
def deactivate_user(user_id: int, svc: UserService = Depends(get_service)):
    return svc.set_active(user_id, False)


@router.post("/users/{user_id}/unlock", response_model=UserOut, dependencies=[Depends(can_manage)])
def unlock_user(user_id: int, svc: UserService = Depends(get_service)):
    return svc.unlock_user(user_id)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(can_manage)])
def delete_user(user_id: int, svc: UserService = Depends(get_service)):
    svc.delete_user(user_id)


@router.post("/users/{user_id}/roles/{role_id}", response_model=UserOut, dependencies=[Depends(can_manage)])
def assign_role(user_id: int, role_id: int, svc: UserService = Depends(get_service)):
    return svc.assign_role(user_id, role_id)


@router.delete("/users/{user_id}/roles/{role_id}", response_model=UserOut, dependencies=[Depends(can_manage)])
def remove_role(user_id: int, role_id: int, svc: UserService = Depends(get_service)):
    return svc.remove_role(user_id, role_id)


@router.get(
    "/statistics",
    response_model=UserStatisticsOut,
    dependencies=[Depends(require_permission(Permission.VIEW_STATISTICS))],
)
def statistics(svc: UserService = Depends(get_service)):
    return svc.statistics()
