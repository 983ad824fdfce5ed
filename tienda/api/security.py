# tienda/api/security.py
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Tuple

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tienda.domain.errors import AuthError, ForbiddenError
from tienda.security.roles import Permission, RoleName, parse_roles, permissions_for
from tienda.security.tokens import TokenService
from tienda.utils.settings import jwt_config

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, built from a verified access token."""

    email: str
    user_id: int | None
    roles: FrozenSet[RoleName]
    role_names: Tuple[str, ...] = ()

    @property
    def permissions(self) -> FrozenSet[Permission]:
        granted = set()
        for role in self.roles:
            granted |= permissions_for(role)
        return frozenset(granted)

    def can(self, permission: Permission) -> bool:
        return permission in self.permissions

    def is_user(self, user_id: int) -> bool:
        return self.user_id is not None and self.user_id == user_id


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(jwt_config())


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthError("Token JWT requerido")
    claims = tokens.verify_access_token(credentials.credentials)
    return Principal(
        email=claims.subject,
        user_id=claims.user_id,
        roles=parse_roles(claims.roles),
        role_names=claims.roles,
    )


def require_permission(permission: Permission):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(permission):
            raise ForbiddenError("No tiene permisos para realizar esta operación")
        return principal

    return dependency


def ensure_self_or(principal: Principal, user_id: int, permission: Permission) -> None:
    if not principal.is_user(user_id) and not principal.can(permission):
        raise ForbiddenError("No tiene permisos sobre los recursos de otro usuario")
