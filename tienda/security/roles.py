# tienda/security/roles.py
import enum
from typing import FrozenSet, Iterable


class RoleName(str, enum.Enum):
    ADMIN = "ADMIN"
    CLIENTE = "CLIENTE"
    GESTOR = "GESTOR"
    VENDEDOR = "VENDEDOR"

    @property
    def description(self) -> str:
        return ROLE_DESCRIPTIONS[self]


ROLE_DESCRIPTIONS = {
    RoleName.ADMIN: "Administrador del sistema",
    RoleName.CLIENTE: "Cliente de la tienda",
    RoleName.GESTOR: "Gestor de usuarios y catálogo",
    RoleName.VENDEDOR: "Vendedor, mantiene el catálogo",
}


class Permission(str, enum.Enum):
    MANAGE_OWN_CART = "MANAGE_OWN_CART"
    MANAGE_ANY_CART = "MANAGE_ANY_CART"
    VIEW_USERS = "VIEW_USERS"
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_ROLES = "MANAGE_ROLES"
    VIEW_STATISTICS = "VIEW_STATISTICS"
    MANAGE_CATALOG = "MANAGE_CATALOG"


def permissions_for(role: RoleName) -> FrozenSet[Permission]:
    match role:
        case RoleName.ADMIN:
            return frozenset(Permission)
        case RoleName.GESTOR:
            return frozenset({Permission.MANAGE_OWN_CART, Permission.VIEW_USERS, Permission.MANAGE_CATALOG})
        case RoleName.VENDEDOR:
            return frozenset({Permission.MANAGE_OWN_CART, Permission.MANAGE_CATALOG})
        case RoleName.CLIENTE:
            return frozenset({Permission.MANAGE_OWN_CART})
    raise ValueError(f"Rol sin permisos definidos: {role!r}")


def parse_roles(names: Iterable[str]) -> FrozenSet[RoleName]:
    """Known role names only; anything else grants nothing."""
    parsed = set()
    for name in names:
        try:
            parsed.add(RoleName(str(name).removeprefix("ROLE_")))
        except ValueError:
            continue
    return frozenset(parsed)
