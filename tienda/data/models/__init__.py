# every model is imported here so SQLAlchemy registers it in Base.metadata
from tienda.data.models.cart import CartModel
from tienda.data.models.cart_item import CartItemModel
from tienda.data.models.role import RoleModel, user_roles
from tienda.data.models.user import UserModel
from tienda.data.models.recovery_token import RecoveryTokenModel, TokenKind
from tienda.data.models.category import CategoryModel
from tienda.data.models.brand import BrandModel
from tienda.data.models.product import ProductModel

CART_TABLES = [CartModel.__table__, CartItemModel.__table__]
USER_TABLES = [RoleModel.__table__, UserModel.__table__, user_roles, RecoveryTokenModel.__table__]
CATALOG_TABLES = [CategoryModel.__table__, BrandModel.__table__, ProductModel.__table__]

__all__ = [
    "CartModel",
    "CartItemModel",
    "RoleModel",
    "UserModel",
    "RecoveryTokenModel",
    "TokenKind",
    "CategoryModel",
    "BrandModel",
    "ProductModel",
    "user_roles",
    "CART_TABLES",
    "USER_TABLES",
    "CATALOG_TABLES",
]
