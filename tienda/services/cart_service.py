# tienda/services/cart_service.py
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tienda.data.models.cart import CartModel
from tienda.data.models.cart_item import CartItemModel
from tienda.domain.errors import BusinessError, NotFoundError
from tienda.domain.schemas.cart import CartOut, CheckoutSummaryOut
from tienda.repos.cart_repo import CartRepo
from tienda.services.checkout_formatter import CheckoutFormatter
from tienda.utils.clock import utcnow
from tienda.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Casos de uso del carrito.
    Cada operacion es una transaccion; el total se recalcula tras cada cambio.
    Un usuario tiene como maximo un carrito activo.
    """

    def __init__(self, db: Session, formatter: CheckoutFormatter):
        self.repo = CartRepo(db)
        self.formatter = formatter

    # query

    def get_or_create_active_cart(self, user_id: int) -> CartOut:
        logger.info(f"Obteniendo carrito para usuario {user_id}")
        cart = self._locate_or_create(user_id)
        self.repo.commit()
        return CartOut.model_validate(cart)

    def checkout_summary(self, user_id: int) -> CheckoutSummaryOut:
        logger.info(f"Generando pedido WhatsApp para usuario {user_id}")
        cart = self._checkout_ready_cart(user_id)
        return self.formatter.build(cart.items, cart.total)

    # commands

    def create_new_cart(self, user_id: int) -> CartOut:
        logger.info(f"Creando nuevo carrito para usuario {user_id}")
        deactivated = self.repo.deactivate_carts_of_user(user_id)
        if deactivated:
            logger.info(f"{deactivated} carrito(s) anteriores desactivados para usuario {user_id}")

        cart = self.repo.add_cart(self._new_cart(user_id))
        self.repo.commit()
        return CartOut.model_validate(cart)

    def add_item(
        self,
        user_id: int,
        product_id: int,
        product_name: str,
        unit_price: Decimal,
        quantity: int,
    ) -> CartOut:
        logger.info(f"Agregando producto {product_id} x{quantity} al carrito del usuario {user_id}")
        self._check_quantity(quantity)

        cart = self._locate_or_create(user_id)
        existing = self.repo.find_item_by_product(cart.id, product_id)

        if existing:
            # price and name keep the snapshot taken on the first add
            logger.info(
                f"Producto {product_id} ya esta en el carrito {cart.id}, cantidad "
                f"{existing.quantity} -> {existing.quantity + quantity}"
            )
            existing.change_quantity(existing.quantity + quantity)
        else:
            cart.items.append(
                CartItemModel(
                    product_id=product_id,
                    product_name=product_name,
                    unit_price=unit_price,
                    quantity=quantity,
                )
            )

        cart.recalculate_total()
        self.repo.commit()
        return CartOut.model_validate(cart)

    def update_quantity(self, user_id: int, item_id: int, quantity: int) -> CartOut:
        logger.info(f"Actualizando item {item_id} a cantidad {quantity} para usuario {user_id}")
        self._check_quantity(quantity)

        cart = self._locate_or_create(user_id)
        item = self._owned_item(cart, item_id)
        item.change_quantity(quantity)

        cart.recalculate_total()
        self.repo.commit()
        return CartOut.model_validate(cart)

    def remove_item(self, user_id: int, item_id: int) -> CartOut:
        logger.info(f"Eliminando item {item_id} del carrito del usuario {user_id}")

        cart = self._locate_or_create(user_id)
        item = self._owned_item(cart, item_id)
        cart.items.remove(item)

        cart.recalculate_total()
        self.repo.commit()
        return CartOut.model_validate(cart)

    def clear_cart(self, user_id: int) -> CartOut:
        logger.info(f"Vaciando carrito del usuario {user_id}")

        cart = self._locate_or_create(user_id)
        cart.clear()
        self.repo.commit()
        return CartOut.model_validate(cart)

    def finalize_checkout(self, user_id: int) -> str:
        logger.info(f"Finalizando compra para usuario {user_id}")

        cart = self._checkout_ready_cart(user_id)
        summary = self.formatter.build(cart.items, cart.total)

        cart.active = False
        self.repo.commit()

        logger.info(f"Carrito {cart.id} cerrado, pedido enviado a WhatsApp")
        return summary.whatsapp_url

    def purge_inactive_carts(self, older_than_days: int) -> int:
        cutoff = utcnow() - timedelta(days=older_than_days)
        removed = self.repo.delete_inactive_before(cutoff)
        self.repo.commit()
        logger.info(f"Eliminados {removed} carritos inactivos anteriores a {cutoff.isoformat()}")
        return removed

    # helpers

    @staticmethod
    def _new_cart(user_id: int) -> CartModel:
        return CartModel(user_id=user_id, active=True, total=Decimal("0.00"), items=[])

    def _locate_or_create(self, user_id: int) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id)
        if cart:
            return cart

        try:
            cart = self.repo.add_cart(self._new_cart(user_id))
            logger.info(f"Creado carrito {cart.id} para usuario {user_id}")
            return cart
        except IntegrityError:
            # another request created the active cart first, use theirs
            self.repo.rollback()
            logger.warning(f"Carrito activo creado en paralelo para usuario {user_id}, se reutiliza")
            cart = self.repo.get_active_cart_by_user(user_id)
            if cart is None:
                raise
            return cart

    def _owned_item(self, cart: CartModel, item_id: int) -> CartItemModel:
        item = self.repo.get_item(item_id)
        if item is None:
            raise NotFoundError("Item no encontrado")
        if item.cart_id != cart.id:
            logger.warning(f"Item {item_id} no pertenece al carrito {cart.id}")
            raise NotFoundError("El item no pertenece al carrito del usuario")
        return item

    def _checkout_ready_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id)
        if cart is None:
            raise NotFoundError("Carrito no encontrado")
        if cart.is_empty:
            raise BusinessError("El carrito está vacío")
        return cart

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if quantity < 1:
            raise BusinessError("La cantidad debe ser mayor a 0")
