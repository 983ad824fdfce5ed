# tienda/services/checkout_formatter.py
"""Turns a cart into the WhatsApp order message and its deep link."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
from urllib.parse import quote

from tienda.data.models.cart_item import CartItemModel
from tienda.domain.schemas.cart import CheckoutSummaryOut, OrderLineOut
from tienda.utils.settings import CheckoutConfig

PRODUCTS_PLACEHOLDER = "{productos}"
TOTAL_PLACEHOLDER = "${total}"


def format_money(amount: Decimal) -> str:
    """Whole pesos, half-up: 1199980.50 -> '1199981'."""
    return f"{Decimal(amount).quantize(Decimal('1'), rounding=ROUND_HALF_UP):f}"


def format_line(name: str, quantity: int, subtotal: Decimal) -> str:
    return f"• {name} x{quantity} - ${format_money(subtotal)}"


class CheckoutFormatter:
    def __init__(self, config: CheckoutConfig):
        self.config = config

    def render_message(self, items: Iterable[CartItemModel], total: Decimal) -> str:
        lines = "\n".join(format_line(i.product_name, i.quantity, i.subtotal) for i in items)
        return (
            self.config.message_template
            .replace(PRODUCTS_PLACEHOLDER, lines)
            .replace(TOTAL_PLACEHOLDER, f"${format_money(total)}")
        )

    def whatsapp_url(self, message: str) -> str:
        number = self.config.whatsapp_number.replace("+", "")
        base = self.config.base_url.rstrip("/")
        return f"{base}/{number}?text={quote(message, safe='')}"

    def build(self, items: Iterable[CartItemModel], total: Decimal) -> CheckoutSummaryOut:
        items = list(items)
        message = self.render_message(items, total)
        return CheckoutSummaryOut(
            whatsapp_number=self.config.whatsapp_number,
            message=message,
            products=[
                OrderLineOut(
                    name=i.product_name,
                    quantity=i.quantity,
                    unit_price=i.unit_price,
                    subtotal=i.subtotal,
                )
                for i in items
            ],
            total=total,
            whatsapp_url=self.whatsapp_url(message),
        )
