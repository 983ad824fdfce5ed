from datetime import timedelta
from decimal import Decimal

import pytest

from tienda.data.models.cart import CartModel
from tienda.domain.errors import BusinessError, NotFoundError
from tienda.services.cart_service import CartService
from tienda.utils.clock import utcnow


@pytest.fixture
def svc(db, formatter):
    return CartService(db, formatter)


def add_laptop(svc, user_id=7, quantity=1):
    return svc.add_item(user_id, 456, "Laptop", Decimal("599990.00"), quantity)


def test_get_or_create_returns_same_active_cart(svc):
    first = svc.get_or_create_active_cart(7)
    second = svc.get_or_create_active_cart(7)

    assert first.id == second.id
    assert first.active is True
    assert first.total == Decimal("0.00")
    assert first.items == []


def test_add_item_to_empty_cart(svc):
    cart = add_laptop(svc)

    assert len(cart.items) == 1
    assert cart.total == Decimal("599990.00")
    assert cart.items[0].subtotal == Decimal("599990.00")


def test_adding_same_product_merges_quantity(svc):
    add_laptop(svc)
    cart = add_laptop(svc)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert cart.items[0].subtotal == Decimal("1199980.00")
    assert cart.total == Decimal("1199980.00")
    assert cart.total_quantity == 2


def test_existing_item_keeps_first_price_and_name(svc):
    add_laptop(svc)
    cart = svc.add_item(7, 456, "Laptop Pro", Decimal("10.00"), 1)

    item = cart.items[0]
    assert item.product_name == "Laptop"
    assert item.unit_price == Decimal("599990.00")
    assert cart.total == Decimal("1199980.00")


def test_total_is_sum_of_subtotals(svc):
    add_laptop(svc)
    cart = svc.add_item(7, 11, "Mouse", Decimal("12990.50"), 3)

    assert cart.total == sum(i.subtotal for i in cart.items)
    assert cart.total == Decimal("638961.50")


def test_add_item_rejects_non_positive_quantity(svc):
    with pytest.raises(BusinessError):
        svc.add_item(7, 1, "Mouse", Decimal("1.00"), 0)


def test_update_quantity_recalculates(svc):
    cart = add_laptop(svc)
    cart = svc.update_quantity(7, cart.items[0].id, 3)

    assert cart.items[0].quantity == 3
    assert cart.total == Decimal("1799970.00")


def test_update_item_of_another_user_is_not_found(svc):
    other = add_laptop(svc, user_id=8)
    add_laptop(svc, user_id=7)

    with pytest.raises(NotFoundError):
        svc.update_quantity(7, other.items[0].id, 5)


def test_update_unknown_item(svc):
    add_laptop(svc)
    with pytest.raises(NotFoundError):
        svc.update_quantity(7, 999, 2)


def test_remove_item(svc):
    add_laptop(svc)
    cart = svc.add_item(7, 11, "Mouse", Decimal("100.00"), 1)
    laptop = next(i for i in cart.items if i.product_id == 456)

    cart = svc.remove_item(7, laptop.id)

    assert [i.product_id for i in cart.items] == [11]
    assert cart.total == Decimal("100.00")


def test_clear_cart(svc):
    add_laptop(svc)
    cart = svc.clear_cart(7)

    assert cart.items == []
    assert cart.total == Decimal("0.00")
    assert cart.active is True


def test_create_new_cart_deactivates_previous(svc, db):
    old = add_laptop(svc)
    new = svc.create_new_cart(7)

    assert new.id != old.id
    active = db.query(CartModel).filter(CartModel.user_id == 7, CartModel.active.is_(True)).all()
    assert [c.id for c in active] == [new.id]


def test_checkout_summary(svc):
    add_laptop(svc, quantity=2)
    summary = svc.checkout_summary(7)

    assert summary.total == Decimal("1199980.00")
    assert "• Laptop x2 - $1199980" in summary.message
    assert summary.message.endswith("Total: $1199980")
    assert summary.whatsapp_url.startswith("https://wa.me/56912345678?text=")
    assert summary.products[0].name == "Laptop"


def test_checkout_of_empty_cart_fails(svc):
    svc.get_or_create_active_cart(7)
    with pytest.raises(BusinessError, match="vacío"):
        svc.checkout_summary(7)


def test_checkout_without_cart_is_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.checkout_summary(7)


def test_finalize_closes_cart(svc, db):
    old = add_laptop(svc)
    url = svc.finalize_checkout(7)

    assert url.startswith("https://wa.me/56912345678?text=")
    assert db.get(CartModel, old.id).active is False

    fresh = svc.get_or_create_active_cart(7)
    assert fresh.id != old.id
    assert fresh.items == []


def test_finalize_empty_cart_keeps_it_active(svc, db):
    cart = svc.get_or_create_active_cart(7)
    with pytest.raises(BusinessError):
        svc.finalize_checkout(7)
    assert db.get(CartModel, cart.id).active is True


def test_purge_inactive_carts(svc, db):
    add_laptop(svc)
    svc.finalize_checkout(7)
    stale = db.query(CartModel).filter(CartModel.active.is_(False)).one()
    stale.updated_at = utcnow() - timedelta(days=45)
    db.commit()
    svc.get_or_create_active_cart(7)

    assert svc.purge_inactive_carts(30) == 1
    assert db.query(CartModel).count() == 1
