import pytest

from tienda.cart_service.main import app
from tienda.api.routers.carts import get_formatter


@pytest.fixture
def client(make_client, formatter):
    app.dependency_overrides[get_formatter] = lambda: formatter
    return make_client(app)


LAPTOP = {"product_id": 456, "product_name": "Laptop", "unit_price": "599990.00", "quantity": 1}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "UP"


def test_requires_token(client):
    resp = client.get("/carrito/usuario/1")

    assert resp.status_code == 401
    body = resp.json()
    assert body["status"] == 401
    assert body["path"] == "/carrito/usuario/1"


def test_rejects_garbage_token(client):
    resp = client.get("/carrito/usuario/1", headers={"Authorization": "Bearer abc.def.ghi"})
    assert resp.status_code == 401


def test_rejects_refresh_token(client, tokens):
    refresh = tokens.issue_refresh_token("cliente@tienda.cl")
    resp = client.get("/carrito/usuario/1", headers={"Authorization": f"Bearer {refresh}"})
    assert resp.status_code == 401


def test_other_users_cart_is_forbidden(client, auth_header):
    resp = client.get("/carrito/usuario/2", headers=auth_header(user_id=1))
    assert resp.status_code == 403


def test_admin_can_manage_any_cart(client, auth_header):
    resp = client.get("/carrito/usuario/2", headers=auth_header("admin@tienda.cl", ("ADMIN",), user_id=99))

    assert resp.status_code == 200
    assert resp.json()["user_id"] == 2


def test_full_cart_flow(client, auth_header):
    headers = auth_header(user_id=1)

    resp = client.post("/carrito/usuario/1/items", json=LAPTOP, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["total"] == "599990.00"

    cart = client.post("/carrito/usuario/1/items", json=LAPTOP, headers=headers).json()
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 2
    assert cart["total"] == "1199980.00"

    item_id = cart["items"][0]["id"]
    cart = client.put(f"/carrito/usuario/1/items/{item_id}", params={"cantidad": 3}, headers=headers).json()
    assert cart["total"] == "1799970.00"

    summary = client.get("/carrito/usuario/1/pedido-whatsapp", headers=headers).json()
    assert "• Laptop x3 - $1799970" in summary["message"]

    resp = client.post("/carrito/usuario/1/finalizar-compra", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["whatsapp_url"].startswith("https://wa.me/56912345678?text=")

    fresh = client.get("/carrito/usuario/1", headers=headers).json()
    assert fresh["items"] == []
    assert fresh["id"] != cart["id"]


def test_invalid_item_is_a_validation_error(client, auth_header):
    bad = dict(LAPTOP, quantity=0, unit_price="0")
    resp = client.post("/carrito/usuario/1/items", json=bad, headers=auth_header(user_id=1))

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Error de validación"
    assert "quantity" in body["details"]
    assert "unit_price" in body["details"]


def test_quantity_out_of_range(client, auth_header):
    headers = auth_header(user_id=1)
    cart = client.post("/carrito/usuario/1/items", json=LAPTOP, headers=headers).json()

    resp = client.put(
        f"/carrito/usuario/1/items/{cart['items'][0]['id']}",
        params={"cantidad": 1000},
        headers=headers,
    )
    assert resp.status_code == 400


def test_checkout_of_empty_cart(client, auth_header):
    headers = auth_header(user_id=1)
    client.get("/carrito/usuario/1", headers=headers)

    resp = client.get("/carrito/usuario/1/pedido-whatsapp", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "El carrito está vacío"


def test_remove_foreign_item_is_not_found(client, auth_header):
    other = client.post("/carrito/usuario/2/items", json=LAPTOP, headers=auth_header(user_id=2)).json()

    resp = client.delete(f"/carrito/usuario/1/items/{other['items'][0]['id']}", headers=auth_header(user_id=1))
    assert resp.status_code == 404


def test_new_cart_and_clear(client, auth_header):
    headers = auth_header(user_id=1)
    first = client.post("/carrito/usuario/1/items", json=LAPTOP, headers=headers).json()

    resp = client.post("/carrito/usuario/1", headers=headers)
    assert resp.status_code == 201
    assert resp.json()["id"] != first["id"]

    client.post("/carrito/usuario/1/items", json=LAPTOP, headers=headers)
    cleared = client.delete("/carrito/usuario/1", headers=headers).json()
    assert cleared["items"] == []
    assert cleared["total"] == "0.00"
