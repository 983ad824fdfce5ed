import pytest

from tienda.product_service.main import app

from tests.conftest import product_payload


@pytest.fixture
def client(make_client):
    return make_client(app)


@pytest.fixture
def editor(auth_header):
    return auth_header("vendedor@tienda.cl", ("VENDEDOR",), user_id=20)


def create_product(client, editor, **overrides):
    resp = client.post("/productos", json=product_payload(**overrides), headers=editor)
    assert resp.status_code == 201, resp.text
    return resp.json()


# categories

def test_category_tree(client, editor):
    root = client.post("/productos/categorias", json={"name": "Hogar"}, headers=editor).json()
    child = client.post(
        "/productos/categorias",
        json={"name": "Cocina y Baño", "parent_id": root["id"]},
        headers=editor,
    ).json()

    assert root["is_root"] is True
    assert child["level"] == 1
    assert child["full_path"] == "Hogar > Cocina y Baño"
    assert child["slug"] == "cocina-y-bano"

    subs = client.get(f"/productos/categorias/{root['id']}/subcategorias").json()
    assert [c["id"] for c in subs] == [child["id"]]
    roots = client.get("/productos/categorias/raiz").json()
    assert [c["name"] for c in roots] == ["Hogar"]


def test_category_cannot_be_its_own_ancestor(client, editor):
    root = client.post("/productos/categorias", json={"name": "Hogar"}, headers=editor).json()
    child = client.post(
        "/productos/categorias", json={"name": "Cocina", "parent_id": root["id"]}, headers=editor
    ).json()

    resp = client.put(
        f"/productos/categorias/{root['id']}",
        json={"name": "Hogar", "parent_id": child["id"]},
        headers=editor,
    )
    assert resp.status_code == 400


def test_category_with_products_cannot_be_deleted(client, editor, category):
    create_product(client, editor)

    resp = client.delete(f"/productos/categorias/{category.id}", headers=editor)
    assert resp.status_code == 400


def test_duplicate_category_name(client, editor, category):
    resp = client.post("/productos/categorias", json={"name": "computación"}, headers=editor)
    assert resp.status_code == 409


def test_category_writes_need_catalog_permission(client, auth_header):
    resp = client.post("/productos/categorias", json={"name": "Hogar"}, headers=auth_header())
    assert resp.status_code == 403


def test_category_flags(client, editor, category):
    body = client.patch(f"/productos/categorias/{category.id}/destacada", headers=editor).json()
    assert body["featured"] is True
    client.patch(f"/productos/categorias/{category.id}/desactivar", headers=editor)

    assert client.get("/productos/categorias/activas").json() == []
    assert client.get("/productos/categorias/contar").json()["destacadas"] == 1


# brands

def test_brands(client, editor):
    resp = client.post("/productos/marcas", json={"name": "Lenovo", "country": "China"}, headers=editor)
    assert resp.status_code == 201
    brand = resp.json()
    assert brand["slug"] == "lenovo"

    assert [b["name"] for b in client.get("/productos/marcas/pais/China").json()] == ["Lenovo"]
    assert [b["name"] for b in client.get("/productos/marcas/buscar", params={"termino": "len"}).json()] == ["Lenovo"]
    assert client.post("/productos/marcas", json={"name": "LENOVO"}, headers=editor).status_code == 409

    assert client.delete(f"/productos/marcas/{brand['id']}", headers=editor).status_code == 204
    assert client.get(f"/productos/marcas/{brand['id']}").status_code == 404


# products

def test_create_product_derives_fields(client, editor, category):
    body = create_product(client, editor, offer_price="499990.00")

    assert body["slug"] == "laptop-gamer"
    assert body["on_offer"] is True
    assert body["final_price"] == "499990.00"
    assert body["discount"] == "100000.00"
    assert body["discount_percentage"] == "16.67"
    assert body["stock_status"] == "DISPONIBLE"
    assert body["available"] is True


def test_offer_price_must_be_lower(client, editor, category):
    resp = client.post("/productos", json=product_payload(offer_price="700000.00"), headers=editor)
    assert resp.status_code == 400


def test_unknown_category(client, editor):
    resp = client.post("/productos", json=product_payload(category_id=99), headers=editor)
    assert resp.status_code == 404


def test_duplicate_code(client, editor, category):
    create_product(client, editor)
    resp = client.post("/productos", json=product_payload(name="Otra"), headers=editor)
    assert resp.status_code == 409


def test_lookups(client, editor, category):
    created = create_product(client, editor, sku="SKU-1")

    assert client.get("/productos/codigo/LAP-001").json()["id"] == created["id"]
    assert client.get("/productos/sku/SKU-1").json()["id"] == created["id"]
    assert client.get("/productos/slug/laptop-gamer").json()["id"] == created["id"]
    assert client.get("/productos/public/999").status_code == 404


def test_stock_adjustment(client, editor, category):
    product = create_product(client, editor, stock=3, min_stock=2)

    body = client.patch(f"/productos/{product['id']}/stock", json={"delta": -1}, headers=editor).json()
    assert body["stock"] == 2
    assert body["stock_status"] == "BAJO_STOCK"

    resp = client.patch(f"/productos/{product['id']}/stock", json={"delta": -5}, headers=editor)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Stock insuficiente"

    body = client.patch(f"/productos/{product['id']}/stock", json={"delta": -2}, headers=editor).json()
    assert body["stock_status"] == "AGOTADO"
    assert client.get("/productos/sin-stock", headers=editor).json()["total_elements"] == 1


def test_listings_and_filters(client, editor, category):
    create_product(client, editor, featured=True)
    create_product(client, editor, code="MOU-1", name="Mouse Inalambrico", price="9990.00", offer_price="7990.00")
    hidden = create_product(client, editor, code="TEC-1", name="Teclado", price="19990.00")
    client.patch(f"/productos/{hidden['id']}/desactivar", headers=editor)

    assert client.get("/productos/public").json()["total_elements"] == 2
    assert [p["code"] for p in client.get("/productos/public/destacados").json()["content"]] == ["LAP-001"]
    assert [p["code"] for p in client.get("/productos/ofertas").json()["content"]] == ["MOU-1"]
    assert [p["code"] for p in client.get("/productos/inactivos").json()["content"]] == ["TEC-1"]
    assert [p["code"] for p in client.get("/productos/buscar", params={"texto": "mouse"}).json()["content"]] == ["MOU-1"]

    filtered = client.get("/productos/filtros", params={"precio_min": "5000", "precio_max": "20000"}).json()
    assert [p["code"] for p in filtered["content"]] == ["MOU-1"]

    resp = client.get("/productos/filtros", params={"precio_min": "100", "precio_max": "10"})
    assert resp.status_code == 400
    assert resp.json()["details"]["precio_min"] == "100"

    page = client.get("/productos", params={"page": 1, "size": 2}).json()
    assert page["total_elements"] == 3
    assert page["total_pages"] == 2
    assert len(page["content"]) == 1


def test_statistics(client, editor, category):
    create_product(client, editor, stock=2)
    create_product(client, editor, code="MOU-1", name="Mouse", price="10000.00", stock=0)

    body = client.get("/productos/estadisticas").json()
    assert body["total_products"] == 2
    assert body["out_of_stock"] == 1
    assert body["inventory_value"] == "1199980.00"
    assert body["max_price"] == "599990.00"
    assert body["products_by_category"] == {"Computación": 2}


def test_delete_product(client, editor, category):
    product = create_product(client, editor)

    assert client.delete(f"/productos/{product['id']}", headers=editor).status_code == 204
    assert client.get(f"/productos/{product['id']}").status_code == 404
