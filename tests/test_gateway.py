import pytest
import requests
from fastapi.testclient import TestClient

from tienda.domain.errors import UpstreamError
from tienda.gateway import auth_filter
from tienda.gateway.main import app, get_gateway_config, get_upstream
from tienda.gateway.proxy import UpstreamClient, request_headers, response_headers
from tienda.gateway.routes import resolve
from tienda.utils.settings import GatewayConfig

ROUTES = {
    "users": "http://user-service:8081",
    "productos": "http://product-service:8082",
    "carrito": "http://cart-service:8083",
}


class FakeResponse:
    def __init__(self, status_code=200, content=b'{"ok": true}', headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {"Content-Type": "application/json"}


class FakeUpstream:
    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = response or FakeResponse()
        self.error = error

    def forward(self, method, url, headers, params, body):
        self.calls.append({"method": method, "url": url, "headers": headers, "params": params, "body": body})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(upstream):
    app.dependency_overrides[get_gateway_config] = lambda: GatewayConfig(routes=ROUTES)
    app.dependency_overrides[get_upstream] = lambda: upstream
    yield TestClient(app)
    app.dependency_overrides.clear()


# routing

def test_resolve_strips_api_prefix():
    target = resolve("/api/carrito/usuario/1/items", ROUTES)
    assert target.url == "http://cart-service:8083/carrito/usuario/1/items"


@pytest.mark.parametrize("path", ["/api/otro/x", "/api", "/api/", "/carrito/usuario/1", "/apis/users/login"])
def test_resolve_unknown(path):
    assert resolve(path, ROUTES) is None


# public paths

@pytest.mark.parametrize(
    "path, public",
    [
        ("/api/users/login", True),
        ("/api/users/login/extra", False),
        ("/api/productos/public", True),
        ("/api/productos/public/5", True),
        ("/api/productos/publicidad", False),
        ("/api/productos/categorias/1/subcategorias", True),
        ("/api/productos/buscar", True),
        ("/api/productos/1", False),
        ("/api/carrito/usuario/1", False),
        ("/api/users/profile", False),
    ],
)
def test_is_public(path, public):
    assert auth_filter.is_public(path, GatewayConfig(routes=ROUTES).public_paths) is public


def test_spoofed_identity_headers_are_removed():
    cleaned = auth_filter.strip_identity_headers({"x-user-id": "1", "X-User-Role": "ADMIN", "Accept": "*/*"})
    assert cleaned == {"Accept": "*/*"}


def test_hop_by_hop_headers_are_not_forwarded():
    assert request_headers({"Host": "x", "Connection": "keep-alive", "Accept": "a"}) == {"Accept": "a"}
    assert response_headers({"Content-Encoding": "gzip", "Content-Type": "t"}) == {"Content-Type": "t"}


# forwarding

def test_public_path_is_forwarded_without_token(client, upstream):
    resp = client.post("/api/users/login", json={"email": "a@b.cl", "password": "x"})

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    call = upstream.calls[0]
    assert call["url"] == "http://user-service:8081/users/login"
    assert call["method"] == "POST"
    assert b'"email"' in call["body"]
    assert "X-User-Id" not in call["headers"]


def test_protected_path_without_token(client, upstream):
    resp = client.get("/api/carrito/usuario/1")

    assert resp.status_code == 401
    assert resp.json() == {"error": "Token JWT requerido", "status": 401}
    assert upstream.calls == []


def test_protected_path_with_invalid_token(client, upstream):
    resp = client.get("/api/carrito/usuario/1", headers={"Authorization": "Bearer no-es-un-jwt"})

    assert resp.status_code == 401
    assert resp.json()["status"] == 401
    assert upstream.calls == []


def test_refresh_token_is_not_accepted(client, tokens, upstream):
    refresh = tokens.issue_refresh_token("ana@tienda.cl")
    resp = client.get("/api/carrito/usuario/1", headers={"Authorization": f"Bearer {refresh}"})

    assert resp.status_code == 401
    assert upstream.calls == []


def test_identity_headers_come_from_the_token(client, upstream, auth_header):
    headers = auth_header("ana@tienda.cl", ("CLIENTE", "GESTOR"), user_id=7)
    headers["X-User-Id"] = "1"
    headers["X-User-Role"] = "ADMIN"

    resp = client.get("/api/carrito/usuario/7", params={"a": "1"}, headers=headers)

    assert resp.status_code == 200
    sent = {k.lower(): v for k, v in upstream.calls[0]["headers"].items()}
    assert sent["x-user-id"] == "7"
    assert sent["x-user-role"] == "CLIENTE,GESTOR"
    assert sent["authorization"].startswith("Bearer ")
    assert upstream.calls[0]["params"] == [("a", "1")]


def test_upstream_status_and_body_are_relayed(client, upstream, auth_header):
    upstream.response = FakeResponse(404, b'{"message": "Producto 9 no encontrado"}')

    resp = client.get("/api/productos/9", headers=auth_header())
    assert resp.status_code == 404
    assert resp.json()["message"] == "Producto 9 no encontrado"


def test_unknown_service(client, upstream, auth_header):
    resp = client.get("/api/pagos/1", headers=auth_header())

    assert resp.status_code == 404
    assert upstream.calls == []


def test_unreachable_service_is_bad_gateway(client, upstream):
    upstream.error = UpstreamError("El servicio solicitado no está disponible")

    resp = client.get("/api/productos/public")
    assert resp.status_code == 502
    assert resp.json()["status"] == 502


def test_gateway_health(client):
    assert client.get("/health").json() == {"status": "UP", "service": "api-gateway"}


def test_upstream_client_wraps_connection_errors():
    class BrokenSession:
        def request(self, *args, **kwargs):
            raise requests.ConnectionError("refused")

    client = UpstreamClient(timeout=1, session=BrokenSession())
    with pytest.raises(UpstreamError):
        client.forward("GET", "http://nowhere/x", {}, [], b"")
