from fastapi import APIRouter
from fastapi.testclient import TestClient

from tienda.api import create_service_app
from tienda.api.errors import GENERIC_ERROR_MESSAGE

router = APIRouter()


@router.get("/boom")
def boom():
    raise RuntimeError("detalle interno que no debe salir")


app = create_service_app("test-service", [router], tables=[])


def test_unexpected_error_is_generic_500():
    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/boom")

    assert resp.status_code == 500
    body = resp.json()
    assert body["message"] == GENERIC_ERROR_MESSAGE
    assert body["path"] == "/boom"
    assert "detalle interno" not in resp.text
    assert {"timestamp", "status", "error", "message", "path"} <= set(body)


def test_unknown_route_uses_error_body():
    resp = TestClient(app).get("/no-existe")

    assert resp.status_code == 404
    assert resp.json()["status"] == 404


def test_health_reports_service_name():
    assert TestClient(app).get("/health").json() == {"status": "UP", "service": "test-service"}
