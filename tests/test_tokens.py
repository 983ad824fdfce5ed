from datetime import datetime, timedelta, timezone

import jwt
import pytest

from tienda.domain.errors import AuthError
from tienda.security.tokens import ACCESS, REFRESH, TokenService
from tienda.utils.settings import JwtConfig

SECRET = "otra-clave-de-pruebas-con-mas-de-32-caracteres"


@pytest.fixture
def svc():
    return TokenService(JwtConfig(secret=SECRET, expiration_seconds=60, refresh_expiration_seconds=600))


def forge(payload, secret=SECRET):
    return jwt.encode(payload, secret, algorithm="HS256")


def test_access_token_claims(svc):
    token = svc.issue_access_token("ana@tienda.cl", ["CLIENTE", "GESTOR"], user_id=5)
    claims = svc.verify_access_token(token)

    assert claims.subject == "ana@tienda.cl"
    assert claims.roles == ("CLIENTE", "GESTOR")
    assert claims.user_id == 5
    assert claims.is_access
    assert svc.extract_subject(token) == "ana@tienda.cl"
    assert svc.extract_roles(token) == ["CLIENTE", "GESTOR"]
    assert svc.extract_token_type(token) == ACCESS
    assert svc.is_access_token(token)
    assert not svc.is_refresh_token(token)


def test_expiration_follows_config(svc):
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    token = svc.issue_access_token("ana@tienda.cl", [])
    expires = svc.extract_expiration(token)

    assert before + timedelta(seconds=55) <= expires <= before + timedelta(seconds=62)


def test_refresh_token_has_no_roles(svc):
    token = svc.issue_refresh_token("ana@tienda.cl")

    claims = svc.verify_refresh_token(token)
    assert claims.is_refresh
    assert claims.roles == ()
    assert svc.extract_token_type(token) == REFRESH
    with pytest.raises(AuthError):
        svc.extract_roles(token)


def test_refresh_token_is_not_an_access_token(svc):
    with pytest.raises(AuthError):
        svc.verify_access_token(svc.issue_refresh_token("ana@tienda.cl"))


def test_access_token_is_not_a_refresh_token(svc):
    with pytest.raises(AuthError):
        svc.verify_refresh_token(svc.issue_access_token("ana@tienda.cl", ["CLIENTE"]))


def test_expired_token(svc):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    token = forge({"sub": "ana@tienda.cl", "type": ACCESS, "roles": [], "iss": "tienda-italo", "exp": past})

    with pytest.raises(AuthError, match="expirado"):
        svc.verify(token)


def test_wrong_signature(svc):
    token = forge(
        {"sub": "ana@tienda.cl", "type": ACCESS, "roles": [], "iss": "tienda-italo",
         "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        secret="una-clave-distinta-tambien-de-32-caracteres",
    )
    with pytest.raises(AuthError):
        svc.verify(token)


def test_missing_subject(svc):
    token = forge({"type": ACCESS, "iss": "tienda-italo", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)})
    with pytest.raises(AuthError):
        svc.verify(token)


def test_unknown_type(svc):
    token = forge({"sub": "x", "type": "OTRO", "iss": "tienda-italo",
                   "exp": datetime.now(timezone.utc) + timedelta(minutes=5)})
    with pytest.raises(AuthError):
        svc.verify(token)
    assert not svc.is_access_token(token)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed(svc, token):
    with pytest.raises(AuthError):
        svc.verify(token)


def test_extract_bearer():
    assert TokenService.extract_bearer("Bearer abc") == "abc"
    assert TokenService.extract_bearer("Basic abc") is None
    assert TokenService.extract_bearer("Bearer ") is None
    assert TokenService.extract_bearer(None) is None


def test_short_secret_is_rejected():
    with pytest.raises(ValueError):
        JwtConfig(secret="corta")
