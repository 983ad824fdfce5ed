import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("JWT_SECRET", "clave-de-pruebas-con-mas-de-32-caracteres")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("WHATSAPP_NUMBER", "+56912345678")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tienda.data.models  # noqa: F401  registers every table
from tienda.api.routers.auth import get_auth_policy, get_notifications
from tienda.api.security import get_token_service
from tienda.data.database import Base, get_db
from tienda.data.models.category import CategoryModel
from tienda.data.models.role import RoleModel
from tienda.data.models.user import UserModel
from tienda.data.seed import seed_roles
from tienda.security.passwords import PasswordHasher
from tienda.security.roles import RoleName
from tienda.services.checkout_formatter import CheckoutFormatter
from tienda.utils.settings import AuthPolicy, CheckoutConfig

PASSWORD = "Secreta1!"
TEST_POLICY = AuthPolicy(
    max_failed_logins=3,
    lockout_minutes=60,
    require_email_verification=True,
    bcrypt_rounds=4,
)


class RecordingNotifications:
    """Keeps the tokens that would have been emailed."""

    def __init__(self):
        self.verifications = []
        self.resets = []

    def send_verification_email(self, email, name, token):
        self.verifications.append((email, token))

    def send_password_reset_email(self, email, name, token):
        self.resets.append((email, token))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def formatter():
    return CheckoutFormatter(
        CheckoutConfig(
            whatsapp_number="+56912345678",
            message_template="¡Hola! Quiero realizar el siguiente pedido:\n\n{productos}\n\nTotal: ${total}",
        )
    )


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def tokens():
    return get_token_service()


@pytest.fixture
def make_client(session_factory, notifications):
    """TestClient for a service app with its database swapped for the test engine."""
    apps = []

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def factory(app, raise_server_exceptions=True):
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_auth_policy] = lambda: TEST_POLICY
        app.dependency_overrides[get_notifications] = lambda: notifications
        apps.append(app)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    yield factory
    for app in apps:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_header(tokens):
    def build(email="cliente@tienda.cl", roles=("CLIENTE",), user_id=1):
        return {"Authorization": f"Bearer {tokens.issue_access_token(email, roles, user_id=user_id)}"}

    return build


@pytest.fixture
def roles(db):
    seed_roles(db)
    return {r.name: r for r in db.query(RoleModel).all()}


@pytest.fixture
def make_user(db, roles):
    hasher = PasswordHasher(rounds=4)

    def create(email="ana@tienda.cl", role=RoleName.CLIENTE, verified=True, active=True, **fields):
        user = UserModel(
            email=email,
            password_hash=hasher.hash(fields.pop("password", PASSWORD)),
            first_name=fields.pop("first_name", "Ana"),
            last_name=fields.pop("last_name", "Rojas"),
            active=active,
            email_verified=verified,
            failed_login_attempts=0,
            **fields,
        )
        user.roles = [roles[role.value]]
        db.add(user)
        db.commit()
        return user

    return create


@pytest.fixture
def category(db):
    cat = CategoryModel(name="Computación", slug="computacion", active=True, featured=False, sort_order=0)
    db.add(cat)
    db.commit()
    return cat


def product_payload(**overrides):
    payload = {
        "code": "LAP-001",
        "name": "Laptop Gamer",
        "price": "599990.00",
        "stock": 10,
        "min_stock": 2,
        "category_id": 1,
    }
    payload.update(overrides)
    return payload


def money(value) -> Decimal:
    return Decimal(str(value))
