from datetime import timedelta
from decimal import Decimal

import pytest

from tienda.data.models.cart import CartModel
from tienda.data.models.recovery_token import RecoveryTokenModel, TokenKind
from tienda.tasks import cleanup
from tienda.utils.clock import utcnow


@pytest.fixture(autouse=True)
def task_sessions(monkeypatch, session_factory):
    monkeypatch.setattr(cleanup, "SessionLocal", session_factory)


def test_purge_expired_tokens(db, make_user):
    user = make_user()
    db.add_all(
        [
            RecoveryTokenModel.issue(user.id, TokenKind.PASSWORD_RESET, timedelta(hours=-1)),
            RecoveryTokenModel.issue(user.id, TokenKind.EMAIL_VERIFICATION, timedelta(days=1)),
        ]
    )
    db.commit()

    assert cleanup.purge_expired_tokens_task.delay().get() == 1
    remaining = db.query(RecoveryTokenModel).one()
    assert remaining.kind == TokenKind.EMAIL_VERIFICATION
    assert remaining.is_valid()


def test_purge_inactive_carts(db):
    old = utcnow() - timedelta(days=40)
    db.add_all(
        [
            CartModel(user_id=1, active=False, total=Decimal("0.00"), updated_at=old),
            CartModel(user_id=2, active=False, total=Decimal("0.00")),
            CartModel(user_id=3, active=True, total=Decimal("0.00"), updated_at=old),
        ]
    )
    db.commit()

    assert cleanup.purge_inactive_carts_task.delay(30).get() == 1
    assert sorted(c.user_id for c in db.query(CartModel).all()) == [2, 3]
