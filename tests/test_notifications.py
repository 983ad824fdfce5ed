from types import SimpleNamespace

from tienda.services import notification_service
from tienda.services.notification_service import NotificationService


def test_verification_email_is_queued(monkeypatch):
    sent = []
    monkeypatch.setattr(
        notification_service,
        "send_verification_email_task",
        SimpleNamespace(delay=lambda *args: sent.append(args)),
    )

    NotificationService.send_verification_email("ana@tienda.cl", "Ana", "tok123")
    assert sent == [("ana@tienda.cl", "Ana", "tok123")]


def test_tasks_run_eagerly_in_tests():
    result = notification_service.send_password_reset_email_task.delay("ana@tienda.cl", "Ana", "tok123").get()

    assert result == {"email": "ana@tienda.cl", "kind": "PASSWORD_RESET", "status": "sent"}
