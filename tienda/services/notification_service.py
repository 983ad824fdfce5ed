# tienda/services/notification_service.py
from tienda.celery_worker import celery_app
from tienda.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Envio de correos transaccionales.
    Cada envio se encola como tarea de Celery; el request no espera al correo.
    """

    @staticmethod
    def send_verification_email(email: str, name: str, token: str):
        send_verification_email_task.delay(email, name, token)

    @staticmethod
    def send_password_reset_email(email: str, name: str, token: str):
        send_password_reset_email_task.delay(email, name, token)


@celery_app.task(name="tienda.services.notification_service.send_verification_email_task")
def send_verification_email_task(email: str, name: str, token: str):
    """Sin SMTP configurado, solo se registra el envio."""
    logger.info(f"[EMAIL] Verificacion de cuenta para {email} ({name})")
    return {"email": email, "kind": "EMAIL_VERIFICATION", "status": "sent"}


@celery_app.task(name="tienda.services.notification_service.send_password_reset_email_task")
def send_password_reset_email_task(email: str, name: str, token: str):
    logger.info(f"[EMAIL] Recuperacion de contraseña para {email} ({name})")
    return {"email": email, "kind": "PASSWORD_RESET", "status": "sent"}
