# tienda/tasks/cleanup.py
from tienda.celery_worker import celery_app
from tienda.data.database import SessionLocal
from tienda.repos.token_repo import TokenRepo
from tienda.services.cart_service import CartService
from tienda.services.checkout_formatter import CheckoutFormatter
from tienda.utils.clock import utcnow
from tienda.utils.logging import get_logger
from tienda.utils.settings import INACTIVE_CART_RETENTION_DAYS, checkout_config

logger = get_logger(__name__)


@celery_app.task(name="tienda.tasks.cleanup.purge_expired_tokens_task")
def purge_expired_tokens_task():
    logger.info("Limpieza de tokens expirados iniciada")

    db = SessionLocal()
    try:
        repo = TokenRepo(db)
        removed = repo.delete_expired(utcnow())
        repo.commit()
        logger.info(f"Eliminados {removed} tokens de recuperacion expirados")
        return removed
    finally:
        db.close()


@celery_app.task(name="tienda.tasks.cleanup.purge_inactive_carts_task")
def purge_inactive_carts_task(older_than_days: int = INACTIVE_CART_RETENTION_DAYS):
    logger.info(f"Limpieza de carritos inactivos con mas de {older_than_days} dias")

    db = SessionLocal()
    try:
        return CartService(db, CheckoutFormatter(checkout_config())).purge_inactive_carts(older_than_days)
    finally:
        db.close()
