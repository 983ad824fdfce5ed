# tienda/celery_worker.py
from celery import Celery

from tienda.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    CLEANUP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "tienda",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks are registered from these modules
celery_app.conf.imports = (
    "tienda.tasks.cleanup",
    "tienda.services.notification_service",
)

celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
celery_app.conf.task_eager_propagates = True
celery_app.conf.timezone = "UTC"

# the sweeps are triggered from outside unless an interval is configured
if CLEANUP_INTERVAL_SECONDS > 0:
    celery_app.conf.beat_schedule = {
        "purge-expired-tokens": {
            "task": "tienda.tasks.cleanup.purge_expired_tokens_task",
            "schedule": float(CLEANUP_INTERVAL_SECONDS),
        },
        "purge-inactive-carts": {
            "task": "tienda.tasks.cleanup.purge_inactive_carts_task",
            "schedule": float(CLEANUP_INTERVAL_SECONDS),
        },
    }
