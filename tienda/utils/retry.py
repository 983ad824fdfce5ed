# tienda/utils/retry.py
from sqlalchemy.exc import OperationalError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from tienda.utils.settings import DB_CONNECT_ATTEMPTS


def db_retry(attempts: int = DB_CONNECT_ATTEMPTS):
    """Retry policy for startup-time database access (the container may boot before postgres)."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception_type(OperationalError),
    )
