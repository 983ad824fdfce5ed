# tienda/utils/clock.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, the same shape every backend hands back from a DateTime column
    return datetime.now(timezone.utc).replace(tzinfo=None)
