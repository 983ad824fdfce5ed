# tienda/data/database.py
from typing import Iterable, Iterator

from sqlalchemy import Table, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tienda.utils.settings import DATABASE_URL
from tienda.utils.retry import db_retry
from tienda.utils.logging import get_logger

logger = get_logger(__name__)

engine = create_engine(DATABASE_URL, pool_pre_ping=True, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@db_retry()
def init_db(tables: Iterable[Table]) -> None:
    """Create the tables a single service owns (each service has its own schema)."""
    tables = list(tables)
    Base.metadata.create_all(bind=engine, tables=tables)
    logger.info(f"Tablas listas: {[t.name for t in tables]}")
