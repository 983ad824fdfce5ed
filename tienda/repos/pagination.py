# tienda/repos/pagination.py
from typing import List, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


def paginate(db: Session, stmt: Select, page: int, size: int) -> Tuple[List, int]:
    """Rows of one page plus the total row count of the unpaged statement."""
    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = db.execute(stmt.offset(page * size).limit(size)).scalars().all()
    return list(rows), total
