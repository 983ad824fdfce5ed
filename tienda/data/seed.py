# tienda/data/seed.py
from sqlalchemy.orm import Session

from tienda.data.database import SessionLocal
from tienda.data.models.role import RoleModel
from tienda.repos.role_repo import RoleRepo
from tienda.security.roles import RoleName
from tienda.utils.logging import get_logger

logger = get_logger(__name__)


def seed_roles(db: Session) -> int:
    """Insert every RoleName missing from the roles table; existing rows are left alone."""
    repo = RoleRepo(db)
    created = 0
    for name in RoleName:
        if repo.get_by_name(name.value) is None:
            repo.add_role(RoleModel(name=name.value, description=name.description, active=True))
            created += 1
    repo.commit()
    if created:
        logger.info(f"Roles creados: {created}")
    return created


def seed():
    db = SessionLocal()
    try:
        seed_roles(db)
    finally:
        db.close()
