# tienda/services/role_service.py
from typing import List

from sqlalchemy.orm import Session

from tienda.domain.errors import NotFoundError
from tienda.domain.schemas.user import RoleOut, RoleUpdateIn
from tienda.repos.role_repo import RoleRepo
from tienda.utils.logging import get_logger

logger = get_logger(__name__)


class RoleService:
    def __init__(self, db: Session):
        self.repo = RoleRepo(db)

    def list_roles(self) -> List[RoleOut]:
        return [RoleOut.model_validate(r) for r in self.repo.list_roles()]

    def get_role(self, role_id: int) -> RoleOut:
        role = self.repo.get_role(role_id)
        if role is None:
            raise NotFoundError("Rol no encontrado")
        return RoleOut.model_validate(role)

    def update_role(self, role_id: int, payload: RoleUpdateIn) -> RoleOut:
        role = self.repo.get_role(role_id)
        if role is None:
            raise NotFoundError("Rol no encontrado")
        # names are fixed, only the description and flag change
        if payload.description is not None:
            role.description = payload.description
        if payload.active is not None:
            role.active = payload.active
        self.repo.commit()
        logger.info(f"Rol {role.name} actualizado")
        return RoleOut.model_validate(role)
