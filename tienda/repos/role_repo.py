# tienda/repos/role_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from tienda.data.models.role import RoleModel


class RoleRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_role(self, role_id: int) -> RoleModel | None:
        return self.db.get(RoleModel, role_id)

    def get_by_name(self, name: str) -> RoleModel | None:
        return self.db.execute(select(RoleModel).where(RoleModel.name == name)).scalars().first()

    def list_roles(self) -> List[RoleModel]:
        return list(self.db.execute(select(RoleModel).order_by(RoleModel.id)).scalars())

    def add_role(self, role: RoleModel) -> RoleModel:
        self.db.add(role)
        self.db.flush()
        return role

    def commit(self) -> None:
        self.db.commit()
