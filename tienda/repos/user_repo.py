# tienda/repos/user_repo.py
from datetime import datetime
from typing import Dict, List, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tienda.data.models.role import RoleModel
from tienda.data.models.user import UserModel
from tienda.repos.pagination import paginate


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def add_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def _page(self, stmt, page: int, size: int) -> Tuple[List[UserModel], int]:
        return paginate(self.db, stmt.order_by(UserModel.id), page, size)

    def list_users(self, page: int, size: int) -> Tuple[List[UserModel], int]:
        return self._page(select(UserModel), page, size)

    def list_active(self, page: int, size: int) -> Tuple[List[UserModel], int]:
        return self._page(select(UserModel).where(UserModel.active.is_(True)), page, size)

    def search_by_name(self, term: str, page: int, size: int) -> Tuple[List[UserModel], int]:
        pattern = f"%{term.strip().lower()}%"
        stmt = select(UserModel).where(
            or_(func.lower(UserModel.first_name).like(pattern), func.lower(UserModel.last_name).like(pattern))
        )
        return self._page(stmt, page, size)

    def list_by_role(self, role_name: str, page: int, size: int) -> Tuple[List[UserModel], int]:
        stmt = select(UserModel).where(UserModel.roles.any(RoleModel.name == role_name))
        return self._page(stmt, page, size)

    # statistics

    def count(self, *criteria) -> int:
        return self.db.execute(select(func.count(UserModel.id)).where(*criteria)).scalar_one()

    def count_locked(self, now: datetime) -> int:
        return self.count(UserModel.locked_until.is_not(None), UserModel.locked_until > now)

    def count_by_role(self) -> Dict[str, int]:
        stmt = (
            select(RoleModel.name, func.count(UserModel.id))
            .select_from(RoleModel)
            .outerjoin(RoleModel.users)
            .group_by(RoleModel.name)
        )
        return {name: count for name, count in self.db.execute(stmt).all()}

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
