# tienda/repos/token_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from tienda.data.models.recovery_token import RecoveryTokenModel, TokenKind


class TokenRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_token(self, token: RecoveryTokenModel) -> RecoveryTokenModel:
        self.db.add(token)
        self.db.flush()
        return token

    def find_valid(self, token: str, kind: TokenKind, now: datetime) -> RecoveryTokenModel | None:
        stmt = select(RecoveryTokenModel).where(
            RecoveryTokenModel.token == token,
            RecoveryTokenModel.kind == kind,
            RecoveryTokenModel.used.is_(False),
            RecoveryTokenModel.expires_at > now,
        )
        return self.db.execute(stmt).scalars().first()

    def find_valid_for_user(self, user_id: int, kind: TokenKind, now: datetime) -> List[RecoveryTokenModel]:
        stmt = select(RecoveryTokenModel).where(
            RecoveryTokenModel.user_id == user_id,
            RecoveryTokenModel.kind == kind,
            RecoveryTokenModel.used.is_(False),
            RecoveryTokenModel.expires_at > now,
        )
        return list(self.db.execute(stmt).scalars())

    def delete_expired(self, now: datetime) -> int:
        result = self.db.execute(
            delete(RecoveryTokenModel)
            .where(RecoveryTokenModel.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self) -> None:
        self.db.commit()
