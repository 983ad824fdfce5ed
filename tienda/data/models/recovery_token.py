# tienda/data/models/recovery_token.py
import enum
import uuid
from datetime import datetime, timedelta

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from tienda.data.database import Base
from tienda.utils.clock import utcnow


class TokenKind(str, enum.Enum):
    PASSWORD_RESET = "PASSWORD_RESET"
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"


class RecoveryTokenModel(Base):
    __tablename__ = "tokens_recuperacion"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(255), nullable=False, unique=True, index=True)
    kind = Column(Enum(TokenKind, name="tipo_token"), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("UserModel", back_populates="recovery_tokens")

    @staticmethod
    def generate() -> str:
        return uuid.uuid4().hex

    @classmethod
    def issue(cls, user_id: int, kind: TokenKind, ttl: timedelta) -> "RecoveryTokenModel":
        return cls(user_id=user_id, token=cls.generate(), kind=kind, used=False, expires_at=utcnow() + ttl)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        return not self.used and not self.is_expired(now)

    def mark_used(self) -> None:
        self.used = True
