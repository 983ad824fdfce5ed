# tienda/data/models/user.py
from datetime import datetime, timedelta

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String
from sqlalchemy.orm import relationship

from tienda.data.database import Base
from tienda.data.models.role import user_roles
from tienda.utils.clock import utcnow


class UserModel(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    birth_date = Column(Date)

    active = Column(Boolean, nullable=False, default=True, index=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    last_login_at = Column(DateTime)
    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    roles = relationship("RoleModel", secondary=user_roles, back_populates="users", lazy="selectin")
    recovery_tokens = relationship(
        "RecoveryTokenModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def role_names(self) -> list[str]:
        return sorted(r.name for r in self.roles)

    def is_locked(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return self.locked_until is not None and self.locked_until > now

    @property
    def locked(self) -> bool:
        return self.is_locked()

    @property
    def enabled(self) -> bool:
        return bool(self.active and self.email_verified)

    def register_failed_login(self, max_attempts: int, lockout_minutes: int) -> None:
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= max_attempts:
            self.locked_until = utcnow() + timedelta(minutes=lockout_minutes)

    def reset_failed_logins(self) -> None:
        self.failed_login_attempts = 0
        self.locked_until = None
