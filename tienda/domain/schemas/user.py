# tienda/domain/schemas/user.py
import re
from datetime import date, datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# pydantic's regex engine has no lookahead, so the policy is checked here
_PASSWORD_CHARS = re.compile(r"^[A-Za-z\d@$!%*?&]{8,}$")
_NAME = re.compile(r"^[a-zA-ZáéíóúüñÁÉÍÓÚÜÑ\s]+$")
_PHONE = re.compile(r"^[+]?[0-9\s\-()]+$")

PASSWORD_POLICY_MESSAGE = (
    "La contraseña debe contener al menos: 1 minúscula, 1 mayúscula, 1 número y 1 carácter especial"
)


def check_password_policy(value: str) -> str:
    if not (
        _PASSWORD_CHARS.match(value)
        and re.search(r"[a-z]", value)
        and re.search(r"[A-Z]", value)
        and re.search(r"\d", value)
        and re.search(r"[@$!%*?&]", value)
    ):
        raise ValueError(PASSWORD_POLICY_MESSAGE)
    return value


class _NormalizedEmail(BaseModel):
    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class ProfileFields(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=100, description="Nombre")
    last_name: str = Field(..., min_length=2, max_length=100, description="Apellido")
    phone: str | None = Field(None, max_length=20, description="Telefono")
    birth_date: date | None = Field(None, description="Fecha de nacimiento")

    @field_validator("first_name", "last_name")
    @classmethod
    def letters_only(cls, value: str) -> str:
        value = value.strip()
        if not _NAME.match(value):
            raise ValueError("Solo puede contener letras y espacios")
        return value

    @field_validator("phone")
    @classmethod
    def phone_format(cls, value: str | None) -> str | None:
        if value is not None and not _PHONE.match(value):
            raise ValueError("El teléfono debe tener un formato válido")
        return value

    @field_validator("birth_date")
    @classmethod
    def in_the_past(cls, value: date | None) -> date | None:
        if value is not None and value >= date.today():
            raise ValueError("La fecha de nacimiento debe ser anterior a la fecha actual")
        return value


class RegisterIn(_NormalizedEmail, ProfileFields):
    """Schema de registro de usuario."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class ProfileUpdateIn(_NormalizedEmail, ProfileFields):
    """Actualizacion de perfil; el email es opcional."""

    email: EmailStr | None = None


class AdminUserUpdateIn(ProfileUpdateIn):
    active: bool | None = None
    email_verified: bool | None = None


class LoginIn(_NormalizedEmail):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)
    remember_me: bool = False


class RefreshTokenIn(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordIn(_NormalizedEmail):
    email: EmailStr


class NewPasswordIn(BaseModel):
    new_password: str = Field(..., min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class ChangePasswordIn(NewPasswordIn):
    current_password: str = Field(..., min_length=1)


class RoleOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    active: bool

    model_config = ConfigDict(from_attributes=True)


class RoleUpdateIn(BaseModel):
    description: str | None = Field(None, max_length=200)
    active: bool | None = None


class UserOut(BaseModel):
    """Schema de usuario (response). Nunca incluye el hash de la contraseña."""

    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone: str | None = None
    birth_date: date | None = None
    active: bool
    email_verified: bool
    last_login_at: datetime | None = None
    failed_login_attempts: int
    locked_until: datetime | None = None
    locked: bool
    enabled: bool
    roles: List[RoleOut]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class LoginOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    expires_at: datetime
    user: UserOut
    roles: List[str]
    first_login: bool = False
    welcome_message: str | None = None


class EmailAvailabilityOut(BaseModel):
    email: str
    available: bool


class UserStatisticsOut(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    verified_users: int
    unverified_users: int
    locked_users: int
    users_by_role: Dict[str, int]
    active_percentage: float
    verified_percentage: float
    new_last_30_days: int
    active_last_30_days: int
