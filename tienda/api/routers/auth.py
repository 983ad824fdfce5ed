# tienda/api/routers/auth.py
from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr
from sqlalchemy.orm import Session

from tienda.api.security import get_token_service
from tienda.data.database import get_db
from tienda.domain.schemas.common import MessageOut
from tienda.domain.schemas.user import (
    EmailAvailabilityOut,
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    NewPasswordIn,
    RefreshTokenIn,
    RegisterIn,
    UserOut,
)
from tienda.security.passwords import PasswordHasher
from tienda.security.tokens import TokenService
from tienda.services.notification_service import NotificationService
from tienda.services.user_service import UserService
from tienda.utils.settings import AuthPolicy, auth_policy

router = APIRouter(prefix="/users", tags=["auth"])


@router.get("/health")
def health():
    return {"status": "UP", "service": "user-service"}


def get_auth_policy() -> AuthPolicy:
    return auth_policy()


def get_notifications() -> NotificationService:
    return NotificationService()


def get_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    policy: AuthPolicy = Depends(get_auth_policy),
    notifications: NotificationService = Depends(get_notifications),
) -> UserService:
    return UserService(
        db=db,
        tokens=tokens,
        hasher=PasswordHasher(rounds=policy.bcrypt_rounds),
        policy=policy,
        notifications=notifications,
    )


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, svc: UserService = Depends(get_service)):
    return svc.register(payload)


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, svc: UserService = Depends(get_service)):
    return svc.login(payload)


@router.post("/refresh-token", response_model=LoginOut)
def refresh_token(payload: RefreshTokenIn, svc: UserService = Depends(get_service)):
    return svc.refresh(payload.refresh_token)


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(payload: ForgotPasswordIn, svc: UserService = Depends(get_service)):
    svc.forgot_password(payload.email)
    return MessageOut(message="Si el email está registrado, recibirás instrucciones para recuperar tu contraseña")


@router.post("/reset-password", response_model=MessageOut)
def reset_password(
    payload: NewPasswordIn,
    token: str = Query(..., min_length=1),
    svc: UserService = Depends(get_service),
):
    svc.reset_password(token, payload.new_password)
    return MessageOut(message="Contraseña restablecida exitosamente")


@router.get("/verify-email", response_model=MessageOut)
def verify_email(token: str = Query(..., min_length=1), svc: UserService = Depends(get_service)):
    svc.verify_email(token)
    return MessageOut(message="Email verificado exitosamente")


@router.get("/check-email", response_model=EmailAvailabilityOut)
def check_email(email: EmailStr = Query(...), svc: UserService = Depends(get_service)):
    normalized = email.strip().lower()
    return EmailAvailabilityOut(email=normalized, available=svc.check_email_available(normalized))
