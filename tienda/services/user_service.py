# tienda/services/user_service.py
from datetime import timedelta

from sqlalchemy.orm import Session

from tienda.data.models.recovery_token import RecoveryTokenModel, TokenKind
from tienda.data.models.role import RoleModel
from tienda.data.models.user import UserModel
from tienda.domain.errors import AuthError, BusinessError, ForbiddenError, NotFoundError
from tienda.domain.schemas.common import Page
from tienda.domain.schemas.user import (
    AdminUserUpdateIn,
    LoginIn,
    LoginOut,
    ProfileUpdateIn,
    RegisterIn,
    UserOut,
    UserStatisticsOut,
)
from tienda.repos.role_repo import RoleRepo
from tienda.repos.token_repo import TokenRepo
from tienda.repos.user_repo import UserRepo
from tienda.security.passwords import PasswordHasher
from tienda.security.roles import RoleName
from tienda.security.tokens import TokenService
from tienda.services.notification_service import NotificationService
from tienda.utils.clock import utcnow
from tienda.utils.logging import get_logger
from tienda.utils.settings import AuthPolicy

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Credenciales inválidas"


class UserService:
    """
    Registro, autenticacion y administracion de usuarios.

    Bloqueo: tras `policy.max_failed_logins` fallos seguidos la cuenta queda
    bloqueada `policy.lockout_minutes`; los intentos durante el bloqueo no lo
    extienden. Un login correcto reinicia el contador.
    """

    def __init__(
        self,
        db: Session,
        tokens: TokenService,
        hasher: PasswordHasher,
        policy: AuthPolicy,
        notifications: NotificationService,
    ):
        self.repo = UserRepo(db)
        self.roles = RoleRepo(db)
        self.recovery = TokenRepo(db)
        self.tokens = tokens
        self.hasher = hasher
        self.policy = policy
        self.notifications = notifications

    # =====================================================
    # authentication
    # =====================================================

    def register(self, payload: RegisterIn) -> UserOut:
        logger.info(f"Registrando usuario {payload.email}")
        if self.repo.email_exists(payload.email):
            raise BusinessError("El email ya está registrado", status_code=409)

        user = UserModel(
            email=payload.email,
            password_hash=self.hasher.hash(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            birth_date=payload.birth_date,
            active=True,
            email_verified=False,
            failed_login_attempts=0,
        )
        user.roles = [self._default_role()]
        self.repo.add_user(user)

        verification = self.recovery.add_token(
            RecoveryTokenModel.issue(
                user.id,
                TokenKind.EMAIL_VERIFICATION,
                timedelta(days=self.policy.email_verification_days),
            )
        )
        self.repo.commit()

        self.notifications.send_verification_email(user.email, user.first_name, verification.token)
        logger.info(f"Usuario registrado: {user.id}")
        return UserOut.model_validate(user)

    def login(self, payload: LoginIn) -> LoginOut:
        logger.info(f"Intento de login para {payload.email}")
        user = self.repo.get_by_email(payload.email)
        if user is None:
            raise AuthError(INVALID_CREDENTIALS)

        if user.is_locked():
            logger.warning(f"Login rechazado, usuario {user.id} bloqueado hasta {user.locked_until}")
            raise AuthError("Usuario bloqueado temporalmente")

        if not self.hasher.verify(payload.password, user.password_hash):
            user.register_failed_login(self.policy.max_failed_logins, self.policy.lockout_minutes)
            self.repo.commit()
            logger.warning(
                f"Contraseña incorrecta para usuario {user.id} "
                f"({user.failed_login_attempts}/{self.policy.max_failed_logins})"
            )
            raise AuthError(INVALID_CREDENTIALS)

        self._check_can_sign_in(user)

        first_login = user.last_login_at is None
        user.reset_failed_logins()
        user.last_login_at = utcnow()
        self.repo.commit()

        logger.info(f"Usuario autenticado: {user.id}")
        return self._login_response(
            user,
            refresh_token=self.tokens.issue_refresh_token(user.email),
            first_login=first_login,
            welcome_message=f"¡Bienvenido a Tienda Italo, {user.first_name or 'Usuario'}!",
        )

    def refresh(self, refresh_token: str) -> LoginOut:
        logger.info("Renovando token de acceso")
        claims = self.tokens.verify_refresh_token(refresh_token)

        user = self.repo.get_by_email(claims.subject)
        if user is None:
            raise AuthError("Usuario no encontrado")
        self._check_can_sign_in(user)

        # the same refresh token stays valid until its own expiry
        return self._login_response(user, refresh_token=refresh_token)

    def forgot_password(self, email: str) -> None:
        user = self.repo.get_by_email(email)
        if user is None:
            # same answer for unknown emails
            logger.info("Recuperacion solicitada para un email no registrado")
            return

        now = utcnow()
        for previous in self.recovery.find_valid_for_user(user.id, TokenKind.PASSWORD_RESET, now):
            previous.mark_used()

        reset = self.recovery.add_token(
            RecoveryTokenModel.issue(
                user.id,
                TokenKind.PASSWORD_RESET,
                timedelta(hours=self.policy.password_reset_hours),
            )
        )
        self.repo.commit()

        self.notifications.send_password_reset_email(user.email, user.first_name, reset.token)
        logger.info(f"Token de recuperacion generado para usuario {user.id}")

    def reset_password(self, token: str, new_password: str) -> None:
        reset = self.recovery.find_valid(token, TokenKind.PASSWORD_RESET, utcnow())
        if reset is None:
            raise BusinessError("Token de recuperación inválido o expirado")

        user = reset.user
        user.password_hash = self.hasher.hash(new_password)
        user.reset_failed_logins()
        reset.mark_used()
        self.repo.commit()
        logger.info(f"Contraseña restablecida para usuario {user.id}")

    def verify_email(self, token: str) -> None:
        verification = self.recovery.find_valid(token, TokenKind.EMAIL_VERIFICATION, utcnow())
        if verification is None:
            raise BusinessError("Token de verificación inválido o expirado")

        verification.user.email_verified = True
        verification.mark_used()
        self.repo.commit()
        logger.info(f"Email verificado para usuario {verification.user_id}")

    def check_email_available(self, email: str) -> bool:
        return not self.repo.email_exists(email)

    # =====================================================
    # profile
    # =====================================================

    def get_profile(self, email: str) -> UserOut:
        return UserOut.model_validate(self._by_email(email))

    def update_profile(self, email: str, payload: ProfileUpdateIn) -> UserOut:
        user = self._by_email(email)
        self._apply_profile(user, payload)
        self.repo.commit()
        logger.info(f"Perfil actualizado: {user.id}")
        return UserOut.model_validate(user)

    def change_password(self, email: str, current_password: str, new_password: str) -> None:
        user = self._by_email(email)
        if not self.hasher.verify(current_password, user.password_hash):
            logger.warning(f"Cambio de contraseña rechazado para usuario {user.id}")
            raise AuthError("Contraseña actual incorrecta")

        user.password_hash = self.hasher.hash(new_password)
        self.repo.commit()
        logger.info(f"Contraseña cambiada para usuario {user.id}")

    # =====================================================
    # administration
    # =====================================================

    def get_user(self, user_id: int) -> UserOut:
        return UserOut.model_validate(self._by_id(user_id))

    def list_users(self, page: int, size: int) -> Page[UserOut]:
        return self._to_page(*self.repo.list_users(page, size), page, size)

    def list_active_users(self, page: int, size: int) -> Page[UserOut]:
        return self._to_page(*self.repo.list_active(page, size), page, size)

    def search_users(self, term: str, page: int, size: int) -> Page[UserOut]:
        return self._to_page(*self.repo.search_by_name(term, page, size), page, size)

    def list_users_by_role(self, role_name: str, page: int, size: int) -> Page[UserOut]:
        name = role_name.strip().upper().removeprefix("ROLE_")
        return self._to_page(*self.repo.list_by_role(name, page, size), page, size)

    def update_user(self, user_id: int, payload: AdminUserUpdateIn) -> UserOut:
        user = self._by_id(user_id)
        self._apply_profile(user, payload)
        if payload.active is not None:
            user.active = payload.active
        if payload.email_verified is not None:
            user.email_verified = payload.email_verified
        self.repo.commit()
        logger.info(f"Usuario actualizado: {user_id}")
        return UserOut.model_validate(user)

    def set_active(self, user_id: int, active: bool) -> UserOut:
        user = self._by_id(user_id)
        user.active = active
        self.repo.commit()
        logger.info(f"Usuario {user_id} {'activado' if active else 'desactivado'}")
        return UserOut.model_validate(user)

    def unlock_user(self, user_id: int) -> UserOut:
        user = self._by_id(user_id)
        user.reset_failed_logins()
        self.repo.commit()
        logger.info(f"Usuario desbloqueado: {user_id}")
        return UserOut.model_validate(user)

    def delete_user(self, user_id: int) -> None:
        # soft delete
        self.set_active(user_id, False)

    def assign_role(self, user_id: int, role_id: int) -> UserOut:
        user = self._by_id(user_id)
        role = self._role_by_id(role_id)
        if role not in user.roles:
            user.roles.append(role)
        self.repo.commit()
        logger.info(f"Rol {role.name} asignado a usuario {user_id}")
        return UserOut.model_validate(user)

    def remove_role(self, user_id: int, role_id: int) -> UserOut:
        user = self._by_id(user_id)
        role = self._role_by_id(role_id)
        if role in user.roles:
            if len(user.roles) == 1:
                raise BusinessError("Un usuario debe tener al menos un rol")
            user.roles.remove(role)
        self.repo.commit()
        logger.info(f"Rol {role.name} removido de usuario {user_id}")
        return UserOut.model_validate(user)

    def statistics(self) -> UserStatisticsOut:
        now = utcnow()
        month_ago = now - timedelta(days=30)

        total = self.repo.count()
        active = self.repo.count(UserModel.active.is_(True))
        verified = self.repo.count(UserModel.email_verified.is_(True))

        def percentage(part: int) -> float:
            return round(part * 100.0 / total, 2) if total else 0.0

        return UserStatisticsOut(
            total_users=total,
            active_users=active,
            inactive_users=total - active,
            verified_users=verified,
            unverified_users=total - verified,
            locked_users=self.repo.count_locked(now),
            users_by_role=self.repo.count_by_role(),
            active_percentage=percentage(active),
            verified_percentage=percentage(verified),
            new_last_30_days=self.repo.count(UserModel.created_at >= month_ago),
            active_last_30_days=self.repo.count(UserModel.last_login_at >= month_ago),
        )

    # =====================================================
    # helpers
    # =====================================================

    def _check_can_sign_in(self, user: UserModel) -> None:
        if not user.active:
            logger.warning(f"Login rechazado, usuario {user.id} inactivo")
            raise ForbiddenError("Usuario inactivo")
        if self.policy.require_email_verification and not user.email_verified:
            logger.warning(f"Login rechazado, usuario {user.id} sin email verificado")
            raise ForbiddenError("Email no verificado")

    def _login_response(self, user: UserModel, refresh_token: str, **extra) -> LoginOut:
        access = self.tokens.issue_access_token(user.email, user.role_names, user_id=user.id)
        return LoginOut(
            access_token=access,
            refresh_token=refresh_token,
            expires_in=self.tokens.config.expiration_seconds,
            expires_at=self.tokens.extract_expiration(access),
            user=UserOut.model_validate(user),
            roles=user.role_names,
            **extra,
        )

    def _apply_profile(self, user: UserModel, payload: ProfileUpdateIn) -> None:
        if payload.email and payload.email != user.email:
            if self.repo.email_exists(payload.email):
                raise BusinessError("El email ya está en uso", status_code=409)
            user.email = payload.email
        user.first_name = payload.first_name
        user.last_name = payload.last_name
        user.phone = payload.phone
        user.birth_date = payload.birth_date

    def _default_role(self) -> RoleModel:
        role = self.roles.get_by_name(RoleName.CLIENTE.value)
        if role is None:
            role = self.roles.add_role(
                RoleModel(name=RoleName.CLIENTE.value, description=RoleName.CLIENTE.description, active=True)
            )
        return role

    def _by_id(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        return user

    def _by_email(self, email: str) -> UserModel:
        user = self.repo.get_by_email(email)
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        return user

    def _role_by_id(self, role_id: int) -> RoleModel:
        role = self.roles.get_role(role_id)
        if role is None:
            raise NotFoundError("Rol no encontrado")
        return role

    @staticmethod
    def _to_page(users, total: int, page: int, size: int) -> Page[UserOut]:
        return Page[UserOut].of([UserOut.model_validate(u) for u in users], page, size, total)
