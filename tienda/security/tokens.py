# tienda/security/tokens.py
"""Signed, time-limited bearer tokens shared by every service.

One contract (issue / verify / extract) used by the gateway filter, the user
service (issuing) and the cart/product services (verifying). Verification
fails closed: any parse, signature, issuer or claim problem is an AuthError.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Tuple

import jwt

from tienda.domain.errors import AuthError
from tienda.utils.settings import JwtConfig
from tienda.utils.logging import get_logger

logger = get_logger(__name__)

ACCESS = "ACCESS"
REFRESH = "REFRESH"
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    token_type: str
    expires_at: datetime
    issued_at: datetime | None = None
    user_id: int | None = None
    roles: Tuple[str, ...] = ()

    @property
    def is_access(self) -> bool:
        return self.token_type == ACCESS

    @property
    def is_refresh(self) -> bool:
        return self.token_type == REFRESH


class TokenService:
    def __init__(self, config: JwtConfig):
        self.config = config

    # issue

    def issue_access_token(self, subject: str, roles: Iterable[str], user_id: int | None = None) -> str:
        claims: Dict[str, Any] = {"roles": list(roles), "type": ACCESS}
        if user_id is not None:
            claims["uid"] = user_id
        return self._encode(subject, claims, self.config.expiration_seconds)

    def issue_refresh_token(self, subject: str) -> str:
        return self._encode(subject, {"type": REFRESH}, self.config.refresh_expiration_seconds)

    def _encode(self, subject: str, claims: Dict[str, Any], ttl_seconds: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
            "iss": self.config.issuer,
        }
        return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)

    # verify

    def _decode(self, token: str) -> Dict[str, Any]:
        if not token or not isinstance(token, str):
            raise AuthError("Token JWT requerido")
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={"require": ["exp", "sub", "iss"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthError("Token JWT expirado") from e
        except jwt.PyJWTError as e:
            logger.warning(f"Token JWT inválido: {e}")
            raise AuthError("Token JWT inválido") from e

        # checked explicitly as well, independent of the library's own check
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= datetime.now(timezone.utc).timestamp():
            raise AuthError("Token JWT expirado")
        return payload

    def verify(self, token: str) -> TokenClaims:
        payload = self._decode(token)
        token_type = payload.get("type")
        if token_type not in (ACCESS, REFRESH):
            raise AuthError("Tipo de token desconocido")

        roles = payload.get("roles", [])
        if not isinstance(roles, list):
            raise AuthError("Claim 'roles' con formato inválido")

        uid = payload.get("uid")
        iat = payload.get("iat")
        return TokenClaims(
            subject=str(payload["sub"]),
            token_type=token_type,
            expires_at=_from_timestamp(payload["exp"]),
            issued_at=_from_timestamp(iat) if isinstance(iat, (int, float)) else None,
            user_id=uid if isinstance(uid, int) else None,
            roles=tuple(str(r) for r in roles),
        )

    def verify_access_token(self, token: str) -> TokenClaims:
        claims = self.verify(token)
        if not claims.is_access:
            raise AuthError("Se requiere un token de acceso")
        return claims

    def verify_refresh_token(self, token: str) -> TokenClaims:
        claims = self.verify(token)
        if not claims.is_refresh:
            raise AuthError("Refresh token inválido")
        return claims

    # extract, each accessor checks its own claim

    def extract_subject(self, token: str) -> str:
        sub = self._decode(token).get("sub")
        if not isinstance(sub, str) or not sub:
            raise AuthError("Claim 'sub' ausente")
        return sub

    def extract_roles(self, token: str) -> List[str]:
        roles = self._decode(token).get("roles")
        if not isinstance(roles, list):
            raise AuthError("Claim 'roles' ausente")
        return [str(r) for r in roles]

    def extract_token_type(self, token: str) -> str:
        token_type = self._decode(token).get("type")
        if not isinstance(token_type, str):
            raise AuthError("Claim 'type' ausente")
        return token_type

    def extract_expiration(self, token: str) -> datetime:
        return _from_timestamp(self._decode(token)["exp"])

    def is_access_token(self, token: str) -> bool:
        try:
            return self.extract_token_type(token) == ACCESS
        except AuthError:
            return False

    def is_refresh_token(self, token: str) -> bool:
        try:
            return self.extract_token_type(token) == REFRESH
        except AuthError:
            return False

    @staticmethod
    def extract_bearer(header: str | None) -> str | None:
        if header and header.startswith(BEARER_PREFIX):
            token = header[len(BEARER_PREFIX):].strip()
            return token or None
        return None


def _from_timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
