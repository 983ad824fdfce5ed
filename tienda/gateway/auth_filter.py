# tienda/gateway/auth_filter.py
from typing import Dict, Iterable, Mapping

from tienda.domain.errors import AuthError
from tienda.security.tokens import TokenService
from tienda.utils.logging import get_logger

logger = get_logger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
IDENTITY_HEADERS = {USER_ID_HEADER.lower(), USER_ROLE_HEADER.lower()}


def matches(path: str, pattern: str) -> bool:
    """Exact match, or '/prefix/**' matching the prefix itself and anything below it."""
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        return path == prefix or path.startswith(prefix + "/")
    return path == pattern


def is_public(path: str, patterns: Iterable[str]) -> bool:
    return any(matches(path, p) for p in patterns)


def strip_identity_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    # identity only ever comes from a verified token
    return {k: v for k, v in headers.items() if k.lower() not in IDENTITY_HEADERS}


def identity_headers(authorization: str | None, tokens: TokenService) -> Dict[str, str]:
    token = tokens.extract_bearer(authorization)
    if token is None:
        raise AuthError("Token JWT requerido")

    claims = tokens.verify_access_token(token)
    user_id = str(claims.user_id) if claims.user_id is not None else claims.subject
    logger.debug(f"Token valido para {claims.subject}")
    return {
        USER_ID_HEADER: user_id,
        USER_ROLE_HEADER: ",".join(claims.roles),
    }
