# tienda/domain/errors.py
from typing import Any, Dict


class AppError(Exception):
    """Base of every client-facing failure; the HTTP status travels with the error."""

    status_code = 500
    error = "Error interno del servidor"

    def __init__(self, message: str, status_code: int | None = None, details: Dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(AppError):
    status_code = 400
    error = "Error de validación"


class BusinessError(AppError):
    status_code = 400
    error = "Error de negocio"


class NotFoundError(BusinessError):
    status_code = 404
    error = "No encontrado"


class AuthError(AppError):
    status_code = 401
    error = "No autorizado"


class ForbiddenError(AppError):
    status_code = 403
    error = "Acceso denegado"


class UpstreamError(AppError):
    status_code = 502
    error = "Servicio no disponible"
