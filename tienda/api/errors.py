# tienda/api/errors.py
"""One place that turns exceptions into the JSON error body every service returns."""
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tienda.domain.errors import AppError
from tienda.utils.clock import utcnow
from tienda.utils.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Ha ocurrido un error inesperado"


def error_response(
    status: int,
    error: str,
    message: str,
    path: str,
    details: Dict[str, Any] | None = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "timestamp": utcnow().isoformat(),
        "status": status,
        "error": error,
        "message": message,
        "path": path,
    }
    if details:
        body["details"] = details
    return JSONResponse(status_code=status, content=body)


def _field_name(loc) -> str:
    # ("body", "quantity") -> "quantity", ("query", "cantidad") -> "cantidad"
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts) or "request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error}: {exc.message} [{request.url.path}]")
    else:
        logger.warning(f"{exc.error}: {exc.message} [{request.method} {request.url.path}]")
    return error_response(exc.status_code, exc.error, exc.message, request.url.path, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = {}
    for err in exc.errors():
        details.setdefault(_field_name(err.get("loc", ())), err.get("msg", "Valor inválido"))
    logger.warning(f"Validacion fallida en {request.url.path}: {details}")
    return error_response(400, "Error de validación", "Los datos enviados no son válidos", request.url.path, details)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, "Error HTTP", str(exc.detail), request.url.path)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # full detail stays in the log
    logger.exception(f"Error no controlado en {request.method} {request.url.path}: {exc}")
    return error_response(500, "Error interno del servidor", GENERIC_ERROR_MESSAGE, request.url.path)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
