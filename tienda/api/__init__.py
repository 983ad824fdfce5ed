# tienda/api/__init__.py
from contextlib import asynccontextmanager
from typing import Callable, Iterable, Sequence

from fastapi import APIRouter, FastAPI
from sqlalchemy import Table

from tienda.api.errors import register_exception_handlers
from tienda.api.routers.health import router as health_router
from tienda.data.database import init_db
from tienda.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_service_app(
    title: str,
    routers: Sequence[APIRouter],
    tables: Iterable[Table],
    on_startup: Callable[[], None] | None = None,
) -> FastAPI:
    """Common shell of every backend service: logging, error handlers, health, schema on startup."""
    configure_logging()
    tables = list(tables)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(tables)
        if on_startup is not None:
            on_startup()
        logger.info(f"{title} listo")
        yield

    app = FastAPI(title=title, version="1.0.0", lifespan=lifespan)
    register_exception_handlers(app)

    app.include_router(health_router)
    # order matters: fixed prefixes before catch-all /{id} routes
    for router in routers:
        app.include_router(router)

    return app
