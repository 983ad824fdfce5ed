# tienda/gateway/main.py
"""
API gateway: one public entry point in front of the services.

/api/<service>/** is forwarded with the /api segment stripped. Every path
outside the public allowlist needs a valid access token; the verified identity
is passed downstream in X-User-Id / X-User-Role.
"""
from functools import lru_cache

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from tienda.api.errors import error_response, register_exception_handlers
from tienda.api.security import get_token_service
from tienda.domain.errors import AuthError
from tienda.gateway import auth_filter, proxy
from tienda.gateway.routes import resolve
from tienda.security.tokens import TokenService
from tienda.utils.logging import configure_logging, get_logger
from tienda.utils.settings import GatewayConfig, gateway_config

logger = get_logger(__name__)

PROXIED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@lru_cache
def get_gateway_config() -> GatewayConfig:
    return gateway_config()


@lru_cache
def get_upstream() -> proxy.UpstreamClient:
    return proxy.UpstreamClient(timeout=get_gateway_config().timeout_seconds)


def create_app() -> FastAPI:
    configure_logging()
    config = get_gateway_config()

    app = FastAPI(title="API Gateway", version="1.0.0")
    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "UP", "service": "api-gateway"}

    @app.api_route("/api/{path:path}", methods=PROXIED_METHODS)
    async def forward(
        request: Request,
        path: str,
        cfg: GatewayConfig = Depends(get_gateway_config),
        tokens: TokenService = Depends(get_token_service),
        upstream: proxy.UpstreamClient = Depends(get_upstream),
    ):
        incoming = request.url.path
        target = resolve(incoming, cfg.routes)
        if target is None:
            return error_response(404, "No encontrado", f"Ruta no encontrada: {incoming}", incoming)

        headers = auth_filter.strip_identity_headers(proxy.request_headers(request.headers))
        if not auth_filter.is_public(incoming, cfg.public_paths):
            try:
                headers.update(auth_filter.identity_headers(request.headers.get("authorization"), tokens))
            except AuthError as e:
                logger.warning(f"Acceso rechazado a {incoming}: {e.message}")
                return JSONResponse(status_code=401, content={"error": e.message, "status": 401})

        body = await request.body()
        logger.info(f"{request.method} {incoming} -> {target.url}")
        resp = await run_in_threadpool(
            upstream.forward,
            request.method,
            target.url,
            headers,
            list(request.query_params.multi_items()),
            body,
        )
        return Response(
            content=resp.content,
            status_code=resp.status_code,
            headers=proxy.response_headers(resp.headers),
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8080)
