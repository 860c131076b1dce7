"""FastAPI application factory.

The app does not reach for a global domain: it is handed a ``Services``
container built over an explicit ``Storage`` and exposes it to the routes
through ``app.state``.
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from gamezone.api.accounts import auth_router
from gamezone.api.catalogue import product_router
from gamezone.api.routes import cart_router, order_router
from gamezone.errors import StorefrontError
from gamezone.services import Services
from gamezone.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(services: Services) -> FastAPI:
    app = FastAPI(
        title="GameZone API",
        description="Marketplace for pre-owned games, consoles and accessories",
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(services.settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id to every log line emitted while serving the request."""
        request_id = request.headers.get("x-request-id") or uuid4().hex
        clear_context()
        add_context(request_id=request_id, path=request.url.path, method=request.method)
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, storefront_error_handler)

    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "domain": services.storage.domain.name}

    return app
