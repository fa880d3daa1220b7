"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.savemate.api.http.app_data import ApplicationDependencies, build_dependencies
from src.savemate.api.http.errors import internal_error_response, register_error_handlers
from src.savemate.api.http.routers import admin, auth, business, categories, deals
from src.savemate.api.utils.app_startup import configure_logging
from src.savemate.runtime.config.config_data import ConfigData
from src.savemate.runtime.context import get_config


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self._hsts = hsts

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        if self._hsts:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def check_production_config(config: ConfigData) -> None:
    """Refuse to serve production traffic with development secrets or open CORS."""
    if config.app.environment != "production":
        return
    if config.jwt.uses_dev_secrets:
        raise RuntimeError("JWT secrets must be configured in production")
    if "*" in config.app.cors.origins and config.app.cors.allow_credentials:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start = time.perf_counter()
    with logger.contextualize(
        request_id=request_id, method=request.method, path=request.url.path
    ):
        try:
            logger.info("request.start")
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            response = internal_error_response(request)
        else:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end {} {}", response.status_code, round(duration_ms, 1))

        response.headers.setdefault("X-Request-ID", request_id)
        return response


def create_app(
    config: ConfigData | None = None,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Build the API.

    ``dependencies`` replaces the services built at startup; tests use it to
    run against an in-memory database.
    """
    config = dependencies.config if dependencies else (config or get_config())
    check_production_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = dependencies is None
        if owned:
            app.state.app_dependencies = build_dependencies(config)
        logger.info("Starting up application in {} environment", config.app.environment)
        try:
            yield
        finally:
            logger.info("Shutting down application")
            # injected dependencies are disposed by whoever built them
            if owned:
                app.state.app_dependencies.database_service.dispose()

    is_production = config.app.environment == "production"
    app = FastAPI(
        title="SaveMate API",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    if dependencies is not None:
        app.state.app_dependencies = dependencies

    register_error_handlers(app)
    app.middleware("http")(log_requests)
    app.add_middleware(SecurityHeadersMiddleware, hsts=is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
        expose_headers=["X-Request-ID"],
    )

    app.include_router(auth.router)
    app.include_router(categories.router)
    app.include_router(deals.router)
    app.include_router(business.router)
    app.include_router(admin.router)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/ready")
    async def readiness(request: Request) -> dict[str, str]:
        """Readiness check: the database and the reset token store must answer."""
        deps: ApplicationDependencies = request.app.state.app_dependencies
        if not deps.database_service.health_check():
            return {"status": "degraded"}
        if not await deps.reset_token_store.ping():
            return {"status": "degraded"}
        return {"status": "ready"}

    return app


def main() -> None:
    import uvicorn

    config = get_config()
    configure_logging(config)
    uvicorn.run(
        create_app(config),
        host=config.app.host,
        port=config.app.port,
        access_log=False,  # We handle access logging in middleware
    )


if __name__ == "__main__":
    main()
