"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from app.api.routes import router as api_router
from app.config import Settings, settings as default_settings
from app.core.exceptions import AppError
from app.core.logging import configure_logging
from app.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    apply_security_headers,
)
from app.db.session import Database

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    database: Database = app.state.database
    # Startup
    await database.connect()
    logger.info("%s started in %s mode", app.title, app.state.settings.environment)
    yield
    # Shutdown: runs after the server has drained in-flight requests
    logger.info("Shutting down gracefully...")
    await database.disconnect()


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or None, "message": message})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Translate every error into a ``{"success": false, "message": ...}`` body."""

    def _add_cors_to_response(response: Response, request: Request) -> None:
        origin = request.headers.get("origin")
        origins = request.app.state.settings.cors_origins
        if origin and (origin in origins or "*" in origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> Response:
        content: dict[str, Any] = {"success": False, "message": exc.message}
        errors = getattr(exc, "errors", None)
        if errors:
            content["errors"] = errors
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Validation failed",
                "errors": _validation_errors(exc),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        """Log the failure and return a generic 500 without internal detail."""
        logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
        response = JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )
        # Sent from outside the middleware stack, so add its headers here
        _add_cors_to_response(response, request)
        return apply_security_headers(
            response, hsts=request.app.state.settings.environment == "production"
        )


def create_application(
    settings: Settings | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="User authentication and administration API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database(settings)

    # Order: last added runs first on request, so request logging sees every response
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
            exempt_prefixes=("/api/health",),
        )
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.environment == "production")
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    return app


app = create_application()
