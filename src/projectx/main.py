"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, database engine).
Middleware, CORS, error handlers and routers all registered here.

The TokenCodec is built here from settings and parked on app.state, so
the signing secret is injected once instead of living in a module-level
constant. Tests build an app with their own Settings.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projectx import __version__
from projectx.api import api_router
from projectx.auth.jwt import TokenCodec
from projectx.config import Settings, settings
from projectx.errors import AuthError, InvalidInput, ProjectXError
from projectx.logs import configure_logging
from projectx.middleware.request_id import RequestIdMiddleware
from projectx.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    app_settings: Settings = app.state.settings
    logger.info(
        "projectx.starting",
        version=__version__,
        environment=app_settings.environment,
        port=app_settings.port,
    )

    yield

    logger.info("projectx.shutdown")

    from projectx.db.engine import engine
    await engine.dispose()


# ─── Error handlers ──────────────────────────────────────


async def projectx_error_handler(request: Request, exc: ProjectXError) -> JSONResponse:
    """Domain errors → {"detail": ...} with the error's status code."""
    content = {"detail": exc.detail}
    headers = None
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, InvalidInput) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed payloads are 400 InvalidInput, not FastAPI's default 422."""
    return JSONResponse(
        status_code=InvalidInput.status_code,
        content={
            "detail": InvalidInput.default_detail,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unclassified (store outage, bug): log it, say nothing specific."""
    logger.exception("request.unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level, json=app_settings.log_json)

    app = FastAPI(
        title="Project-X",
        description="Project and task tracker backend",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.token_codec = TokenCodec(
        secret=app_settings.jwt_secret,
        algorithm=app_settings.jwt_algorithm,
        expires_delta=timedelta(minutes=app_settings.access_token_expire_minutes),
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ProjectXError, projectx_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: projectx.main:app)
app = create_app()
