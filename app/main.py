"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here. See app.core.lifespan and app.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.core.config import get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.core.limiter import limiter
from app.middleware import RequestIDMiddleware
from app.shared.telemetry import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    register_exception_handlers(app)

    # Middleware: first added = innermost. Request ID wraps CORS so preflight
    # responses carry the header too.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
