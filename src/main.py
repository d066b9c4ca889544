"""
FastAPI application for the Ripped City portal.

`create_app()` builds the app; the module-level `app` is what the ASGI
server imports.

Local development against the in-memory backend:
    SUPABASE_MOCK_MODE=true MOCK_USERS=coach@example.com:secret \
        COACH_EMAIL=coach@example.com uvicorn src.main:app --reload

Deployed:
    gunicorn src.main:app -w 1 -k uvicorn.workers.UvicornWorker

Each browser's portal state lives in this process, so keep a single
worker or route a visitor to the same worker every time.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import reset_state
from .api.routes import auth, clients, health, intake, landing, view
from .config.settings import get_settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)

# (router, prefix, tag)
ROUTERS = (
    (health.router, "/health", "Health"),
    (view.router, "/api/v1/view", "View"),
    (auth.router, "/api/v1/auth", "Auth"),
    (clients.router, "/api/v1/clients", "Clients"),
    (intake.router, "/api/v1/intake", "Intake"),
    (landing.router, "/api/v1/landing", "Landing"),
)

API_DESCRIPTION = """
Backend-for-frontend for the Ripped City coaching site.

## Flow

1. **Landing**: `GET /api/v1/landing/content`, intake wizard under `/api/v1/intake`
2. **Sign in**: `POST /api/v1/auth/sign-in`
3. **Route**: `GET /api/v1/view` tells the shell whether to show the
   dashboard, the client portal, or a fallback
4. **Edit**: `POST /api/v1/clients`, `PUT /api/v1/clients/{client_id}`

A browser is identified by the `portal_id` cookie set on its first request.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Check configuration on the way up; drop every visitor on the way down,
    which releases their auth subscriptions.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "Portal API starting",
        extra={
            "version": __version__,
            "mock_mode": settings.supabase_mock_mode,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        # Visitors see the config error view until this is fixed
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    if settings.demo_access_enabled:
        logger.warning("Demo access enabled; do not run this configuration in production")

    yield

    reset_state()
    logger.info("Portal API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=API_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # The visitor cookie has to cross origins with the shell
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router, prefix, tag in ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def unhandled_exception(request, exc):
        """Log the details here; the browser only gets a generic 500."""
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Something went wrong on our side. Please try again."},
        )

    logger.info(
        "Portal app created",
        extra={"routers": len(ROUTERS), "mock_mode": settings.supabase_mock_mode}
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
