"""FastAPI application factory.

create_app() returns a configured FastAPI instance: middleware, CORS,
error handlers and routers. The lifespan sets up logging, optionally
creates the schema (dev/SQLite), and disposes of the engine on shutdown.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coursebook import __version__
from coursebook.api import api_router
from coursebook.config import settings
from coursebook.errors import register_exception_handlers
from coursebook.log import configure_logging
from coursebook.middleware.request_context import RequestContextMiddleware
from coursebook.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: anything before `yield` runs at startup, after `yield` at
    shutdown. httpx.ASGITransport doesn't run it, so tests never touch
    the module-level engine.
    """
    configure_logging()
    logger.info(
        "coursebook.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from coursebook.db.engine import create_schema, engine

    if settings.auto_create_schema:
        await create_schema()
        logger.info("coursebook.schema_created")

    yield

    logger.info("coursebook.shutdown")
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Coursebook",
        description="REST API for users and the courses they own",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration.
    # Request flow: RequestContext → Security → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Location", "X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": "Welcome to the Coursebook REST API!"}

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: coursebook.main:app)
app = create_app()
