"""Keyforge FastAPI application entry point."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from keyforge import __version__
from keyforge.config import get_settings
from keyforge.db import close_db, create_engine, init_db
from keyforge.errors import KeyforgeError, ValidationError
from keyforge.stores.sql import SQLRowStore

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("keyforge.startup", version=__version__)
    settings = get_settings()
    engine = create_engine(settings.database)
    await init_db(engine)
    app.state.engine = engine
    app.state.row_store = SQLRowStore(engine)

    yield

    # Shutdown
    logger.info("keyforge.shutdown")
    await close_db(engine)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Keyforge",
        description="API key management for SaaS accounts",
        version=__version__,
        lifespan=lifespan,
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    # Error handlers
    @app.exception_handler(KeyforgeError)
    async def keyforge_error_handler(request: Request, exc: KeyforgeError):
        """Handle Keyforge errors with consistent format."""
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies as validation errors."""
        request_id = getattr(request.state, "request_id", None)
        error = ValidationError(
            "Malformed request",
            details={
                "fields": [".".join(str(p) for p in err["loc"]) for err in exc.errors()],
            },
        )
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_dict(request_id),
        )

    # Health check
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    # Import and register API routers
    from keyforge.api.v1 import router as v1_router

    app.include_router(v1_router, prefix="/v1")

    return app


# Create default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "keyforge.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=True,
    )
