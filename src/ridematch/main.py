"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import health, matching, push, routing, watches
from .config import settings
from .services.notifications import shutdown_trigger_executor


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Background watch triggers run to completion before the process exits.
    shutdown_trigger_executor(wait=True)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        # Add root_path for Railway proxy compatibility
        root_path="",
        lifespan=lifespan,
    )
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(matching.router, prefix=settings.api_prefix)
    app.include_router(watches.router, prefix=settings.api_prefix)
    app.include_router(routing.router, prefix=settings.api_prefix)
    app.include_router(push.router, prefix=settings.api_prefix)
    return app


app = create_app()
