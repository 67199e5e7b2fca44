"""FastAPI application entry point."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import bulk, distance, health
from .config import settings
from .services.bulk import BulkSession


def create_app(session: BulkSession | None = None) -> FastAPI:
    app = FastAPI(title=settings.app_name)
    # Caches live as long as the app; every upload reuses them.
    app.state.bulk_session = session or BulkSession()
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition"],
        )

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
    app.include_router(distance.router, prefix=settings.api_prefix)
    app.include_router(bulk.router, prefix=settings.api_prefix)
    return app


app = create_app()
