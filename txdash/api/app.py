"""FastAPI application for the transaction dashboard API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_config, get_section
from ..database import Database, StoreError
from .routers import analytics, seed, transactions


def create_app(config: dict | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit ``config`` the lifespan loads config.yaml at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan - open the store at startup, close it at shutdown."""
        app_config = config if config is not None else get_config()
        app.state.config = app_config
        app.state.db = Database(get_section(app_config, "paths")["database"])

        yield

        app.state.db.close()

    app = FastAPI(
        title="Transaction Dashboard API",
        description="Monthly listings, statistics and chart data for sale transactions",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS configuration for the browser dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_section(config, "api")["cors_origins"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transactions.router, prefix="/api", tags=["transactions"])
    app.include_router(analytics.router, prefix="/api", tags=["analytics"])
    app.include_router(seed.router, prefix="/api", tags=["seed"])

    @app.get("/health", tags=["health"])
    async def health_check(request: Request) -> dict:
        """Health check endpoint."""
        try:
            stats = request.app.state.db.get_stats()
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e
        return {
            "status": "healthy",
            "total_transactions": stats["total_transactions"],
        }

    return app


# Create app instance
app = create_app()
