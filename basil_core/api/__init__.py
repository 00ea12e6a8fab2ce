"""
FastAPI application factory and API package.

Run with:
    uvicorn basil_core.api:app --reload --port 8000

Or via the CLI:
    python -m basil_core serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from basil_core.config import get_settings
from basil_core.api.routes import health_router, pricing_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="BASIL Pricing API",
        description="Local price derivation for the BASIL inventory forms",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
    )

    # CORS: the dashboard calls this from the browser
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(pricing_router, prefix="/api/pricing", tags=["Pricing"])

    logger.info(f"{settings.app_name} API configured")
    return application


# Module-level instance for `uvicorn basil_core.api:app`
app = create_app()
