"""FastAPI application factory for the PackScan API."""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from logging_config import configure_logging

# Patchable imports for testing
from db.schema import ensure_application_schema
from extraction.oracle import ExtractionOracle

configure_logging()
logger = logging.getLogger(__name__)


def parse_cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(oracle: ExtractionOracle | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="PackScan API",
        description="Packaging inspection lists, prospect classification and BI review",
        version="0.1.0",
    )

    try:
        ensure_application_schema()
    except Exception:
        logger.exception("Application database bootstrap failed")
        raise

    app.state.oracle = oracle or ExtractionOracle()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Photos make list payloads large
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    from api.routes import (
        system_router,
        lists_router,
        records_router,
        review_router,
        analytics_router,
        settings_router,
    )

    app.include_router(system_router)
    app.include_router(lists_router)
    app.include_router(records_router)
    app.include_router(review_router)
    app.include_router(analytics_router)
    app.include_router(settings_router)

    return app


def main():
    """Run the API server."""
    import uvicorn
    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
