"""
FastAPI application entry point for the HealthTrack API.

This module configures and creates the FastAPI application with:
- Structured JSON logging with request_id propagation
- Dependency Injection: services and repositories injected via Depends()
- Exception Handling: consistent error bodies via setup_exception_handlers()
- CORS middleware
- Lifespan Management: database and threshold tables initialized at startup
- In-memory metrics exposed for Prometheus scraping

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware: LoggingMiddleware → CORSMiddleware              │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py        /health, /ready, /metrics           │
    │    ├── users.py         users & doctor assignment           │
    │    ├── measurements.py  glucose / blood pressure / weight   │
    │    ├── statistics.py    window stats, trend, day buckets    │
    │    ├── export.py        CSV export                          │
    │    └── meta.py          threshold tables                    │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)       statistics core in              │
    │                             services/statistics/            │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)  → Database (SQLite)          │
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, settings
from core.dependencies import get_database, get_threshold_tables
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import (
    health_router,
    users_router,
    measurements_router,
    statistics_router,
    export_router,
    meta_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, open the database (creating the schema)
    and load the threshold tables so a broken YAML file fails at boot.
    """
    setup_logging(
        level=settings.healthtrack_log_level,
        json_format=settings.healthtrack_log_format == "json",
    )

    logger = logging.getLogger(__name__)
    logger.info("Starting HealthTrack API...")

    db = get_database()
    logger.info("Database initialized", extra={"db_path": db.db_path})

    get_threshold_tables()
    logger.info(
        "Statistics configured",
        extra={
            "timezone": settings.healthtrack_timezone,
            "default_window_days": settings.healthtrack_default_window_days,
        }
    )

    yield

    logger.info("HealthTrack API shutting down...")


app = FastAPI(
    title="HealthTrack API",
    description="Record glucose, blood pressure and weight measurements, classify them against "
                "clinical thresholds, and compute window statistics and trends.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

setup_exception_handlers(app)

# Middleware runs in reverse order of registration: logging wraps CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(measurements_router)
app.include_router(statistics_router)
app.include_router(export_router)
app.include_router(meta_router)


def run() -> None:
    """Start the API with uvicorn using the configured host and port."""
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )


if __name__ == "__main__":
    run()
