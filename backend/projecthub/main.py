"""ProjectHub backend API entry point.

Run with: uvicorn projecthub.main:app
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from projecthub import __version__
from projecthub.api.errors import register_exception_handlers
from projecthub.api.routes import catalog, health, metrics, projects, tables
from projecthub.core.config import settings
from projecthub.core.database import engine
from projecthub.core.logging_config import configure_logging
from projecthub.core.metrics import app_info
from projecthub.core.middleware import ObservabilityMiddleware
from projecthub.core.redis import close_redis

configure_logging()

logger = structlog.stdlib.get_logger("projecthub.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle events."""
    app_info.info({"version": __version__, "env": settings.app_env, "component": "api"})
    logger.info("api_started", env=settings.app_env)

    yield

    await close_redis()
    await engine.dispose()
    logger.info("api_stopped")


app = FastAPI(
    title="ProjectHub",
    description="Project records admin API — schema-driven CRUD with enum validation",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)

# Routes — all REST under /api/
app.include_router(health.router, tags=["health"])
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(tables.router, prefix="/api/table", tags=["tables"])
app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
app.include_router(metrics.router, tags=["metrics"])
