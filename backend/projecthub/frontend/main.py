"""Frontend host entry point — project pages plus the /api reverse proxy.

Run with: uvicorn projecthub.frontend.main:app
"""

from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI

from projecthub import __version__
from projecthub.api.routes import metrics
from projecthub.core.config import settings
from projecthub.core.logging_config import configure_logging
from projecthub.core.metrics import app_info
from projecthub.core.middleware import ObservabilityMiddleware
from projecthub.frontend import pages
from projecthub.frontend.api_client import ProjectsApiClient
from projecthub.frontend.proxy import ReverseProxy, build_proxy_router

configure_logging("frontend")

logger = structlog.stdlib.get_logger("projecthub.frontend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle events."""
    app_info.info({"version": __version__, "env": settings.app_env, "component": "frontend"})

    # Default httpx timeouts apply; the proxy sets none of its own
    proxy_client = httpx.AsyncClient()
    api_client = httpx.AsyncClient(base_url=settings.frontend.frontend_api_base_url)
    app.state.reverse_proxy = ReverseProxy(settings.proxy.proxy_backend_url, proxy_client)
    app.state.projects_api = ProjectsApiClient(api_client)
    logger.info(
        "frontend_started",
        backend=settings.proxy.proxy_backend_url,
        mount=settings.proxy.proxy_mount_path,
    )

    yield

    await proxy_client.aclose()
    await api_client.aclose()


app = FastAPI(
    title="ProjectHub Frontend",
    description="Project list UI and API reverse proxy",
    version=__version__,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
)

app.add_middleware(ObservabilityMiddleware)

app.include_router(build_proxy_router(settings.proxy), tags=["proxy"])
app.include_router(pages.router, tags=["pages"])
app.include_router(metrics.router, tags=["metrics"])


@app.get("/health/live", tags=["health"])
async def liveness():
    """Liveness probe — process is alive. /api/health is proxied to the backend."""
    return {"status": "live"}
