"""Reverse proxy — forwards frontend-host API calls to the backend origin.

One-to-one path mapping: ``<backend>/<path>?<query>``. Method, headers and
body pass through unchanged; the response comes back with permissive CORS
headers whatever its status. No retries and no caching; a transport failure
propagates out of the handler.
"""

import time

import httpx
import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from projecthub.core.config import ProxySettings
from projecthub.core.metrics import (
    proxy_upstream_duration_seconds,
    proxy_upstream_requests_total,
)

logger = structlog.stdlib.get_logger("projecthub.proxy")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

NO_BODY_METHODS = frozenset({"GET", "HEAD"})

PROXIED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# httpx has already decoded and de-chunked the body; framing is redone downstream
_DROPPED_RESPONSE_HEADERS = frozenset(
    {"content-length", "content-encoding", "transfer-encoding", "connection", "keep-alive"}
)


class ReverseProxy:
    def __init__(self, backend_url: str, client: httpx.AsyncClient):
        self._backend_url = backend_url.rstrip("/")
        self._client = client

    def target_url(self, request: Request) -> str:
        url = f"{self._backend_url}{request.url.path}"
        if request.url.query:
            url = f"{url}?{request.url.query}"
        return url

    async def handle(self, request: Request) -> Response:
        method = request.method
        body = None if method in NO_BODY_METHODS else await request.body()
        target = self.target_url(request)

        start = time.perf_counter()
        upstream = await self._client.request(
            method,
            target,
            headers=request.headers.raw,
            content=body,
        )
        proxy_upstream_duration_seconds.labels(method=method).observe(
            time.perf_counter() - start
        )
        proxy_upstream_requests_total.labels(
            method=method, status=upstream.status_code
        ).inc()
        logger.debug("proxied", method=method, target=target, status=upstream.status_code)

        response = Response(content=upstream.content, status_code=upstream.status_code)
        for name, value in upstream.headers.multi_items():
            if name.lower() not in _DROPPED_RESPONSE_HEADERS:
                response.headers.append(name, value)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

    @staticmethod
    def preflight() -> Response:
        """Local answer to a CORS preflight, used when preflight forwarding is off."""
        return Response(
            status_code=204,
            headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"},
        )


def get_reverse_proxy(request: Request) -> ReverseProxy:
    """Return the reverse proxy from app state."""
    return request.app.state.reverse_proxy


def build_proxy_router(proxy_settings: ProxySettings) -> APIRouter:
    """Router forwarding every path under the configured mount point."""
    router = APIRouter()
    mount = proxy_settings.proxy_mount_path.rstrip("/")

    @router.api_route(
        f"{mount}/{{path:path}}",
        methods=PROXIED_METHODS,
        include_in_schema=False,
    )
    async def proxy(
        path: str,
        request: Request,
        reverse_proxy: ReverseProxy = Depends(get_reverse_proxy),
    ):
        if request.method == "OPTIONS" and proxy_settings.proxy_answer_preflight:
            return reverse_proxy.preflight()
        return await reverse_proxy.handle(request)

    return router
