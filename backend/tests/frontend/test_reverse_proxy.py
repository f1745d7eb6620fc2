"""Reverse proxy tests: the frontend host forwards /api/* to a fake backend origin."""

from collections import Counter

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from projecthub.core.config import ProxySettings
from projecthub.frontend.proxy import (
    CORS_HEADERS,
    ReverseProxy,
    build_proxy_router,
    get_reverse_proxy,
)

BACKEND_URL = "http://backend.test"


def json_response(status_code, payload):
    return httpx.Response(status_code, json=payload)


def assert_cors(resp: httpx.Response) -> None:
    for name, value in CORS_HEADERS.items():
        assert resp.headers[name] == value


async def test_get_is_forwarded_with_path_and_query(frontend_client, backend_routes, backend_requests):
    backend_routes[("GET", "/api/projects")] = json_response(200, {"success": True, "data": []})

    resp = await frontend_client.get("/api/projects?x=1")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": []}
    assert len(backend_requests) == 1
    forwarded = backend_requests[0]
    assert str(forwarded.url) == f"{BACKEND_URL}/api/projects?x=1"
    assert forwarded.method == "GET"
    assert forwarded.content == b""
    assert_cors(resp)


async def test_post_body_and_headers_pass_through(frontend_client, backend_routes, backend_requests):
    backend_routes[("POST", "/api/projects")] = lambda request: httpx.Response(
        201, content=request.content, headers={"Content-Type": "application/json", "X-Backend": "yes"}
    )

    resp = await frontend_client.post(
        "/api/projects", json={"name": "Pier 40"}, headers={"X-Trace": "abc"}
    )

    assert resp.status_code == 201
    assert resp.json() == {"name": "Pier 40"}
    assert resp.headers["X-Backend"] == "yes"
    forwarded = backend_requests[0]
    assert forwarded.headers["X-Trace"] == "abc"
    assert forwarded.headers["Content-Type"] == "application/json"


async def test_every_inbound_header_is_forwarded(frontend_client, backend_routes, backend_requests):
    backend_routes[("POST", "/api/projects")] = json_response(201, {"success": True})

    request = frontend_client.build_request(
        "POST", "/api/projects", json={"name": "Pier 40"}, headers={"X-Trace": "abc"}
    )
    await frontend_client.send(request)

    inbound = Counter(request.headers.multi_items())
    forwarded = Counter(backend_requests[0].headers.multi_items())
    assert inbound - forwarded == Counter()
    # Only client defaults may be added when the inbound request lacks them
    extra = {name for name, _ in (forwarded - inbound)}
    assert extra <= {"accept", "accept-encoding", "connection", "user-agent"}


async def test_error_responses_keep_status_and_get_cors(frontend_client, backend_routes):
    backend_routes[("DELETE", "/api/projects/9")] = json_response(404, {"error": "Project not found"})

    resp = await frontend_client.delete("/api/projects/9")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Project not found"}
    assert_cors(resp)


async def test_cors_headers_override_upstream(frontend_client, backend_routes):
    backend_routes[("GET", "/api/health")] = httpx.Response(
        200, json={"status": "ok"}, headers={"Access-Control-Allow-Origin": "http://other"}
    )

    resp = await frontend_client.get("/api/health")

    assert resp.headers.get_list("Access-Control-Allow-Origin") == ["*"]


async def test_options_is_forwarded_by_default(frontend_client, backend_routes, backend_requests):
    backend_routes[("OPTIONS", "/api/projects")] = httpx.Response(200)

    resp = await frontend_client.options("/api/projects")

    assert resp.status_code == 200
    assert backend_requests[0].method == "OPTIONS"
    assert_cors(resp)


async def test_transport_failure_propagates(frontend_client, backend_routes):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend_routes[("GET", "/api/projects")] = refuse

    with pytest.raises(httpx.ConnectError):
        await frontend_client.get("/api/projects")


async def test_backend_path_prefix_is_kept():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as upstream:
        reverse_proxy = ReverseProxy("https://origin.test/v2/", upstream)
        app = FastAPI()
        app.include_router(build_proxy_router(ProxySettings()))
        app.dependency_overrides[get_reverse_proxy] = lambda: reverse_proxy

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://f") as c:
            await c.get("/api/tables")

    assert seen == ["https://origin.test/v2/api/tables"]


async def test_preflight_answered_locally_when_enabled():
    def handler(request):
        raise AssertionError("preflight must not reach the backend")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as upstream:
        reverse_proxy = ReverseProxy(BACKEND_URL, upstream)
        app = FastAPI()
        app.include_router(build_proxy_router(ProxySettings(proxy_answer_preflight=True)))
        app.dependency_overrides[get_reverse_proxy] = lambda: reverse_proxy

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://f") as c:
            resp = await c.options("/api/projects")

    assert resp.status_code == 204
    assert resp.headers["Access-Control-Max-Age"] == "86400"
    assert_cors(resp)


def test_backend_url_gets_scheme_and_loses_trailing_slash():
    assert ProxySettings(proxy_backend_url="api.example.org/").proxy_backend_url == (
        "https://api.example.org"
    )
