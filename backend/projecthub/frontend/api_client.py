"""HTTP client for the backend API, used by the frontend pages.

Failures are raised as ApiError carrying the server's ``error`` message when
the response had one.
"""

from typing import Any

import httpx


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


def error_message(exc: BaseException, fallback: str) -> str:
    """Best-effort user-facing message: server error, then transport error, then fallback."""
    server_message = getattr(exc, "server_message", None)
    if server_message:
        return server_message
    return str(exc) or fallback


def _server_error(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class ProjectsApiClient:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def get_columns(self, table_name: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/columns/{table_name}")

    async def list_projects(self) -> dict[str, Any]:
        return await self._request("GET", "/api/projects")

    async def get_project(self, project_id: Any) -> dict[str, Any]:
        return await self._request("GET", f"/api/projects/{project_id}")

    async def create_project(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/api/projects", json=data)

    async def update_project(self, project_id: Any, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/api/projects/{project_id}", json=data)

    async def delete_project(self, project_id: Any) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/projects/{project_id}")

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            raise ApiError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                server_message=_server_error(response),
            )

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON from {method} {path}") from exc
        return payload if isinstance(payload, dict) else {}
