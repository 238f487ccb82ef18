"""HTTP client factory and error mapping for the XeCare backend."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx

from xecare.config import Settings, get_settings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], "str | None"]


class ApiError(Exception):
    """Raised when a backend call fails at the transport or HTTP level."""

    def __init__(
        self, message: str, *, status_code: int | None = None, detail: Any = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class AuthenticationError(ApiError):
    """Raised for 401/403 responses: the stored credentials are not usable."""


def create_http_client(
    settings: Settings | None = None,
    *,
    token_provider: TokenProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Return an ``AsyncClient`` bound to the backend base URL.

    ``token_provider`` is consulted on every request so a token stored after
    login (or cleared after logout) is picked up without rebuilding the client.
    """

    settings = settings or get_settings()

    async def _attach_bearer_token(request: httpx.Request) -> None:
        if token_provider is None or "Authorization" in request.headers:
            return
        token = token_provider()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        headers={"Accept": "application/json"},
        event_hooks={"request": [_attach_bearer_token]},
        transport=transport,
    )


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    json_body: Any = None,
) -> Any:
    """Perform a request and return the decoded JSON body (``None`` if empty)."""

    try:
        response = await client.request(method, url, params=params, json=json_body)
    except httpx.HTTPError as exc:
        logger.debug("Request %s %s failed: %s", method, url, exc)
        raise ApiError(f"Request to {url} failed: {exc}") from exc

    raise_for_api_status(response)
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise ApiError(
            f"Invalid JSON returned by {url}", status_code=response.status_code
        ) from exc


def raise_for_api_status(response: httpx.Response) -> None:
    """Translate an unsuccessful ``response`` into the matching exception."""

    status_code = response.status_code
    if 200 <= status_code < 300:
        return

    detail = _extract_error_detail(response)
    url = response.request.url.path
    if status_code in (401, 403):
        logger.info(
            "Backend rejected credentials for %s with status %s", url, status_code
        )
        raise AuthenticationError(
            f"Authentication failed with status {status_code}",
            status_code=status_code,
            detail=detail,
        )
    raise ApiError(
        f"API error {status_code} for {url}", status_code=status_code, detail=detail
    )


def _extract_error_detail(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        body = response.json()
    except json.JSONDecodeError:
        return response.text.strip() or None
    if isinstance(body, dict):
        return body.get("message") or body.get("detail") or body.get("error") or body
    return body


__all__ = [
    "ApiError",
    "AuthenticationError",
    "TokenProvider",
    "create_http_client",
    "raise_for_api_status",
    "request_json",
]
