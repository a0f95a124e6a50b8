"""Async HTTP client for the Attio REST API."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ..config.constants import DEFAULT_BASE_URL, REQUEST_TIMEOUT_SECONDS
from ..exceptions import ApiError, NetworkError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the ``message`` out of an Attio error body if there is one."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message
    return response.reason_phrase or f"HTTP {response.status_code}"


class AttioClient:
    """Thin wrapper over ``httpx.AsyncClient`` that raises our exceptions.

    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AttioClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiError: the server answered with a 4xx/5xx status
            NetworkError: the request never completed or the body is not JSON
        """
        try:
            response = await self.client.request(method, path, params=params, json=json_body)
        except httpx.TimeoutException as e:
            raise NetworkError("Request timed out", path=path) from e
        except httpx.TransportError as e:
            raise NetworkError("Request failed", path=path) from e

        if response.status_code >= 400:
            raise ApiError(_error_message(response), status=response.status_code, path=path)

        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise NetworkError("Invalid response format from API", path=path) from e
        return body if isinstance(body, dict) else {"data": body}

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", path, json_body=body)

    async def patch(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("PATCH", path, json_body=body)

    async def delete(self, path: str) -> dict[str, Any]:
        return await self.request("DELETE", path)
