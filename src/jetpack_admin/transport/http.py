"""
REST HTTP client for the Jetpack admin API.
"""

import logging
from typing import Any, Optional

import httpx

from jetpack_admin.errors import AuthError, ConnectionError, JetpackError

DEFAULT_BASE_URL = "https://dashboard.shipwithjetpack.com"

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "jetpack-admin/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Endpoints answer failures with { "error": "<message>" }; fall back to the raw body."""
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {resp.status_code}: {resp.text[:200]}"

    async def _request(self, method: str, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        try:
            resp = await self._client.request(method, path, json=body, headers=self._auth_headers())
        except httpx.TransportError as e:
            raise ConnectionError(f"{method} {path} failed: {e}") from e
        logger.debug("%s %s -> %d", method, path, resp.status_code)
        if resp.status_code in (401, 403):
            raise AuthError(self._error_message(resp), details={"status": resp.status_code})
        if resp.status_code >= 400:
            raise JetpackError("http_error", self._error_message(resp), {"status": resp.status_code})
        if not resp.content:
            return None
        return resp.json()

    async def get(self, path: str) -> Any:
        return await self._request("GET", path)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("POST", path, body)

    async def close(self) -> None:
        await self._client.aclose()
