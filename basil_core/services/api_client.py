"""
API Client — async HTTP access to the BASIL backend.

Thin layer over ``httpx.AsyncClient``:
  - attaches the persisted bearer token
  - unwraps the ``{success, data, message, error}`` envelope
  - turns every failure into an ApiError (status, code, auth marker)

No retries or backoff here: callers decide whether to try again.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from basil_core.config import get_settings
from basil_core.errors import ApiError, is_token_error_message
from basil_core.persistence.local_store import TOKEN_KEY, LocalStore

logger = logging.getLogger(__name__)


class ApiClient:
    """Async JSON client for the remote API."""

    def __init__(
        self,
        store: LocalStore,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.store = store
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ── Token ────────────────────────────────────────────

    def get_token(self) -> Optional[str]:
        return self.store.get(TOKEN_KEY)

    def set_token(self, token: Optional[str]) -> None:
        if token:
            self.store.set(TOKEN_KEY, token)
        else:
            self.store.remove(TOKEN_KEY)

    # ── Lifecycle ────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url + "/",
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Verbs ────────────────────────────────────────────

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the unwrapped ``data`` payload."""
        headers = {"Accept": "application/json"}
        token = self.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = path.lstrip("/")
        try:
            response = await self._get_client().request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.warning(f"API timeout: {method} {path} after {self.timeout}s")
            raise ApiError(
                f"Request timeout. The request took longer than {self.timeout}s. Endpoint: {path}",
                code="TIMEOUT",
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"API network error: {method} {path} | {type(e).__name__}: {e}")
            raise ApiError(
                f"Unable to connect to the API server. Endpoint: {path} | Error: {e}",
                code="NETWORK_ERROR",
            ) from e

        return self._unwrap(method, path, response)

    def _unwrap(self, method: str, path: str, response: httpx.Response) -> Any:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            body = payload if isinstance(payload, dict) else {}
            message = (
                body.get("error")
                or body.get("message")
                or response.text
                or f"Request failed with status {response.status_code}"
            )
            status = response.status_code
            is_auth = status in (401, 403) and is_token_error_message(str(message))
            logger.warning(f"API {method} {path} → {status}: {message}")
            raise ApiError(
                str(message),
                status=status,
                code=str(body.get("code") or status),
                is_auth_error=is_auth,
                details=payload,
            )

        if payload is None:
            raise ApiError("Invalid response format", status=response.status_code, code="INVALID_RESPONSE")

        if isinstance(payload, dict) and "success" in payload:
            if payload.get("success") is False:
                raise ApiError(
                    str(payload.get("error") or payload.get("message") or "Request failed"),
                    status=response.status_code,
                    code=str(payload.get("code") or "UNKNOWN_ERROR"),
                    details=payload,
                )
            return payload.get("data")
        return payload
