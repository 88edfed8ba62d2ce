"""
HTTPS transport for callable cloud functions.

Request body is {"data": payload}; a successful response carries {"result": ...},
a failed one {"error": {"status": "RESOURCE_EXHAUSTED", "message": ...}}.
Errors are raised as FunctionsError with a lowercase, dash-separated code
("resource-exhausted") so callers can translate them per call site.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0  # seconds

NETWORK_TIMEOUT_MESSAGE = "Network request timed out. Please check your internet connection."

_HTTP_STATUS_CODES = {
    400: "invalid-argument",
    401: "unauthenticated",
    403: "permission-denied",
    404: "not-found",
    409: "already-exists",
    429: "resource-exhausted",
    499: "cancelled",
    501: "unimplemented",
    503: "unavailable",
    504: "deadline-exceeded",
}


class FunctionsError(Exception):
    """A callable function failed or could not be reached."""

    def __init__(self, code: str, message: str = "", details: Any = None):
        super().__init__(message or code)
        self.code = code
        self.message = message
        self.details = details


def _code_from_status(status: str) -> str:
    return status.strip().lower().replace("_", "-")


def _error_from_response(response: httpx.Response) -> FunctionsError:
    try:
        body = response.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("status"):
        return FunctionsError(
            _code_from_status(str(error["status"])),
            str(error.get("message") or ""),
            error.get("details"),
        )
    code = _HTTP_STATUS_CODES.get(response.status_code, "internal")
    return FunctionsError(code, f"HTTP {response.status_code}")


class FunctionsClient:
    """Calls functions at base_url/<name>. One short-lived HTTP client per call."""

    def __init__(
        self,
        base_url: str,
        *,
        id_token: str | None = None,
        id_token_provider: Callable[[], Awaitable[str | None]] | None = None,
        default_timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._base_url = base_url.strip().rstrip("/")
        self._id_token = id_token
        self._id_token_provider = id_token_provider
        self._default_timeout = default_timeout
        self._transport = transport

    async def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._id_token
        if self._id_token_provider is not None:
            token = await self._id_token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def call(
        self,
        name: str,
        payload: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> Any:
        """POST payload to the named function and return its result member."""
        url = f"{self._base_url}/{name}"
        headers = await self._headers()
        effective_timeout = timeout if timeout is not None else self._default_timeout

        async with httpx.AsyncClient(timeout=effective_timeout, transport=self._transport) as client:
            try:
                response = await client.post(url, json={"data": payload}, headers=headers)
            except httpx.TimeoutException as exc:
                logger.warning("Callable %s timed out after %.0fs", name, effective_timeout)
                raise FunctionsError("deadline-exceeded", NETWORK_TIMEOUT_MESSAGE) from exc
            except httpx.RequestError as exc:
                logger.warning("Callable %s unreachable: %s", name, type(exc).__name__)
                raise FunctionsError("unavailable", f"Network error: {exc}") from exc

        if response.is_success:
            try:
                body = response.json()
            except ValueError as exc:
                raise FunctionsError("internal", f"{name} returned invalid JSON") from exc
            if not isinstance(body, dict) or "result" not in body:
                raise FunctionsError("internal", f"{name} response has no result")
            return body["result"]

        error = _error_from_response(response)
        logger.warning(
            "Callable %s failed: status=%d code=%s",
            name,
            response.status_code,
            error.code,
        )
        raise error
