"""
Remote Store Client.

Async HTTP client for the hosted backend-as-a-service that owns
authentication and note storage. Auth endpoints live under the
configured auth path (GoTrue-style), table endpoints under the REST
path (PostgREST-style).

Every call goes through the resilience guard (circuit breaker,
semaphore, timeout) and every failure surfaces as a RemoteError so
callers never see transport exceptions.

Usage:
    store = StoreClient()
    store.set_access_token(principal.access_token)
    rows = await store.rest("GET", "notes", params={"user_id": "eq.123"})
    await store.close()
"""

import asyncio
from typing import Any

import aiobreaker
import httpx

from notekeep.backend.core.config import get_app_config, get_settings
from notekeep.backend.core.exceptions import RemoteError, RemoteTimeoutError
from notekeep.backend.core.logging import get_logger, log_with_source
from notekeep.backend.core.resilience import create_circuit_breaker, guarded_call

logger = get_logger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _get_store_config() -> dict[str, Any]:
    """Load store settings from store.yaml and the anon key from config/.env."""
    store = get_app_config().store
    return {
        "base_url": store.url,
        "auth_path": store.auth_path,
        "rest_path": store.rest_path,
        "timeout": store.timeouts.request_seconds,
        "max_concurrent": store.max_concurrent_requests,
        "fail_max": store.circuit_breaker.fail_max,
        "breaker_timeout": store.circuit_breaker.timeout_duration,
        "api_key": get_settings().store_anon_key,
    }


def _error_message(response: httpx.Response) -> str:
    """Pull the most specific error text out of an auth or REST error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class StoreClient:
    """
    HTTP client for the remote store.

    Features:
    - Base URL, paths, timeout and anon key from configuration
    - Bearer token of the signed-in user on every request once set
    - Circuit breaker, concurrency cap and per-call timeout
    - Structured logging of requests/responses
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        auth_path: str = "/auth/v1",
        rest_path: str = "/rest/v1",
        max_concurrent: int = 10,
        breaker: aiobreaker.CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the store client.

        Args:
            base_url: Store base URL. If None, reads from config/settings/store.yaml.
            api_key: Anon key. If None, reads STORE_ANON_KEY from config/.env.
            timeout: Per-call timeout in seconds. If None, reads from store.yaml.
            auth_path: Path prefix of the auth endpoints (when not configured).
            rest_path: Path prefix of the table endpoints (when not configured).
            max_concurrent: Concurrent request cap (when not configured).
            breaker: Circuit breaker to use instead of a configured one.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        fail_max, breaker_timeout = 5, 30
        if base_url is None or api_key is None:
            try:
                config = _get_store_config()
            except Exception as e:
                raise RuntimeError(
                    "Could not determine store settings from config/settings/store.yaml "
                    "and config/.env"
                ) from e
            base_url = base_url or config["base_url"]
            api_key = api_key or config["api_key"]
            timeout = timeout if timeout is not None else config["timeout"]
            auth_path = config["auth_path"]
            rest_path = config["rest_path"]
            max_concurrent = config["max_concurrent"]
            fail_max = config["fail_max"]
            breaker_timeout = config["breaker_timeout"]

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else 10.0
        self.auth_path = auth_path.rstrip("/")
        self.rest_path = rest_path.rstrip("/")
        self.breaker = breaker or create_circuit_breaker(
            "store", fail_max=fail_max, timeout_duration=breaker_timeout,
        )
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._transport = transport
        self._access_token: str | None = None
        self._client: httpx.AsyncClient | None = None

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def set_access_token(self, token: str | None) -> None:
        """Authenticate subsequent requests as a user, or drop back to the anon key."""
        self._access_token = token

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"apikey": self.api_key},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._access_token or self.api_key}"}
        if extra:
            headers.update(extra)
        return headers

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request. Transport failures and 5xx count against the breaker."""
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(f"Remote store timed out: {e}") from e
        except httpx.HTTPError as e:
            raise RemoteError(f"Could not reach remote store: {e}") from e

        if response.status_code >= 500:
            raise RemoteError(_error_message(response), status_code=response.status_code)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Make a request against the store and decode the JSON body.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path below the store base URL
            params: Query parameters
            json: JSON request body
            headers: Extra headers

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            RemoteError: On transport failure, timeout, open breaker or HTTP error status
        """
        log_with_source(logger, "store", "debug", "Store request", method=method, path=path)

        try:
            response = await guarded_call(
                self.breaker,
                self._semaphore,
                self.timeout,
                self._send,
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(headers),
            )
        except RemoteError as e:
            log_with_source(
                logger,
                "store",
                "error",
                "Store request failed",
                method=method,
                path=path,
                code=e.code,
                error=e.message,
            )
            raise

        log_with_source(
            logger,
            "store",
            "debug",
            "Store response",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if response.status_code >= 400:
            raise RemoteError(_error_message(response), status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError("Remote store returned a malformed body") from e

    async def auth(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Call an auth endpoint, e.g. auth("POST", "signup", json={...})."""
        return await self.request(method, f"{self.auth_path}/{endpoint}", **kwargs)

    async def rest(self, method: str, table: str, **kwargs: Any) -> Any:
        """Call a table endpoint, e.g. rest("GET", "notes", params={...})."""
        return await self.request(method, f"{self.rest_path}/{table}", **kwargs)
