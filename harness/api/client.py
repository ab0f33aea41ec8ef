"""
HTTP client for scenario steps.

Builds requests against the configured base URL with JSON content
negotiation, executes them synchronously and returns a ``CapturedResponse``.
Every call is logged on the way out and on the way back, and the
pretty-printed response body is attached to the scenario's diagnostics.

The client does not touch the scenario context; callers store the response.
Transport errors propagate as ``httpx.TransportError``; there are no retries.
"""

from __future__ import annotations

import json
import logging
import threading
from enum import Enum
from typing import Any

import httpx

from harness.api.response import CapturedResponse
from harness.core import attachments
from harness.core.config import ConfigStore, get_config, get_settings
from harness.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_client: ApiClient | None = None
_client_lock = threading.Lock()

JSON_CONTENT_TYPE = "application/json"

# Headers that should never reach the logs
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-auth-token",
}


class Service(str, Enum):
    """Which configured base URL a request targets."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def base_url_key(self) -> str:
        if self is Service.SECONDARY:
            return "api.reqres.base.url"
        return "api.base.url"


def _sanitize_headers(headers: dict[str, str] | None) -> dict[str, str]:
    """Redact sensitive headers."""
    if not headers:
        return {}
    return {
        k: "***REDACTED***" if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()
    }


class ApiClient:
    """Synchronous JSON API client bound to the configured services."""

    def __init__(
        self,
        config: ConfigStore | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
        verify: bool | None = None,
    ):
        self._config = config
        settings = None
        if timeout is None or verify is None:
            settings = get_settings()

        client_kwargs: dict[str, Any] = {
            "verify": verify if verify is not None else settings.harness_verify_tls,
        }
        effective_timeout = timeout if timeout is not None else settings.harness_http_timeout_seconds
        if effective_timeout is not None:
            client_kwargs["timeout"] = effective_timeout
        if transport is not None:
            client_kwargs["transport"] = transport

        self.client = httpx.Client(**client_kwargs)

    @property
    def config(self) -> ConfigStore:
        return self._config if self._config is not None else get_config()

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def base_url(self, service: Service = Service.PRIMARY) -> str:
        base_url = self.config.get(service.base_url_key)
        if not base_url or not base_url.strip():
            raise ConfigurationError(
                f"Base URL '{service.base_url_key}' is not configured",
                details={"key": service.base_url_key, "service": service.value},
            )
        return base_url.strip().rstrip("/")

    def build_url(self, endpoint: str, service: Service = Service.PRIMARY) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url(service)}/{endpoint.lstrip('/')}"

    # ==================== HTTP Methods ====================

    def get(self, endpoint: str, query_params: dict[str, Any] | None = None) -> CapturedResponse:
        return self.send("GET", endpoint, query_params=query_params)

    def get_with_headers(self, endpoint: str, headers: dict[str, str]) -> CapturedResponse:
        return self.send("GET", endpoint, headers=headers)

    def post(self, endpoint: str, body: Any) -> CapturedResponse:
        return self.send("POST", endpoint, body=body)

    def post_secondary(self, endpoint: str, body: Any) -> CapturedResponse:
        """POST against the secondary (reqres) service."""
        return self.send("POST", endpoint, body=body, service=Service.SECONDARY)

    def put(self, endpoint: str, body: Any) -> CapturedResponse:
        return self.send("PUT", endpoint, body=body)

    def patch(self, endpoint: str, body: Any) -> CapturedResponse:
        return self.send("PATCH", endpoint, body=body)

    def delete(self, endpoint: str) -> CapturedResponse:
        return self.send("DELETE", endpoint)

    def post_with_auth(self, endpoint: str, body: Any, token: str) -> CapturedResponse:
        """POST with a Bearer token."""
        return self.send("POST", endpoint, body=body, headers={"Authorization": f"Bearer {token}"})

    def get_with_basic_auth(self, endpoint: str, username: str, password: str) -> CapturedResponse:
        return self.send("GET", endpoint, auth=(username, password))

    def send(
        self,
        method: str,
        endpoint: str,
        *,
        body: Any = None,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        auth: tuple[str, str] | None = None,
        service: Service = Service.PRIMARY,
    ) -> CapturedResponse:
        """Build, log and execute one request; returns the captured response."""
        method = method.upper()
        url = self.build_url(endpoint, service)

        request_headers = {"Content-Type": JSON_CONTENT_TYPE, "Accept": JSON_CONTENT_TYPE}
        if headers:
            request_headers.update(headers)

        content: str | None = None
        if body is not None:
            content = body if isinstance(body, str) else json.dumps(body)

        logger.info(
            "%s %s params=%s body=%s",
            method,
            endpoint,
            query_params or {},
            content,
            extra={
                "http_method": method,
                "url": url,
                "request_headers": _sanitize_headers(request_headers),
                "basic_auth": auth is not None,
            },
        )

        response = self.client.request(
            method,
            url,
            content=content,
            params=query_params,
            headers=request_headers,
            auth=auth,
        )

        captured = CapturedResponse.from_httpx(response)
        self._log_response(captured)
        return captured

    # ==================== Helpers ====================

    def _log_response(self, response: CapturedResponse) -> None:
        pretty = response.pretty_body()
        logger.info(
            "Response Status: %d %s (%.0fms)",
            response.status_code,
            response.status_line,
            response.elapsed_ms,
        )
        logger.debug("Response Body: %s", pretty)
        attachments.attach("Response Body", JSON_CONTENT_TYPE, pretty)


def get_api_client() -> ApiClient:
    """Return the shared API client, creating it on first use."""
    global _client

    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            _client = ApiClient()
    return _client


def close_api_client() -> None:
    """Close and forget the shared API client."""
    global _client

    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
