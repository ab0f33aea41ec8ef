"""
Preparing and sending the scenario's pending request.

"Prepare" steps write a complete request descriptor into the scenario
context (every key, so nothing leaks from an earlier prepare); "send"
dispatches it through the API client and stores the captured response.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from harness.api.client import ApiClient, Service, get_api_client
from harness.api.response import CapturedResponse
from harness.core.context import (
    AUTH_TOKEN_KEY,
    BASIC_AUTH_KEY,
    BODY_KEY,
    ENDPOINT_KEY,
    HEADERS_KEY,
    METHOD_KEY,
    QUERY_PARAMS_KEY,
    REQUEST_KEYS,
    SERVICE_KEY,
    ScenarioContext,
    scenario_context,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def prepare_request(
    method: str,
    endpoint: str,
    body: Any = None,
    query_params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    auth_token: str | None = None,
    basic_auth: tuple[str, str] | None = None,
    service: Service = Service.PRIMARY,
    context: ScenarioContext = scenario_context,
) -> None:
    """Replace the pending request descriptor."""
    method = method.upper()
    if method not in SUPPORTED_METHODS:
        raise ValueError(f"Unknown HTTP method: {method}")

    for key in REQUEST_KEYS:
        context.set(key, None)

    context.set(METHOD_KEY, method)
    context.set(ENDPOINT_KEY, endpoint)
    context.set(BODY_KEY, body)
    context.set(QUERY_PARAMS_KEY, dict(query_params) if query_params is not None else None)
    context.set(HEADERS_KEY, dict(headers) if headers is not None else None)
    context.set(AUTH_TOKEN_KEY, auth_token)
    context.set(BASIC_AUTH_KEY, basic_auth)
    context.set(SERVICE_KEY, service)


def send_request(
    client: ApiClient | None = None,
    context: ScenarioContext = scenario_context,
) -> CapturedResponse:
    """Execute the pending request and store its response in the context."""
    client = client or get_api_client()

    method = context.require(METHOD_KEY)
    endpoint = context.require(ENDPOINT_KEY)
    body = context.get(BODY_KEY)
    query_params = context.get(QUERY_PARAMS_KEY)
    headers = context.get(HEADERS_KEY)
    auth_token = context.get(AUTH_TOKEN_KEY)
    basic_auth = context.get(BASIC_AUTH_KEY)
    service = context.get(SERVICE_KEY) or Service.PRIMARY

    if service is Service.SECONDARY and method != "POST":
        raise ValueError(f"The secondary service only supports POST, got {method}")
    if method not in SUPPORTED_METHODS:
        raise ValueError(f"Unknown HTTP method: {method}")

    request_headers = dict(headers) if headers else {}
    if auth_token:
        request_headers["Authorization"] = f"Bearer {auth_token}"

    logger.info("Sending %s request to %s", method, endpoint)

    response = client.send(
        method,
        endpoint,
        body=body,
        query_params=query_params,
        headers=request_headers or None,
        auth=tuple(basic_auth) if basic_auth is not None else None,
        service=service,
    )

    context.set_response(response)
    return response


def data_table_to_params(rows: Iterable[Mapping[str, str]]) -> dict[str, str]:
    """Convert ``| key | value |`` table rows into a dict (query params or headers)."""
    params: dict[str, str] = {}
    for row in rows:
        key = row.get("key")
        if key is None or not str(key).strip():
            raise ValueError("Table rows need a non-empty 'key' column")
        params[str(key).strip()] = row.get("value", "")
    return params
