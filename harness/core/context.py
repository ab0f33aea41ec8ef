"""
Per-scenario state shared across step definitions.

Steps are plain functions, so anything one step produces (the prepared
request, the captured response, extracted IDs) is threaded to later steps
through this store. Storage is thread-local: scenarios running on different
worker threads never see each other's entries.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from harness.core.errors import ContextError

if TYPE_CHECKING:
    from harness.api.response import CapturedResponse

RESPONSE_KEY = "response"

# Pending request descriptor keys
METHOD_KEY = "method"
ENDPOINT_KEY = "endpoint"
QUERY_PARAMS_KEY = "query_params"
BODY_KEY = "body"
HEADERS_KEY = "headers"
AUTH_TOKEN_KEY = "auth_token"
BASIC_AUTH_KEY = "basic_auth"
SERVICE_KEY = "service"

REQUEST_KEYS = (
    METHOD_KEY,
    ENDPOINT_KEY,
    QUERY_PARAMS_KEY,
    BODY_KEY,
    HEADERS_KEY,
    AUTH_TOKEN_KEY,
    BASIC_AUTH_KEY,
    SERVICE_KEY,
)


class ScenarioContext:
    """Thread-local key/value store for the scenario running on this thread."""

    def __init__(self) -> None:
        self._local = threading.local()

    def _store(self) -> dict[str, Any]:
        store = getattr(self._local, "store", None)
        if store is None:
            store = {}
            self._local.store = store
        return store

    def set(self, key: str, value: Any) -> None:
        self._store()[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._store().get(key, default)

    def require(self, key: str) -> Any:
        """Get a value that an earlier step must have set."""
        store = self._store()
        if key not in store or store[key] is None:
            raise ContextError(
                f"Scenario context has no value for '{key}'",
                details={"key": key, "known_keys": sorted(store)},
            )
        return store[key]

    def contains(self, key: str) -> bool:
        return key in self._store()

    def set_response(self, response: CapturedResponse) -> None:
        self.set(RESPONSE_KEY, response)

    def get_response(self) -> CapturedResponse:
        """The response captured by the most recent request in this scenario."""
        response = self.get(RESPONSE_KEY)
        if response is None:
            raise ContextError("No response captured yet; send a request first")
        return response

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of this thread's entries."""
        return dict(self._store())

    def clear(self) -> None:
        """Empty the store but keep it allocated for this thread."""
        self._store().clear()

    def remove(self) -> None:
        """Detach the store from this thread entirely."""
        if hasattr(self._local, "store"):
            del self._local.store


scenario_context = ScenarioContext()
