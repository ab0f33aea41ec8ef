"""Captured HTTP responses."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from harness.api.json_path import JsonPath, read_path

_UNPARSED = object()


def format_json_pretty(data: Any, indent: int = 2) -> str:
    """Format JSON data (or JSON text) with indentation for readability."""
    if data is None:
        return "null"
    if isinstance(data, str):
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, TypeError):
            return data
        return json.dumps(parsed, indent=indent, ensure_ascii=False)
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class CapturedResponse:
    """
    Everything a validation step may look at after a request.

    Built from an ``httpx.Response`` once the body has been read; the parsed
    JSON is cached so repeated path lookups do not re-decode the body.
    """

    method: str
    url: str
    status_code: int
    status_line: str
    headers: dict[str, str]
    text: str
    elapsed_ms: float
    _json: Any = field(default=_UNPARSED, repr=False, compare=False)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> CapturedResponse:
        try:
            elapsed_ms = response.elapsed.total_seconds() * 1000
        except RuntimeError:
            # elapsed is only set once the response has been closed
            elapsed_ms = 0.0

        request = response.request
        return cls(
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            status_line=f"{response.http_version} {response.status_code} {response.reason_phrase}",
            headers=dict(response.headers),
            text=response.text,
            elapsed_ms=elapsed_ms,
        )

    def json(self) -> Any:
        """Decoded body, or None if the body is empty or not JSON."""
        if self._json is _UNPARSED:
            try:
                parsed = json.loads(self.text) if self.text.strip() else None
            except json.JSONDecodeError:
                parsed = None
            object.__setattr__(self, "_json", parsed)
        return self._json

    def json_path(self, path: str | JsonPath) -> Any:
        """Read a field from the JSON body; None when absent."""
        return read_path(self.json(), path)

    def pretty_body(self) -> str:
        body = self.json()
        if body is None:
            return self.text
        return format_json_pretty(body)

    @property
    def elapsed_millis(self) -> int:
        return int(self.elapsed_ms)
