"""Helpers shared by the unit tests (plain functions, not fixtures)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from harness.api.response import CapturedResponse

BASE_URL = "http://api.test"
SECONDARY_URL = "http://reqres.test/api"


def write_properties(directory: Path, env: str, values: dict[str, str]) -> Path:
    path = directory / f"config-{env}.properties"
    lines = [f"{key}={value}" for key, value in values.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def make_response(
    status_code: int = 200,
    body: Any = None,
    elapsed_ms: float = 12.0,
    text: str | None = None,
) -> CapturedResponse:
    return CapturedResponse(
        method="GET",
        url=f"{BASE_URL}/resource",
        status_code=status_code,
        status_line=f"HTTP/1.1 {status_code} OK",
        headers={"content-type": "application/json"},
        text=text if text is not None else json.dumps(body),
        elapsed_ms=elapsed_ms,
    )
