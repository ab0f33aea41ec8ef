"""
Pytest configuration and shared fixtures for harness unit tests.

Provides:
- Property-file backed ConfigStore pointed at a temp directory
- API clients wired to httpx.MockTransport (no network)
- SQLite-backed database gateways with a ``users`` table
- A fixture that places a captured response into the scenario context
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]

# Add the package root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx  # noqa: E402 (import after path setup)
import pytest  # noqa: E402 (import after path setup)

from harness.api.client import ApiClient  # noqa: E402
from harness.api.response import CapturedResponse  # noqa: E402
from harness.core import attachments  # noqa: E402
from harness.core.config import ConfigStore  # noqa: E402
from harness.core.context import scenario_context  # noqa: E402
from harness.core.db import DatabaseGateway  # noqa: E402
from tests.helpers import BASE_URL, SECONDARY_URL, make_response, write_properties  # noqa: E402

_OVERRIDE_ENV_VARS = (
    "HARNESS_ENV",
    "HARNESS_CONFIG_DIR",
    "HARNESS_HTTP_TIMEOUT_SECONDS",
    "HARNESS_VERIFY_TLS",
    "API_BASE_URL",
    "API_REQRES_BASE_URL",
    "DB_URL",
    "DB_USERNAME",
    "DB_PASSWORD",
)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep env-var overrides, the context and attachments out of each test."""
    for name in _OVERRIDE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    scenario_context.remove()
    attachments.drain()
    yield
    scenario_context.remove()
    attachments.drain()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "config"
    directory.mkdir()
    write_properties(
        directory,
        "qa",
        {
            "api.base.url": BASE_URL,
            "api.reqres.base.url": SECONDARY_URL,
        },
    )
    return directory


@pytest.fixture
def config_store(config_dir: Path) -> ConfigStore:
    return ConfigStore(env="qa", config_dir=config_dir)


@pytest.fixture
def mock_client(
    config_store: ConfigStore,
) -> Generator[Callable[[Callable[[httpx.Request], httpx.Response]], ApiClient]]:
    """Factory: build an ApiClient whose transport calls ``handler``."""
    clients: list[ApiClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> ApiClient:
        client = ApiClient(
            config=config_store,
            transport=httpx.MockTransport(handler),
            timeout=5.0,
            verify=True,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def sqlite_gateway(tmp_path: Path) -> Generator[DatabaseGateway]:
    """Gateway over a file-backed SQLite database with a seeded users table."""
    db_dir = tmp_path / "db"
    db_dir.mkdir()
    write_properties(db_dir, "qa", {"db.url": f"sqlite:///{db_dir / 'harness.db'}"})

    gateway = DatabaseGateway(config=ConfigStore(env="qa", config_dir=db_dir))
    gateway.execute_update(
        "CREATE TABLE users ("
        "id INTEGER PRIMARY KEY, "
        "username TEXT UNIQUE, "
        "name TEXT, "
        "email TEXT)"
    )
    gateway.execute_update(
        "INSERT INTO users (id, username, name, email) VALUES (?, ?, ?, ?)",
        1,
        "Bret",
        "Leanne Graham",
        "Sincere@april.biz",
    )
    yield gateway
    gateway.close_connection()


@pytest.fixture
def unavailable_gateway(tmp_path: Path) -> DatabaseGateway:
    """Gateway whose database file lives in a directory that does not exist."""
    config_dir = tmp_path / "unreachable"
    config_dir.mkdir()
    write_properties(
        config_dir, "qa", {"db.url": f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}"}
    )
    return DatabaseGateway(config=ConfigStore(env="qa", config_dir=config_dir))


@pytest.fixture
def captured() -> Callable[..., CapturedResponse]:
    """Store a synthetic response in the scenario context and return it."""

    def _store(status_code: int = 200, body: Any = None, **kwargs: Any) -> CapturedResponse:
        response = make_response(status_code, body, **kwargs)
        scenario_context.set_response(response)
        return response

    return _store
