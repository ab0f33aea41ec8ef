"""
Database-backed steps: test data fixtures and API-vs-DB comparisons.

All of these are no-ops (with a warning) when the database is unavailable,
so API-only runs still pass without a database.
"""

from __future__ import annotations

import logging
import re

from harness.core.context import ScenarioContext, scenario_context
from harness.core.db import DatabaseGateway, QueryStatus, get_gateway
from harness.core.errors import ValidationFailure

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

API_VALUE_KEY_TEMPLATE = "api_user_{field}"


def _column(name: str) -> str:
    """Column names cannot be bound as parameters, so only plain identifiers pass."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid column name: {name!r}")
    return name


def validate_field_against_db(
    field: str,
    user_id: int,
    gateway: DatabaseGateway | None = None,
    context: ScenarioContext = scenario_context,
) -> bool:
    """
    Compare ``users.<field>`` for ``user_id`` with the API value stored as
    ``api_user_<field>``.

    Returns True when a comparison was made, False when it was skipped.
    """
    gateway = gateway or get_gateway()
    if not gateway.is_available():
        logger.warning("Database not available - skipping DB validation for '%s'", field)
        return False

    column = _column(field)
    results = gateway.execute_query(f"SELECT {column} FROM users WHERE id = :user_id", user_id=user_id)
    if results.status == QueryStatus.FAILED:
        logger.error("DB lookup for users.%s failed: %s", column, results.error)
        return False

    row = results.first()
    if row is None:
        logger.warning("No DB record found for user id=%s", user_id)
        return False

    db_raw = next(iter(row.values()))
    db_value = None if db_raw is None else str(db_raw)
    api_raw = context.get(API_VALUE_KEY_TEMPLATE.format(field=field))
    api_value = None if api_raw is None else str(api_raw)

    logger.info("DB value: '%s', API value: '%s'", db_value, api_value)
    if db_value != api_value:
        raise ValidationFailure(
            field, f"DB vs API mismatch for field: {field}", expected=db_value, actual=api_value
        )
    return True


def create_user_test_data(username: str, gateway: DatabaseGateway | None = None) -> int:
    gateway = gateway or get_gateway()
    if not gateway.is_available():
        logger.warning("Database not available - skipping test data creation.")
        return 0

    rows = gateway.execute_update(
        "INSERT INTO users (username, name, email) VALUES (:username, :name, :email) "
        "ON CONFLICT DO NOTHING",
        username=username,
        name="Test User",
        email=f"{username}@test.com",
    )
    logger.info("Created %d test data rows for user '%s'", rows, username)
    return rows


def delete_user_test_data(username: str, gateway: DatabaseGateway | None = None) -> int:
    gateway = gateway or get_gateway()
    if not gateway.is_available():
        logger.warning("Database not available - skipping test data cleanup.")
        return 0

    rows = gateway.execute_update("DELETE FROM users WHERE username = :username", username=username)
    logger.info("Deleted %d rows for user '%s'", rows, username)
    return rows
