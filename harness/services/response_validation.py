"""
Assertions and extraction against the scenario's captured response.

Every check reads the most recent response from the scenario context and
raises ``ValidationFailure`` (an AssertionError) naming the field/path with
the expected and actual values.
"""

from __future__ import annotations

import json
import logging
from numbers import Number
from typing import Any

from harness.api.json_path import JsonPath
from harness.api.response import CapturedResponse
from harness.core.context import ScenarioContext, scenario_context
from harness.core.errors import ValidationFailure

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str | None:
    """Render a JSON value the way a string comparison expects it."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Number):
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _matches(actual: Any, expected: Any) -> bool:
    if isinstance(expected, int) and not isinstance(expected, bool):
        return _as_int(actual) == expected
    return _as_text(actual) == _as_text(expected)


def _response(context: ScenarioContext) -> CapturedResponse:
    return context.get_response()


def _body_list(context: ScenarioContext) -> list[Any]:
    body = _response(context).json()
    if not isinstance(body, list):
        raise ValidationFailure(
            "$",
            "Response should be a list",
            expected="list",
            actual=type(body).__name__ if body is not None else None,
        )
    return body


def assert_status_code(expected: int, context: ScenarioContext = scenario_context) -> None:
    actual = _response(context).status_code
    if actual != expected:
        raise ValidationFailure("status_code", "HTTP Status Code", expected=expected, actual=actual)


def assert_field_equals(
    field: str, expected: str | int, context: ScenarioContext = scenario_context
) -> None:
    """Compare a field as text (string expected) or as an integer (int expected)."""
    actual = _response(context).json_path(field)
    if not _matches(actual, expected):
        raise ValidationFailure(field, f"Field: {field}", expected=expected, actual=actual)


def assert_field_not_null(field: str, context: ScenarioContext = scenario_context) -> None:
    if _response(context).json_path(field) is None:
        raise ValidationFailure(field, f"Field '{field}' should not be null")


def assert_response_is_non_empty_list(
    label: str = "items", context: ScenarioContext = scenario_context
) -> None:
    items = _body_list(context)
    if not items:
        raise ValidationFailure("$", f"{label.capitalize()} list should not be empty")
    logger.info("Response contains %d %s", len(items), label)


def assert_list_has_at_least(min_items: int, context: ScenarioContext = scenario_context) -> None:
    items = _body_list(context)
    if len(items) < min_items:
        raise ValidationFailure(
            "$",
            f"List should have >= {min_items} items",
            expected=f">= {min_items}",
            actual=len(items),
        )


def assert_each_item_has_fields(*fields: str, context: ScenarioContext = scenario_context) -> None:
    """Every element of the top-level list has every named field, non-null."""
    if not fields:
        raise ValueError("At least one field name is required")

    for position, item in enumerate(_body_list(context)):
        if not isinstance(item, dict):
            raise ValidationFailure(
                f"[{position}]", "List element should be an object", expected="object", actual=item
            )
        for name in fields:
            if item.get(name) is None:
                raise ValidationFailure(f"[{position}].{name}", f"Missing: {name} in item {position}")


def assert_all_values_equal(
    field: str, expected: str | int, context: ScenarioContext = scenario_context
) -> None:
    """Every value the path yields equals ``expected``; an empty list passes."""
    values = _response(context).json_path(field)
    if not isinstance(values, list):
        raise ValidationFailure(
            field, f"Field '{field}' should resolve to a list", expected="list", actual=values
        )
    for position, value in enumerate(values):
        if not _matches(value, expected):
            raise ValidationFailure(
                f"[{position}].{field}", f"Field '{field}' mismatch", expected=expected, actual=value
            )


def assert_first_item_field_equals(
    field: str, expected: str | int, context: ScenarioContext = scenario_context
) -> None:
    path = JsonPath.parse(f"[0].{field}")
    actual = _response(context).json_path(path)
    if not _matches(actual, expected):
        raise ValidationFailure(str(path), f"First item's {field}", expected=expected, actual=actual)


def assert_response_time_below(max_ms: int, context: ScenarioContext = scenario_context) -> None:
    actual = _response(context).elapsed_millis
    logger.info("Response time: %dms (max allowed: %dms)", actual, max_ms)
    if actual >= max_ms:
        raise ValidationFailure(
            "elapsed_ms",
            f"Response time {actual}ms exceeded {max_ms}ms",
            expected=f"< {max_ms}",
            actual=actual,
        )


def extract_field(field: str, key: str, context: ScenarioContext = scenario_context) -> Any:
    """Copy a response field into the scenario context under ``key``."""
    value = _response(context).json_path(field)
    logger.info("Extracted '%s' = %r and stored as '%s'", field, value, key)
    context.set(key, value)
    return value


def assert_stored_value_equals(
    key: str, expected: Any, context: ScenarioContext = scenario_context
) -> None:
    if not context.contains(key):
        raise ValidationFailure(key, f"Stored value '{key}' was never set")

    actual = context.get(key)
    if not _matches(actual, expected):
        raise ValidationFailure(key, f"Stored value '{key}'", expected=expected, actual=actual)
