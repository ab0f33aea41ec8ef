"""Unit tests for response assertions and field extraction."""

import pytest

from harness.core.context import scenario_context
from harness.core.errors import ContextError, ValidationFailure
from harness.services import response_validation as rv

USERS = [
    {"id": 1, "name": "A", "username": "a", "email": "a@x.io", "active": True},
    {"id": 2, "name": "B", "username": "b", "email": "b@x.io", "active": False},
]


class TestSingleObject:
    @pytest.fixture(autouse=True)
    def created(self, captured) -> None:
        captured(201, {"id": 42, "name": "Alice", "address": {"city": "Paris"}, "nickname": None})

    def test_status_code_passes(self) -> None:
        rv.assert_status_code(201)

    def test_status_code_failure_reports_expected_and_actual(self) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_status_code(200)

        failure = exc_info.value
        assert failure.field == "status_code"
        assert failure.expected == 200
        assert failure.actual == 201
        assert "expected 200 but was 201" in str(failure)

    def test_field_equals_string_and_int(self) -> None:
        rv.assert_field_equals("name", "Alice")
        rv.assert_field_equals("id", 42)
        rv.assert_field_equals("id", "42")
        rv.assert_field_equals("address.city", "Paris")

    def test_field_mismatch(self) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_field_equals("name", "Bob")

        assert exc_info.value.field == "name"
        assert exc_info.value.expected == "Bob"
        assert exc_info.value.actual == "Alice"

    def test_field_not_null(self) -> None:
        rv.assert_field_not_null("address.city")
        with pytest.raises(ValidationFailure):
            rv.assert_field_not_null("nickname")
        with pytest.raises(ValidationFailure):
            rv.assert_field_not_null("missing")

    def test_extract_then_compare_stored_value(self) -> None:
        value = rv.extract_field("id", "newUserId")

        assert value == 42
        assert scenario_context.get("newUserId") == 42
        rv.assert_stored_value_equals("newUserId", 42)

    def test_stored_value_mismatch_and_missing(self) -> None:
        rv.extract_field("id", "newUserId")

        with pytest.raises(ValidationFailure):
            rv.assert_stored_value_equals("newUserId", 7)
        with pytest.raises(ValidationFailure):
            rv.assert_stored_value_equals("neverStored", 7)

    def test_object_body_is_not_a_list(self) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_response_is_non_empty_list("users")

        assert exc_info.value.actual == "dict"


class TestListBody:
    @pytest.fixture(autouse=True)
    def listed(self, captured) -> None:
        captured(200, USERS)

    def test_non_empty_list(self) -> None:
        rv.assert_response_is_non_empty_list("users")

    def test_at_least(self) -> None:
        rv.assert_list_has_at_least(2)
        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_list_has_at_least(3)
        assert exc_info.value.actual == 2

    def test_each_item_has_fields(self) -> None:
        rv.assert_each_item_has_fields("id", "name", "username", "email")

    def test_each_item_missing_field(self) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_each_item_has_fields("id", "phone")

        assert exc_info.value.field == "[0].phone"

    def test_each_item_requires_field_names(self) -> None:
        with pytest.raises(ValueError):
            rv.assert_each_item_has_fields()

    def test_all_values_equal(self, captured) -> None:
        captured(200, [{"userId": 1}, {"userId": 1}])

        rv.assert_all_values_equal("userId", 1)

    def test_all_values_mismatch(self) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_all_values_equal("id", 1)

        assert exc_info.value.field == "[1].id"
        assert exc_info.value.actual == 2

    def test_first_item_field(self) -> None:
        rv.assert_first_item_field_equals("name", "A")
        with pytest.raises(ValidationFailure):
            rv.assert_first_item_field_equals("name", "B")

    def test_boolean_rendered_as_text(self) -> None:
        rv.assert_first_item_field_equals("active", "true")


class TestEmptyAndMissing:
    def test_empty_list_fails_non_empty_check(self, captured) -> None:
        captured(200, [])

        with pytest.raises(ValidationFailure):
            rv.assert_response_is_non_empty_list("users")

    def test_element_that_is_not_an_object(self, captured) -> None:
        captured(200, [1, 2])

        with pytest.raises(ValidationFailure):
            rv.assert_each_item_has_fields("id")

    def test_assertions_need_a_response(self) -> None:
        with pytest.raises(ContextError):
            rv.assert_status_code(200)


class TestResponseTime:
    def test_below_threshold(self, captured) -> None:
        captured(200, {}, elapsed_ms=120.4)

        rv.assert_response_time_below(500)

    def test_over_threshold(self, captured) -> None:
        captured(200, {}, elapsed_ms=900.0)

        with pytest.raises(ValidationFailure) as exc_info:
            rv.assert_response_time_below(500)
        assert exc_info.value.actual == 900

    def test_threshold_is_exclusive(self, captured) -> None:
        captured(200, {}, elapsed_ms=500.0)

        with pytest.raises(ValidationFailure):
            rv.assert_response_time_below(500)
