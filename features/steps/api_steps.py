"""Step definitions for HTTP request/response scenarios."""

import json

from behave import given, then, when
from behave.runner import Context

from harness.api.client import Service
from harness.services import request_steps, response_validation


def _docstring_body(context: Context) -> str:
    body = (context.text or "").strip()
    # fail early on malformed JSON in the feature file
    json.loads(body)
    return body


# specific patterns first: behave rejects a pattern an earlier one already matches
@given('I prepare a GET request to "{endpoint}" with basic auth "{username}" and "{password}"')
def step_prepare_get_basic_auth(context: Context, endpoint: str, username: str, password: str) -> None:
    request_steps.prepare_request("GET", endpoint, basic_auth=(username, password))


@given('I prepare a GET request to "{endpoint}"')
def step_prepare_get(context: Context, endpoint: str) -> None:
    request_steps.prepare_request("GET", endpoint)


@given('I prepare a GET request to "{endpoint}" with query params')
def step_prepare_get_with_params(context: Context, endpoint: str) -> None:
    params = request_steps.data_table_to_params(context.table)
    request_steps.prepare_request("GET", endpoint, query_params=params)


@given('I prepare a GET request to "{endpoint}" with headers')
def step_prepare_get_with_headers(context: Context, endpoint: str) -> None:
    headers = request_steps.data_table_to_params(context.table)
    request_steps.prepare_request("GET", endpoint, headers=headers)


@given('I prepare a {method} request to "{endpoint}" with body')
def step_prepare_with_body(context: Context, method: str, endpoint: str) -> None:
    request_steps.prepare_request(method, endpoint, body=_docstring_body(context))


@given('I prepare a POST request to "{endpoint}" with token "{token}" and body')
def step_prepare_post_with_token(context: Context, endpoint: str, token: str) -> None:
    request_steps.prepare_request("POST", endpoint, body=_docstring_body(context), auth_token=token)


@given('I prepare a POST request to "{endpoint}" on the secondary service with body')
def step_prepare_secondary_post(context: Context, endpoint: str) -> None:
    request_steps.prepare_request(
        "POST", endpoint, body=_docstring_body(context), service=Service.SECONDARY
    )


@given('I prepare a DELETE request to "{endpoint}"')
def step_prepare_delete(context: Context, endpoint: str) -> None:
    request_steps.prepare_request("DELETE", endpoint)


@when("I send the request")
def step_send(context: Context) -> None:
    request_steps.send_request()


@then("the response status code should be {expected:d}")
def step_status_code(context: Context, expected: int) -> None:
    response_validation.assert_status_code(expected)


@then('the response field "{field}" should be "{expected}"')
def step_field_equals_text(context: Context, field: str, expected: str) -> None:
    response_validation.assert_field_equals(field, expected)


@then('the response field "{field}" should be {expected:d}')
def step_field_equals_int(context: Context, field: str, expected: int) -> None:
    response_validation.assert_field_equals(field, expected)


@then('the response field "{field}" should not be null')
def step_field_not_null(context: Context, field: str) -> None:
    response_validation.assert_field_not_null(field)


@then('I extract and store the field "{field}" as "{key}"')
def step_extract(context: Context, field: str, key: str) -> None:
    response_validation.extract_field(field, key)


@then('the stored value "{key}" should equal {expected:d}')
def step_stored_value(context: Context, key: str, expected: int) -> None:
    response_validation.assert_stored_value_equals(key, expected)


@then("the response should contain a list of {label}")
def step_non_empty_list(context: Context, label: str) -> None:
    response_validation.assert_response_is_non_empty_list(label)


@then("the list should have at least {min_items:d} items")
def step_list_size(context: Context, min_items: int) -> None:
    response_validation.assert_list_has_at_least(min_items)


@then("each {item} should have fields {fields}")
def step_each_has_fields(context: Context, item: str, fields: str) -> None:
    names = [name.strip().strip('"') for name in fields.split(",")]
    response_validation.assert_each_item_has_fields(*[n for n in names if n])


@then('all "{field}" values in the list should be {expected:d}')
def step_all_values(context: Context, field: str, expected: int) -> None:
    response_validation.assert_all_values_equal(field, expected)


@then('the first {item}\'s "{field}" should be "{expected}"')
def step_first_item_field(context: Context, item: str, field: str, expected: str) -> None:
    response_validation.assert_first_item_field_equals(field, expected)


@then("the response time should be less than {max_ms:d} milliseconds")
def step_response_time(context: Context, max_ms: int) -> None:
    response_validation.assert_response_time_below(max_ms)
