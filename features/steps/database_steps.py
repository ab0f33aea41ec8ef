"""Step definitions that touch the database (skipped when it is unavailable)."""

from behave import given, then
from behave.runner import Context

from harness.services import db_validation


@then('if database is available, validate field "{field}" for user id {user_id:d} matches API value')
def step_validate_field_against_db(context: Context, field: str, user_id: int) -> None:
    db_validation.validate_field_against_db(field, user_id)


@given('I create test data in database for user "{username}"')
def step_create_test_data(context: Context, username: str) -> None:
    db_validation.create_user_test_data(username)


@then('I delete test data from database for user "{username}"')
def step_delete_test_data(context: Context, username: str) -> None:
    db_validation.delete_user_test_data(username)
