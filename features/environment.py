"""Behave environment hooks for API scenarios.

Runtime overrides come from behave userdata, e.g.:

    behave -D env=staging -D api.base.url=http://localhost:8080
"""

import logging

from behave.model import Scenario
from behave.runner import Context

from harness import hooks
from harness.api.client import close_api_client
from harness.core.config import get_config, get_settings
from harness.core.db import get_gateway
from harness.core.observability import configure_logging

logger = logging.getLogger(__name__)


def before_all(context: Context) -> None:
    settings = get_settings()
    configure_logging(settings.harness_log_level, structured=settings.harness_structured_logs)

    userdata = dict(context.config.userdata)
    env = userdata.pop("env", None)

    config = get_config()
    if env:
        config.reset(env=env)
    config.update_overrides(userdata)

    logger.info("Running against environment '%s'", config.env)


def before_scenario(context: Context, scenario: Scenario) -> None:
    hooks.before_scenario(scenario.name, scenario.effective_tags)


def after_scenario(context: Context, scenario: Scenario) -> None:
    status = getattr(scenario.status, "name", str(scenario.status))
    context.attachments = hooks.after_scenario(scenario.name, status)

    if hooks.is_db_scenario(scenario.effective_tags):
        hooks.after_db_scenario()


def after_all(context: Context) -> None:
    close_api_client()
    get_gateway().close_connection()
