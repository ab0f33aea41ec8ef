"""
Scenario lifecycle hooks.

Called by the BDD runner's environment module: the scenario context is
cleared when a scenario starts and detached when it ends, so pooled worker
threads never carry state from one scenario into the next. Scenarios tagged
``db`` also close the shared database connection on the way out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from harness.core import attachments
from harness.core.attachments import Attachment
from harness.core.context import scenario_context
from harness.core.db import get_gateway
from harness.core.observability import set_scenario_id

logger = logging.getLogger(__name__)

DB_TAG = "db"


def before_scenario(name: str, tags: Iterable[str] = ()) -> None:
    logger.info("======== STARTING: %s [Tags: %s] ========", name, sorted(tags))
    set_scenario_id(name)
    attachments.drain()
    scenario_context.clear()


def after_scenario(name: str, status: str) -> list[Attachment]:
    """Tear the scenario down; returns its attachments for the reporter."""
    logger.info("======== FINISHED: %s [Status: %s] ========", name, status)
    recorded = attachments.drain()
    if recorded:
        logger.debug("Scenario '%s' recorded %d attachment(s)", name, len(recorded))
    scenario_context.remove()
    set_scenario_id("")
    return recorded


def after_db_scenario() -> None:
    get_gateway().close_connection()


def is_db_scenario(tags: Iterable[str]) -> bool:
    return any(tag.lstrip("@") == DB_TAG for tag in tags)
