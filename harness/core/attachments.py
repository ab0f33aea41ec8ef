"""
Diagnostic attachments recorded during a scenario.

The API client attaches the pretty-printed body of every response here; the
lifecycle hooks drain the list at the end of each scenario and hand it to
whatever reporter is in use.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_local = threading.local()


@dataclass(frozen=True)
class Attachment:
    """A named blob captured while a step ran."""

    name: str
    content_type: str
    body: str

    @property
    def size_bytes(self) -> int:
        return len(self.body.encode("utf-8"))


def _attachments() -> list[Attachment]:
    items = getattr(_local, "items", None)
    if items is None:
        items = []
        _local.items = items
    return items


def attach(name: str, content_type: str, body: str) -> Attachment:
    """Record an attachment for the scenario running on this thread."""
    attachment = Attachment(name=name, content_type=content_type, body=body)
    _attachments().append(attachment)
    logger.debug("Attached '%s' (%s, %d bytes)", name, content_type, attachment.size_bytes)
    return attachment


def pending() -> list[Attachment]:
    """Attachments recorded so far on this thread (copy)."""
    return list(_attachments())


def drain() -> list[Attachment]:
    """Return and forget this thread's attachments."""
    items = _attachments()
    drained = list(items)
    items.clear()
    return drained
