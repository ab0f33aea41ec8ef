"""
Lightweight ``.properties`` file reader.

Handles the subset of the Java properties format that environment config
files use:

    # comment
    ! also a comment
    api.base.url=https://jsonplaceholder.typicode.com
    db.username: qa_user
    long.value = first part \\
        second part

Keys and values are trimmed. No unicode escapes, no multi-separator keys.
"""

from __future__ import annotations

from pathlib import Path

_COMMENT_MARKERS = ("#", "!")


def _split_key_value(line: str) -> tuple[str, str] | None:
    """Split a logical line on the first ``=`` or ``:``.

    Returns:
        Tuple of (key, value) or None if the line has no key.
    """
    positions = [idx for idx in (line.find("="), line.find(":")) if idx != -1]
    if not positions:
        key, value = line, ""
    else:
        sep = min(positions)
        key, value = line[:sep], line[sep + 1 :]

    key = key.strip()
    if not key:
        return None
    return key, value.strip()


def _logical_lines(text: str) -> list[str]:
    """Join backslash-continued physical lines into logical lines."""
    lines: list[str] = []
    pending = ""

    for raw_line in text.splitlines():
        stripped = raw_line.strip()

        if not pending and (not stripped or stripped.startswith(_COMMENT_MARKERS)):
            continue

        if stripped.endswith("\\") and not stripped.endswith("\\\\"):
            pending += stripped[:-1]
            continue

        lines.append(pending + stripped)
        pending = ""

    if pending:
        lines.append(pending)
    return lines


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties text into a dict (later keys win)."""
    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        parsed = _split_key_value(line)
        if parsed:
            key, value = parsed
            properties[key] = value
    return properties


def load_properties_file(path: str | Path) -> dict[str, str]:
    """Read and parse a properties file.

    Raises:
        OSError: if the file cannot be read.
        UnicodeDecodeError: if the file is not valid UTF-8.
    """
    return parse_properties(Path(path).read_text(encoding="utf-8"))
