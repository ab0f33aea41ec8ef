"""
Small JSON path expressions for reading fields out of response bodies.

Supported syntax examples:
  - "" or "$"            -> whole document
  - "name"               -> top-level field
  - "address.city"       -> nested dict
  - "items[0].id"        -> list index (negative indexes count from the end)
  - "[0].name" / "$[0]"  -> index into a top-level list
  - "items[*].id"        -> every element
  - "['first name']"     -> keys that are not plain identifiers

A key applied to a list maps over its elements, so "userId" against a list
of posts yields every post's userId; nested lists are flattened, so
"a[*].b[*].c" is one flat list. A digit key applied to a list indexes
it ("items.0.id"). Missing fields resolve to None instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

_TOKEN = re.compile(
    r"\[(?P<index>-?\d+|\*)\]"
    r"|\['(?P<quoted>[^']*)'\]"
    r"|(?P<key>[^.\[\]]+)"
    r"|(?P<dot>\.)"
)


class JsonPathError(ValueError):
    """Raised for expressions that cannot be parsed."""


@dataclass(frozen=True)
class Key:
    name: str


@dataclass(frozen=True)
class Index:
    position: int


@dataclass(frozen=True)
class Wildcard:
    pass


Segment = Key | Index | Wildcard


@dataclass(frozen=True)
class JsonPath:
    """A parsed path: the original expression plus its segments."""

    expression: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, expression: str) -> JsonPath:
        return _parse(expression)

    @property
    def is_root(self) -> bool:
        return not self.segments

    def evaluate(self, document: Any) -> Any:
        current = document
        for segment in self.segments:
            if current is None:
                return None
            current = _apply(segment, current)
        return current

    def __str__(self) -> str:
        return self.expression or "$"


@lru_cache(maxsize=256)
def _parse(expression: str) -> JsonPath:
    body = expression.strip()
    if body.startswith("$"):
        body = body[1:]

    segments: list[Segment] = []
    pos = 0
    while pos < len(body):
        match = _TOKEN.match(body, pos)
        if not match:
            raise JsonPathError(f"Invalid JSON path '{expression}' at position {pos}")
        pos = match.end()

        if match.group("dot"):
            continue
        if match.group("index") is not None:
            raw = match.group("index")
            segments.append(Wildcard() if raw == "*" else Index(int(raw)))
        elif match.group("quoted") is not None:
            segments.append(Key(match.group("quoted")))
        else:
            key = match.group("key").strip()
            if key == "*":
                segments.append(Wildcard())
            elif key:
                segments.append(Key(key))

    return JsonPath(expression=expression, segments=tuple(segments))


def _apply(segment: Segment, node: Any) -> Any:
    if isinstance(segment, Wildcard):
        if isinstance(node, list):
            return list(node)
        if isinstance(node, dict):
            return list(node.values())
        return None

    if isinstance(segment, Index):
        if not isinstance(node, list):
            return None
        try:
            return node[segment.position]
        except IndexError:
            return None

    # Key
    if isinstance(node, dict):
        return node.get(segment.name)
    if isinstance(node, list):
        if re.fullmatch(r"-?\d+", segment.name):
            return _apply(Index(int(segment.name)), node)
        return _map_key(segment.name, node)
    return None


def _map_key(name: str, items: list[Any]) -> list[Any]:
    # nested lists (from an earlier wildcard) are flattened into one projection
    values: list[Any] = []
    for item in items:
        if isinstance(item, list):
            values.extend(_map_key(name, item))
        else:
            values.append(item.get(name) if isinstance(item, dict) else None)
    return values


def read_path(document: Any, path: str | JsonPath) -> Any:
    """Evaluate ``path`` against a decoded JSON document."""
    if not isinstance(path, JsonPath):
        path = JsonPath.parse(path)
    return path.evaluate(document)
