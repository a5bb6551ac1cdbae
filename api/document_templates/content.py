"""
Template content as a typed tree.

Stored content is plain JSON (dict/list/str/int/float/bool/None). Before
comparing two versions it is parsed into one of six node kinds so the diff
code can dispatch on the kind instead of probing attributes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class NullNode:
    def to_json(self) -> None:
        return None


@dataclass(frozen=True)
class BoolNode:
    value: bool

    def to_json(self) -> bool:
        return self.value


@dataclass(frozen=True)
class NumberNode:
    value: int | float

    # Dataclass equality compares `value`, so 1 and 1.0 are the same number.
    def to_json(self) -> int | float:
        return self.value


@dataclass(frozen=True)
class StringNode:
    value: str

    def to_json(self) -> str:
        return self.value


@dataclass(frozen=True)
class SequenceNode:
    items: tuple["Node", ...]

    def to_json(self) -> list[Any]:
        return [item.to_json() for item in self.items]


@dataclass(frozen=True)
class MappingNode:
    # Sorted by key so equality and iteration ignore insertion order.
    entries: tuple[tuple[str, "Node"], ...]

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    def get(self, key: str) -> "Node | None":
        for entry_key, node in self.entries:
            if entry_key == key:
                return node
        return None

    def to_json(self) -> dict[str, Any]:
        return {key: node.to_json() for key, node in self.entries}


Node = Union[NullNode, BoolNode, NumberNode, StringNode, SequenceNode, MappingNode]


class ContentTypeError(TypeError):
    pass


def parse(value: Any) -> Node:
    """
    Convert a JSON-like Python value into a content node.

    Raises ContentTypeError for values JSON cannot represent (sets, bytes,
    objects, non-string mapping keys, NaN or infinite floats).
    """
    if value is None:
        return NullNode()
    # bool is a subclass of int; check it first.
    if isinstance(value, bool):
        return BoolNode(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ContentTypeError("NaN and infinite numbers are not valid template content.")
        return NumberNode(value)
    if isinstance(value, str):
        return StringNode(value)
    if isinstance(value, (list, tuple)):
        return SequenceNode(tuple(parse(item) for item in value))
    if isinstance(value, dict):
        entries = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise ContentTypeError(f"Mapping keys must be strings, got {type(key).__name__}.")
            entries.append((key, parse(item)))
        entries.sort(key=lambda entry: entry[0])
        return MappingNode(tuple(entries))
    raise ContentTypeError(f"Unsupported content value of type {type(value).__name__}.")
