"""
Structural diff between two template content trees.

Mappings are compared by key, sequences by position. The result is a flat
list of changes addressed by path, e.g. `agendas[1].title`, plus a count per
change kind. The functions here are pure: the same two inputs always give the
same output, in the same order.

Known limitation: reordering sequence items is reported as `modified` entries
at the affected indices, not as a move.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any

from . import content
from .content import MappingNode, Node, SequenceNode

ADDED = "added"
REMOVED = "removed"
MODIFIED = "modified"

DEFAULT_MAX_VALUE_CHARS = 200

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

PathSegment = str | int


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def max_value_chars() -> int:
    return _env_int("TEMPLATE_DIFF_MAX_VALUE_CHARS", DEFAULT_MAX_VALUE_CHARS)


@dataclass(frozen=True)
class Change:
    path: str
    type: str
    old_value: str | None = None
    new_value: str | None = None
    segments: tuple[PathSegment, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class DiffSummary:
    added: int = 0
    removed: int = 0
    modified: int = 0


def format_path(segments: tuple[PathSegment, ...] | list[PathSegment]) -> str:
    """
    Render path segments as `key.sub[0].field`.

    Keys that are not plain identifiers are bracket-quoted: `labels["a b"]`.
    The root itself has no segments and renders as the empty string.
    """
    out = ""
    for segment in segments:
        if isinstance(segment, int):
            out += f"[{segment}]"
        elif _IDENTIFIER_RE.match(segment):
            out += f".{segment}" if out else segment
        else:
            out += f"[{json.dumps(segment, ensure_ascii=False)}]"
    return out


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def format_value(node: Node, *, limit: int | None = None) -> str:
    """
    Human-readable string for a content value.
    """
    limit = limit if limit is not None else max_value_chars()

    if isinstance(node, content.NullNode):
        return "(none)"
    if isinstance(node, content.BoolNode):
        return "true" if node.value else "false"
    if isinstance(node, content.NumberNode):
        value = node.value
        if isinstance(value, float) and value.is_integer():
            return _truncate(str(int(value)), limit)
        return _truncate(json.dumps(value), limit)
    if isinstance(node, content.StringNode):
        if not node.value:
            return "(empty string)"
        return _truncate(node.value, limit)
    if isinstance(node, SequenceNode):
        if not node.items:
            return "(empty list)"
        return _truncate(_compact_json(node.to_json()), limit)
    if isinstance(node, MappingNode):
        if not node.entries:
            return "(empty object)"
        return _truncate(_compact_json(node.to_json()), limit)
    raise content.ContentTypeError(f"Not a content node: {node!r}")


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _walk(
    old: Node,
    new: Node,
    segments: tuple[PathSegment, ...],
    changes: list[Change],
    limit: int,
) -> None:
    if isinstance(old, MappingNode) and isinstance(new, MappingNode):
        for key in sorted(set(old.keys()) | set(new.keys())):
            _walk_pair(old.get(key), new.get(key), segments + (key,), changes, limit)
        return

    if isinstance(old, SequenceNode) and isinstance(new, SequenceNode):
        for index in range(max(len(old.items), len(new.items))):
            old_item = old.items[index] if index < len(old.items) else None
            new_item = new.items[index] if index < len(new.items) else None
            _walk_pair(old_item, new_item, segments + (index,), changes, limit)
        return

    if old == new:
        return

    changes.append(
        Change(
            path=format_path(segments),
            type=MODIFIED,
            old_value=format_value(old, limit=limit),
            new_value=format_value(new, limit=limit),
            segments=segments,
        )
    )


def _walk_pair(
    old: Node | None,
    new: Node | None,
    segments: tuple[PathSegment, ...],
    changes: list[Change],
    limit: int,
) -> None:
    if old is None and new is not None:
        changes.append(
            Change(
                path=format_path(segments),
                type=ADDED,
                new_value=format_value(new, limit=limit),
                segments=segments,
            )
        )
    elif new is None and old is not None:
        changes.append(
            Change(
                path=format_path(segments),
                type=REMOVED,
                old_value=format_value(old, limit=limit),
                segments=segments,
            )
        )
    elif old is not None and new is not None:
        _walk(old, new, segments, changes, limit)


def diff_content(old: Any, new: Any) -> list[Change]:
    """
    Compare two JSON-like content blobs and return the flat change list.
    """
    changes: list[Change] = []
    _walk(content.parse(old), content.parse(new), (), changes, max_value_chars())
    return changes


def summarize(changes: list[Change]) -> DiffSummary:
    return DiffSummary(
        added=sum(1 for c in changes if c.type == ADDED),
        removed=sum(1 for c in changes if c.type == REMOVED),
        modified=sum(1 for c in changes if c.type == MODIFIED),
    )
