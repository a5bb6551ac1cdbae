"""
Human-readable labels for diff paths.

Presentation only: `agendas[1].title` -> "Agenda 2 > Title". Unknown keys are
shown as-is, so every path gets some label.
"""

from __future__ import annotations

from typing import Sequence

FIELD_LABELS = {
    "title": "Title",
    "title_template": "Title template",
    "text": "Text",
    "content": "Content",
    "chairman": "Chairman",
    "labels": "Labels",
    "date": "Date",
    "agendas_section": "Agenda section heading",
    "agenda_title_template": "Agenda title template",
    "footer_message": "Footer message",
    "footer_labels": "Footer labels",
    "gp_prefix": "GP prefix",
    "seal_text": "Seal text",
    "table_config": "Table",
    "key": "Key",
    "label": "Label",
    "width": "Width",
    "align": "Alignment",
    "line_gap": "Line gap",
    "index": "Order",
    "type": "Type",
    "filter": "Filter",
    "appendix": "Appendix",
}

# Sequence keys whose items get a numbered singular label ("Agenda 2").
ITEM_LABELS = {
    "agendas": "Agenda",
    "columns": "Column",
    "sections": "Section",
    "sub": "Item",
    "appendix": "Appendix",
}

ROOT_LABEL = "Content"


def display_path(segments: Sequence[str | int]) -> str:
    parts: list[str] = []
    i = 0
    while i < len(segments):
        segment = segments[i]
        following = segments[i + 1] if i + 1 < len(segments) else None

        if isinstance(segment, int):
            parts.append(f"#{segment + 1}")
            i += 1
            continue

        if isinstance(following, int) and segment in ITEM_LABELS:
            parts.append(f"{ITEM_LABELS[segment]} {following + 1}")
            i += 2
            continue

        parts.append(FIELD_LABELS.get(segment, segment))
        i += 1

    return " > ".join(parts) if parts else ROOT_LABEL
