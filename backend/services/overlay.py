"""
Overlay Renderer - Split a line into plain and provenance-tagged segments
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from models.change import ChangeKind, ChangeRecord
from models.diff import ProjectedRange, RenderSegment

HIGHLIGHT_COLORS = {
    ChangeKind.AI_GENERATED: "#00ffff26",
    ChangeKind.PASTE: "#ff880026",
    ChangeKind.IDE_PASTE: "#a4f54226",
    ChangeKind.UNDO_REDO: "#80008026",
    ChangeKind.USER_EDIT: "#88888811",
}

AI_TYPE_PHRASES = {
    "inlineCompletion": "Using inline completion",
    "applyPatch": "Using the apply patch tool",
    "createFile": "Using the create file tool",
    "insertEdit": "Using the insert edit tool",
    "replaceString": "Using the replace string tool",
    "applyEdit": "Using an internal command",
}


INVALID_DATE = "Invalid Date"


def format_timestamp(epoch_ms: int) -> str:
    try:
        return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (OverflowError, ValueError, OSError):
        return INVALID_DATE


def highlight_color(kind: str) -> str:
    return HIGHLIGHT_COLORS[ChangeKind(kind)]


def describe_change(record: ChangeRecord) -> str:
    """Tooltip text for a change"""
    created = f" • Created at: {format_timestamp(record.created_at)}"
    by = record.author or "you"
    kind = record.kind

    if kind == ChangeKind.AI_GENERATED:
        owner = f"{record.author}'s" if record.author else "your"
        label = f"AI Generated under {owner} control"
        if record.ai_name:
            label += f" • {record.ai_name}"
        if record.ai_model:
            label += f" ({record.ai_model})"
        phrase = AI_TYPE_PHRASES.get(record.ai_type)
        if phrase:
            label += f" • {phrase}"
        return label + created
    elif kind == ChangeKind.PASTE:
        source = f' • From the webpage "{record.paste_title}" ({record.paste_url})' if record.paste_url else ""
        return f"Clipboard Paste by {by}{source}{created}"
    elif kind == ChangeKind.IDE_PASTE:
        source = f" • From the {record.paste_url} repository at {record.paste_title}" if record.paste_url else ""
        return f"Clipboard Paste by {by}{source}{created}"
    elif kind == ChangeKind.UNDO_REDO:
        return f"Undo/Redo by {by}{created}"
    elif kind == ChangeKind.USER_EDIT:
        return f"Edit by {by}{created}"
    else:
        raise ValueError(f"Unsupported change kind: {kind}")


def render(line_text: str, ranges: Iterable[ProjectedRange]) -> list[RenderSegment]:
    """Cover line_text with contiguous segments.

    Ranges must be sorted by start_char. A range starting inside one that was
    already emitted is dropped entirely: the earlier start wins.
    """
    segments = []
    current_pos = 0

    for projected in ranges:
        if projected.start_char < current_pos:
            continue

        if current_pos < projected.start_char:
            segments.append(RenderSegment(text=line_text[current_pos : projected.start_char]))

        segments.append(
            RenderSegment(
                text=line_text[projected.start_char : projected.end_char],
                record=projected.record,
                label=describe_change(projected.record),
                color=highlight_color(projected.record.kind),
            )
        )
        current_pos = projected.end_char

    if current_pos < len(line_text) or not segments:
        segments.append(RenderSegment(text=line_text[current_pos:]))

    return segments
