"""
Interval Projector - Character ranges of a line covered by each change
"""

from __future__ import annotations

from models.change import ChangeLog
from models.diff import ProjectedRange


def project(change_log: ChangeLog, line_number: int, line_length: int) -> list[ProjectedRange]:
    """Project every change touching line_number onto that line.

    Ranges are clipped to [0, line_length], empty ones dropped, and the result
    is sorted by start_char with ties kept in change log order.
    """
    ranges = []

    for record in change_log.changes:
        if not record.touches(line_number):
            continue

        if record.start.line == record.end.line:
            start_char, end_char = record.start.character, record.end.character
        elif line_number == record.start.line:
            # Start line: rest of the line
            start_char, end_char = record.start.character, line_length
        elif line_number == record.end.line:
            start_char, end_char = 0, record.end.character
        else:
            start_char, end_char = 0, line_length

        start_char = max(0, min(start_char, line_length))
        end_char = max(start_char, min(end_char, line_length))
        if end_char > start_char:
            ranges.append(ProjectedRange(start_char=start_char, end_char=end_char, record=record))

    ranges.sort(key=lambda r: r.start_char)
    return ranges
