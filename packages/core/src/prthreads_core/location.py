"""Map a review comment to a line in the current version of its file."""

from __future__ import annotations

import re

from prthreads_core.models import Comment

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def line_from_diff_hunk(diff_hunk: str, original_position: int | None = None) -> int:
    """
    Derive a new-file line number from a review comment's diff hunk.

    ``newStart`` from the header is the anchor. Body lines are walked with
    the header at index 0; every line that is not a removal (``-``) exists
    in the new file and advances the offset. When the walk reaches
    ``original_position`` the offset at that point pins the line.

    Returns 0 when the header cannot be parsed.
    """
    lines = diff_hunk.splitlines()
    if not lines:
        return 0
    match = _HUNK_HEADER_RE.match(lines[0])
    if not match:
        return 0
    new_start = int(match.group(3))

    line_offset = 0
    found = False
    for index, line in enumerate(lines[1:], start=1):
        if not line.startswith("-"):
            line_offset += 1
        if original_position is not None and index == original_position:
            found = True
            break

    if found and line_offset > 0:
        return new_start + line_offset - 1
    return new_start


def resolve_line(comment: Comment) -> int:
    """Best available line for a comment; first satisfied source wins.

    line → diff hunk → original_line → start_line → 1
    """
    if comment.line is not None:
        return comment.line
    if comment.diff_hunk:
        from_hunk = line_from_diff_hunk(comment.diff_hunk, comment.original_position)
        if from_hunk:
            return from_hunk
    if comment.original_line is not None:
        return comment.original_line
    if comment.start_line is not None:
        return comment.start_line
    return 1


def position_summary(comment: Comment) -> str:
    """Human-readable dump of the raw positional fields, for the detail view."""
    fields = (
        ("line", comment.line),
        ("original_line", comment.original_line),
        ("start_line", comment.start_line),
        ("position", comment.position),
        ("original_position", comment.original_position),
    )
    parts = [f"{name}={'-' if value is None else value}" for name, value in fields]
    parts.append(f"side={comment.side}")
    return " ".join(parts)
