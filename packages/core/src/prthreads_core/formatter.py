"""Render comments as single list lines and keep their full detail on the side."""

from __future__ import annotations

import re

from prthreads_core.location import position_summary, resolve_line
from prthreads_core.models import Comment, CommentDetail, ListEntry

ELLIPSIS = "..."
RESOLVED_TAG = "[RESOLVED]"
DEFAULT_MAX_LENGTH = 300
REPLY_SNIPPET_LENGTH = 60
VISIBLE_REPLIES = 2

_SUGGESTION_BLOCK_RE = re.compile(r"```suggestion[^\n]*\n.*?```", re.DOTALL)
_CODE_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


def clean_body(body: str) -> str:
    """Flatten a markdown comment body to one line."""
    text = _SUGGESTION_BLOCK_RE.sub("[suggestion]", body or "")
    text = _CODE_BLOCK_RE.sub("[code]", text)
    text = text.replace("\r\n", " ").replace("\n", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters, ellipsis included."""
    if len(text) <= limit:
        return text
    if limit < len(ELLIPSIS):
        return text[: max(limit, 0)]
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def is_resolved(comment: Comment) -> bool:
    """A comment counts as resolved if any source of resolution says so."""
    return comment.resolved_at is not None or bool(comment.resolved) or comment.is_resolved


def is_bot(author: str, bot_authors=()) -> bool:
    return author in bot_authors or author.endswith("[bot]")


def summarize_replies(comment: Comment) -> str:
    replies = comment.replies
    if not replies:
        return ""
    parts = []
    hidden = len(replies) - VISIBLE_REPLIES
    if hidden > 0:
        parts.append(f"[+{hidden} earlier]")
    for reply in replies[-VISIBLE_REPLIES:]:
        snippet = truncate(clean_body(reply.body), REPLY_SNIPPET_LENGTH)
        parts.append(f"[↪ {reply.author}: {snippet}]")
    return " ".join(parts)


def comment_text(comment: Comment, max_length: int = DEFAULT_MAX_LENGTH, show_full: bool = False) -> str:
    """Cleaned body plus reply summary, truncated unless ``show_full``."""
    text = clean_body(comment.body)
    replies = summarize_replies(comment)
    if replies:
        text = f"{text} {replies}" if text else replies
    if show_full:
        return text
    return truncate(text, max_length)


def format_comment(
    comment: Comment,
    index: int,
    max_length: int = DEFAULT_MAX_LENGTH,
    show_full: bool = False,
    bot_authors=(),
) -> tuple[ListEntry, CommentDetail]:
    """Build the list row for ``comment`` and the detail record kept at ``index``."""
    line = resolve_line(comment)
    resolved = is_resolved(comment)

    prefix = f"[{index}] "
    if resolved:
        prefix += f"{RESOLVED_TAG} "
    text = f"{prefix}{comment.author}: {comment_text(comment, max_length, show_full)}"

    entry = ListEntry(
        index=index,
        comment_id=comment.id,
        file=comment.path,
        line=line,
        severity="info" if is_bot(comment.author, bot_authors) else "warning",
        text=text,
    )
    detail = CommentDetail(
        index=index,
        comment_id=comment.id,
        author=comment.author,
        path=comment.path,
        created_at=comment.created_at,
        url=comment.html_url,
        position_summary=position_summary(comment),
        resolved_line=line,
        body=comment.body,
        diff_hunk=comment.diff_hunk,
        is_resolved=resolved,
        replies=list(comment.replies),
    )
    return entry, detail


def mark_resolved(text: str) -> str:
    """Insert the resolved tag after the ``[index]`` prefix of a rendered line."""
    if f"] {RESOLVED_TAG} " in text:
        return text
    head, sep, tail = text.partition("] ")
    if not sep or not head.startswith("["):
        return f"{RESOLVED_TAG} {text}"
    return f"{head}] {RESOLVED_TAG} {tail}"


def mark_unresolved(text: str) -> str:
    if text.startswith(f"{RESOLVED_TAG} "):
        return text[len(RESOLVED_TAG) + 1 :]
    return text.replace(f"] {RESOLVED_TAG} ", "] ", 1)
