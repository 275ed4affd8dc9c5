"""Review comment data models.

Comment mirrors one entry of GitHub's REST review-comment payload. The
positional fields (line, original_line, start_line, position,
original_position) are all optional because GitHub fills them in
inconsistently: outdated comments lose ``line``, single-line comments
have no ``start_line``, and so on. location.resolve_line() is the only
place that decides which one wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Reply:
    """A follow-up comment inside a review thread."""

    author: str
    body: str
    created_at: str = ""

    @classmethod
    def from_graphql(cls, node: dict) -> Reply:
        author = (node.get("author") or {}).get("login") or "Unknown"
        return cls(author=author, body=node.get("body") or "", created_at=node.get("createdAt") or "")


@dataclass
class Comment:
    """One inline review comment, plus the thread data merged onto it at fetch time."""

    id: int
    path: str
    body: str
    author: str = "Unknown"
    review_id: int | None = None
    diff_hunk: str = ""
    line: int | None = None
    original_line: int | None = None
    start_line: int | None = None
    position: int | None = None
    original_position: int | None = None
    side: str = "RIGHT"
    created_at: str = ""
    html_url: str = ""
    # Explicit resolution fields some payloads carry. Usually absent on REST.
    resolved_at: str | None = None
    resolved: bool | None = None
    # Filled in from GraphQL review threads during the merge step.
    is_resolved: bool = False
    replies: list[Reply] = field(default_factory=list)
    thread_id: str | None = None

    @classmethod
    def from_rest(cls, data: dict) -> Comment:
        user = data.get("user") or {}
        return cls(
            id=data["id"],
            path=data.get("path") or "",
            body=data.get("body") or "",
            author=user.get("login") or "Unknown",
            review_id=data.get("pull_request_review_id"),
            diff_hunk=data.get("diff_hunk") or "",
            line=data.get("line"),
            original_line=data.get("original_line"),
            start_line=data.get("start_line"),
            position=data.get("position"),
            original_position=data.get("original_position"),
            side=data.get("side") or "RIGHT",
            created_at=data.get("created_at") or "",
            html_url=data.get("html_url") or "",
            resolved_at=data.get("resolved_at"),
            resolved=data.get("resolved"),
        )

    @property
    def can_act_on_thread(self) -> bool:
        """Only inline review comments (those with a review id) have a thread."""
        return self.review_id is not None


@dataclass
class CommentDetail:
    """Everything the detail view and the action commands need, keyed by display index."""

    index: int
    comment_id: int
    author: str
    path: str
    created_at: str
    url: str
    position_summary: str
    resolved_line: int
    body: str
    diff_hunk: str
    is_resolved: bool
    replies: list[Reply] = field(default_factory=list)


@dataclass
class ListEntry:
    """One row of the navigable list, in the shape an editor quickfix list expects."""

    index: int
    comment_id: int
    file: str
    line: int
    severity: str  # "warning" for people, "info" for bots
    text: str


@dataclass
class CommentList:
    """A rendered list plus its title and status summary."""

    pr_number: int
    title: str
    entries: list[ListEntry] = field(default_factory=list)
    total: int = 0
    resolved_hidden: int = 0

    @property
    def status(self) -> str:
        shown = f"{len(self.entries)} shown"
        if self.resolved_hidden:
            return f"{shown}, {self.resolved_hidden} resolved hidden"
        return shown


@dataclass
class ActionResult:
    """Outcome of a thread action. ``changed`` is False for informational no-ops."""

    changed: bool
    message: str
    strategy: str | None = None
    response: dict | None = None
