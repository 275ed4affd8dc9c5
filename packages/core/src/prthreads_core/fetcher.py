"""Fetch review comments and fold review-thread data onto them.

REST gives the positional data (path, diff hunk, line fields) but says
nothing about threads. GraphQL gives threads and their resolution state
but identifies comments by node id. The two are correlated through each
GraphQL comment's ``databaseId``, which equals the REST comment ``id``.

Known limitation: the two calls are not atomic. A comment created between
them is simply shown as an unthreaded starter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from prthreads_core.errors import ParseFailure, PRThreadsError
from prthreads_core.models import Comment, Reply

logger = logging.getLogger(__name__)


@dataclass
class ThreadInfo:
    thread_id: str | None
    is_resolved: bool
    replies: list[Reply] = field(default_factory=list)


def index_threads(threads: list[dict]) -> tuple[set[int], dict[int, ThreadInfo]]:
    """Return (reply comment ids, starter comment id → ThreadInfo)."""
    reply_ids: set[int] = set()
    starters: dict[int, ThreadInfo] = {}
    for thread in threads:
        nodes = [n for n in ((thread.get("comments") or {}).get("nodes") or []) if n]
        if not nodes:
            continue
        for node in nodes[1:]:
            if node.get("databaseId") is not None:
                reply_ids.add(node["databaseId"])
        starter_id = nodes[0].get("databaseId")
        if starter_id is None:
            continue
        starters[starter_id] = ThreadInfo(
            thread_id=thread.get("id"),
            is_resolved=bool(thread.get("isResolved")),
            replies=[Reply.from_graphql(n) for n in nodes[1:]],
        )
    return reply_ids, starters


def merge_threads(comments: list[Comment], threads: list[dict]) -> list[Comment]:
    """Drop replies from the top level and attach thread data to starters."""
    reply_ids, starters = index_threads(threads)
    merged = []
    for comment in comments:
        if comment.id in reply_ids:
            continue
        info = starters.get(comment.id)
        if info is not None:
            comment.is_resolved = info.is_resolved
            comment.replies = list(info.replies)
            comment.thread_id = info.thread_id
        else:
            comment.is_resolved = False
            comment.replies = []
        merged.append(comment)
    return merged


class SessionCache:
    """Single-PR-deep memo of the last successful fetch, for one process.

    Only one logical thread of control reads or writes it; a concurrent
    caller would need to serialise access around fetch().
    """

    def __init__(self):
        self.pr_number: int | None = None
        self.comments: list[Comment] = []

    def get(self, pr_number: int) -> list[Comment] | None:
        if self.pr_number is not None and self.pr_number == pr_number:
            return self.comments
        return None

    def store(self, pr_number: int, comments: list[Comment]) -> None:
        self.pr_number = pr_number
        self.comments = comments

    def invalidate(self) -> None:
        self.pr_number = None
        self.comments = []


class CommentFetcher:
    def __init__(self, gateway, session: SessionCache | None = None):
        self._gateway = gateway
        self.session = session if session is not None else SessionCache()

    def fetch(self, pr_number: int, force_refresh: bool = False) -> list[Comment]:
        """Return thread-starter comments for a PR, with replies and resolution attached.

        Served from the session cache unless ``force_refresh`` is set (which
        empties the cache first) or the cache holds a different PR. A REST
        failure propagates; a GraphQL failure or malformed thread data
        degrades to the unthreaded REST list.
        """
        if force_refresh:
            self.session.invalidate()
        else:
            cached = self.session.get(pr_number)
            if cached is not None:
                logger.debug("Using cached comments for PR #%d", pr_number)
                return cached

        raw = self._gateway.list_review_comments(pr_number)
        try:
            comments = [Comment.from_rest(c) for c in raw]
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseFailure(f"Unexpected review comment payload for PR #{pr_number}: {e}") from e

        try:
            merged = merge_threads(comments, self._gateway.review_threads(pr_number))
        except (PRThreadsError, AttributeError, TypeError) as e:
            logger.warning("Could not load review threads for PR #%d; showing all comments: %s", pr_number, e)
            for comment in comments:
                comment.is_resolved = False
                comment.replies = []
                comment.thread_id = None
            merged = comments

        logger.debug("Fetched %d comment(s), %d thread starter(s) for PR #%d", len(comments), len(merged), pr_number)
        self.session.store(pr_number, merged)
        return merged
