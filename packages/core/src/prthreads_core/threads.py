"""Thread actions: resolve, unresolve, and reply.

Resolve/unresolve always re-query the PR's review threads to find the one
holding the comment; thread ids are never taken from the display cache.

Replies go through an ordered chain of strategies. Each strategy is a pure
function from (comment, context) to a RestRequest, so the chain can be
tested without a network:

  replies endpoint
    ├─ pending-review conflict → in_reply_to comment
    │                          → pending review + submit as COMMENT
    └─ any other error         → single-comment COMMENT review

Only alternate endpoints are tried; the same request is never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from prthreads_core.errors import LookupFailure, ParseFailure, PreconditionFailure, TransportFailure
from prthreads_core.location import resolve_line
from prthreads_core.models import ActionResult, Comment

logger = logging.getLogger(__name__)


@dataclass
class RestRequest:
    verb: str
    path: str
    payload: dict


@dataclass
class ReplyContext:
    repo_path: str
    pr_number: int
    body: str

    @property
    def pulls_path(self) -> str:
        return f"{self.repo_path}/pulls/{self.pr_number}"


@dataclass
class ReplyStrategy:
    name: str
    build: Callable[[Comment, ReplyContext], RestRequest]
    # Second request issued with the first one's response, e.g. submitting a pending review.
    follow_up: Callable[[dict, Comment, ReplyContext], RestRequest] | None = None


def _review_comment(comment: Comment, ctx: ReplyContext) -> dict:
    return {"path": comment.path, "line": resolve_line(comment), "side": comment.side, "body": ctx.body}


def replies_endpoint_request(comment: Comment, ctx: ReplyContext) -> RestRequest:
    return RestRequest("POST", f"{ctx.pulls_path}/comments/{comment.id}/replies", {"body": ctx.body})


def in_reply_to_request(comment: Comment, ctx: ReplyContext) -> RestRequest:
    return RestRequest("POST", f"{ctx.pulls_path}/comments", {"body": ctx.body, "in_reply_to": comment.id})


def pending_review_request(comment: Comment, ctx: ReplyContext) -> RestRequest:
    # No "event" key: GitHub creates the review in the PENDING state.
    return RestRequest("POST", f"{ctx.pulls_path}/reviews", {"comments": [_review_comment(comment, ctx)]})


def submit_review_request(response: dict, comment: Comment, ctx: ReplyContext) -> RestRequest:
    review_id = (response or {}).get("id")
    if review_id is None:
        raise ParseFailure("Pending review response did not include an id.")
    return RestRequest("POST", f"{ctx.pulls_path}/reviews/{review_id}/events", {"event": "COMMENT"})


def comment_review_request(comment: Comment, ctx: ReplyContext) -> RestRequest:
    return RestRequest(
        "POST",
        f"{ctx.pulls_path}/reviews",
        {"event": "COMMENT", "comments": [_review_comment(comment, ctx)]},
    )


PRIMARY_STRATEGY = ReplyStrategy("replies endpoint", replies_endpoint_request)
PENDING_REVIEW_FALLBACKS = (
    ReplyStrategy("in_reply_to comment", in_reply_to_request),
    ReplyStrategy("pending review", pending_review_request, follow_up=submit_review_request),
)
GENERIC_FALLBACKS = (ReplyStrategy("comment review", comment_review_request),)


def is_pending_review_conflict(error: TransportFailure) -> bool:
    """GitHub refuses new comments while the user has an unsubmitted review."""
    return "pending review" in (error.message or "").lower()


def _require_review_id(comment: Comment, action: str) -> None:
    if not comment.can_act_on_thread:
        raise PreconditionFailure(
            f"Cannot {action} comment {comment.id}: it is not part of a pull request review.",
            hint="Only inline review comments can be replied to or resolved from here.",
        )


class ThreadActions:
    def __init__(self, gateway):
        self._gateway = gateway

    # ------------------------------------------------------------------ #
    # Resolve / unresolve                                                  #
    # ------------------------------------------------------------------ #

    def find_thread(self, pr_number: int, comment_id: int) -> dict:
        """Return the review thread that contains ``comment_id``."""
        for thread in self._gateway.review_threads(pr_number):
            nodes = (thread.get("comments") or {}).get("nodes") or []
            if any(n and n.get("databaseId") == comment_id for n in nodes):
                return thread
        raise LookupFailure(
            f"No review thread contains comment {comment_id} on PR #{pr_number}.",
            hint="The thread may be beyond the first 100 threads, or the comment was deleted.",
        )

    def resolve(self, pr_number: int, comment: Comment) -> ActionResult:
        return self._set_resolved(pr_number, comment, True)

    def unresolve(self, pr_number: int, comment: Comment) -> ActionResult:
        return self._set_resolved(pr_number, comment, False)

    def _set_resolved(self, pr_number: int, comment: Comment, resolved: bool) -> ActionResult:
        verb = "resolve" if resolved else "unresolve"
        _require_review_id(comment, verb)

        thread = self.find_thread(pr_number, comment.id)
        if bool(thread.get("isResolved")) == resolved:
            state = "resolved" if resolved else "unresolved"
            return ActionResult(changed=False, message=f"Thread is already {state}.")

        thread_id = thread.get("id")
        if not thread_id:
            raise ParseFailure("Review thread has no id.")
        is_resolved = self._gateway.set_thread_resolved(thread_id, resolved)
        if is_resolved != resolved:
            raise TransportFailure(f"GitHub did not {verb} thread {thread_id}.")

        logger.info("%sd thread %s for comment %d", verb.capitalize(), thread_id, comment.id)
        return ActionResult(changed=True, message=f"Thread {verb}d.")

    # ------------------------------------------------------------------ #
    # Reply                                                                #
    # ------------------------------------------------------------------ #

    def _run(self, strategy: ReplyStrategy, comment: Comment, ctx: ReplyContext):
        request = strategy.build(comment, ctx)
        response = self._gateway.rest(request.verb, request.path, payload=request.payload)
        if strategy.follow_up is None:
            return response

        request = strategy.follow_up(response, comment, ctx)
        try:
            return self._gateway.rest(request.verb, request.path, payload=request.payload)
        except TransportFailure as e:
            # The first request succeeded, so GitHub now holds a pending review with the reply in it.
            review_id = response.get("id")
            raise type(e)(
                f"{e.message} (pending review {review_id} was created but not submitted)",
                status=e.status,
                data=e.data,
                hint=f"Submit or delete pending review {review_id} on GitHub before replying again.",
            ) from e

    def reply(self, pr_number: int, comment: Comment, body: str) -> ActionResult:
        _require_review_id(comment, "reply to")
        if not body or not body.strip():
            raise PreconditionFailure("Reply text is empty.")

        ctx = ReplyContext(repo_path=self._gateway.repo_path, pr_number=pr_number, body=body)
        try:
            response = self._run(PRIMARY_STRATEGY, comment, ctx)
            return ActionResult(True, "Reply posted.", PRIMARY_STRATEGY.name, response)
        except TransportFailure as e:
            last_error = e

        fallbacks = PENDING_REVIEW_FALLBACKS if is_pending_review_conflict(last_error) else GENERIC_FALLBACKS
        for strategy in fallbacks:
            logger.warning("Reply failed (%s); trying %s", last_error.message, strategy.name)
            try:
                response = self._run(strategy, comment, ctx)
            except TransportFailure as e:
                last_error = e
                continue
            return ActionResult(True, f"Reply posted via {strategy.name}.", strategy.name, response)

        raise last_error
