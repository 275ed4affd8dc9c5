"""List controller: builds the visible comment list and dispatches actions on it.

Display indices are 1-based positions in fetch order and are only valid
for the most recent build(). Actions look the comment up through the
index → Comment map kept alongside the rendered entries, never by parsing
the rendered text.
"""

from __future__ import annotations

import logging
from typing import Callable

from prthreads_core.errors import LookupFailure, PRThreadsError
from prthreads_core.formatter import DEFAULT_MAX_LENGTH, format_comment, mark_resolved, mark_unresolved
from prthreads_core.gh import local
from prthreads_core.models import ActionResult, Comment, CommentDetail, CommentList, ListEntry

logger = logging.getLogger(__name__)


class ListController:
    def __init__(
        self,
        fetcher,
        actions,
        locator=None,
        config: dict | None = None,
        branch_lookup: Callable[[], str | None] = local.current_branch,
    ):
        config = config or {}
        self._fetcher = fetcher
        self._actions = actions
        self._locator = locator
        self._branch_lookup = branch_lookup
        self.max_length: int = config.get("max_length", DEFAULT_MAX_LENGTH)
        self.show_full: bool = bool(config.get("show_full", False))
        self.show_resolved: bool = bool(config.get("show_resolved", False))
        self.bot_authors: list[str] = list(config.get("bot_authors") or [])

        self.pr_number: int | None = None
        self.current: CommentList | None = None
        self.details: dict[int, CommentDetail] = {}
        self._comments: dict[int, Comment] = {}

    # ------------------------------------------------------------------ #
    # Building                                                             #
    # ------------------------------------------------------------------ #

    def resolve_pr(self, pr_number: int | None = None) -> int:
        """Use the explicit PR number, else locate one from the current branch."""
        if pr_number is not None:
            return pr_number
        if self.pr_number is not None:
            return self.pr_number

        branch = self._branch_lookup()
        if not branch:
            raise LookupFailure(
                "Could not determine the current git branch.",
                hint="Check out the PR branch or pass --pr <number>.",
            )
        if self._locator is None:
            raise LookupFailure(f"No PR locator configured for branch {branch!r}.", hint="Pass --pr <number>.")
        return self._locator.locate(branch)

    def build(self, pr_number: int | None = None, force_refresh: bool = False) -> CommentList:
        pr = self.resolve_pr(pr_number)
        comments = self._fetcher.fetch(pr, force_refresh=force_refresh)
        self.pr_number = pr
        return self._render(pr, comments)

    def refresh(self) -> CommentList:
        return self.build(self.pr_number, force_refresh=True)

    def _render(self, pr_number: int, comments: list[Comment]) -> CommentList:
        self.details.clear()
        self._comments.clear()

        entries: list[ListEntry] = []
        resolved_hidden = 0
        for index, comment in enumerate(comments, 1):
            entry, detail = format_comment(
                comment,
                index,
                max_length=self.max_length,
                show_full=self.show_full,
                bot_authors=self.bot_authors,
            )
            self._comments[index] = comment
            self.details[index] = detail
            if detail.is_resolved and not self.show_resolved:
                resolved_hidden += 1
                continue
            entries.append(entry)

        self.current = CommentList(
            pr_number=pr_number,
            title=f"PR #{pr_number} review comments ({len(comments)})",
            entries=entries,
            total=len(comments),
            resolved_hidden=resolved_hidden,
        )
        logger.debug("Rendered %s for PR #%d", self.current.status, pr_number)
        return self.current

    # ------------------------------------------------------------------ #
    # Selection                                                            #
    # ------------------------------------------------------------------ #

    def comment_at(self, index: int) -> Comment:
        try:
            return self._comments[index]
        except KeyError:
            raise LookupFailure(
                f"No comment [{index}] in the current list.",
                hint="Indices change on every refresh; list the comments again.",
            ) from None

    def detail(self, index: int) -> CommentDetail:
        self.comment_at(index)
        return self.details[index]

    def entry(self, index: int) -> ListEntry | None:
        if self.current is None:
            return None
        return next((e for e in self.current.entries if e.index == index), None)

    # ------------------------------------------------------------------ #
    # Actions                                                              #
    # ------------------------------------------------------------------ #

    def resolve(self, index: int) -> ActionResult:
        comment = self.comment_at(index)
        result = self._actions.resolve(self.pr_number, comment)
        if result.changed:
            comment.is_resolved = True
            self._update_resolution(index, True)
        return result

    def unresolve(self, index: int) -> ActionResult:
        comment = self.comment_at(index)
        result = self._actions.unresolve(self.pr_number, comment)
        if result.changed:
            comment.is_resolved = False
            comment.resolved = None
            comment.resolved_at = None
            self._update_resolution(index, False)
        return result

    def _update_resolution(self, index: int, resolved: bool) -> None:
        self.details[index].is_resolved = resolved
        entry = self.entry(index)
        if entry is not None:
            entry.text = mark_resolved(entry.text) if resolved else mark_unresolved(entry.text)

    def reply(self, index: int, body: str) -> ActionResult:
        """Post a reply, then refetch so the new reply shows up in the thread."""
        comment = self.comment_at(index)
        result = self._actions.reply(self.pr_number, comment, body)
        try:
            self.refresh()
        except PRThreadsError as e:
            logger.warning("Reply posted but the list could not be refreshed: %s", e)
        return result
