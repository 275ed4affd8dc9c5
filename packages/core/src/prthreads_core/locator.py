"""Resolve the current branch to a pull request number.

Lookup order (stops at first success):
  1. Open PRs whose head branch equals the branch name (REST)
  2. `gh pr status` — gh's notion of the current branch's PR
  3. `gh pr view` — the PR for the checked-out ref
"""

from __future__ import annotations

import logging
from typing import Callable

from prthreads_core.errors import LookupFailure, ParseFailure, TransportFailure
from prthreads_core.gh import local

logger = logging.getLogger(__name__)


def _as_pr_number(value) -> int | None:
    """Normalise a strategy result; empty output and the literal ``null`` mean nothing found."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = str(value).strip()
    if not text or text == "null":
        return None
    try:
        number = int(text)
    except ValueError:
        logger.debug("Ignoring non-numeric PR lookup result: %r", text)
        return None
    return number if number > 0 else None


def lookup_hint(branch: str) -> str:
    return (
        "Try one of:\n"
        f"  gh pr list --head {branch}\n"
        "  gh pr status\n"
        "  gh pr view\n"
        "or pass the number explicitly with --pr <number>."
    )


class PRLocator:
    def __init__(
        self,
        gateway,
        status_lookup: Callable[[], str | None] = local.gh_status_pr_number,
        view_lookup: Callable[[], str | None] = local.gh_view_pr_number,
    ):
        self._gateway = gateway
        self._status_lookup = status_lookup
        self._view_lookup = view_lookup

    def _from_head_branch(self, branch: str) -> int | None:
        pulls = self._gateway.open_pulls_for_branch(branch)
        return pulls[0].get("number") if pulls else None

    def locate(self, branch: str) -> int:
        strategies = [
            ("open PRs for head branch", lambda: self._from_head_branch(branch)),
            ("gh pr status", self._status_lookup),
            ("gh pr view", self._view_lookup),
        ]
        for name, strategy in strategies:
            try:
                number = _as_pr_number(strategy())
            except (TransportFailure, ParseFailure) as e:
                logger.debug("PR lookup via %s failed: %s", name, e)
                continue
            if number is not None:
                logger.debug("Resolved branch %s to PR #%d via %s", branch, number, name)
                return number
            logger.debug("PR lookup via %s found nothing", name)

        raise LookupFailure(f"No pull request found for branch {branch!r}.", hint=lookup_hint(branch))
