"""Local git / gh CLI collaborators.

Each helper runs one short-lived process and returns its trimmed stdout,
or None when the binary is missing, times out, or exits non-zero. Callers
treat None as "this source has nothing" and move on to the next one.
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

_TIMEOUT = 10


def _run(args: list[str], timeout: int = _TIMEOUT) -> str | None:
    logger.debug("Running: %s", " ".join(args))
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("%s unavailable: %s", args[0], e)
        return None
    if result.returncode != 0:
        logger.debug("%s exited %d: %s", " ".join(args[:3]), result.returncode, (result.stderr or "").strip())
        return None
    return (result.stdout or "").strip()


def current_branch() -> str | None:
    """Return the checked-out branch name, or None on a detached HEAD."""
    branch = _run(["git", "rev-parse", "--abbrev-ref", "HEAD"])
    if not branch or branch == "HEAD":
        return None
    return branch


def detect_repo_from_git() -> str | None:
    """Try to detect the GitHub repo slug from the git remote URL."""
    url = _run(["git", "remote", "get-url", "origin"])
    if not url or "github.com" not in url:
        return None
    # https://github.com/owner/repo.git  →  owner/repo
    # git@github.com:owner/repo.git      →  owner/repo
    slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
    return slug if "/" in slug else None


def gh_status_pr_number() -> str | None:
    """PR number gh associates with the current branch (``gh pr status``)."""
    return _run(["gh", "pr", "status", "--json", "number", "--jq", ".currentBranch.number"])


def gh_view_pr_number() -> str | None:
    """PR number for the checked-out ref (``gh pr view``)."""
    return _run(["gh", "pr", "view", "--json", "number", "--jq", ".number"])
