"""Where the GitHub token comes from.

Environment variables win so CI can inject a token without touching the
gh config store. Otherwise the session stored by `gh auth login` is reused,
so anyone who can run `gh pr view` can run prthreads without extra setup.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def _token_from_env() -> str | None:
    return next((os.environ[var] for var in TOKEN_ENV_VARS if os.environ.get(var)), None)


def _token_from_gh_cli(timeout: int = 5) -> str | None:
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=timeout)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh auth token unavailable: %s", e)
        return None
    token = result.stdout.strip() if result.returncode == 0 else ""
    return token or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when neither source has one.

    Never raises. build_controller turns a missing token into a UsageError.
    """
    token = _token_from_env()
    if token:
        return token

    token = _token_from_gh_cli()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token
