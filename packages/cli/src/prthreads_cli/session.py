"""Wiring shared by every command: build the controller, report failures."""

from __future__ import annotations

import functools

import click

from prthreads_core.controller import ListController
from prthreads_core.errors import PRThreadsError
from prthreads_core.fetcher import CommentFetcher
from prthreads_core.gh.gateway import GitHubGateway
from prthreads_core.gh.local import detect_repo_from_git
from prthreads_core.locator import PRLocator
from prthreads_core.threads import ThreadActions


def build_controller(config: dict) -> ListController:
    """Instantiate gateway → fetcher / actions / locator → controller from config.

    This factory lives in the CLI so prthreads_core has no knowledge of
    click or of how the repository and token were discovered.
    """
    repo = config.get("repo") or detect_repo_from_git()
    if not repo:
        raise click.UsageError(
            "Could not detect the repository. Pass --repo owner/name or set 'repo' in .prthreads.yml."
        )
    if not config.get("github_token"):
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    try:
        gateway = GitHubGateway(
            repo,
            token=config["github_token"],
            base_url=config.get("api_base_url", "https://api.github.com"),
            timeout=config.get("request_timeout", 30),
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    return ListController(
        fetcher=CommentFetcher(gateway),
        actions=ThreadActions(gateway),
        locator=PRLocator(gateway),
        config=config,
    )


def get_controller(ctx: click.Context) -> ListController:
    """Return the controller for this invocation, building it on first use."""
    obj = ctx.ensure_object(dict)
    if obj.get("controller") is None:
        obj["controller"] = build_controller(obj.get("config") or {})
    return obj["controller"]


def error_message(error: PRThreadsError) -> str:
    if error.hint:
        return f"{error.message}\n{error.hint}"
    return error.message


def reports_errors(func):
    """Turn PRThreadsError into a ClickException so the command exits non-zero with a readable message."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PRThreadsError as e:
            raise click.ClickException(error_message(e)) from e

    return wrapper
