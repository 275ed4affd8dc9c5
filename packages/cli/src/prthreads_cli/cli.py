"""CLI entry point for prthreads.

Commands:
  list       — list inline review comments for the current branch's PR
  show       — detail view of one comment
  reply      — reply to a review thread
  resolve    — resolve a review thread
  unresolve  — unresolve a review thread
  browse     — interactive session over one PR
  init       — write a .prthreads.yml for this repository
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prthreads_cli.commands.actions import reply_cmd, resolve_cmd, unresolve_cmd
from prthreads_cli.commands.browse import browse_cmd
from prthreads_cli.commands.init import init_cmd
from prthreads_cli.commands.list import list_cmd, show_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("prthreads"),
    prog_name="prthreads",
)
@click.option(
    "--config",
    "config_path",
    default=".prthreads.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTHREADS_CONFIG",
)
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Auto-detected from git remote.")
@click.option("--verbose", "-v", is_flag=True, help="Log API calls and fallback steps.")
@click.pass_context
def main(ctx: click.Context, config_path: str, repo: str | None, verbose: bool):
    """Browse, reply to, and resolve GitHub PR review threads from the terminal."""
    from prthreads_core.config import load_config
    from prthreads_cli.auth import resolve_github_token

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler(show_path=False)])

    ctx.ensure_object(dict)

    try:
        config = load_config(config_path, cli_overrides={"repo": repo})
    except ValueError as e:
        raise click.UsageError(str(e))

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path


main.add_command(list_cmd)
main.add_command(show_cmd)
main.add_command(reply_cmd)
main.add_command(resolve_cmd)
main.add_command(unresolve_cmd)
main.add_command(browse_cmd)
main.add_command(init_cmd)
