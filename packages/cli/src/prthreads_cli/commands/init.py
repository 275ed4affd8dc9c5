"""init command — write a .prthreads.yml for this repository.

Pins the repository slug (so commands work outside the checkout, or with
a non-GitHub origin) and the display preferences.
"""

from __future__ import annotations

import click
from rich.console import Console

from prthreads_core.config import DEFAULT_CONFIG, write_config
from prthreads_core.gh.local import detect_repo_from_git

console = Console()


@click.command("init")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Auto-detected from git remote.")
@click.pass_context
def init_cmd(ctx, repo: str | None):
    """Create or update .prthreads.yml in the current directory."""
    console.print("\n[bold cyan]prthreads init[/bold cyan]\n")

    if repo is None:
        repo = detect_repo_from_git()
        if repo:
            console.print(f"[dim]Detected repository: {repo}[/dim]")
        else:
            repo = click.prompt("GitHub repository (owner/name)")

    max_length = click.prompt("Truncate comments at (characters)", type=int, default=DEFAULT_CONFIG["max_length"])
    show_resolved = click.confirm("Show resolved threads by default?", default=DEFAULT_CONFIG["show_resolved"])

    config_path = (ctx.obj or {}).get("config_path", ".prthreads.yml")
    path = write_config({"repo": repo, "max_length": max_length, "show_resolved": show_resolved}, config_path)
    console.print(f"[green]Wrote {path}[/green]")
    console.print("List comments with: [bold]prthreads list[/bold]")
