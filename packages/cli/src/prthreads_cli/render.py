"""Terminal rendering for comment lists, detail views, and action results."""

from __future__ import annotations

import click
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from prthreads_core.models import ActionResult, CommentDetail, CommentList

console = Console()

_SEVERITY_STYLE = {"warning": "white", "info": "dim"}


def print_quickfix(comment_list: CommentList) -> None:
    """One ``file:line: [severity] text`` row per entry, for editor quickfix lists."""
    for e in comment_list.entries:
        click.echo(f"{e.file}:{e.line}: [{e.severity}] {e.text}")


def print_table(comment_list: CommentList) -> None:
    if not comment_list.entries:
        console.print(f"[yellow]No review comments to show ({comment_list.status}).[/yellow]")
        return

    table = Table(title=comment_list.title, caption=comment_list.status, show_header=True, header_style="bold cyan")
    table.add_column("Location", style="bold", no_wrap=True)
    table.add_column("Comment")

    for e in comment_list.entries:
        style = _SEVERITY_STYLE.get(e.severity, "white")
        table.add_row(f"{escape(e.file)}:{e.line}", f"[{style}]{escape(e.text)}[/{style}]")

    console.print(table)


def print_detail(detail: CommentDetail) -> None:
    state = "[green]resolved[/green]" if detail.is_resolved else "[yellow]unresolved[/yellow]"
    header = (
        f"[bold]{escape(detail.author)}[/bold]  {escape(detail.created_at)}  {state}\n"
        f"[cyan]{escape(detail.path)}:{detail.resolved_line}[/cyan]\n"
        f"[dim]{escape(detail.position_summary)}[/dim]\n"
        f"[dim]{escape(detail.url)}[/dim]"
    )
    parts = [header, "", escape(detail.body)]
    for reply in detail.replies:
        parts.append(f"\n[bold]↪ {escape(reply.author)}[/bold]  [dim]{escape(reply.created_at)}[/dim]")
        parts.append(escape(reply.body))

    renderables = ["\n".join(parts)]
    if detail.diff_hunk:
        renderables.append(Syntax(detail.diff_hunk, "diff", theme="ansi_dark", word_wrap=True))

    title = escape(f"[{detail.index}] comment {detail.comment_id}")
    console.print(Panel(Group(*renderables), title=title, expand=True))


def print_result(result: ActionResult) -> None:
    if result.changed:
        console.print(f"[green]{escape(result.message)}[/green]")
    else:
        console.print(f"[yellow]{escape(result.message)}[/yellow]")
