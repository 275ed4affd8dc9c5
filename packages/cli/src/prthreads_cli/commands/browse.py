"""browse command — an interactive session over one PR's review threads.

One controller (and so one session cache and one detail table) lives for
the whole loop; comments are fetched once and only refetched on `R` or
after a reply.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from prthreads_cli.commands.actions import read_reply_text
from prthreads_cli.render import print_detail, print_result, print_table
from prthreads_cli.session import error_message, get_controller, reports_errors
from prthreads_core.errors import PRThreadsError

console = Console()

_HELP = """\
  [bold]d N[/bold] show detail   [bold]r N[/bold] reply   [bold]x N[/bold] resolve   [bold]u N[/bold] unresolve
  [bold]l[/bold]   list again    [bold]R[/bold]   refresh [bold]a[/bold]   toggle resolved
  [bold]f[/bold]   toggle full   [bold]q[/bold]   quit"""

_INDEXED = {"d", "r", "x", "u"}


def parse_command(raw: str) -> tuple[str, int | None, str]:
    """Split ``"r 3 thanks!"`` into ``("r", 3, "thanks!")``."""
    parts = raw.strip().split(maxsplit=2)
    if not parts:
        return "", None, ""
    command = parts[0]
    index = None
    if len(parts) > 1:
        try:
            index = int(parts[1].strip("[]"))
        except ValueError:
            raise click.BadParameter(f"{parts[1]!r} is not a comment index.")
    rest = parts[2] if len(parts) > 2 else ""
    return command, index, rest


def _dispatch(controller, command: str, index: int | None, rest: str) -> bool:
    """Run one browse command. Returns False when the loop should stop."""
    if command in _INDEXED and index is None:
        raise click.BadParameter(f"'{command}' needs a comment index, e.g. '{command} 3'.")

    if command == "q":
        return False
    if command == "d":
        print_detail(controller.detail(index))
    elif command == "r":
        controller.comment_at(index)
        body = read_reply_text(rest or None)
        if not body:
            console.print("[yellow]Empty reply; nothing posted.[/yellow]")
            return True
        print_result(controller.reply(index, body))
        print_table(controller.current)
    elif command == "x":
        print_result(controller.resolve(index))
    elif command == "u":
        print_result(controller.unresolve(index))
    elif command == "R":
        print_table(controller.refresh())
    elif command == "a":
        controller.show_resolved = not controller.show_resolved
        print_table(controller.build())
    elif command == "f":
        controller.show_full = not controller.show_full
        print_table(controller.build())
    elif command == "l":
        print_table(controller.current)
    else:
        console.print(_HELP)
    return True


@click.command("browse")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number. Omit to use the current branch.")
@click.pass_context
@reports_errors
def browse_cmd(ctx, pr_number: int | None):
    """Interactively browse, reply to, and resolve review threads."""
    controller = get_controller(ctx)
    print_table(controller.build(pr_number))
    console.print(_HELP)

    while True:
        raw = click.prompt("prthreads", default="", show_default=False, prompt_suffix="> ")
        try:
            command, index, rest = parse_command(raw)
            if not _dispatch(controller, command, index, rest):
                break
        except click.BadParameter as e:
            console.print(f"[red]{escape(e.format_message())}[/red]")
        except PRThreadsError as e:
            console.print(f"[red]{escape(error_message(e))}[/red]")
