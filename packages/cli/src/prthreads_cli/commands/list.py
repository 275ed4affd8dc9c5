"""list / show commands — render the comment list and a single comment's detail."""

from __future__ import annotations

import click

from prthreads_cli.render import print_detail, print_quickfix, print_table
from prthreads_cli.session import get_controller, reports_errors


@click.command("list")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number. Omit to use the current branch.")
@click.option("--all", "show_resolved", is_flag=True, help="Include resolved threads.")
@click.option("--full", "show_full", is_flag=True, help="Do not truncate comment text.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "quickfix"]),
    default="table",
    show_default=True,
    help="quickfix prints file:line: text rows for an editor.",
)
@click.pass_context
@reports_errors
def list_cmd(ctx, pr_number: int | None, show_resolved: bool, show_full: bool, output_format: str):
    """List inline review comments, one line per thread.

    Resolved threads are hidden unless --all is given. The [N] index on
    each line is what show / reply / resolve / unresolve expect.
    """
    controller = get_controller(ctx)
    if show_resolved:
        controller.show_resolved = True
    if show_full:
        controller.show_full = True

    comment_list = controller.build(pr_number)
    if output_format == "quickfix":
        print_quickfix(comment_list)
    else:
        print_table(comment_list)


@click.command("show")
@click.argument("index", type=int)
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number. Omit to use the current branch.")
@click.pass_context
@reports_errors
def show_cmd(ctx, index: int, pr_number: int | None):
    """Show the full body, replies, and diff hunk of comment INDEX."""
    controller = get_controller(ctx)
    controller.build(pr_number)
    print_detail(controller.detail(index))
