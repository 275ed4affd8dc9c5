"""reply / resolve / unresolve commands — act on one review thread by display index."""

from __future__ import annotations

import click

from prthreads_cli.render import print_result
from prthreads_cli.session import get_controller, reports_errors

_PR_OPTION = click.option(
    "--pr", "pr_number", type=int, default=None, help="Pull request number. Omit to use the current branch."
)

_EDITOR_TEMPLATE = "\n# Write your reply above. Lines starting with '#' are ignored.\n"


def read_reply_text(message: str | None) -> str:
    """Return the reply body from -m, or from $EDITOR when -m is omitted."""
    if message is not None:
        return message.strip()
    edited = click.edit(_EDITOR_TEMPLATE) or ""
    lines = [line for line in edited.splitlines() if not line.startswith("#")]
    return "\n".join(lines).strip()


@click.command("reply")
@click.argument("index", type=int)
@click.option("--message", "-m", default=None, help="Reply text. Opens $EDITOR when omitted.")
@_PR_OPTION
@click.pass_context
@reports_errors
def reply_cmd(ctx, index: int, message: str | None, pr_number: int | None):
    """Reply to the review thread of comment INDEX."""
    controller = get_controller(ctx)
    controller.build(pr_number)
    # Fail on a bad index before opening an editor.
    controller.comment_at(index)

    body = read_reply_text(message)
    if not body:
        raise click.UsageError("Reply text is empty; nothing posted.")
    print_result(controller.reply(index, body))


@click.command("resolve")
@click.argument("index", type=int)
@_PR_OPTION
@click.pass_context
@reports_errors
def resolve_cmd(ctx, index: int, pr_number: int | None):
    """Resolve the review thread of comment INDEX."""
    controller = get_controller(ctx)
    controller.build(pr_number)
    print_result(controller.resolve(index))


@click.command("unresolve")
@click.argument("index", type=int)
@_PR_OPTION
@click.pass_context
@reports_errors
def unresolve_cmd(ctx, index: int, pr_number: int | None):
    """Unresolve the review thread of comment INDEX."""
    controller = get_controller(ctx)
    controller.build(pr_number)
    print_result(controller.unresolve(index))
