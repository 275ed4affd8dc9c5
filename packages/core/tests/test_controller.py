"""Tests for list building, resolved-hiding, and action dispatch by display index."""

from unittest.mock import MagicMock

import pytest

from prthreads_core.controller import ListController
from prthreads_core.errors import LookupFailure, TransportFailure
from prthreads_core.models import ActionResult, Comment


def make_comment(comment_id, resolved=False, author="alice"):
    return Comment(
        id=comment_id,
        path=f"src/file{comment_id}.py",
        body=f"body {comment_id}",
        author=author,
        review_id=100,
        line=comment_id * 10,
        is_resolved=resolved,
    )


def five_comments():
    return [
        make_comment(1),
        make_comment(2, resolved=True),
        make_comment(3),
        make_comment(4, resolved=True),
        make_comment(5),
    ]


def make_controller(comments=None, config=None, locator=None, branch="feature/x"):
    fetcher = MagicMock()
    fetcher.fetch.return_value = comments if comments is not None else five_comments()
    actions = MagicMock()
    controller = ListController(
        fetcher,
        actions,
        locator=locator,
        config=config,
        branch_lookup=lambda: branch,
    )
    return controller, fetcher, actions


class TestBuild:
    def test_resolved_hidden_by_default(self):
        controller, _, _ = make_controller()

        result = controller.build(42)

        assert len(result.entries) == 3
        assert result.resolved_hidden == 2
        assert result.status == "3 shown, 2 resolved hidden"

    def test_show_resolved(self):
        controller, _, _ = make_controller(config={"show_resolved": True})

        result = controller.build(42)

        assert len(result.entries) == 5
        assert result.status == "5 shown"

    def test_indices_count_hidden_comments(self):
        controller, _, _ = make_controller()

        result = controller.build(42)

        assert [e.index for e in result.entries] == [1, 3, 5]
        assert result.entries[1].text.startswith("[3] alice: ")

    def test_title_has_pr_and_count(self):
        controller, _, _ = make_controller()
        assert controller.build(42).title == "PR #42 review comments (5)"

    def test_details_rebuilt_for_every_comment(self):
        controller, fetcher, _ = make_controller()
        controller.build(42)
        assert sorted(controller.details) == [1, 2, 3, 4, 5]

        fetcher.fetch.return_value = [make_comment(9)]
        controller.build(42, force_refresh=True)
        assert sorted(controller.details) == [1]
        assert controller.details[1].comment_id == 9

    def test_entry_carries_location_and_severity(self):
        controller, _, _ = make_controller(
            comments=[make_comment(1, author="github-actions[bot]")], config={"bot_authors": []}
        )
        entry = controller.build(42).entries[0]
        assert (entry.file, entry.line, entry.severity) == ("src/file1.py", 10, "info")

    def test_max_length_from_config(self):
        comment = make_comment(1)
        comment.body = "x" * 500
        controller, _, _ = make_controller(comments=[comment], config={"max_length": 50})
        text = controller.build(42).entries[0].text
        assert text == "[1] alice: " + "x" * 47 + "..."

    def test_refresh_forces_fetch(self):
        controller, fetcher, _ = make_controller()
        controller.build(42)
        controller.refresh()
        fetcher.fetch.assert_called_with(42, force_refresh=True)


class TestResolvePr:
    def test_explicit_number_skips_locator(self):
        locator = MagicMock()
        controller, _, _ = make_controller(locator=locator)
        controller.build(42)
        locator.locate.assert_not_called()

    def test_locates_from_branch(self):
        locator = MagicMock()
        locator.locate.return_value = 17
        controller, fetcher, _ = make_controller(locator=locator)

        controller.build()

        locator.locate.assert_called_once_with("feature/x")
        fetcher.fetch.assert_called_once_with(17, force_refresh=False)

    def test_detached_head(self):
        controller, _, _ = make_controller(locator=MagicMock(), branch=None)
        with pytest.raises(LookupFailure):
            controller.build()

    def test_lookup_failure_propagates(self):
        locator = MagicMock()
        locator.locate.side_effect = LookupFailure("No pull request found", hint="gh pr view")
        controller, _, _ = make_controller(locator=locator)
        with pytest.raises(LookupFailure):
            controller.build()


class TestActions:
    def test_unknown_index(self):
        controller, _, _ = make_controller()
        controller.build(42)
        with pytest.raises(LookupFailure):
            controller.comment_at(99)

    def test_resolve_updates_entry_text(self):
        controller, _, actions = make_controller()
        actions.resolve.return_value = ActionResult(changed=True, message="Thread resolved.")
        controller.build(42)

        controller.resolve(3)

        comment = controller.comment_at(3)
        actions.resolve.assert_called_once_with(42, comment)
        assert comment.is_resolved is True
        assert controller.entry(3).text.startswith("[3] [RESOLVED] alice: ")
        assert controller.details[3].is_resolved is True

    def test_resolve_noop_leaves_text(self):
        controller, _, actions = make_controller()
        actions.resolve.return_value = ActionResult(changed=False, message="Thread is already resolved.")
        controller.build(42)

        controller.resolve(1)

        assert controller.entry(1).text.startswith("[1] alice: ")

    def test_unresolve_strips_marker(self):
        controller, _, actions = make_controller(config={"show_resolved": True})
        actions.unresolve.return_value = ActionResult(changed=True, message="Thread unresolved.")
        controller.build(42)
        assert controller.entry(2).text.startswith("[2] [RESOLVED] ")

        controller.unresolve(2)

        assert controller.entry(2).text.startswith("[2] alice: ")
        assert controller.comment_at(2).is_resolved is False

    def test_reply_refreshes_list(self):
        controller, fetcher, actions = make_controller()
        actions.reply.return_value = ActionResult(changed=True, message="Reply posted.")
        controller.build(42)

        controller.reply(1, "thanks")

        actions.reply.assert_called_once()
        assert actions.reply.call_args.args[2] == "thanks"
        fetcher.fetch.assert_called_with(42, force_refresh=True)

    def test_reply_survives_refresh_failure(self):
        controller, fetcher, actions = make_controller()
        actions.reply.return_value = ActionResult(changed=True, message="Reply posted.")
        controller.build(42)
        fetcher.fetch.side_effect = TransportFailure("boom")

        result = controller.reply(1, "thanks")

        assert result.changed is True
