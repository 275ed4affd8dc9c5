"""Tests for comment fetching, thread merging, and the session cache."""

from unittest.mock import MagicMock

import pytest

from prthreads_core.errors import ParseFailure, PermissionFailure, TransportFailure
from prthreads_core.fetcher import CommentFetcher, SessionCache, index_threads, merge_threads
from prthreads_core.models import Comment


def rest_comment(comment_id, path="src/app.py", login="alice", review_id=100, **extra):
    data = {
        "id": comment_id,
        "pull_request_review_id": review_id,
        "path": path,
        "body": f"comment {comment_id}",
        "user": {"login": login},
        "diff_hunk": "@@ -1,2 +1,3 @@\n a\n+b",
        "line": 2,
        "original_line": 2,
        "position": 2,
        "original_position": 2,
        "side": "RIGHT",
        "created_at": "2024-05-01T10:00:00Z",
        "html_url": f"https://github.com/o/r/pull/1#discussion_r{comment_id}",
    }
    data.update(extra)
    return data


def thread(thread_id, comment_ids, resolved=False):
    return {
        "id": thread_id,
        "isResolved": resolved,
        "comments": {
            "nodes": [
                {
                    "id": f"PRRC_{cid}",
                    "databaseId": cid,
                    "body": f"comment {cid}",
                    "author": {"login": f"user{cid}"},
                    "createdAt": "2024-05-01T11:00:00Z",
                }
                for cid in comment_ids
            ]
        },
    }


def make_gateway(comments, threads):
    gateway = MagicMock()
    gateway.list_review_comments.return_value = comments
    gateway.review_threads.return_value = threads
    return gateway


class TestIndexThreads:
    def test_reply_ids_exclude_starters(self):
        reply_ids, starters = index_threads([thread("T1", [1, 2, 3]), thread("T2", [4])])
        assert reply_ids == {2, 3}
        assert set(starters) == {1, 4}
        assert starters[1].thread_id == "T1"
        assert [r.author for r in starters[1].replies] == ["user2", "user3"]

    def test_empty_thread_ignored(self):
        reply_ids, starters = index_threads([{"id": "T1", "isResolved": True, "comments": {"nodes": []}}])
        assert reply_ids == set()
        assert starters == {}

    def test_missing_author_is_unknown(self):
        t = thread("T1", [1, 2])
        t["comments"]["nodes"][1]["author"] = None
        _, starters = index_threads([t])
        assert starters[1].replies[0].author == "Unknown"


class TestMergeThreads:
    def test_replies_folded_into_starter(self):
        comments = [Comment.from_rest(rest_comment(i)) for i in (1, 2, 3)]
        merged = merge_threads(comments, [thread("T1", [1, 2, 3])])

        assert [c.id for c in merged] == [1]
        assert [r.body for r in merged[0].replies] == ["comment 2", "comment 3"]

    def test_resolution_attached(self):
        comments = [Comment.from_rest(rest_comment(i)) for i in (1, 4)]
        merged = merge_threads(comments, [thread("T1", [1], resolved=True), thread("T2", [4])])
        assert [(c.id, c.is_resolved) for c in merged] == [(1, True), (4, False)]
        assert merged[0].thread_id == "T1"

    def test_comment_without_thread_gets_defaults(self):
        comments = [Comment.from_rest(rest_comment(9))]
        merged = merge_threads(comments, [thread("T1", [1, 2])])
        assert merged[0].is_resolved is False
        assert merged[0].replies == []

    def test_fetch_order_preserved(self):
        comments = [Comment.from_rest(rest_comment(i)) for i in (5, 1, 3)]
        merged = merge_threads(comments, [thread("T1", [1]), thread("T2", [3]), thread("T3", [5])])
        assert [c.id for c in merged] == [5, 1, 3]


class TestSessionCache:
    def test_empty_at_start(self):
        assert SessionCache().get(1) is None

    def test_store_replaces_previous_pr(self):
        cache = SessionCache()
        cache.store(1, ["a"])
        cache.store(2, ["b"])
        assert cache.get(1) is None
        assert cache.get(2) == ["b"]

    def test_invalidate(self):
        cache = SessionCache()
        cache.store(1, ["a"])
        cache.invalidate()
        assert cache.get(1) is None


class TestCommentFetcher:
    def test_merges_rest_and_graphql(self):
        gateway = make_gateway([rest_comment(i) for i in (1, 2, 3)], [thread("T1", [1, 2, 3], resolved=True)])

        comments = CommentFetcher(gateway).fetch(42)

        assert [c.id for c in comments] == [1]
        assert comments[0].is_resolved is True
        assert len(comments[0].replies) == 2

    def test_second_fetch_served_from_cache(self):
        gateway = make_gateway([rest_comment(1)], [thread("T1", [1])])
        fetcher = CommentFetcher(gateway)

        first = fetcher.fetch(42)
        second = fetcher.fetch(42)

        assert second is first
        gateway.list_review_comments.assert_called_once_with(42)
        gateway.review_threads.assert_called_once_with(42)

    def test_force_refresh_bypasses_cache(self):
        gateway = make_gateway([rest_comment(1)], [thread("T1", [1])])
        fetcher = CommentFetcher(gateway)

        fetcher.fetch(42)
        fetcher.fetch(42, force_refresh=True)

        assert gateway.list_review_comments.call_count == 2

    def test_different_pr_overwrites_cache(self):
        gateway = make_gateway([rest_comment(1)], [])
        fetcher = CommentFetcher(gateway)

        fetcher.fetch(1)
        fetcher.fetch(2)

        assert fetcher.session.pr_number == 2
        assert gateway.list_review_comments.call_count == 2

    def test_graphql_failure_degrades_to_rest_list(self):
        gateway = make_gateway([rest_comment(i) for i in (1, 2)], None)
        gateway.review_threads.side_effect = TransportFailure("GraphQL error: boom")

        comments = CommentFetcher(gateway).fetch(42)

        assert [c.id for c in comments] == [1, 2]
        assert all(c.is_resolved is False and c.replies == [] for c in comments)

    def test_graphql_permission_failure_also_degrades(self):
        gateway = make_gateway([rest_comment(1)], None)
        gateway.review_threads.side_effect = PermissionFailure("forbidden", status=403)

        comments = CommentFetcher(gateway).fetch(42)

        assert [c.id for c in comments] == [1]

    def test_malformed_thread_nodes_degrade_to_rest_list(self):
        gateway = make_gateway([rest_comment(i) for i in (1, 2)], ["not a thread", thread("T1", [1, 2])])

        comments = CommentFetcher(gateway).fetch(42)

        assert [c.id for c in comments] == [1, 2]
        assert all(c.is_resolved is False and c.replies == [] and c.thread_id is None for c in comments)

    def test_failed_forced_refresh_empties_cache(self):
        gateway = make_gateway([rest_comment(1)], [thread("T1", [1])])
        fetcher = CommentFetcher(gateway)
        fetcher.fetch(42)
        gateway.list_review_comments.side_effect = TransportFailure("GET failed (502): Bad Gateway", status=502)

        with pytest.raises(TransportFailure):
            fetcher.fetch(42, force_refresh=True)

        assert fetcher.session.get(42) is None

    def test_rest_failure_aborts_and_leaves_cache_empty(self):
        gateway = make_gateway(None, [])
        gateway.list_review_comments.side_effect = TransportFailure("GET failed (404): Not Found", status=404)
        fetcher = CommentFetcher(gateway)

        with pytest.raises(TransportFailure):
            fetcher.fetch(42)

        assert fetcher.session.get(42) is None
        gateway.review_threads.assert_not_called()

    def test_malformed_rest_payload_is_parse_failure(self):
        gateway = make_gateway([{"path": "no id"}], [])

        with pytest.raises(ParseFailure):
            CommentFetcher(gateway).fetch(42)

    def test_rest_fields_mapped(self):
        gateway = make_gateway([rest_comment(7, login=None, review_id=None, side=None, line=None)], [])

        comment = CommentFetcher(gateway).fetch(42)[0]

        assert comment.author == "Unknown"
        assert comment.review_id is None
        assert comment.can_act_on_thread is False
        assert comment.side == "RIGHT"
        assert comment.line is None
        assert comment.original_position == 2
