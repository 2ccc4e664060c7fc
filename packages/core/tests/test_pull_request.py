"""Tests for GitHub pull request helper functions."""

import types
from unittest.mock import MagicMock

from changeset_bot_core.gh.pull_request import (
    create_comment,
    delete_comment,
    find_bot_comment_id,
    get_bot_comment_id,
    has_changeset_been_added,
    list_changed_files,
    list_commit_messages,
)
from changeset_bot_core.models import ChangedFile

BOT = "changeset-bot[bot]"


def _comment(comment_id, login):
    user = types.SimpleNamespace(login=login) if login is not None else None
    return types.SimpleNamespace(id=comment_id, user=user)


class TestHasChangesetBeenAdded:
    def test_added_changeset_detected(self):
        files = [ChangedFile("proj/.changeset/foo-bar.md", "added")]
        assert has_changeset_been_added(files, "proj/.changeset") is True

    def test_modified_changeset_ignored(self):
        files = [ChangedFile("proj/.changeset/foo-bar.md", "modified")]
        assert has_changeset_been_added(files, "proj/.changeset") is False

    def test_readme_ignored(self):
        files = [ChangedFile("proj/.changeset/README.md", "added")]
        assert has_changeset_been_added(files, "proj/.changeset") is False

    def test_non_markdown_ignored(self):
        files = [ChangedFile("proj/.changeset/config.json", "added")]
        assert has_changeset_been_added(files, "proj/.changeset") is False

    def test_other_folder_ignored(self):
        files = [ChangedFile("other/.changeset/foo.md", "added")]
        assert has_changeset_been_added(files, "proj/.changeset") is False

    def test_folder_name_is_not_a_pattern(self):
        files = [ChangedFile("xchangeset/foo.md", "added")]
        assert has_changeset_been_added(files, ".changeset") is False

    def test_any_matching_file_is_enough(self):
        files = [
            ChangedFile("src/index.ts", "modified"),
            ChangedFile(".changeset/README.md", "added"),
            ChangedFile(".changeset/witty-llama.md", "added"),
        ]
        assert has_changeset_been_added(files, ".changeset") is True

    def test_empty_file_list(self):
        assert has_changeset_been_added([], ".changeset") is False


class TestFindBotCommentId:
    def test_returns_none_when_no_comments(self):
        assert find_bot_comment_id([], BOT) is None

    def test_returns_none_when_bot_has_not_commented(self):
        assert find_bot_comment_id([_comment(1, "alice"), _comment(2, "bob")], BOT) is None

    def test_returns_bot_comment_id(self):
        assert find_bot_comment_id([_comment(1, "alice"), _comment(2, BOT)], BOT) == 2

    def test_returns_first_bot_comment(self):
        assert find_bot_comment_id([_comment(3, BOT), _comment(4, BOT)], BOT) == 3

    def test_skips_comments_from_deleted_users(self):
        assert find_bot_comment_id([_comment(1, None), _comment(2, BOT)], BOT) == 2

    def test_reads_issue_comments_from_pr(self):
        pr = MagicMock()
        pr.get_issue_comments.return_value = [_comment(7, BOT)]
        assert get_bot_comment_id(pr, BOT) == 7


class TestPullRequestCalls:
    def test_list_changed_files(self):
        pr = MagicMock()
        pr.get_files.return_value = [
            types.SimpleNamespace(filename="a.ts", status="added", patch="@@"),
            types.SimpleNamespace(filename="b.ts", status="removed", patch=None),
        ]
        assert list_changed_files(pr) == [ChangedFile("a.ts", "added"), ChangedFile("b.ts", "removed")]

    def test_list_commit_messages(self):
        pr = MagicMock()
        pr.get_commits.return_value = [
            types.SimpleNamespace(commit=types.SimpleNamespace(message="first")),
            types.SimpleNamespace(commit=types.SimpleNamespace(message="second")),
        ]
        assert list_commit_messages(pr) == ["first", "second"]

    def test_delete_comment(self):
        pr = MagicMock()
        delete_comment(pr, 42)
        pr.get_issue_comment.assert_called_once_with(42)
        pr.get_issue_comment.return_value.delete.assert_called_once_with()

    def test_create_comment_returns_id(self):
        pr = MagicMock()
        pr.create_issue_comment.return_value.id = 99
        assert create_comment(pr, "body") == 99
        pr.create_issue_comment.assert_called_once_with("body")
