from __future__ import annotations

import re

from github import Github

from changeset_bot_core.models import ChangedFile


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def list_changed_files(pr) -> list[ChangedFile]:
    return [ChangedFile(filename=f.filename, status=f.status) for f in pr.get_files()]


def list_commit_messages(pr) -> list[str]:
    return [c.commit.message for c in pr.get_commits()]


def find_bot_comment_id(comments, bot_login: str) -> int | None:
    """Return the id of the first comment authored by bot_login, or None."""
    for comment in comments:
        user = comment.user
        if user is not None and user.login == bot_login:
            return comment.id
    return None


def get_bot_comment_id(pr, bot_login: str) -> int | None:
    return find_bot_comment_id(pr.get_issue_comments(), bot_login)


def has_changeset_been_added(changed_files: list[ChangedFile], changeset_dir: str) -> bool:
    """True if the PR adds a new ``<changeset_dir>/<name>.md`` other than the README."""
    pattern = re.compile(rf"^{re.escape(changeset_dir)}/.+\.md$")
    readme = f"{changeset_dir}/README.md"
    return any(
        f.status == "added" and pattern.match(f.filename) is not None and f.filename != readme
        for f in changed_files
    )


def delete_comment(pr, comment_id: int) -> None:
    pr.get_issue_comment(comment_id).delete()


def create_comment(pr, body: str) -> int:
    return pr.create_issue_comment(body).id
