"""Resolver that reads the workspace straight from the GitHub API.

All reads are pinned to the PR's head ref, so manifests and changeset files
come from the same snapshot as the changed-file list.
"""

from __future__ import annotations

from changeset_bot_core.resolvers.base import BaseResolver


class GithubTreeResolver(BaseResolver):
    def _list_files(self, repo, ref: str) -> list[str]:
        tree = repo.get_git_tree(ref, recursive=True)
        return [entry.path for entry in tree.tree if entry.type == "blob"]

    def _read_file(self, repo, ref: str, path: str) -> str:
        return repo.get_contents(path, ref=ref).decoded_content.decode("utf-8", errors="replace")
