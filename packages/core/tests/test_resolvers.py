"""Tests for changeset parsing and the GitHub tree resolver.

Shared behaviour lives in BaseResolver and is exercised through
GithubTreeResolver with a MagicMock repository standing in for PyGithub.
"""

import json
import types
from unittest.mock import MagicMock

import pytest

from changeset_bot_core.errors import ValidationError
from changeset_bot_core.models import ChangedFile, Release
from changeset_bot_core.resolvers.base import parse_changeset
from changeset_bot_core.resolvers.github_tree import GithubTreeResolver

REF = "feature"


def make_repo(files: dict[str, str]):
    repo = MagicMock()
    repo.get_git_tree.return_value.tree = [types.SimpleNamespace(path=path, type="blob") for path in files] + [
        types.SimpleNamespace(path="packages", type="tree")
    ]
    repo.get_contents.side_effect = lambda path, ref: types.SimpleNamespace(decoded_content=files[path].encode())
    return repo


def manifest(name):
    return json.dumps({"name": name, "version": "1.0.0"})


WORKSPACE = {
    "package.json": manifest("monorepo-root"),
    "packages/core/package.json": manifest("@acme/core"),
    "packages/core/node_modules/dep/package.json": manifest("dep"),
    "packages/react/package.json": manifest("@acme/react"),
    "packages/react/ui/package.json": manifest("@acme/react-ui"),
    ".changeset/README.md": "# Changesets",
    ".changeset/config.json": "{}",
}


# ---------------------------------------------------------------------------
# parse_changeset
# ---------------------------------------------------------------------------


class TestParseChangeset:
    def test_parses_frontmatter_and_summary(self):
        changeset = parse_changeset("witty-llama", '---\n"@acme/core": minor\n"@acme/react": patch\n---\n\nAdd a thing\n')
        assert changeset.id == "witty-llama"
        assert changeset.releases == (("@acme/core", "minor"), ("@acme/react", "patch"))
        assert changeset.summary == "Add a thing"

    def test_empty_frontmatter_is_allowed(self):
        changeset = parse_changeset("empty", "---\n---\n\nNothing to release\n")
        assert changeset.releases == ()
        assert changeset.summary == "Nothing to release"

    def test_crlf_line_endings_are_accepted(self):
        changeset = parse_changeset("witty-llama", '---\r\n"@acme/core": minor\r\n---\r\n\r\nAdd a thing\r\n')
        assert changeset.releases == (("@acme/core", "minor"),)
        assert changeset.summary == "Add a thing"

    def test_missing_frontmatter_raises(self):
        with pytest.raises(ValidationError, match="could not parse changeset no-fm"):
            parse_changeset("no-fm", "Just a summary\n")

    def test_invalid_yaml_raises(self):
        with pytest.raises(ValidationError, match="invalid frontmatter"):
            parse_changeset("bad", '---\n"@acme/core": [minor\n---\n\nx\n')

    def test_non_mapping_frontmatter_raises(self):
        with pytest.raises(ValidationError, match="must be a mapping"):
            parse_changeset("list", "---\n- minor\n---\n\nx\n")

    def test_unknown_bump_type_raises(self):
        with pytest.raises(ValidationError, match="invalid bump type 'huge'"):
            parse_changeset("huge", '---\n"@acme/core": huge\n---\n\nx\n')


# ---------------------------------------------------------------------------
# GithubTreeResolver
# ---------------------------------------------------------------------------


class TestGithubTreeResolver:
    def test_changed_packages_use_longest_directory_match(self):
        repo = make_repo(WORKSPACE)
        files = [
            ChangedFile("packages/react/ui/button.tsx", "modified"),
            ChangedFile("packages/core/src/index.ts", "modified"),
            ChangedFile("packages/react/index.ts", "modified"),
            ChangedFile("packages/core/src/other.ts", "added"),
        ]
        result = GithubTreeResolver().resolve(repo, REF, files)
        assert result.changed_packages == ["@acme/react-ui", "@acme/core", "@acme/react"]
        assert result.any_relevant_changes is True

    def test_files_outside_packages_are_irrelevant(self):
        repo = make_repo(WORKSPACE)
        files = [ChangedFile("README.md", "modified"), ChangedFile("docs/guide.md", "added")]
        result = GithubTreeResolver().resolve(repo, REF, files)
        assert result.changed_packages == []
        assert result.any_relevant_changes is False

    def test_changeset_files_do_not_count_as_changes(self):
        repo = make_repo({**WORKSPACE, ".changeset/witty-llama.md": '---\n"@acme/core": patch\n---\n\nfix\n'})
        result = GithubTreeResolver().resolve(repo, REF, [ChangedFile(".changeset/witty-llama.md", "added")])
        assert result.any_relevant_changes is False

    def test_node_modules_manifests_are_ignored(self):
        repo = make_repo(WORKSPACE)
        result = GithubTreeResolver().resolve(repo, REF, [ChangedFile("packages/core/node_modules/dep/x.js", "added")])
        assert result.changed_packages == ["@acme/core"]

    def test_root_manifest_used_when_it_is_the_only_package(self):
        repo = make_repo({"package.json": manifest("single"), "src/index.ts": ""})
        result = GithubTreeResolver().resolve(repo, REF, [ChangedFile("src/index.ts", "modified")])
        assert result.changed_packages == ["single"]

    def test_project_root_limits_discovery(self):
        repo = make_repo(
            {
                "CopilotKit/package.json": manifest("root"),
                "CopilotKit/packages/sdk/package.json": manifest("@copilotkit/sdk"),
                "examples/demo/package.json": manifest("demo"),
            }
        )
        resolver = GithubTreeResolver(changeset_dir="CopilotKit/.changeset", project_root="CopilotKit")
        files = [ChangedFile("examples/demo/app.ts", "modified"), ChangedFile("CopilotKit/packages/sdk/a.ts", "added")]
        assert resolver.resolve(repo, REF, files).changed_packages == ["@copilotkit/sdk"]

    def test_release_plan_takes_highest_bump_in_first_seen_order(self):
        repo = make_repo(
            {
                **WORKSPACE,
                ".changeset/a-first.md": '---\n"@acme/react": patch\n"@acme/core": none\n---\n\none\n',
                ".changeset/b-second.md": '---\n"@acme/core": minor\n"@acme/react": major\n---\n\ntwo\n',
            }
        )
        plan = GithubTreeResolver().resolve(repo, REF, []).release_plan
        assert [c.id for c in plan.changesets] == ["a-first", "b-second"]
        assert plan.releases == (Release("@acme/react", "major"), Release("@acme/core", "minor"))

    def test_readme_and_nested_files_are_not_changesets(self):
        repo = make_repo({**WORKSPACE, ".changeset/nested/x.md": "not a changeset"})
        plan = GithubTreeResolver().resolve(repo, REF, []).release_plan
        assert plan.changesets == ()
        assert plan.releases == ()

    def test_changeset_for_unknown_package_raises(self):
        repo = make_repo({**WORKSPACE, ".changeset/ghost.md": '---\n"@acme/ghost": patch\n---\n\nboo\n'})
        with pytest.raises(ValidationError, match="Found changeset ghost for package @acme/ghost"):
            GithubTreeResolver().resolve(repo, REF, [])

    def test_manifest_without_name_raises(self):
        repo = make_repo({**WORKSPACE, "packages/bad/package.json": "{}"})
        with pytest.raises(ValidationError, match="packages/bad/package.json"):
            GithubTreeResolver().resolve(repo, REF, [])

    def test_invalid_manifest_json_raises(self):
        repo = make_repo({**WORKSPACE, "packages/bad/package.json": "{not json"})
        with pytest.raises(ValidationError, match="not valid JSON"):
            GithubTreeResolver().resolve(repo, REF, [])

    def test_duplicate_package_names_raise(self):
        repo = make_repo({**WORKSPACE, "packages/copy/package.json": manifest("@acme/core")})
        with pytest.raises(ValidationError, match="multiple packages named"):
            GithubTreeResolver().resolve(repo, REF, [])

    def test_changed_file_without_name_raises(self):
        repo = make_repo(WORKSPACE)
        with pytest.raises(ValidationError):
            GithubTreeResolver().resolve(repo, REF, [ChangedFile("", "added")])
        repo.get_git_tree.assert_not_called()

    def test_reads_are_pinned_to_ref(self):
        repo = make_repo(WORKSPACE)
        GithubTreeResolver().resolve(repo, REF, [])
        repo.get_git_tree.assert_called_once_with(REF, recursive=True)
        assert all(c.kwargs["ref"] == REF for c in repo.get_contents.call_args_list)
