"""Markdown bodies for the changeset status comment.

Every function here is a pure string template: identical inputs always give
byte-identical output, which is what makes re-running the bot on an unchanged
PR produce the same comment.
"""

from __future__ import annotations

from urllib.parse import quote

from changeset_bot_core.models import PRClassification, ReleasePlan

_TYPE_LABELS = {"major": "Major", "minor": "Minor", "patch": "Patch"}

_EMPTY_TABLE_TEXT = (
    "When changesets are added to this PR, you'll see the packages that this PR "
    "includes changesets for and the associated semver types"
)

# encodeURIComponent leaves these unescaped; GitHub's editor expects the same.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _markdown_table(rows: list[list[str]]) -> str:
    """Render rows as a padded GitHub table. The first row is the header."""
    widths = [max(3, *(len(row[i]) for row in rows)) for i in range(len(rows[0]))]

    def _line(cells: list[str]) -> str:
        return "| " + " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)) + " |"

    lines = [_line(rows[0]), "| " + " | ".join("-" * w for w in widths) + " |"]
    lines.extend(_line(row) for row in rows[1:])
    return "\n".join(lines)


def release_plan_message(release_plan: ReleasePlan | None) -> str:
    """Collapsible summary of the packages a PR will release, or "" without a plan."""
    if release_plan is None:
        return ""

    publishable = release_plan.publishable_releases

    if release_plan.changesets:
        count = "1 package" if len(publishable) == 1 else f"{len(publishable)} packages"
        headline = f"changesets to release {count}"
    else:
        headline = "no changesets"

    if publishable:
        body = _markdown_table([["Name", "Type"]] + [[r.name, _TYPE_LABELS[r.type]] for r in publishable])
    else:
        body = _EMPTY_TABLE_TEXT

    return f"<details><summary>This PR includes {headline}</summary>\n\n{body}\n\n</details>"


def render_absent(head_sha: str, add_changeset_url: str, release_plan: ReleasePlan | None) -> str:
    return f"""###  ⚠️  No Changeset found

Latest commit: {head_sha}

Merging this PR will not cause a version bump for any packages. If these changes should not result in a new version, you're good to go. **If these changes should result in a version bump, you need to add a changeset.**

{release_plan_message(release_plan)}

[Click here if you're a maintainer who wants to add a changeset to this PR]({add_changeset_url})

"""  # noqa: E501


def render_present(head_sha: str, add_changeset_url: str, release_plan: ReleasePlan | None) -> str:
    return f"""###  🦋  Changeset detected

Latest commit: {head_sha}

**The changes in this PR will be included in the next version bump.**

{release_plan_message(release_plan)}

[Click here if you're a maintainer who wants to add another changeset to this PR]({add_changeset_url})

"""


def render_irrelevant(
    head_sha: str,
    add_changeset_url: str,
    release_plan: ReleasePlan | None,
    tracked_packages: str = "workspace",
) -> str:
    # No release table or link: nothing needs to be done.
    return f"""### ⏭️ Changeset Not Required

Latest commit: {head_sha}

No changes in this PR affected the `{tracked_packages}` packages. Merging this PR will not cause a version bump for any packages.

Changeset is not required for this PR.
"""  # noqa: E501


def render_error_block(message: str) -> str:
    return (
        "<details><summary>💥 An error occurred when fetching the changed packages and changesets in this PR"
        f"</summary>\n\n```\n{message}\n```\n\n</details>\n"
    )


def render_report(
    classification: PRClassification,
    head_sha: str,
    add_changeset_url: str,
    release_plan: ReleasePlan | None,
    tracked_packages: str = "workspace",
    error_message: str | None = None,
) -> str:
    """Compose the full comment body for a classified PR."""
    templates = {
        PRClassification.IRRELEVANT: lambda: render_irrelevant(
            head_sha, add_changeset_url, release_plan, tracked_packages
        ),
        PRClassification.CHANGESET_PRESENT: lambda: render_present(head_sha, add_changeset_url, release_plan),
        PRClassification.CHANGESET_ABSENT: lambda: render_absent(head_sha, add_changeset_url, release_plan),
    }
    body = templates[classification]()
    if error_message is not None:
        body += render_error_block(error_message)
    return body


def new_changeset_template(changed_packages: list[str], summary: str) -> str:
    """Changeset file contents that bump every changed package by a patch."""
    frontmatter = "\n".join(f'"{name}": patch' for name in changed_packages)
    return f"---\n{frontmatter}\n---\n\n{summary}\n"


def add_changeset_url(
    repo_html_url: str,
    head_ref: str,
    changeset_dir: str,
    filename_token: str,
    changed_packages: list[str],
    commit_messages: list[str],
) -> str:
    """Deep link into GitHub's new-file editor, pre-filled with a changeset."""
    summary = "\n".join(f"- {message}" for message in commit_messages)
    value = quote(new_changeset_template(changed_packages, summary), safe=_URI_COMPONENT_SAFE)
    ref = quote(head_ref, safe="/")
    return f"{repo_html_url}/new/{ref}?filename={changeset_dir}/{filename_token}.md&value={value}"
