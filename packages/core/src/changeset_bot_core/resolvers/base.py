"""Base resolver implementing the Template Method pattern.

All resolvers share the same algorithm:
    resolve() → _list_files() + _read_file()   ← only these differ per source
              → _load_packages() → _changed_packages()
              → _load_changesets() → _assemble_release_plan()

Subclasses implement two things only:
  - _list_files: every file path tracked at a ref
  - _read_file: the text of one file at a ref

Everything else (package discovery, changeset parsing, release planning)
lives here so it is defined once and behaves identically for every source.
"""

from __future__ import annotations

import json
import logging
import posixpath
import re
from abc import ABC, abstractmethod

import yaml

from changeset_bot_core.errors import ValidationError
from changeset_bot_core.models import BUMP_TYPES, Changeset, ChangedFile, Release, ReleasePlan, ResolvedPackages

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A\s*---(.*?)\n\s*---[ \t]*(?:\n|\Z)(.*)\Z", re.DOTALL)


def parse_changeset(changeset_id: str, text: str) -> Changeset:
    """Parse a changeset file: YAML frontmatter of ``"pkg": bump`` then a summary."""
    text = text.replace("\r\n", "\n")
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        raise ValidationError(f"could not parse changeset {changeset_id} - invalid frontmatter:\n{text}")

    try:
        frontmatter = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"could not parse changeset {changeset_id} - invalid frontmatter: {e}") from e

    if not isinstance(frontmatter, dict):
        raise ValidationError(f"could not parse changeset {changeset_id} - frontmatter must be a mapping")

    releases = []
    for name, bump in frontmatter.items():
        if bump not in BUMP_TYPES:
            raise ValidationError(
                f"changeset {changeset_id} declares an invalid bump type {bump!r} for {name}. "
                f"Expected one of: {', '.join(BUMP_TYPES)}"
            )
        releases.append((str(name), bump))

    return Changeset(id=changeset_id, summary=match.group(2).strip(), releases=tuple(releases))


class BaseResolver(ABC):
    def __init__(self, changeset_dir: str = ".changeset", project_root: str = ""):
        self.changeset_dir = changeset_dir.strip("/")
        self.project_root = project_root.strip("/")

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def resolve(self, repo, ref: str, changed_files: list[ChangedFile]) -> ResolvedPackages:
        """Work out which packages a PR touches and what releasing it would do.

        Raises ValidationError when the changed files, a package manifest or a
        changeset cannot be used. Any other exception is a transport failure.
        """
        for f in changed_files:
            if not f.filename:
                raise ValidationError("The pull request lists a changed file without a filename.")

        paths = self._list_files(repo, ref)
        packages = self._load_packages(repo, ref, paths)
        changed = self._changed_packages(packages, changed_files)
        changesets = self._load_changesets(repo, ref, paths)
        plan = self._assemble_release_plan(packages, changesets)

        logger.debug(
            "Resolved %d changed package(s) and %d changeset(s) at %s",
            len(changed),
            len(changesets),
            ref,
        )
        return ResolvedPackages(changed_packages=changed, release_plan=plan, any_relevant_changes=bool(changed))

    # ------------------------------------------------------------------ #
    # Abstract: implement in each resolver                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _list_files(self, repo, ref: str) -> list[str]:
        """Return every tracked file path at ref."""

    @abstractmethod
    def _read_file(self, repo, ref: str, path: str) -> str:
        """Return the decoded text of path at ref."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _in_project(self, path: str) -> bool:
        return not self.project_root or path.startswith(self.project_root + "/")

    def _load_packages(self, repo, ref: str, paths: list[str]) -> dict[str, str]:
        """Map package name → package directory for every workspace manifest."""
        packages: dict[str, str] = {}
        for path in paths:
            if posixpath.basename(path) != "package.json" or "node_modules/" in path or not self._in_project(path):
                continue
            try:
                manifest = json.loads(self._read_file(repo, ref, path))
            except json.JSONDecodeError as e:
                raise ValidationError(f"{path} is not valid JSON: {e}") from e
            name = manifest.get("name") if isinstance(manifest, dict) else None
            if not isinstance(name, str) or not name:
                raise ValidationError(f'The package at "{path}" does not have a name.')
            if name in packages:
                raise ValidationError(f'There are multiple packages named "{name}".')
            packages[name] = posixpath.dirname(path)

        # The project's own manifest only counts when it is the sole package.
        if len(packages) > 1:
            packages = {name: d for name, d in packages.items() if d != self.project_root}
        return packages

    def _changed_packages(self, packages: dict[str, str], changed_files: list[ChangedFile]) -> list[str]:
        changed: list[str] = []
        for f in changed_files:
            if f.filename.startswith(self.changeset_dir + "/"):
                continue
            owner = None
            for name, directory in packages.items():
                if directory and not f.filename.startswith(directory + "/"):
                    continue
                if owner is None or len(directory) > len(packages[owner]):
                    owner = name
            if owner is not None and owner not in changed:
                changed.append(owner)
        return changed

    def _load_changesets(self, repo, ref: str, paths: list[str]) -> list[Changeset]:
        prefix = self.changeset_dir + "/"
        changesets = []
        for path in paths:
            if not path.startswith(prefix) or not path.endswith(".md"):
                continue
            name = path[len(prefix) :]
            if "/" in name or name == "README.md":
                continue
            changesets.append(parse_changeset(name[: -len(".md")], self._read_file(repo, ref, path)))
        return changesets

    def _assemble_release_plan(self, packages: dict[str, str], changesets: list[Changeset]) -> ReleasePlan:
        """One release per package named in a changeset, at the highest declared bump."""
        bumps: dict[str, str] = {}
        for changeset in changesets:
            for name, bump in changeset.releases:
                if name not in packages:
                    raise ValidationError(
                        f'Found changeset {changeset.id} for package {name} which is not in the workspace'
                    )
                if name not in bumps or BUMP_TYPES.index(bump) > BUMP_TYPES.index(bumps[name]):
                    bumps[name] = bump
        return ReleasePlan(
            changesets=tuple(changesets),
            releases=tuple(Release(name=name, type=bump) for name, bump in bumps.items()),
        )
