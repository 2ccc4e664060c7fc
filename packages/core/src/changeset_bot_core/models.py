"""Value types shared by the resolver, the report renderer and the bot."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

BUMP_TYPES = ("none", "patch", "minor", "major")


@dataclass(frozen=True)
class Changeset:
    """One release-intent file. Only the count matters to the report."""

    id: str
    summary: str
    releases: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Release:
    name: str
    type: str  # "none" | "patch" | "minor" | "major"


@dataclass(frozen=True)
class ReleasePlan:
    changesets: tuple[Changeset, ...] = ()
    releases: tuple[Release, ...] = ()

    @property
    def publishable_releases(self) -> list[Release]:
        return [r for r in self.releases if r.type != "none"]


@dataclass(frozen=True)
class ChangedFile:
    filename: str
    status: str  # GitHub file status: "added" | "modified" | "removed" | "renamed" | ...


@dataclass(frozen=True)
class PRIdentity:
    """The pull request one reconciliation run targets."""

    owner: str
    repo: str
    pull_number: int
    head_sha: str
    head_ref: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ResolvedPackages:
    """What a resolver returns on success."""

    changed_packages: list[str] = field(default_factory=list)
    release_plan: ReleasePlan | None = None
    any_relevant_changes: bool = False


class PRClassification(Enum):
    IRRELEVANT = "irrelevant"
    CHANGESET_PRESENT = "changeset_present"
    CHANGESET_ABSENT = "changeset_absent"


class ResolutionStatus(Enum):
    RESOLVED = "resolved"
    INVALID = "invalid"  # validation error, shown to the user
    FAILED = "failed"  # unexpected error, reported to telemetry only


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving changed packages, including the degraded cases.

    Degraded outcomes carry fallback values so a report can still be rendered,
    but callers branch on ``status`` rather than on the fallback values.
    """

    status: ResolutionStatus
    changed_packages: list[str] = field(default_factory=list)
    release_plan: ReleasePlan | None = None
    any_relevant_changes: bool = False
    error_message: str | None = None

    @property
    def degraded(self) -> bool:
        return self.status is not ResolutionStatus.RESOLVED

    @classmethod
    def resolved(cls, result: ResolvedPackages) -> Resolution:
        return cls(
            status=ResolutionStatus.RESOLVED,
            changed_packages=list(result.changed_packages),
            release_plan=result.release_plan,
            any_relevant_changes=result.any_relevant_changes,
        )

    @classmethod
    def fallback(
        cls, status: ResolutionStatus, placeholder_package: str, error_message: str | None = None
    ) -> Resolution:
        return cls(
            status=status,
            changed_packages=[placeholder_package],
            release_plan=None,
            any_relevant_changes=False,
            error_message=error_message,
        )


@dataclass
class ReconcileResult:
    """What one reconciliation run did. Returned to the CLI for display."""

    pr: PRIdentity
    classification: PRClassification
    body: str
    resolution_status: ResolutionStatus
    deleted_comment_id: int | None = None
    created_comment_id: int | None = None
    shadow: bool = False
