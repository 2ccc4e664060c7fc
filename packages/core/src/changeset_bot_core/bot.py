"""Reconcile the changeset status comment on a pull request."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from coolname import generate_slug

from changeset_bot_core.errors import ValidationError
from changeset_bot_core.gh.pull_request import (
    create_comment,
    delete_comment,
    get_bot_comment_id,
    get_pull,
    has_changeset_been_added,
    list_changed_files,
    list_commit_messages,
)
from changeset_bot_core.models import (
    ChangedFile,
    PRClassification,
    PRIdentity,
    ReconcileResult,
    Resolution,
    ResolutionStatus,
)
from changeset_bot_core.report import add_changeset_url, render_report
from changeset_bot_core.resolvers.base import BaseResolver
from changeset_bot_core.resolvers.github_tree import GithubTreeResolver
from changeset_bot_core.telemetry import capture_exception

logger = logging.getLogger(__name__)


def classify(any_relevant_changes: bool, has_changeset: bool) -> PRClassification:
    if not any_relevant_changes:
        return PRClassification.IRRELEVANT
    if has_changeset:
        return PRClassification.CHANGESET_PRESENT
    return PRClassification.CHANGESET_ABSENT


def random_changeset_name() -> str:
    """A lowercase, hyphen-separated name such as ``witty-llama``."""
    return generate_slug(2)


def resolve_packages(
    resolver: BaseResolver,
    repo,
    ref: str,
    changed_files: list[ChangedFile],
    placeholder_package: str,
) -> Resolution:
    """Run the resolver, turning its failures into a degraded Resolution.

    Validation errors keep their message for the comment. Anything else is
    reported to telemetry and hidden from the user.
    """
    try:
        return Resolution.resolved(resolver.resolve(repo, ref, changed_files))
    except ValidationError as e:
        logger.warning("Could not resolve changed packages at %s: %s", ref, e)
        return Resolution.fallback(ResolutionStatus.INVALID, placeholder_package, error_message=str(e))
    except Exception as e:
        capture_exception(e)
        return Resolution.fallback(ResolutionStatus.FAILED, placeholder_package)


def _resolve_after_files(
    resolver: BaseResolver,
    repo,
    ref: str,
    files_future: Future,
    placeholder_package: str,
) -> Resolution:
    # A failed file listing is a transport error and must not be swallowed as a resolution failure.
    changed_files = files_future.result()
    return resolve_packages(resolver, repo, ref, changed_files, placeholder_package)


def build_resolver(config: dict) -> BaseResolver:
    return GithubTreeResolver(changeset_dir=config["changeset_dir"], project_root=config.get("project_root", ""))


def reconcile_pull_request(
    pr_identity: PRIdentity,
    repo,
    config: dict,
    resolver: BaseResolver | None = None,
    shadow: bool = False,
    name_factory=random_changeset_name,
) -> ReconcileResult:
    """Post a fresh status comment on the PR, deleting the previous one first.

    The comment lookup, changed-file listing and package resolution run
    concurrently. Commits are listed afterwards since they only feed the
    "add a changeset" link. In shadow mode nothing is deleted or created.

    Failures talking to GitHub are logged and re-raised; no retries happen here.
    """
    resolver = resolver if resolver is not None else build_resolver(config)
    changeset_dir = config["changeset_dir"]

    try:
        pr = get_pull(repo, pr_identity.pull_number)

        with ThreadPoolExecutor(max_workers=config.get("max_workers", 3)) as pool:
            comment_future = pool.submit(get_bot_comment_id, pr, config["bot_login"])
            files_future = pool.submit(list_changed_files, pr)
            resolution_future = pool.submit(
                _resolve_after_files,
                resolver,
                repo,
                pr_identity.head_ref,
                files_future,
                config["placeholder_package"],
            )
            has_changeset = has_changeset_been_added(files_future.result(), changeset_dir)
            comment_id = comment_future.result()
            resolution = resolution_future.result()

        commit_messages = list_commit_messages(pr)

        # A degraded resolution cannot prove the PR is irrelevant.
        any_relevant_changes = resolution.any_relevant_changes or resolution.degraded
        classification = classify(any_relevant_changes, has_changeset)
        logger.info(
            "%s#%d at %s classified as %s (resolution: %s)",
            pr_identity.full_name,
            pr_identity.pull_number,
            pr_identity.head_sha[:7],
            classification.value,
            resolution.status.value,
        )

        url = add_changeset_url(
            repo.html_url,
            pr_identity.head_ref,
            changeset_dir,
            name_factory(),
            resolution.changed_packages,
            commit_messages,
        )
        body = render_report(
            classification,
            pr_identity.head_sha,
            url,
            resolution.release_plan,
            tracked_packages=config.get("tracked_packages", "workspace"),
            error_message=resolution.error_message,
        )

        result = ReconcileResult(
            pr=pr_identity,
            classification=classification,
            body=body,
            resolution_status=resolution.status,
            shadow=shadow,
        )
        if shadow:
            return result

        if comment_id is not None:
            delete_comment(pr, comment_id)
            result.deleted_comment_id = comment_id
            logger.info("Deleted previous status comment %d", comment_id)
        result.created_comment_id = create_comment(pr, body)
        logger.info("Created status comment %d", result.created_comment_id)
        return result
    except Exception:
        logger.exception("Failed to reconcile status comment for %s#%d", pr_identity.full_name, pr_identity.pull_number)
        raise
