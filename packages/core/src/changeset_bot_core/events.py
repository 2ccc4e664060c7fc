"""Dispatch pull request webhook events to the reconciliation run."""

from __future__ import annotations

import logging

from changeset_bot_core.bot import reconcile_pull_request
from changeset_bot_core.gh.pull_request import get_repo
from changeset_bot_core.models import PRIdentity, ReconcileResult

logger = logging.getLogger(__name__)

HANDLED_ACTIONS = ("opened", "synchronize")


def should_handle_event(event_name: str, payload: dict, release_branch_prefix: str) -> bool:
    """Only PR opened/synchronize events count, and never for release branches."""
    if event_name != "pull_request" or payload.get("action") not in HANDLED_ACTIONS:
        logger.info("Ignoring %s event (action: %s)", event_name, payload.get("action"))
        return False
    head_ref = payload["pull_request"]["head"]["ref"]
    if head_ref.startswith(release_branch_prefix):
        logger.info("Ignoring release branch %s", head_ref)
        return False
    return True


def pr_identity_from_payload(payload: dict) -> PRIdentity:
    repository = payload["repository"]
    head = payload["pull_request"]["head"]
    return PRIdentity(
        owner=repository["owner"]["login"],
        repo=repository["name"],
        pull_number=payload["number"],
        head_sha=head["sha"],
        head_ref=head["ref"],
    )


def pr_identity_from_pull(repo, pr) -> PRIdentity:
    return PRIdentity(
        owner=repo.owner.login,
        repo=repo.name,
        pull_number=pr.number,
        head_sha=pr.head.sha,
        head_ref=pr.head.ref,
    )


def handle_event(
    event_name: str,
    payload: dict,
    config: dict,
    repo_obj=None,
    resolver=None,
    shadow: bool = False,
) -> ReconcileResult | None:
    """Reconcile the status comment for a webhook event. Returns None when the event is ignored."""
    if not should_handle_event(event_name, payload, config["release_branch_prefix"]):
        return None

    pr_identity = pr_identity_from_payload(payload)
    repo = repo_obj if repo_obj is not None else get_repo(pr_identity.full_name, token=config["github_token"])
    return reconcile_pull_request(pr_identity, repo, config, resolver=resolver, shadow=shadow)
