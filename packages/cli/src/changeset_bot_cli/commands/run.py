"""run command: reconcile the status comment on one pull request."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from changeset_bot_core.bot import reconcile_pull_request
from changeset_bot_core.events import pr_identity_from_pull
from changeset_bot_core.gh.pull_request import get_pull, get_repo
from changeset_bot_core.models import PRClassification, ReconcileResult
from changeset_bot_cli.auth import require_github_token

console = Console()

_CLASSIFICATION_STYLE = {
    PRClassification.IRRELEVANT: ("dim", "changeset not required"),
    PRClassification.CHANGESET_PRESENT: ("green", "changeset detected"),
    PRClassification.CHANGESET_ABSENT: ("yellow", "no changeset found"),
}


def print_result(result: ReconcileResult) -> None:
    style, label = _CLASSIFICATION_STYLE[result.classification]
    pr = result.pr
    console.print(f"[bold]{pr.full_name}#{pr.pull_number}[/bold] @ {pr.head_sha[:7]}: [{style}]{label}[/{style}]")

    if result.shadow:
        console.print(Panel(Markdown(result.body), title="Shadow mode: comment not posted"))
        return

    if result.deleted_comment_id is not None:
        console.print(f"  Replaced comment {result.deleted_comment_id}")
    console.print(f"[green]  Posted comment {result.created_comment_id}[/green]")


@click.command("run")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the status comment without posting to GitHub.",
)
@click.pass_context
def run_cmd(ctx, repo: str, pr_number: int, shadow: bool):
    """Reconcile the changeset status comment on a pull request.

    Deletes the bot's previous comment (if any) and posts a fresh one
    describing whether the PR carries a changeset and what it will release.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
    """
    config = ctx.obj["config"]
    token = require_github_token(config)

    this_repo = get_repo(repo, token=token)
    pr_identity = pr_identity_from_pull(this_repo, get_pull(this_repo, pr_number))

    result = reconcile_pull_request(pr_identity, this_repo, config, shadow=shadow)
    print_result(result)
