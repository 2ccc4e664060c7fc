"""handle-event command: dispatch a webhook payload read from disk."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console

from changeset_bot_core.events import handle_event, should_handle_event
from changeset_bot_cli.auth import require_github_token
from changeset_bot_cli.commands.run import print_result

console = Console()


@click.command("handle-event")
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    required=True,
    help="Webhook event name, e.g. pull_request. Defaults to $GITHUB_EVENT_NAME.",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    required=True,
    help="Path to the JSON webhook payload. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option("--shadow", "-s", is_flag=True, help="Print the status comment without posting to GitHub.")
@click.pass_context
def handle_event_cmd(ctx, event_name: str, event_path: str, shadow: bool):
    """Handle a pull_request opened/synchronize event.

    Other events, other actions and release branches are ignored without
    touching the pull request.
    """
    config = ctx.obj["config"]

    path = Path(event_path)
    if not path.exists():
        raise click.BadParameter(f"Event payload not found: {event_path}", param_hint="--event-path")
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Event payload is not valid JSON: {e}", param_hint="--event-path")

    result = None
    if should_handle_event(event_name, payload, config["release_branch_prefix"]):
        require_github_token(config)
        result = handle_event(event_name, payload, config, shadow=shadow)
    if result is None:
        console.print(f"[yellow]Ignored {event_name} event ({payload.get('action', 'no action')}).[/yellow]")
        return
    print_result(result)
