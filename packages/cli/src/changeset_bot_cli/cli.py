"""CLI entry point for changeset-bot.

Commands:
  run          : reconcile the changeset status comment on one pull request
  handle-event : dispatch a pull_request webhook payload (e.g. from GitHub Actions)
  init         : write a starter config and GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from changeset_bot_cli.commands.event import handle_event_cmd
from changeset_bot_cli.commands.init import init_cmd
from changeset_bot_cli.commands.run import run_cmd

console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("changeset-bot"),
    prog_name="changeset-bot",
)
@click.option(
    "--config",
    "config_path",
    default=".changeset-bot.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CHANGESET_BOT_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Keep a changeset status comment up to date on GitHub pull requests."""
    from changeset_bot_core.config import load_config
    from changeset_bot_core.telemetry import init_telemetry
    from changeset_bot_cli.auth import resolve_github_token

    configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    init_telemetry(config.get("sentry_dsn"))
    ctx.obj["config"] = config


main.add_command(run_cmd)
main.add_command(handle_event_cmd)
main.add_command(init_cmd)
