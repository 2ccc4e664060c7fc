"""init command: write a starter config and GitHub Actions workflow.

The workflow runs `changeset-bot handle-event` on every pull_request
opened/synchronize event, so the status comment stays current without
hosting a webhook server.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from changeset_bot_core.config import DEFAULT_CONFIG

console = Console()

_WORKFLOW_TEMPLATE = """\
name: Changeset Status

on:
  pull_request:
    types: [opened, synchronize]

jobs:
  changeset-status:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write

    steps:
      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install changeset-bot
        run: pip install "changeset-bot=={version}"

      - name: Update changeset status comment
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
        run: changeset-bot handle-event
"""


@click.command("init")
@click.option("--bot-login", default=None, help="Login of the account that posts the status comment.")
def init_cmd(bot_login: str | None):
    """Set up changeset-bot for a repository.

    Creates .changeset-bot.yml and optionally a GitHub Actions workflow.
    """
    console.print("\n[bold cyan]changeset-bot init[/bold cyan]\n")

    changeset_dir = click.prompt("Changeset folder", default=DEFAULT_CONFIG["changeset_dir"])
    project_root = click.prompt(
        "Directory containing the workspace packages (blank for the whole repo)",
        default="",
        show_default=False,
    )
    if bot_login is None:
        bot_login = click.prompt("Bot login", default=DEFAULT_CONFIG["bot_login"])

    config = {"changeset_dir": changeset_dir, "bot_login": bot_login}
    if project_root:
        config["project_root"] = project_root
    _write_config(config)
    console.print("[green]Created .changeset-bot.yml[/green]")

    if click.confirm("\nGenerate .github/workflows/changeset-bot.yml for GitHub Actions?", default=True):
        _write_workflow()
        console.print("[green]Created .github/workflows/changeset-bot.yml[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Preview a comment with: [bold]changeset-bot run --repo <owner/name> --pr <number> --shadow[/bold]")


def _write_config(config: dict) -> None:
    """Write or update .changeset-bot.yml, preserving any existing keys."""
    path = Path(".changeset-bot.yml")
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    """Read the current changeset-bot version from the installed package metadata."""
    try:
        from importlib.metadata import version

        return version("changeset-bot")
    except Exception:
        return "0.1.0"


def _write_workflow() -> None:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    (workflow_dir / "changeset-bot.yml").write_text(_WORKFLOW_TEMPLATE.format(version=_get_version()))
