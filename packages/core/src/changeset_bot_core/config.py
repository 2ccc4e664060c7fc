import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "changeset_dir": ".changeset",
    "project_root": "",  # "" = discover packages across the whole repo
    "bot_login": "github-actions[bot]",  # author of comments posted with the Actions token
    "release_branch_prefix": "changeset-release",
    "tracked_packages": "workspace",  # label used in the "not required" report
    "placeholder_package": "@fake-scope/fake-pkg",
    "max_workers": 3,
    "sentry_dsn": None,
}


def load_config(config_path: str = ".changeset-bot.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .changeset-bot.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["changeset_dir"] = str(config["changeset_dir"]).strip("/")
    config["project_root"] = str(config["project_root"] or "").strip("/")

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    if not config.get("sentry_dsn"):
        config["sentry_dsn"] = os.environ.get("SENTRY_DSN")

    return config
