"""Configuration file and environment handling for todotree."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_URL = "https://api.todoist.com/rest/v1/"
DEFAULT_FILTER = "(today | overdue)"
DEFAULT_TIMEOUT = 10.0

CONFIG_FILE = "config.yaml"

SAMPLE_CONFIG = f"""# todotree configuration

# API token from the Todoist integration settings.
# The TODOIST_TOKEN environment variable takes precedence.
token: ""

# Filter query used by `todotree list` when --filter is not given.
filter: "{DEFAULT_FILTER}"

# Base URL of the REST API (TODOTREE_URL overrides it).
url: {DEFAULT_URL}

# Request timeout in seconds.
timeout: {DEFAULT_TIMEOUT:g}
"""


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is incomplete."""


@dataclass
class Config:
    """Settings used to talk to the task service."""

    token: Optional[str] = None
    url: str = DEFAULT_URL
    filter: str = DEFAULT_FILTER
    timeout: float = DEFAULT_TIMEOUT
    source_file: Optional[Path] = None

    def require_token(self) -> str:
        """Get the API token, failing if none was configured."""
        if not self.token:
            raise ConfigError(
                "No API token configured. Set TODOIST_TOKEN or add 'token' to "
                f"{self.source_file or default_config_path()}"
            )
        return self.token


def default_config_path() -> Path:
    """Get the config file location, honouring TODOTREE_CONFIG_DIR."""
    config_dir = os.environ.get("TODOTREE_CONFIG_DIR")
    if config_dir:
        return Path(config_dir) / CONFIG_FILE
    return Path.home() / ".config" / "todotree" / CONFIG_FILE


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load the configuration.

    Values from the environment override values from the file, which
    override the defaults. A missing file is not an error.

    Args:
        path: Config file to read (default: default_config_path())

    Returns:
        The merged configuration

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values
    """
    if path is None:
        path = default_config_path()

    data = {}
    if path.exists():
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

    try:
        timeout = float(data.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout in {path}: {data.get('timeout')!r}") from e

    return Config(
        token=os.environ.get("TODOIST_TOKEN") or data.get("token") or None,
        url=os.environ.get("TODOTREE_URL") or data.get("url") or DEFAULT_URL,
        filter=data.get("filter") or DEFAULT_FILTER,
        timeout=timeout,
        source_file=path if path.exists() else None,
    )


def write_sample_config(path: Optional[Path] = None) -> Path:
    """
    Create a sample config file.

    Raises:
        FileExistsError: If the file already exists
    """
    if path is None:
        path = default_config_path()
    if path.exists():
        raise FileExistsError(f"Config file already exists at {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_CONFIG)
    return path
