"""Configuration management for taskpad."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TASKPAD_HOME = Path(os.environ.get("TASKPAD_HOME", Path.home() / ".taskpad"))
CONFIG_FILE = TASKPAD_HOME / "config" / "taskpad.conf"
DATA_DIR = TASKPAD_HOME / "data"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Config:
    """taskpad configuration."""

    data_dir: str = ""
    default_priority: str = "Medium"
    # Reject tasks whose project id matches no project
    strict_projects: bool = False
    log_level: str = "WARNING"


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from taskpad.conf file."""
    config = Config()
    config_file = Path(path) if path else CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "default_priority":
                config.default_priority = value
            case "strict_projects":
                config.strict_projects = value.lower() in _TRUE_VALUES
            case "log_level":
                config.log_level = value.upper()
            case _:
                logger.debug("Ignoring unknown config key %r in %s", key, config_file)

    return config
