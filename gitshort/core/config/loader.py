"""
Configuration loader: reads and writes the user's config.yml.

The file is a flat YAML mapping of ``StoreConfig`` fields::

    repository: ~/src/links
    branch: master
    remote: origin

Location: ``$GITSHORT_CONFIG`` if set, else ``~/.config/gitshort/config.yml``.
A missing file is not an error, it just means "all defaults".
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from gitshort.core.models.config import StoreConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GITSHORT_CONFIG"
CONFIG_FILE = "config.yml"


class ConfigError(Exception):
    """Raised when the configuration file is invalid or cannot be written."""


def default_config_path() -> Path:
    """Resolve the config file location (env var first, then ~/.config)."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "gitshort" / CONFIG_FILE


def _read_raw(path: Path) -> dict[str, Any]:
    if not path.is_file():
        logger.debug("No config file at %s, using defaults", path)
        return {}

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _validate(data: dict[str, Any], source: Path | None = None) -> StoreConfig:
    unknown = sorted(set(data) - set(StoreConfig.model_fields))
    if unknown:
        where = f" in {source}" if source else ""
        raise ConfigError(f"Unknown config key(s){where}: {', '.join(unknown)}")
    try:
        config = StoreConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    return config.model_copy(update={"repository": config.repository.expanduser()})


def load_config(path: Path | None = None, **overrides: Any) -> StoreConfig:
    """Load the store configuration.

    Args:
        path: Config file (default: ``default_config_path()``).
        **overrides: Values that win over the file (``None`` is ignored),
            e.g. from CLI flags.

    Raises:
        ConfigError: The file is unreadable or holds invalid values.
    """
    path = path or default_config_path()
    data = _read_raw(path)
    data.update({key: value for key, value in overrides.items() if value is not None})
    config = _validate(data, path)
    logger.debug("Config: repository=%s branch=%s remote=%s",
                 config.repository, config.branch, config.remote)
    return config


def save_config(config: StoreConfig, path: Path | None = None) -> None:
    """Write *config* to disk atomically (temp file, then rename)."""
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_defaults=True)
    content = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".config_", suffix=".tmp")
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write {path}: {e}") from e
    logger.debug("Config saved to %s", path)


def set_config_value(key: str, value: str, path: Path | None = None) -> StoreConfig:
    """Set one key in the config file and return the resulting config."""
    path = path or default_config_path()
    if key not in StoreConfig.model_fields:
        raise ConfigError(
            f"Unknown config key '{key}'. Valid: {', '.join(StoreConfig.model_fields)}"
        )

    data = _read_raw(path)
    data[key] = value
    config = _validate(data, path)
    save_config(config, path)
    logger.info("Config %s=%s", key, value)
    return config


def config_items(config: StoreConfig) -> dict[str, str]:
    """Flat ``key → display string`` view (``None`` shown as empty)."""
    return {
        key: "" if value is None else str(value)
        for key, value in config.model_dump(mode="json").items()
    }
