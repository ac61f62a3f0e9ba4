"""Configuration loading for Design Lab.

Config is read from two optional files and deep-merged, project over user:

1. User: ``$XDG_CONFIG_HOME/design-lab/design-lab.json[c]`` (``~/.config``)
2. Project: ``<project>/.designlab/design-lab.json[c]``

Both files accept JSONC (``/* */`` blocks and full-line ``//`` comments).
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from designlab.config.schema import DesignLabConfig
from designlab.domain.exceptions import ConfigurationError
from designlab.guards.static.schema import format_validation_errors

logger = logging.getLogger(__name__)

CONFIG_NAME = "design-lab"
PROJECT_CONFIG_DIR = ".designlab"

_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)


def parse_jsonc(content: str) -> Any:
    """Parse JSON after stripping block comments and full-line // comments."""
    stripped = _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", content))
    return json.loads(stripped)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base. Dicts merge; everything else replaces."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def user_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def user_config_stem() -> Path:
    return user_config_dir() / CONFIG_NAME / CONFIG_NAME


def project_config_stem(project_dir: str | Path) -> Path:
    return Path(project_dir) / PROJECT_CONFIG_DIR / CONFIG_NAME


def _find_config_file(stem: Path) -> Path | None:
    for suffix in (".json", ".jsonc"):
        candidate = stem.with_name(stem.name + suffix)
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read one config file.

    Raises:
        ConfigurationError: If the file is not valid JSON(C) or not an object
    """
    try:
        data = parse_jsonc(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected object in {path}, got {type(data).__name__}")
    return data


def validate_config(data: dict[str, Any], source: str = "configuration") -> DesignLabConfig:
    """
    Validate a merged config dict.

    Raises:
        ConfigurationError: Listing every invalid field as 'path: message'
    """
    try:
        return DesignLabConfig.model_validate(data)
    except ValidationError as e:
        issues = "\n".join(f"  {line}" for line in format_validation_errors(e))
        raise ConfigurationError(f"Invalid {source}:\n{issues}") from e


def load_config(
    project_dir: str | Path = ".",
    config_file: str | Path | None = None,
    include_user: bool = True,
) -> DesignLabConfig:
    """
    Load, merge and validate configuration.

    Args:
        project_dir: Project root holding .designlab/
        config_file: Explicit file used instead of the project config
        include_user: Also merge the user-level config underneath

    Returns:
        Validated DesignLabConfig

    Raises:
        ConfigurationError: If no config is found or the result is invalid
    """
    sources: list[Path] = []
    if include_user:
        user_file = _find_config_file(user_config_stem())
        if user_file:
            sources.append(user_file)

    if config_file is not None:
        explicit = Path(config_file)
        if not explicit.is_file():
            raise ConfigurationError(f"Config file not found: {explicit}")
        sources.append(explicit)
    else:
        project_file = _find_config_file(project_config_stem(project_dir))
        if project_file:
            sources.append(project_file)

    if not sources:
        raise ConfigurationError(
            "No design-lab configuration found. Run 'design-lab init' to create "
            f"{project_config_stem(project_dir)}.json"
        )

    merged: dict[str, Any] = {}
    for path in sources:
        logger.info("Loaded config from %s", path)
        merged = deep_merge(merged, load_config_file(path))

    return validate_config(merged, source=", ".join(str(p) for p in sources))
