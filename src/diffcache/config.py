"""
Run configuration loading.

Sources, lowest precedence first: an optional YAML file, then explicit
overrides (command-line options, which click already fills from the
``INPUT_*`` environment variables the CI host sets).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import DiffCacheConfig

logger = logging.getLogger("diffcache.config")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must be a mapping")
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def load_config(
    config_file: Optional[Path] = None, **overrides: Optional[str]
) -> DiffCacheConfig:
    """Build the run configuration.

    Args:
        config_file: YAML file with any of the config fields.
        **overrides: Field values; ``None`` or ``""`` means "not given".

    Returns:
        Validated DiffCacheConfig.

    Raises:
        ConfigurationError: On an unreadable file, a missing required
            input, or an invalid pattern.
    """
    data: dict[str, Any] = {}
    if config_file is not None:
        data.update(_read_yaml(config_file.expanduser()))
        logger.debug("Loaded config file %s", config_file)
    data.update({k: v for k, v in overrides.items() if v not in (None, "")})

    try:
        config = DiffCacheConfig(**data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc

    logger.info("Using regex: %s", config.include)
    if config.exclude:
        logger.info("Using ignore: %s", config.exclude)
    logger.info("Using cache tag: %s", config.tag)
    return config
