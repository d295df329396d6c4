"""Configuration file loading and validation.

Loads a YAML configuration file, expands ``${ENV_VAR}`` placeholders,
and validates it against :class:`~mcp_mode_guard.config.schema.GuardConfig`.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from mcp_mode_guard.config.env import expand_env_vars
from mcp_mode_guard.config.schema import GuardConfig
from mcp_mode_guard.constants import CONFIG_ENV_VAR, CONFIG_SEARCH_ORDER
from mcp_mode_guard.errors import ConfigurationError

logger = logging.getLogger(__name__)

_YAML_EXTS = frozenset({".yaml", ".yml"})


def find_config_file(explicit: Optional[str] = None) -> str:
    """Resolve the config path: *explicit* → ``$MODE_GUARD_CONFIG`` → CWD search.

    Falls back to ``CWD/config.yaml`` if nothing exists (the loader then
    reports a clear error).
    """
    if explicit:
        return explicit
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return from_env
    for name in CONFIG_SEARCH_ORDER:
        candidate = os.path.join(os.getcwd(), name)
        if os.path.isfile(candidate):
            return candidate
    return os.path.join(os.getcwd(), CONFIG_SEARCH_ORDER[0])


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file.

    An empty file is an empty configuration.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def parse_guard_config(raw_data: Dict[str, Any]) -> GuardConfig:
    """Validate already-parsed config data.

    Raises :class:`ConfigurationError` listing every validation error.
    """
    try:
        return GuardConfig.model_validate(expand_env_vars(raw_data))
    except ValidationError as exc:
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n"
            f"{_format_validation_errors(exc)}"
        ) from exc


def load_guard_config(cfg_fpath: str) -> GuardConfig:
    """Load, expand and validate the configuration file at *cfg_fpath*."""
    logger.debug("Loading configuration file: %s", cfg_fpath)

    if not os.path.exists(cfg_fpath):
        raise ConfigurationError(f"Configuration file does not exist: {cfg_fpath}")

    config = parse_guard_config(_read_config_file(cfg_fpath))
    logger.info(
        "Configuration loaded: %d server(s), %d mode(s).",
        len(config.servers),
        len(config.modes),
    )
    return config
