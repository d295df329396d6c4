"""Configuration loading and validation for MCP Mode Guard."""

from mcp_mode_guard.config.env import expand_env_vars
from mcp_mode_guard.config.loader import find_config_file, load_guard_config, parse_guard_config
from mcp_mode_guard.config.schema import (
    GuardConfig,
    ModeConfig,
    RestrictionsConfig,
    ServerConfig,
    ToolRuleConfig,
)

__all__ = [
    "GuardConfig",
    "ModeConfig",
    "RestrictionsConfig",
    "ServerConfig",
    "ToolRuleConfig",
    "expand_env_vars",
    "find_config_file",
    "load_guard_config",
    "parse_guard_config",
]
