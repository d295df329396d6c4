"""Shared constants for MCP Mode Guard."""

PACKAGE_NAME = "MCP Mode Guard"
PACKAGE_VERSION = "0.1.0"

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "WARNING"

# Config file discovery
CONFIG_ENV_VAR = "MODE_GUARD_CONFIG"
CONFIG_SEARCH_ORDER = ("config.yaml", "config.yml")

# Wildcards understood by the pattern matcher
WILDCARD_ANY = "*"
WILDCARD_ONE = "?"
