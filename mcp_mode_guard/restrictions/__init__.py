"""Mode restrictions: pattern matching, models and resolver."""

from mcp_mode_guard.restrictions.models import (
    ReasonCode,
    RestrictionSet,
    ServerDescriptor,
    ToolRule,
    Verdict,
    normalize_restrictions,
)
from mcp_mode_guard.restrictions.patterns import (
    filter_by_pattern,
    matches_any,
    matches_pattern,
    matches_pattern_or_contains,
)
from mcp_mode_guard.restrictions.resolver import (
    filter_servers,
    filter_tools,
    is_tool_permitted,
    resolve_server,
    resolve_tool,
)

__all__ = [
    "ReasonCode",
    "RestrictionSet",
    "ServerDescriptor",
    "ToolRule",
    "Verdict",
    "filter_by_pattern",
    "filter_servers",
    "filter_tools",
    "is_tool_permitted",
    "matches_any",
    "matches_pattern",
    "matches_pattern_or_contains",
    "normalize_restrictions",
    "resolve_server",
    "resolve_tool",
]
