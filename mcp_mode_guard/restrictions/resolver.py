"""Restriction resolver: server and tool verdicts for a mode.

Every function here is pure.  Verdicts are recomputed on each prompt
build and each tool call, so nothing is cached between calls.

Precedence, at both server and tool granularity::

    enabled = not disallowed and (no allow-list or allow-list match)

A name matched by both an allow and a disallow pattern is therefore
always disabled, whatever order the rules were declared in.  Opt-in
servers (``default_visible=False``) are the one exception: they are
visible only when allow-listed and the disallow list is not consulted.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from mcp_mode_guard.restrictions.models import (
    ReasonCode,
    RestrictionSet,
    ServerDescriptor,
    ToolRule,
    Verdict,
)
from mcp_mode_guard.restrictions.patterns import matches_any, matches_pattern

logger = logging.getLogger(__name__)

DefaultVisibleLookup = Callable[[str], Optional[bool]]


def resolve_server(
    server_name: str,
    default_visible: Optional[bool],
    restrictions: Optional[RestrictionSet],
) -> Verdict:
    """Decide whether *server_name* is visible under *restrictions*.

    *default_visible* of ``None`` is treated as ``True``.
    """
    opt_in = default_visible is False

    if restrictions is None:
        if opt_in:
            return Verdict(False, ReasonCode.DEFAULT_HIDDEN)
        return Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    allowed = restrictions.allowed_servers
    allow_listed = matches_any(server_name, allowed)

    if opt_in:
        verdict = Verdict(
            allow_listed,
            ReasonCode.EXPLICITLY_ALLOWED if allow_listed else ReasonCode.NOT_IN_ALLOWLIST,
        )
    else:
        outside_allowlist = bool(allowed) and not allow_listed
        disallowed = matches_any(server_name, restrictions.disallowed_servers)
        enabled = not disallowed and not outside_allowlist

        if outside_allowlist:
            reason = ReasonCode.NOT_IN_ALLOWLIST
        elif disallowed:
            reason = ReasonCode.EXPLICITLY_DISALLOWED
        elif allow_listed:
            reason = ReasonCode.EXPLICITLY_ALLOWED
        else:
            reason = ReasonCode.DEFAULT_VISIBLE
        verdict = Verdict(enabled, reason)

    logger.debug(
        "Server '%s' (opt-in=%s) → %s (%s)",
        server_name,
        opt_in,
        "enabled" if verdict.enabled else "disabled",
        verdict.reason.value,
    )
    return verdict


def _rule_matches(rule: ToolRule, server_name: str, tool_name: str) -> bool:
    if not isinstance(rule, ToolRule) or not rule.is_complete:
        return False
    return matches_pattern(server_name, rule.server_name) and matches_pattern(
        tool_name, rule.tool_name
    )


def _any_rule_matches(
    rules: Optional[Tuple[ToolRule, ...]], server_name: str, tool_name: str
) -> bool:
    if not rules:
        return False
    return any(_rule_matches(rule, server_name, tool_name) for rule in rules)


def resolve_tool(
    server_name: str,
    tool_name: str,
    restrictions: Optional[RestrictionSet],
) -> Verdict:
    """Decide whether *tool_name* on *server_name* may be used.

    Only meaningful once the owning server's verdict is enabled; a
    disabled server hides all of its tools regardless of tool rules.
    """
    if restrictions is None or not (restrictions.allowed_tools or restrictions.disallowed_tools):
        return Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    allowed = restrictions.allowed_tools
    allow_listed = _any_rule_matches(allowed, server_name, tool_name)
    outside_allowlist = bool(allowed) and not allow_listed
    disallowed = _any_rule_matches(restrictions.disallowed_tools, server_name, tool_name)
    enabled = not disallowed and not outside_allowlist

    if outside_allowlist:
        reason = ReasonCode.NOT_IN_ALLOWLIST
    elif disallowed:
        reason = ReasonCode.EXPLICITLY_DISALLOWED
    elif allow_listed:
        reason = ReasonCode.EXPLICITLY_ALLOWED
    else:
        reason = ReasonCode.DEFAULT_VISIBLE

    logger.debug(
        "Tool '%s' on '%s' → %s (%s)",
        tool_name,
        server_name,
        "enabled" if enabled else "disabled",
        reason.value,
    )
    return Verdict(enabled, reason)


def is_tool_permitted(
    server_name: str,
    tool_name: str,
    default_visible: Optional[bool],
    restrictions: Optional[RestrictionSet],
) -> Verdict:
    """Combined server-then-tool verdict for gating a single invocation."""
    server_verdict = resolve_server(server_name, default_visible, restrictions)
    if not server_verdict.enabled:
        return server_verdict
    return resolve_tool(server_name, tool_name, restrictions)


def _default_visible(
    server: ServerDescriptor,
    default_visible_lookup: Optional[DefaultVisibleLookup],
) -> Optional[bool]:
    if default_visible_lookup is not None:
        return default_visible_lookup(server.name)
    return server.default_visible


def filter_servers(
    servers: Sequence[ServerDescriptor],
    restrictions: Optional[RestrictionSet],
    default_visible_lookup: Optional[DefaultVisibleLookup] = None,
) -> List[ServerDescriptor]:
    """Return the enabled *servers*, in input order.

    *default_visible_lookup* maps a server name to its configured
    default-visibility flag (``None`` meaning "not set", i.e. visible).
    Without it, each descriptor's own flag is used.
    """
    return [
        server
        for server in servers
        if resolve_server(
            server.name, _default_visible(server, default_visible_lookup), restrictions
        ).enabled
    ]


def filter_tools(
    server: ServerDescriptor,
    restrictions: Optional[RestrictionSet],
    default_visible_lookup: Optional[DefaultVisibleLookup] = None,
) -> List[str]:
    """Return the enabled tool names of *server*, in advertised order.

    Returns an empty list if the server itself is disabled.
    *default_visible_lookup* behaves as in :func:`filter_servers`.
    """
    default_visible = _default_visible(server, default_visible_lookup)
    if not resolve_server(server.name, default_visible, restrictions).enabled:
        return []
    return [
        tool for tool in server.tools if resolve_tool(server.name, tool, restrictions).enabled
    ]
