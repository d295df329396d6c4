"""Pure mutators for building a mode's restriction set.

These back interactive editors: each call takes the current
(possibly ``None``) :class:`RestrictionSet` and returns a new,
normalized one.  An edit that leaves every list empty returns ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from mcp_mode_guard.restrictions.models import (
    RestrictionSet,
    ServerDescriptor,
    ToolRule,
    Verdict,
    normalize_restrictions,
)
from mcp_mode_guard.restrictions.resolver import resolve_server


class RuleList(str, Enum):
    ALLOWED = "allowed"
    DISALLOWED = "disallowed"


def _server_field(rule_list: RuleList) -> str:
    return "allowed_servers" if rule_list is RuleList.ALLOWED else "disallowed_servers"


def _tool_field(rule_list: RuleList) -> str:
    return "allowed_tools" if rule_list is RuleList.ALLOWED else "disallowed_tools"


def _opposite(rule_list: RuleList) -> RuleList:
    return RuleList.DISALLOWED if rule_list is RuleList.ALLOWED else RuleList.ALLOWED


def _base(restrictions: Optional[RestrictionSet]) -> RestrictionSet:
    return restrictions if restrictions is not None else RestrictionSet()


def toggle_server(
    restrictions: Optional[RestrictionSet],
    server_name: str,
    rule_list: RuleList,
) -> Optional[RestrictionSet]:
    """Add *server_name* to *rule_list*, or remove it if already present.

    Adding also removes the name from the opposite list, so a server is
    never in both lists through this editor.
    """
    current = _base(restrictions)
    target = _server_field(rule_list)
    other = _server_field(_opposite(rule_list))
    target_names = tuple(getattr(current, target) or ())
    other_names = tuple(getattr(current, other) or ())

    if server_name in target_names:
        updated = replace(current, **{target: tuple(n for n in target_names if n != server_name)})
    else:
        updated = replace(
            current,
            **{
                target: target_names + (server_name,),
                other: tuple(n for n in other_names if n != server_name),
            },
        )
    return normalize_restrictions(updated)


def _tool_rules(current: RestrictionSet, rule_list: RuleList) -> List[ToolRule]:
    return list(getattr(current, _tool_field(rule_list)) or ())


def add_tool_rule(
    restrictions: Optional[RestrictionSet],
    rule_list: RuleList,
    rule: Optional[ToolRule] = None,
) -> Optional[RestrictionSet]:
    """Append *rule* to the tool list.

    Without *rule* an empty placeholder is appended; it never matches
    anything until both fields are filled in.
    """
    current = _base(restrictions)
    rules = _tool_rules(current, rule_list)
    rules.append(rule if rule is not None else ToolRule("", ""))
    return normalize_restrictions(replace(current, **{_tool_field(rule_list): tuple(rules)}))


def update_tool_rule(
    restrictions: Optional[RestrictionSet],
    rule_list: RuleList,
    index: int,
    *,
    server_name: Optional[str] = None,
    tool_name: Optional[str] = None,
) -> Optional[RestrictionSet]:
    """Replace the given fields of the rule at *index*.

    Raises :class:`IndexError` if there is no such rule.
    """
    current = _base(restrictions)
    rules = _tool_rules(current, rule_list)
    old = rules[index]
    rules[index] = ToolRule(
        server_name=old.server_name if server_name is None else server_name,
        tool_name=old.tool_name if tool_name is None else tool_name,
    )
    return normalize_restrictions(replace(current, **{_tool_field(rule_list): tuple(rules)}))


def remove_tool_rule(
    restrictions: Optional[RestrictionSet],
    rule_list: RuleList,
    index: int,
) -> Optional[RestrictionSet]:
    """Remove the rule at *index*.  Raises :class:`IndexError` if missing."""
    current = _base(restrictions)
    rules = _tool_rules(current, rule_list)
    del rules[index]
    return normalize_restrictions(replace(current, **{_tool_field(rule_list): tuple(rules)}))


def count_configured_lists(restrictions: Optional[RestrictionSet]) -> int:
    """Number of non-empty lists in *restrictions* (0 to 4)."""
    if restrictions is None:
        return 0
    return sum(
        1
        for values in (
            restrictions.allowed_servers,
            restrictions.disallowed_servers,
            restrictions.allowed_tools,
            restrictions.disallowed_tools,
        )
        if values
    )


# ── Display status ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class ServerSummary:
    """Names of enabled and disabled servers, in input order."""

    enabled: Tuple[str, ...]
    disabled: Tuple[str, ...]


def server_status(server: ServerDescriptor, restrictions: Optional[RestrictionSet]) -> Verdict:
    """Status shown next to a server in an editor.

    Same verdict the enforcement path computes, so the display cannot
    disagree with what the gate allows.
    """
    return resolve_server(server.name, server.default_visible, restrictions)


def summarize_servers(
    servers: Sequence[ServerDescriptor],
    restrictions: Optional[RestrictionSet],
) -> ServerSummary:
    enabled: List[str] = []
    disabled: List[str] = []
    for server in servers:
        if server_status(server, restrictions).enabled:
            enabled.append(server.name)
        else:
            disabled.append(server.name)
    return ServerSummary(enabled=tuple(enabled), disabled=tuple(disabled))
