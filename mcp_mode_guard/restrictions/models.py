"""Value types shared by the restriction resolver and its consumers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from mcp import types as mcp_types

logger = logging.getLogger(__name__)


class ReasonCode(str, Enum):
    """Why a server or tool ended up enabled or disabled.

    Diagnostic only; never feeds back into the decision.
    """

    DEFAULT_VISIBLE = "default_visible"
    DEFAULT_HIDDEN = "default_hidden"
    EXPLICITLY_ALLOWED = "explicitly_allowed"
    EXPLICITLY_DISALLOWED = "explicitly_disallowed"
    NOT_IN_ALLOWLIST = "not_in_allowlist"


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating one server or tool for a mode."""

    enabled: bool
    reason: ReasonCode


@dataclass(frozen=True)
class ServerDescriptor:
    """Snapshot of one connected tool server.

    Attributes
    ----------
    name:
        Unique server name.
    tools:
        Advertised tool names, in the server's order.
    default_visible:
        Whether a mode that says nothing about the server can see it.
        ``False`` makes the server opt-in.
    resources:
        URIs of the server's static resources.
    resource_templates:
        URI templates of the server's parameterised resources.
    """

    name: str
    tools: Tuple[str, ...] = ()
    default_visible: bool = True
    resources: Tuple[str, ...] = ()
    resource_templates: Tuple[str, ...] = ()

    @property
    def resource_count(self) -> int:
        """Resources plus resource templates."""
        return len(self.resources) + len(self.resource_templates)

    @classmethod
    def from_mcp_tools(
        cls,
        name: str,
        tools: Iterable[mcp_types.Tool],
        default_visible: Optional[bool] = None,
    ) -> ServerDescriptor:
        """Build a descriptor from a server's ``list_tools`` result."""
        return cls(
            name=name,
            tools=tuple(t.name for t in tools),
            default_visible=default_visible is not False,
        )

    @classmethod
    def from_mcp_resources(
        cls,
        name: str,
        resources: Iterable[mcp_types.Resource],
        resource_templates: Iterable[mcp_types.ResourceTemplate] = (),
        default_visible: Optional[bool] = None,
        tools: Iterable[str] = (),
    ) -> ServerDescriptor:
        """Build a descriptor from ``list_resources`` and
        ``list_resource_templates`` results.

        *tools* takes plain tool names so a descriptor built by
        :meth:`from_mcp_tools` can be carried over.
        """
        return cls(
            name=name,
            tools=tuple(tools),
            default_visible=default_visible is not False,
            resources=tuple(str(r.uri) for r in resources),
            resource_templates=tuple(t.uriTemplate for t in resource_templates),
        )


@dataclass(frozen=True)
class ToolRule:
    """A ``(server pattern, tool pattern)`` pair used in tool allow/disallow lists."""

    server_name: str
    tool_name: str

    @property
    def is_complete(self) -> bool:
        """Return ``True`` if both patterns are non-empty strings."""
        return (
            isinstance(self.server_name, str)
            and isinstance(self.tool_name, str)
            and bool(self.server_name)
            and bool(self.tool_name)
        )


@dataclass(frozen=True)
class RestrictionSet:
    """Server and tool restrictions attached to a mode.

    ``None`` for a list means "not configured".  Use
    :func:`normalize_restrictions` so that an empty set collapses to
    ``None``.
    """

    allowed_servers: Optional[Tuple[str, ...]] = None
    disallowed_servers: Optional[Tuple[str, ...]] = None
    allowed_tools: Optional[Tuple[ToolRule, ...]] = None
    disallowed_tools: Optional[Tuple[ToolRule, ...]] = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.allowed_servers
            or self.disallowed_servers
            or self.allowed_tools
            or self.disallowed_tools
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RestrictionSet:
        """Parse from plain data using the snake_case field names.

        Tool rules may be :class:`ToolRule` instances or
        ``{"server_name": ..., "tool_name": ...}`` mappings.  A bare
        string counts as a one-entry list.  Anything else that is not a
        list or tuple leaves the field unconfigured, and entries of the
        wrong type are skipped; both are logged at WARNING.  Full
        validation lives in :mod:`mcp_mode_guard.config.schema`.
        """

        def _entries(field: str) -> Optional[Tuple[Any, ...]]:
            raw = data.get(field)
            if raw is None:
                return None
            if isinstance(raw, str):
                return (raw,)
            if isinstance(raw, (list, tuple)):
                return tuple(raw)
            logger.warning("Ignoring %s: expected a list, got %r", field, raw)
            return None

        def _rules(field: str) -> Optional[Tuple[ToolRule, ...]]:
            raw = _entries(field)
            if raw is None:
                return None
            rules = []
            for r in raw:
                if isinstance(r, ToolRule):
                    rules.append(r)
                elif isinstance(r, Mapping):
                    rules.append(ToolRule(r.get("server_name", ""), r.get("tool_name", "")))
                else:
                    logger.warning("Skipping invalid %s entry %r", field, r)
            return tuple(rules)

        def _names(field: str) -> Optional[Tuple[str, ...]]:
            raw = _entries(field)
            if raw is None:
                return None
            names = []
            for n in raw:
                if isinstance(n, str):
                    names.append(n)
                else:
                    logger.warning("Skipping invalid %s entry %r", field, n)
            return tuple(names)

        return cls(
            allowed_servers=_names("allowed_servers"),
            disallowed_servers=_names("disallowed_servers"),
            allowed_tools=_rules("allowed_tools"),
            disallowed_tools=_rules("disallowed_tools"),
        )


def normalize_restrictions(restrictions: Optional[RestrictionSet]) -> Optional[RestrictionSet]:
    """Collapse empty lists to ``None`` and an empty set to ``None``."""
    if restrictions is None or restrictions.is_empty:
        return None
    return replace(
        restrictions,
        allowed_servers=restrictions.allowed_servers or None,
        disallowed_servers=restrictions.disallowed_servers or None,
        allowed_tools=restrictions.allowed_tools or None,
        disallowed_tools=restrictions.disallowed_tools or None,
    )
