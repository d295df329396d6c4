"""Pre-execution gate for MCP tool calls and resource reads.

Rejects a ``use_mcp_tool`` invocation before it reaches the server when
the active mode may not see the server or may not call the tool, and an
``access_mcp_resource`` request when the mode may not see the server.

Can be used directly (:meth:`ModeToolGate.check`,
:meth:`ModeToolGate.check_resource`) or as async middleware wrapping
the handler that performs the call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from mcp_mode_guard.errors import ResourceAccessDeniedError, ToolAccessDeniedError
from mcp_mode_guard.restrictions.models import RestrictionSet, ServerDescriptor, Verdict
from mcp_mode_guard.restrictions.resolver import is_tool_permitted, resolve_server

logger = logging.getLogger(__name__)

RestrictionsLookup = Callable[[Optional[str]], Optional[RestrictionSet]]


@dataclass
class ToolCall:
    """A pending tool invocation.

    Attributes:
        mode: Slug of the mode the assistant is running in.
        server_name: Target MCP server.
        tool_name: Tool to invoke on that server.
        arguments: Tool arguments, passed through untouched.
    """

    mode: Optional[str]
    server_name: str
    tool_name: str
    arguments: Optional[Dict[str, Any]] = None


@dataclass
class ResourceRequest:
    """A pending resource read."""

    mode: Optional[str]
    server_name: str
    uri: str


class ModeToolGate:
    """Checks tool calls and resource reads against the active mode.

    Parameters
    ----------
    servers:
        Current server snapshot, used for each server's default
        visibility.  Servers missing from it are treated as visible by
        default.
    restrictions_lookup:
        Returns the :class:`RestrictionSet` for a mode slug, or ``None``.
    """

    def __init__(
        self,
        servers: Iterable[ServerDescriptor],
        restrictions_lookup: RestrictionsLookup,
    ) -> None:
        self._servers: Dict[str, ServerDescriptor] = {s.name: s for s in servers}
        self._lookup = restrictions_lookup

    def update_servers(self, servers: Iterable[ServerDescriptor]) -> None:
        """Replace the server snapshot (e.g. after a capability change)."""
        self._servers = {s.name: s for s in servers}
        logger.debug("Gate server snapshot updated: %d server(s)", len(self._servers))

    def _default_visible(self, server_name: str) -> bool:
        server = self._servers.get(server_name)
        return server.default_visible if server is not None else True

    def evaluate(self, mode: Optional[str], server_name: str, tool_name: str) -> Verdict:
        return is_tool_permitted(
            server_name, tool_name, self._default_visible(server_name), self._lookup(mode)
        )

    def evaluate_resource(self, mode: Optional[str], server_name: str) -> Verdict:
        """Server-level verdict only; tool rules are not consulted."""
        return resolve_server(server_name, self._default_visible(server_name), self._lookup(mode))

    def check(self, mode: Optional[str], server_name: str, tool_name: str) -> Verdict:
        """Return the verdict, or raise :class:`ToolAccessDeniedError` if disabled."""
        verdict = self.evaluate(mode, server_name, tool_name)
        if not verdict.enabled:
            logger.warning(
                "Tool call DENIED: mode=%s, server=%s, tool=%s, reason=%s",
                mode,
                server_name,
                tool_name,
                verdict.reason.value,
            )
            raise ToolAccessDeniedError(mode, server_name, tool_name, verdict.reason.value)
        return verdict

    def check_resource(
        self,
        mode: Optional[str],
        server_name: str,
        uri: Optional[str] = None,
    ) -> Verdict:
        """Return the verdict, or raise :class:`ResourceAccessDeniedError` if disabled."""
        verdict = self.evaluate_resource(mode, server_name)
        if not verdict.enabled:
            logger.warning(
                "Resource access DENIED: mode=%s, server=%s, uri=%s, reason=%s",
                mode,
                server_name,
                uri,
                verdict.reason.value,
            )
            raise ResourceAccessDeniedError(mode, server_name, uri, verdict.reason.value)
        return verdict

    async def __call__(
        self,
        call: ToolCall,
        next_handler: Callable[[ToolCall], Awaitable[Any]],
    ) -> Any:
        """Check *call* and continue to *next_handler*, or deny."""
        self.check(call.mode, call.server_name, call.tool_name)
        return await next_handler(call)

    async def access_resource(
        self,
        request: ResourceRequest,
        next_handler: Callable[[ResourceRequest], Awaitable[Any]],
    ) -> Any:
        """Middleware form of :meth:`check_resource`."""
        self.check_resource(request.mode, request.server_name, request.uri)
        return await next_handler(request)
