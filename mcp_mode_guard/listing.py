"""Filtered capability listings for a mode.

Produces the structured data the prompt builder renders into the
``use_mcp_tool`` and ``access_mcp_resource`` sections: the servers a
mode may see, each with the tools it may call or the number of
resources it offers.  Text templating happens elsewhere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from mcp_mode_guard.restrictions.models import RestrictionSet, ServerDescriptor
from mcp_mode_guard.restrictions.resolver import (
    DefaultVisibleLookup,
    filter_servers,
    resolve_tool,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerListing:
    """One visible server and its visible tools."""

    name: str
    tools: Tuple[str, ...]


@dataclass(frozen=True)
class ResourceListing:
    """One visible server and how many resources it offers."""

    name: str
    resource_count: int


def build_capability_listing(
    servers: Sequence[ServerDescriptor],
    restrictions: Optional[RestrictionSet],
    default_visible_lookup: Optional[DefaultVisibleLookup] = None,
) -> List[ServerListing]:
    """Return the visible servers and their visible tools, in input order.

    A visible server whose tools are all filtered out is still listed,
    with an empty tool tuple.
    """
    listing = [
        ServerListing(
            name=server.name,
            tools=tuple(
                tool
                for tool in server.tools
                if resolve_tool(server.name, tool, restrictions).enabled
            ),
        )
        for server in filter_servers(servers, restrictions, default_visible_lookup)
    ]
    logger.debug(
        "Capability listing: %d of %d server(s) visible.",
        len(listing),
        len(servers),
    )
    return listing


def build_resource_listing(
    servers: Sequence[ServerDescriptor],
    restrictions: Optional[RestrictionSet],
    default_visible_lookup: Optional[DefaultVisibleLookup] = None,
) -> List[ResourceListing]:
    """Return the visible servers with their resource counts, in input order.

    Only server visibility applies; tool rules do not affect resources.
    The count includes resource templates.
    """
    listing = [
        ResourceListing(name=server.name, resource_count=server.resource_count)
        for server in filter_servers(servers, restrictions, default_visible_lookup)
    ]
    logger.debug(
        "Resource listing: %d of %d server(s) visible.",
        len(listing),
        len(servers),
    )
    return listing
