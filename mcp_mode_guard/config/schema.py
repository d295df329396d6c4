"""Pydantic configuration models for MCP Mode Guard.

Keys are snake_case; the camelCase spellings used by editor exports
(``allowedServers``, ``defaultEnabled``, ``serverName`` ...) are accepted
as aliases.  Validated models convert to the frozen runtime types in
:mod:`mcp_mode_guard.restrictions.models`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from mcp_mode_guard.restrictions.models import (
    RestrictionSet,
    ServerDescriptor,
    ToolRule,
    normalize_restrictions,
)

logger = logging.getLogger(__name__)


# ── Restrictions ─────────────────────────────────────────────────────────


class ToolRuleConfig(BaseModel):
    """One ``(server pattern, tool pattern)`` entry of a tool list."""

    model_config = ConfigDict(populate_by_name=True)

    server_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("server_name", "serverName", "server"),
        description="Server name or wildcard pattern.",
    )
    tool_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("tool_name", "toolName", "tool"),
        description="Tool name or wildcard pattern.",
    )

    @field_validator("server_name", "tool_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("pattern must be a non-empty string")
        return v

    def to_rule(self) -> ToolRule:
        return ToolRule(server_name=self.server_name, tool_name=self.tool_name)


class RestrictionsConfig(BaseModel):
    """Server and tool allow/disallow lists of one mode."""

    model_config = ConfigDict(populate_by_name=True)

    allowed_servers: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("allowed_servers", "allowedServers"),
        description="Wildcard patterns; only matching servers are visible.",
    )
    disallowed_servers: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("disallowed_servers", "disallowedServers"),
        description="Wildcard patterns; matching servers are hidden.",
    )
    allowed_tools: Optional[List[ToolRuleConfig]] = Field(
        default=None,
        validation_alias=AliasChoices("allowed_tools", "allowedTools"),
    )
    disallowed_tools: Optional[List[ToolRuleConfig]] = Field(
        default=None,
        validation_alias=AliasChoices("disallowed_tools", "disallowedTools"),
    )

    @field_validator("allowed_servers", "disallowed_servers")
    @classmethod
    def _strip_server_patterns(
        cls, v: Optional[List[str]], info: ValidationInfo
    ) -> Optional[List[str]]:
        """Strip server patterns like tool-rule patterns; drop blank ones."""
        if v is None:
            return v
        kept: List[str] = []
        for item in v:
            pattern = item.strip()
            if pattern:
                kept.append(pattern)
            else:
                logger.warning("Skipping blank %s entry %r", info.field_name, item)
        return kept

    @field_validator("allowed_tools", "disallowed_tools", mode="before")
    @classmethod
    def _drop_malformed_rules(cls, v: Any, info: ValidationInfo) -> Any:
        """Skip tool entries that do not validate instead of failing the mode."""
        if v is None or not isinstance(v, list):
            return v
        kept: List[ToolRuleConfig] = []
        for item in v:
            try:
                kept.append(ToolRuleConfig.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid %s entry %r: %s",
                    info.field_name,
                    item,
                    exc.errors()[0]["msg"],
                )
        return kept

    def to_restriction_set(self) -> Optional[RestrictionSet]:
        """Convert to a normalized :class:`RestrictionSet` (``None`` if empty)."""

        def _rules(entries: Optional[List[ToolRuleConfig]]):
            return None if entries is None else tuple(e.to_rule() for e in entries)

        return normalize_restrictions(
            RestrictionSet(
                allowed_servers=(
                    None if self.allowed_servers is None else tuple(self.allowed_servers)
                ),
                disallowed_servers=(
                    None if self.disallowed_servers is None else tuple(self.disallowed_servers)
                ),
                allowed_tools=_rules(self.allowed_tools),
                disallowed_tools=_rules(self.disallowed_tools),
            )
        )


# ── Servers & modes ──────────────────────────────────────────────────────


class ServerConfig(BaseModel):
    """Known MCP server and the tools it advertises."""

    model_config = ConfigDict(populate_by_name=True)

    default_visible: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "default_visible", "defaultVisible", "default_enabled", "defaultEnabled"
        ),
        description="False makes the server opt-in: hidden unless a mode allow-lists it.",
    )
    tools: List[str] = Field(default_factory=list, description="Advertised tool names.")
    resources: List[str] = Field(default_factory=list, description="Resource URIs.")
    resource_templates: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("resource_templates", "resourceTemplates"),
        description="Resource URI templates.",
    )
    description: str = ""


class ModeConfig(BaseModel):
    """A named assistant mode and its optional restrictions."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, description="Display name.")
    description: str = ""
    restrictions: Optional[RestrictionsConfig] = Field(
        default=None,
        validation_alias=AliasChoices("restrictions", "mcp_restrictions", "mcpRestrictions"),
    )


class GuardConfig(BaseModel):
    """Root configuration model."""

    servers: Dict[str, ServerConfig] = Field(default_factory=dict)
    modes: Dict[str, ModeConfig] = Field(default_factory=dict)

    @field_validator("servers", "modes", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def restrictions_for(self, mode: Optional[str]) -> Optional[RestrictionSet]:
        """Normalized restrictions of *mode*; ``None`` for unknown modes."""
        mode_cfg = self.modes.get(mode) if mode else None
        if mode_cfg is None or mode_cfg.restrictions is None:
            return None
        return mode_cfg.restrictions.to_restriction_set()

    def default_visible_for(self, server_name: str) -> Optional[bool]:
        """Configured default visibility of *server_name*, ``None`` if unknown."""
        server_cfg = self.servers.get(server_name)
        return None if server_cfg is None else server_cfg.default_visible

    def server_descriptors(self) -> List[ServerDescriptor]:
        """Configured servers as descriptors, in file order."""
        return [
            ServerDescriptor(
                name=name,
                tools=tuple(cfg.tools),
                default_visible=cfg.default_visible,
                resources=tuple(cfg.resources),
                resource_templates=tuple(cfg.resource_templates),
            )
            for name, cfg in self.servers.items()
        ]
