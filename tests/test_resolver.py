"""Tests for the server/tool restriction resolver."""

from __future__ import annotations

import logging

import pytest
from mcp import types as mcp_types

from mcp_mode_guard.restrictions import (
    ReasonCode,
    RestrictionSet,
    ServerDescriptor,
    ToolRule,
    Verdict,
    filter_servers,
    filter_tools,
    is_tool_permitted,
    normalize_restrictions,
    resolve_server,
    resolve_tool,
)


def _rs(**kwargs) -> RestrictionSet:
    return RestrictionSet.from_dict(kwargs)


# ════════════════════════════════════════════════════════════════════════
#  Server verdicts
# ════════════════════════════════════════════════════════════════════════


class TestResolveServerNoRestrictions:
    def test_default_visible(self) -> None:
        assert resolve_server("docs", True, None) == Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    def test_unspecified_default_is_visible(self) -> None:
        assert resolve_server("docs", None, None) == Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    def test_default_hidden(self) -> None:
        assert resolve_server("admin", False, None) == Verdict(False, ReasonCode.DEFAULT_HIDDEN)


class TestResolveServerOptIn:
    def test_allow_listed(self) -> None:
        verdict = resolve_server("admin", False, _rs(allowed_servers=["admin"]))
        assert verdict == Verdict(True, ReasonCode.EXPLICITLY_ALLOWED)

    def test_allow_listed_by_pattern(self) -> None:
        verdict = resolve_server("admin-tools", False, _rs(allowed_servers=["admin-*"]))
        assert verdict.enabled

    def test_not_allow_listed(self) -> None:
        verdict = resolve_server("admin", False, _rs(allowed_servers=["docs"]))
        assert verdict == Verdict(False, ReasonCode.NOT_IN_ALLOWLIST)

    def test_no_allow_list_at_all(self) -> None:
        verdict = resolve_server("admin", False, _rs(disallowed_servers=["other"]))
        assert verdict == Verdict(False, ReasonCode.NOT_IN_ALLOWLIST)

    def test_empty_allow_list(self) -> None:
        verdict = resolve_server("admin", False, RestrictionSet(allowed_servers=()))
        assert not verdict.enabled

    def test_disallow_list_not_consulted(self) -> None:
        rs = _rs(disallowed_servers=["admin"])
        assert resolve_server("admin", False, rs) == Verdict(False, ReasonCode.NOT_IN_ALLOWLIST)

        rs = _rs(allowed_servers=["admin"], disallowed_servers=["admin"])
        assert resolve_server("admin", False, rs) == Verdict(True, ReasonCode.EXPLICITLY_ALLOWED)


class TestResolveServerDefaultVisible:
    def test_outside_allow_list(self) -> None:
        rs = _rs(allowed_servers=["server1", "server2"])
        verdict = resolve_server("server3", True, rs)
        assert verdict == Verdict(False, ReasonCode.NOT_IN_ALLOWLIST)

    def test_inside_allow_list(self) -> None:
        rs = _rs(allowed_servers=["server1", "server2"])
        assert resolve_server("server2", True, rs) == Verdict(True, ReasonCode.EXPLICITLY_ALLOWED)

    def test_disallowed(self) -> None:
        rs = _rs(disallowed_servers=["docs"])
        verdict = resolve_server("docs", True, rs)
        assert verdict == Verdict(False, ReasonCode.EXPLICITLY_DISALLOWED)

    def test_disallowed_by_pattern(self) -> None:
        rs = _rs(disallowed_servers=["*-prod"])
        assert not resolve_server("db-prod", None, rs).enabled
        assert resolve_server("db-dev", None, rs).enabled

    def test_unrelated_rules_keep_default(self) -> None:
        rs = _rs(disallowed_servers=["other"])
        assert resolve_server("docs", True, rs) == Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    def test_empty_allow_list_means_no_allow_list(self) -> None:
        rs = RestrictionSet(allowed_servers=(), disallowed_servers=("x",))
        assert resolve_server("docs", True, rs) == Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    @pytest.mark.parametrize(
        "allowed, disallowed",
        [
            (["docs"], ["docs"]),
            (["d*"], ["docs"]),
            (["docs"], ["*"]),
            (["*"], ["do?s"]),
        ],
    )
    def test_disallow_wins_over_allow(self, allowed, disallowed) -> None:
        rs = _rs(allowed_servers=allowed, disallowed_servers=disallowed)
        verdict = resolve_server("docs", True, rs)
        assert verdict == Verdict(False, ReasonCode.EXPLICITLY_DISALLOWED)

    def test_unknown_server_names_in_rules_are_inert(self) -> None:
        rs = _rs(disallowed_servers=["ghost"], allowed_servers=["docs", "phantom"])
        assert resolve_server("docs", True, rs).enabled


class TestResolveServerIdempotent:
    def test_same_inputs_same_verdict(self) -> None:
        rs = _rs(allowed_servers=["a*"], disallowed_servers=["ab"])
        first = resolve_server("ab", True, rs)
        second = resolve_server("ab", True, rs)
        assert first == second


# ════════════════════════════════════════════════════════════════════════
#  Tool verdicts
# ════════════════════════════════════════════════════════════════════════


class TestResolveTool:
    def test_no_restrictions(self) -> None:
        assert resolve_tool("docs", "anything", None) == Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    def test_no_tool_lists(self) -> None:
        rs = _rs(allowed_servers=["docs"])
        assert resolve_tool("docs", "anything", rs).enabled

    def test_allow_list_match(self) -> None:
        rs = _rs(allowed_tools=[ToolRule("docs", "get_*")])
        assert resolve_tool("docs", "get_public", rs) == Verdict(
            True, ReasonCode.EXPLICITLY_ALLOWED
        )

    def test_allow_list_miss(self) -> None:
        rs = _rs(allowed_tools=[ToolRule("docs", "get_*")])
        assert resolve_tool("docs", "delete_all", rs) == Verdict(
            False, ReasonCode.NOT_IN_ALLOWLIST
        )

    def test_allow_list_is_server_scoped(self) -> None:
        rs = _rs(allowed_tools=[ToolRule("docs", "get_*")])
        assert not resolve_tool("other", "get_public", rs).enabled

    def test_disallow_only(self) -> None:
        rs = _rs(disallowed_tools=[ToolRule("*", "delete_*")])
        assert resolve_tool("fs", "delete_file", rs) == Verdict(
            False, ReasonCode.EXPLICITLY_DISALLOWED
        )
        assert resolve_tool("fs", "read_file", rs) == Verdict(True, ReasonCode.DEFAULT_VISIBLE)

    def test_specific_disallow_beats_broad_allow(self) -> None:
        rs = _rs(
            allowed_tools=[{"server_name": "docs", "tool_name": "get_*"}],
            disallowed_tools=[{"server_name": "docs", "tool_name": "get_secrets"}],
        )
        assert resolve_tool("docs", "get_secrets", rs) == Verdict(
            False, ReasonCode.EXPLICITLY_DISALLOWED
        )
        assert resolve_tool("docs", "get_public", rs).enabled

    def test_disallow_wins_regardless_of_declaration_order(self) -> None:
        rules = [ToolRule("docs", "get_secrets"), ToolRule("docs", "get_*")]
        for allowed in (rules, list(reversed(rules))):
            rs = _rs(allowed_tools=allowed, disallowed_tools=[ToolRule("d*", "get_secret?")])
            assert not resolve_tool("docs", "get_secrets", rs).enabled

    def test_help_rule_does_not_catch_helper(self) -> None:
        rs = _rs(disallowed_tools=[ToolRule("docs", "help")])
        assert not resolve_tool("docs", "help", rs).enabled
        assert resolve_tool("docs", "helper", rs).enabled

    def test_incomplete_rules_are_inert(self) -> None:
        rs = _rs(
            disallowed_tools=[
                ToolRule("", ""),
                ToolRule("docs", ""),
                ToolRule(None, "x"),  # type: ignore[arg-type]
                ToolRule("docs", "get_secrets"),
            ]
        )
        assert resolve_tool("docs", "get_public", rs).enabled
        assert not resolve_tool("docs", "get_secrets", rs).enabled

    def test_incomplete_allow_rule_does_not_grant(self) -> None:
        rs = _rs(allowed_tools=[ToolRule("", "")])
        assert not resolve_tool("docs", "get_public", rs).enabled

    def test_malformed_mapping_entries_are_dropped(self) -> None:
        rs = _rs(disallowed_tools=["not-a-rule", 42, {"server_name": "docs"}])
        assert resolve_tool("docs", "get_public", rs).enabled


class TestIsToolPermitted:
    def test_disabled_server_hides_tools(self) -> None:
        rs = _rs(disallowed_servers=["docs"], allowed_tools=[ToolRule("docs", "*")])
        verdict = is_tool_permitted("docs", "get_public", True, rs)
        assert verdict == Verdict(False, ReasonCode.EXPLICITLY_DISALLOWED)

    def test_opt_in_server_without_restrictions(self) -> None:
        assert not is_tool_permitted("admin", "reset", False, None).enabled

    def test_enabled_server_uses_tool_rules(self) -> None:
        rs = _rs(disallowed_tools=[ToolRule("docs", "get_secrets")])
        assert is_tool_permitted("docs", "get_public", None, rs).enabled
        assert not is_tool_permitted("docs", "get_secrets", None, rs).enabled


# ════════════════════════════════════════════════════════════════════════
#  Batch filtering
# ════════════════════════════════════════════════════════════════════════


def _servers() -> list[ServerDescriptor]:
    return [
        ServerDescriptor("docs", ("get_public", "get_secrets", "search")),
        ServerDescriptor("admin", ("reset",), default_visible=False),
        ServerDescriptor("server3", ("ping",)),
    ]


class TestFilterServers:
    def test_no_restrictions_uses_defaults(self) -> None:
        assert [s.name for s in filter_servers(_servers(), None)] == ["docs", "server3"]

    def test_preserves_input_order(self) -> None:
        rs = _rs(allowed_servers=["server3", "admin", "docs"])
        names = [s.name for s in filter_servers(_servers(), rs)]
        assert names == ["docs", "admin", "server3"]

    def test_lookup_overrides_descriptor_flag(self) -> None:
        lookup = {"docs": False, "admin": None}.get
        names = [s.name for s in filter_servers(_servers(), None, lookup)]
        assert names == ["admin", "server3"]


class TestFilterTools:
    def test_all_tools_without_restrictions(self) -> None:
        assert filter_tools(_servers()[0], None) == ["get_public", "get_secrets", "search"]

    def test_allow_then_disallow(self) -> None:
        rs = _rs(
            allowed_tools=[ToolRule("docs", "get_*")],
            disallowed_tools=[ToolRule("docs", "get_secrets")],
        )
        assert filter_tools(_servers()[0], rs) == ["get_public"]

    def test_disabled_server_has_no_tools(self) -> None:
        assert filter_tools(_servers()[1], None) == []

    def test_lookup_applies_to_server_check(self) -> None:
        server = ServerDescriptor("admin", ("reset",))
        lookup = {"admin": False}.get
        assert filter_servers([server], None, lookup) == []
        assert filter_tools(server, None, lookup) == []

    def test_lookup_can_reveal_server(self) -> None:
        server = _servers()[1]
        assert filter_tools(server, None, {"admin": True}.get) == ["reset"]


# ════════════════════════════════════════════════════════════════════════
#  Models
# ════════════════════════════════════════════════════════════════════════


class TestNormalizeRestrictions:
    def test_none(self) -> None:
        assert normalize_restrictions(None) is None

    def test_empty_set_becomes_none(self) -> None:
        assert normalize_restrictions(RestrictionSet()) is None
        assert normalize_restrictions(RestrictionSet(allowed_servers=(), allowed_tools=())) is None

    def test_empty_lists_become_none(self) -> None:
        rs = normalize_restrictions(RestrictionSet(allowed_servers=(), disallowed_servers=("x",)))
        assert rs is not None
        assert rs.allowed_servers is None
        assert rs.disallowed_servers == ("x",)


class TestRestrictionSetFromDict:
    def test_bare_string_is_one_entry(self) -> None:
        rs = _rs(allowed_servers="docs")
        assert rs.allowed_servers == ("docs",)
        assert resolve_server("docs", True, rs).enabled
        assert not resolve_server("d", True, rs).enabled

    @pytest.mark.parametrize("value", [True, 42, {"server_name": "docs"}])
    def test_non_list_value_is_unconfigured(
        self, value, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="mcp_mode_guard.restrictions.models"):
            rs = _rs(disallowed_tools=value, disallowed_servers=value)
        assert rs.disallowed_tools is None
        assert rs.disallowed_servers is None
        assert "Ignoring disallowed_tools" in caplog.text
        assert resolve_tool("docs", "get_secrets", rs).enabled

    def test_non_string_server_entries_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="mcp_mode_guard.restrictions.models"):
            rs = _rs(allowed_servers=["docs", 3, None])
        assert rs.allowed_servers == ("docs",)
        assert caplog.text.count("Skipping invalid allowed_servers entry") == 2

    def test_tuple_accepted(self) -> None:
        rs = _rs(disallowed_servers=("a", "b"))
        assert rs.disallowed_servers == ("a", "b")


class TestServerDescriptor:
    def test_from_mcp_tools(self) -> None:
        tools = [
            mcp_types.Tool(name="get_public", inputSchema={"type": "object"}),
            mcp_types.Tool(name="get_secrets", inputSchema={"type": "object"}),
        ]
        server = ServerDescriptor.from_mcp_tools("docs", tools)
        assert server.tools == ("get_public", "get_secrets")
        assert server.default_visible is True

    def test_from_mcp_tools_opt_in(self) -> None:
        server = ServerDescriptor.from_mcp_tools("admin", [], default_visible=False)
        assert server.default_visible is False

    def test_frozen(self) -> None:
        server = ServerDescriptor("docs")
        with pytest.raises(AttributeError):
            server.name = "changed"  # type: ignore[misc]

    def test_from_mcp_resources(self) -> None:
        resources = [
            mcp_types.Resource(uri="file:///docs/readme.md", name="readme"),
            mcp_types.Resource(uri="file:///docs/CHANGELOG.md", name="changelog"),
        ]
        templates = [mcp_types.ResourceTemplate(uriTemplate="docs://page/{id}", name="page")]
        server = ServerDescriptor.from_mcp_resources(
            "docs", resources, templates, default_visible=False, tools=("search",)
        )
        assert server.resources == ("file:///docs/readme.md", "file:///docs/CHANGELOG.md")
        assert server.resource_templates == ("docs://page/{id}",)
        assert server.resource_count == 3
        assert server.tools == ("search",)
        assert server.default_visible is False

    def test_resource_count_defaults_to_zero(self) -> None:
        assert ServerDescriptor("docs").resource_count == 0
