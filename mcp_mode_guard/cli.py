"""CLI argument parsing and main entry point.

Inspects a mode-guard configuration file:

* ``mcp-mode-guard servers --mode M``: server verdicts with reasons.
* ``mcp-mode-guard tools --mode M``: the filtered capability listing.
* ``mcp-mode-guard resources --mode M``: visible servers with resource counts.
* ``mcp-mode-guard check --mode M SERVER TOOL``: exit 0 if permitted, 1 if not.

Configuration errors exit with status 2.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from mcp_mode_guard.config.loader import find_config_file, load_guard_config
from mcp_mode_guard.config.schema import GuardConfig
from mcp_mode_guard.constants import DEFAULT_LOG_LEVEL, PACKAGE_NAME, PACKAGE_VERSION
from mcp_mode_guard.display.logging_config import setup_logging
from mcp_mode_guard.errors import ConfigurationError, ToolAccessDeniedError
from mcp_mode_guard.gate import ModeToolGate
from mcp_mode_guard.listing import build_capability_listing, build_resource_listing
from mcp_mode_guard.restrictions.editor import count_configured_lists, server_status

module_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DENIED = 1
EXIT_CONFIG_ERROR = 2


def _console() -> Console:
    return Console(highlight=False)


def _load(args: argparse.Namespace) -> GuardConfig:
    cfg_path = os.path.abspath(find_config_file(args.config))
    module_logger.info("Configuration file path resolved to: %s", cfg_path)
    return load_guard_config(cfg_path)


# ── ``mcp-mode-guard servers`` ──────────────────────────────────────────


def _cmd_servers(args: argparse.Namespace, config: GuardConfig) -> int:
    restrictions = config.restrictions_for(args.mode)
    console = _console()

    table = Table(title=f"Servers for mode '{args.mode}'")
    table.add_column("Server")
    table.add_column("Status")
    table.add_column("Reason")
    table.add_column("Tools", justify="right")

    for server in config.server_descriptors():
        verdict = server_status(server, restrictions)
        label = Text("enabled", style="green") if verdict.enabled else Text("disabled", style="red")
        name = server.name if server.default_visible else f"{server.name} (opt-in)"
        table.add_row(Text(name), label, verdict.reason.value, str(len(server.tools)))

    console.print(table)
    console.print(f"{count_configured_lists(restrictions)} restriction list(s) configured.")
    return EXIT_OK


# ── ``mcp-mode-guard tools`` ────────────────────────────────────────────


def _cmd_tools(args: argparse.Namespace, config: GuardConfig) -> int:
    listing = build_capability_listing(
        config.server_descriptors(),
        config.restrictions_for(args.mode),
    )
    console = _console()

    if not listing:
        console.print("No MCP servers are available for the current mode.")
        return EXIT_OK

    for entry in listing:
        console.print(f"[bold]{escape(entry.name)}[/bold]:")
        if entry.tools:
            for tool in entry.tools:
                console.print(f"  • {escape(tool)}")
        else:
            console.print("  (No tools available for current mode)")
    return EXIT_OK


# ── ``mcp-mode-guard resources`` ────────────────────────────────────────


def _cmd_resources(args: argparse.Namespace, config: GuardConfig) -> int:
    listing = build_resource_listing(
        config.server_descriptors(),
        config.restrictions_for(args.mode),
    )
    console = _console()

    if not listing:
        console.print("No MCP servers are available for the current mode.")
        return EXIT_OK

    for entry in listing:
        plural = "" if entry.resource_count == 1 else "s"
        console.print(
            f"[bold]{escape(entry.name)}[/bold]: {entry.resource_count} resource{plural} available"
        )
    return EXIT_OK


# ── ``mcp-mode-guard check`` ────────────────────────────────────────────


def _cmd_check(args: argparse.Namespace, config: GuardConfig) -> int:
    gate = ModeToolGate(config.server_descriptors(), config.restrictions_for)
    console = _console()
    try:
        verdict = gate.check(args.mode, args.server, args.tool)
    except ToolAccessDeniedError as exc:
        console.print(f"[red]DENIED[/red] {escape(str(exc))}")
        return EXIT_DENIED
    console.print(
        f"[green]ALLOWED[/green] {escape(args.server)}/{escape(args.tool)} "
        f"(mode: {escape(args.mode)}, reason: {verdict.reason.value})"
    )
    return EXIT_OK


# ── CLI parser construction ──────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-mode-guard",
        description=f"{PACKAGE_NAME} v{PACKAGE_VERSION}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML config (default: $MODE_GUARD_CONFIG, then ./config.yaml).",
    )
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL.lower(),
        choices=["debug", "info", "warning", "error", "critical"],
        help="File log level.",
    )

    subparsers = parser.add_subparsers(dest="command")

    sp_servers = subparsers.add_parser("servers", help="Show server verdicts for a mode")
    sp_servers.add_argument("--mode", required=True, help="Mode slug")
    sp_servers.set_defaults(func=_cmd_servers)

    sp_tools = subparsers.add_parser("tools", help="Show the tools a mode can use")
    sp_tools.add_argument("--mode", required=True, help="Mode slug")
    sp_tools.set_defaults(func=_cmd_tools)

    sp_resources = subparsers.add_parser(
        "resources", help="Show the servers a mode can read resources from"
    )
    sp_resources.add_argument("--mode", required=True, help="Mode slug")
    sp_resources.set_defaults(func=_cmd_resources)

    sp_check = subparsers.add_parser("check", help="Check whether a mode may call a tool")
    sp_check.add_argument("--mode", required=True, help="Mode slug")
    sp_check.add_argument("server", help="Server name")
    sp_check.add_argument("tool", help="Tool name")
    sp_check.set_defaults(func=_cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Program entry point: parse arguments and dispatch to subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_CONFIG_ERROR

    setup_logging(args.log_level, quiet=True)

    try:
        config = _load(args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
