"""
MCP Mode Guard - per-mode access control for MCP servers and tools.

MCP Mode Guard decides, for a named assistant mode, which connected MCP
servers and which of their tools are visible and invokable, based on each
server's default visibility and the mode's allow/disallow rules.
"""

from mcp_mode_guard.constants import PACKAGE_NAME, PACKAGE_VERSION

__version__ = PACKAGE_VERSION
__app_name__ = PACKAGE_NAME

__all__ = [
    "PACKAGE_NAME",
    "PACKAGE_VERSION",
    "__version__",
    "__app_name__",
]
