"""Custom exception classes for MCP Mode Guard."""

from typing import Optional


class ModeGuardError(Exception):
    """Base class for all custom exceptions in MCP Mode Guard."""

    pass


class ConfigurationError(ModeGuardError):
    """Raised when loading or validating the configuration file fails."""

    pass


class ToolAccessDeniedError(ModeGuardError):
    """
    Raised by the pre-execution gate when the active mode may not use
    the requested server or tool.
    """

    def __init__(
        self,
        mode: Optional[str],
        server_name: str,
        tool_name: str,
        reason: Optional[str] = None,
    ):
        self.mode = mode
        self.server_name = server_name
        self.tool_name = tool_name
        self.reason = reason

        full_msg = f"Access denied for tool '{tool_name}' on server '{server_name}'"
        if mode:
            full_msg += f" (mode: {mode})"
        if reason:
            full_msg += f": {reason}"
        super().__init__(full_msg)


class ResourceAccessDeniedError(ModeGuardError):
    """
    Raised by the pre-execution gate when the active mode may not read
    resources from the requested server.
    """

    def __init__(
        self,
        mode: Optional[str],
        server_name: str,
        uri: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.mode = mode
        self.server_name = server_name
        self.uri = uri
        self.reason = reason

        full_msg = f"Access denied for resources on server '{server_name}'"
        if uri:
            full_msg = f"Access denied for resource '{uri}' on server '{server_name}'"
        if mode:
            full_msg += f" (mode: {mode})"
        if reason:
            full_msg += f": {reason}"
        super().__init__(full_msg)
