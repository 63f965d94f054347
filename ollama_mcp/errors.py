"""Error hierarchy shared by the dispatcher and the MCP front end.

Every failure that reaches a caller is a ``ToolCallError`` carrying a
category, so the front end can surface it as a tool error without having
to know where it came from.
"""

from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categories of tool call failures."""

    INVALID_INPUT = auto()  # Caller-supplied data rejected, backend never contacted
    CONFIGURATION = auto()  # Server configuration or backend client missing
    BACKEND = auto()  # Backend failed, timed out or was cancelled


class ToolCallError(Exception):
    """Base exception for tool call failures with categorization."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        tool_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.category = category
        self.message = message
        self.tool_name = tool_name


class InvalidInputError(ToolCallError, ValueError):
    """Raised when a tool input fails validation."""

    def __init__(self, message: str, tool_name: Optional[str] = None):
        super().__init__(ErrorCategory.INVALID_INPUT, message, tool_name=tool_name)


class ConfigurationUnavailableError(ToolCallError):
    """Raised when configuration or the backend client is not initialized."""

    def __init__(self, message: str, tool_name: Optional[str] = None):
        super().__init__(ErrorCategory.CONFIGURATION, message, tool_name=tool_name)


class BackendError(ToolCallError):
    """Backend call failed, timed out, or was cancelled."""

    def __init__(
        self,
        tool_name: str,
        message: str,
        *,
        timed_out: bool = False,
        cancelled: bool = False,
    ):
        super().__init__(ErrorCategory.BACKEND, message, tool_name=tool_name)
        self.timed_out = timed_out
        self.cancelled = cancelled
