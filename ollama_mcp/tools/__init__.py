"""Tool layer: schemas, validation, request translation and dispatch."""

from .dispatcher import TOOL_SPECS, TOOL_TIMEOUTS, ToolDispatcher, ToolSpec

__all__ = ["TOOL_SPECS", "TOOL_TIMEOUTS", "ToolDispatcher", "ToolSpec"]
