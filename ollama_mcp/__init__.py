"""ollama-mcp: MCP server exposing a local Ollama instance as tools."""

from .version import __version__

__all__ = ["__version__"]
