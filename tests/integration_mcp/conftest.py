"""
Configuration for MCP integration tests.
These tests drive the real FastMCP server in memory against a faked Ollama backend.
"""

import pytest

from ollama_mcp.server import create_server


@pytest.fixture
def anyio_backend():
    # asyncio only: trio is not a dependency
    return "asyncio"


@pytest.fixture
def mcp_server(config):
    """Create MCP server instance bound to the fake backend."""
    return create_server(config, name="ollama-mcp")
