#!/usr/bin/env python3
"""ollama-mcp server: Ollama chat, code and model management tools over MCP."""

import errno
import logging
import signal
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastmcp import FastMCP

from .config import Config, get_config, get_settings
from .errors import ConfigurationUnavailableError
from .logging.setup import setup_logging, shutdown_logging
from .tools.dispatcher import ToolDispatcher
from .tools.integration import register_all_tools
from .version import short_version, version_string

logger = logging.getLogger(__name__)

HELP_TEXT = """ollama-mcp

Usage: ollama-mcp [options]

A Model Context Protocol server exposing a local Ollama instance as tools:
code, chat, list-models, model-info and pull-model.

Options:
  -h, --help     Show this help message and exit
  -V, --version  Show version and exit

Environment:
  OLLAMA_HOST           Ollama endpoint (default 127.0.0.1:11434)
  OLLAMA_CONTEXT_SIZE   Default context size in tokens (default 32000)
  OLLAMA_CODE_MODEL     Model used by the code tool
  OLLAMA_CHAT_MODEL     Model used by the chat tool
  OLLAMA_KEEP_ALIVE     How long Ollama keeps a model loaded (default 1m)
  OLLAMA_CUSTOM_CLIENT  Use the long-running HTTP client profile
  LOG_LEVEL             Logging level (default INFO)"""


def create_server(config: Optional[Config] = None, name: Optional[str] = None) -> FastMCP:
    """Build a FastMCP server with all tools registered against ``config``.

    When no configuration is given the process-wide one is resolved from
    settings. The backend client is closed when the server shuts down.
    """
    if config is None:
        config = get_config()
    if name is None:
        name = get_settings().mcp.name

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            if config.client is not None:
                await config.client.aclose()
                logger.debug("Closed Ollama client")

    mcp = FastMCP(name, version=short_version(), lifespan=lifespan)
    dispatcher = ToolDispatcher(config)
    register_all_tools(mcp, dispatcher)

    logger.debug(
        f"{name} initialized: code={config.code_model}, chat={config.chat_model}"
    )
    return mcp


def main():
    """Main entry point."""
    # Ignore SIGPIPE to prevent crashes on broken pipes (Unix only)
    if sys.platform != "win32":
        signal.signal(signal.SIGPIPE, signal.SIG_IGN)

    if "--help" in sys.argv or "-h" in sys.argv:
        print(HELP_TEXT)
        sys.exit(0)

    if "--version" in sys.argv or "-V" in sys.argv:
        print(version_string())
        sys.exit(0)

    setup_logging()

    try:
        config = get_config()
    except ConfigurationUnavailableError as e:
        logger.error(f"Invalid configuration: {e.message}")
        shutdown_logging()
        sys.exit(1)

    mcp = create_server(config)

    # Clients spawn one server process per session: run once and exit on disconnect
    try:
        logger.info(f"Starting ollama-mcp {short_version()} (stdio transport)...")
        mcp.run()
        logger.info("MCP server exited normally")
    except KeyboardInterrupt:
        logger.info("MCP server interrupted by user")
    except (EOFError, BrokenPipeError, OSError) as e:
        # These are normal disconnection scenarios for stdio
        if isinstance(e, OSError) and e.errno not in (None, errno.EPIPE):
            logger.error(f"MCP server failed: {e}")
            raise
        logger.info("Client disconnected")
    finally:
        shutdown_logging()


if __name__ == "__main__":
    main()
