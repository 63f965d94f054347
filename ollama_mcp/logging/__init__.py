"""Logging setup for the ollama-mcp server."""

from .setup import get_instance_id, setup_logging, shutdown_logging

__all__ = ["get_instance_id", "setup_logging", "shutdown_logging"]
