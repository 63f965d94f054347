"""Logging system setup with a non-blocking queue handler for the log file."""

import atexit
import logging
import logging.handlers
import queue
import sys
import uuid
from pathlib import Path
from typing import Optional

from ..config import Settings, get_settings

APP_LOGGER = "ollama_mcp"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_instance_id: Optional[str] = None


def generate_instance_id() -> str:
    """Generate semantic instance ID based on runtime context."""
    project = Path.cwd().name  # Project name from current directory
    is_container = Path("/.dockerenv").exists()  # Docker container detection
    context = "container" if is_container else "local"
    session = str(uuid.uuid4())[:8]  # Unique session identifier

    return f"{project}_{context}_{session}"


def get_instance_id() -> str:
    """Return this process's instance ID, generating it on first use."""
    global _instance_id
    if _instance_id is None:
        _instance_id = generate_instance_id()
    return _instance_id


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure the ``ollama_mcp`` logger.

    Records go to stderr (stdout carries JSON-RPC) and, when a log file is
    configured, to that file through a queue so tool calls never block on
    disk writes.
    """
    if settings is None:
        settings = get_settings()

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(settings.logging.level)
    app_logger.propagate = False

    shutdown_logging()
    if app_logger.hasHandlers():
        app_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    app_logger.addHandler(stderr_handler)

    instance_id = get_instance_id()

    if settings.logging.file:
        try:
            log_path = Path(settings.logging.file).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            file_handler.setLevel(settings.logging.level)

            log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)
            queue_handler = logging.handlers.QueueHandler(log_queue)
            queue_listener = logging.handlers.QueueListener(
                log_queue, file_handler, respect_handler_level=True
            )
            queue_listener.start()

            # Store listener for cleanup
            app_logger._queue_listener = queue_listener  # type: ignore[attr-defined]
            atexit.unregister(shutdown_logging)
            atexit.register(shutdown_logging)

            app_logger.addHandler(queue_handler)
        except OSError as e:
            # Don't block server startup if the log file is unusable
            app_logger.warning(f"Could not open log file {settings.logging.file}: {e}")

    app_logger.debug(
        f"Logging initialized for instance {instance_id} at level {settings.logging.level}"
    )
    return app_logger


def shutdown_logging() -> None:
    """Stop the queue listener if it exists."""
    app_logger = logging.getLogger(APP_LOGGER)
    listener = getattr(app_logger, "_queue_listener", None)
    if listener is not None:
        listener.stop()
        delattr(app_logger, "_queue_listener")
        for handler in list(app_logger.handlers):
            if isinstance(handler, logging.handlers.QueueHandler):
                app_logger.removeHandler(handler)
        for handler in listener.handlers:
            handler.close()
