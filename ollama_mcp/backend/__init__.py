"""Ollama backend client."""

from .client import BackendResponseError, OllamaClient
from .types import (
    ChatRequest,
    ChatResponse,
    ListModelResponse,
    ListResponse,
    Message,
    ProgressResponse,
    PullRequest,
    ShowResponse,
)

__all__ = [
    "BackendResponseError",
    "OllamaClient",
    "ChatRequest",
    "ChatResponse",
    "ListModelResponse",
    "ListResponse",
    "Message",
    "ProgressResponse",
    "PullRequest",
    "ShowResponse",
]
