"""
Shared test fixtures for ollama-mcp tests.
"""

# Note: config.py skips ./config.yaml when pytest is detected, unless
# OLLAMA_MCP_CONFIG_FILE is set explicitly
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple
from unittest.mock import patch

import httpx
import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from ollama_mcp.backend.client import OllamaClient  # noqa: E402
from ollama_mcp.config import Config, get_config, get_settings  # noqa: E402

BASE_URL = "http://ollama.test:11434"

OLLAMA_ENV_VARS = (
    "OLLAMA_HOST",
    "OLLAMA_CONTEXT_SIZE",
    "OLLAMA_CODE_MODEL",
    "OLLAMA_CHAT_MODEL",
    "OLLAMA_KEEP_ALIVE",
    "OLLAMA_CUSTOM_CLIENT",
    "OLLAMA_MCP_CONFIG_FILE",
    "OLLAMA_MCP_LOG_FILE",
    "LOG_LEVEL",
)


def ndjson(records: List[Dict[str, Any]], status_code: int = 200) -> httpx.Response:
    body = "".join(json.dumps(record) + "\n" for record in records)
    return httpx.Response(
        status_code,
        content=body.encode(),
        headers={"content-type": "application/x-ndjson"},
    )


class FakeOllama:
    """In-process stand-in for the Ollama HTTP API, used as an httpx handler.

    Every request is recorded. Set ``failures[path] = (status, message)`` to
    make an endpoint fail, ``delay`` to make every endpoint slow, or
    ``unreachable`` to refuse connections.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.chat_records: List[Dict[str, Any]] = [
            {
                "model": "gpt-oss:20b",
                "created_at": "2025-01-01T00:00:00.123456789Z",
                "message": {"role": "assistant", "content": "Hello there!"},
                "done": True,
                "done_reason": "stop",
            }
        ]
        self.models: List[Dict[str, Any]] = [
            {
                "name": "qwen3-coder:30b",
                "model": "qwen3-coder:30b",
                "modified_at": "2025-03-04T10:11:12.987654321+01:00",
                "size": 18556688736,
                "digest": "06c1097efce0",
                "details": {"family": "qwen3moe", "parameter_size": "30.5B"},
            },
            {
                "name": "gpt-oss:20b",
                "model": "gpt-oss:20b",
                "modified_at": "2025-02-01T08:00:00.5Z",
                "size": 13780173734,
                "digest": "aa4295ac10c3",
            },
        ]
        self.show_record: Dict[str, Any] = {
            "license": "Apache License 2.0",
            "modelfile": "FROM gpt-oss:20b",
            "parameters": "temperature 1",
            "template": "{{ .Prompt }}",
            "system": "You are a helpful assistant.",
            "modified_at": "2025-02-01T08:00:00.123456789Z",
        }
        self.pull_records: List[Dict[str, Any]] = [
            {"status": "pulling manifest"},
            {"status": "pulling 06c1097efce0", "digest": "06c1097efce0", "total": 100, "completed": 50},
            {"status": "pulling 06c1097efce0", "digest": "06c1097efce0", "total": 100, "completed": 100},
            {"status": "success"},
        ]
        self.failures: Dict[str, Tuple[int, str]] = {}
        self.delay: float = 0.0
        self.unreachable = False

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("All connection attempts failed", request=request)
        if self.delay:
            await asyncio.sleep(self.delay)

        path = request.url.path
        if path in self.failures:
            status, message = self.failures[path]
            return httpx.Response(status, json={"error": message})

        if path == "/api/chat":
            return ndjson(self.chat_records)
        if path == "/api/tags":
            return httpx.Response(200, json={"models": self.models})
        if path == "/api/show":
            return httpx.Response(200, json=self.show_record)
        if path == "/api/pull":
            return ndjson(self.pull_records)
        return httpx.Response(404, json={"error": "404 page not found"})

    def payload(self, index: int = -1) -> Dict[str, Any]:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]


def make_client(handler) -> OllamaClient:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url=BASE_URL
    )
    return OllamaClient(BASE_URL, http_client=http_client)


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def ollama_client(fake_ollama) -> OllamaClient:
    return make_client(fake_ollama)


@pytest.fixture
def config(ollama_client) -> Config:
    """Default configuration bound to the fake backend."""
    return Config(client=ollama_client)


@pytest.fixture
def clean_env():
    """Run with none of the ollama-mcp environment variables set."""
    env = {
        k: v
        for k, v in os.environ.items()
        if k not in OLLAMA_ENV_VARS
        and not k.upper().startswith(("OLLAMA__", "MCP__", "LOGGING__"))
    }
    with patch.dict(os.environ, env, clear=True):
        get_settings.cache_clear()
        get_config.cache_clear()
        yield
    get_settings.cache_clear()
    get_config.cache_clear()
