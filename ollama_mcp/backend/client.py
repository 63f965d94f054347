"""Async client for the Ollama HTTP API."""

import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .http import create_http_client
from .types import (
    ChatRequest,
    ChatResponse,
    ListResponse,
    ProgressResponse,
    PullRequest,
    ShowResponse,
)

logger = logging.getLogger(__name__)

ChatCallback = Callable[[ChatResponse], None]
ProgressCallback = Callable[[ProgressResponse], None]

M = TypeVar("M", bound=BaseModel)


class BackendResponseError(Exception):
    """The backend answered with an error status or an in-stream error."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (status {self.status_code})"
        return self.message


def _error_message(body: bytes, fallback: str) -> str:
    """Extract the backend's ``{"error": ...}`` message from a response body."""
    try:
        data = json.loads(body)
    except ValueError:
        text = body.decode("utf-8", errors="replace").strip()
        return text or fallback
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return fallback


def _decode(model: Type[M], data: Any) -> M:
    """Validate a decoded record; JSON of the wrong shape is a backend error."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise BackendResponseError(0, f"malformed response: {e}") from e


class OllamaClient:
    """Thin async wrapper around the four Ollama endpoints the tools need.

    The client holds no per-call state and can be shared by concurrent tool
    calls. The underlying ``httpx.AsyncClient`` is created on first use so
    that building a configuration never opens sockets.
    """

    def __init__(
        self,
        base_url: str,
        *,
        custom_profile: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url
        self.custom_profile = custom_profile
        self._http = http_client

    def __repr__(self) -> str:
        return f"OllamaClient(base_url={self.base_url!r}, custom_profile={self.custom_profile})"

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = create_http_client(
                self.base_url, custom_profile=self.custom_profile
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _stream(
        self, method: str, path: str, payload: Dict[str, Any]
    ) -> AsyncIterator[Dict[str, Any]]:
        """Yield each decoded NDJSON record of a (possibly streamed) response."""
        async with self.http.stream(method, path, json=payload) as response:
            if response.status_code >= 400:
                body = await response.aread()
                raise BackendResponseError(
                    response.status_code,
                    _error_message(body, response.reason_phrase or "request failed"),
                )

            async for line in response.aiter_lines():
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except ValueError as e:
                    raise BackendResponseError(
                        response.status_code, f"malformed response line: {e}"
                    ) from e
                if isinstance(record, dict) and record.get("error"):
                    raise BackendResponseError(0, str(record["error"]))
                yield record

    async def _request_json(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> Any:
        response = await self.http.request(method, path, json=payload)
        if response.status_code >= 400:
            raise BackendResponseError(
                response.status_code,
                _error_message(response.content, response.reason_phrase or "request failed"),
            )
        try:
            return response.json()
        except ValueError as e:
            raise BackendResponseError(
                response.status_code, f"malformed response body: {e}"
            ) from e

    async def chat(self, request: ChatRequest, on_chunk: ChatCallback) -> None:
        """POST /api/chat, handing every response record to ``on_chunk``."""
        payload = request.model_dump(exclude_none=True)
        logger.debug(f"POST /api/chat model={request.model} stream={request.stream}")
        async for record in self._stream("POST", "/api/chat", payload):
            on_chunk(_decode(ChatResponse, record))

    async def list(self) -> ListResponse:
        """GET /api/tags."""
        data = await self._request_json("GET", "/api/tags")
        return _decode(ListResponse, data)

    async def show(self, name: str) -> ShowResponse:
        """POST /api/show."""
        data = await self._request_json("POST", "/api/show", {"model": name})
        return _decode(ShowResponse, data)

    async def pull(self, request: PullRequest, on_progress: ProgressCallback) -> None:
        """POST /api/pull, handing every progress record to ``on_progress``."""
        payload = request.model_dump()
        logger.debug(f"POST /api/pull model={request.model}")
        async for record in self._stream("POST", "/api/pull", payload):
            on_progress(_decode(ProgressResponse, record))
