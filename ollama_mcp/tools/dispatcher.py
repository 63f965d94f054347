"""Tool dispatcher: one entry point for every tool call.

Each call runs validate -> build -> backend -> normalize and either returns
the tool's output model or raises a ``ToolCallError``. Nothing is retried.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..backend.client import BackendResponseError, OllamaClient
from ..backend.types import ProgressResponse, PullRequest
from ..config import Config
from ..errors import (
    BackendError,
    ConfigurationUnavailableError,
    InvalidInputError,
    ToolCallError,
)
from .normalizer import (
    ChatCollector,
    normalize_model_info,
    normalize_models,
    pull_success,
)
from .request_builder import build_chat_request, code_to_chat_input
from .schemas import (
    ChatInput,
    ChatOutput,
    CodeInput,
    CodeOutput,
    ListModelsInput,
    ListModelsOutput,
    ModelInfoInput,
    ModelInfoOutput,
    PullModelInput,
    PullModelOutput,
)
from .validators import validate_chat_input, validate_model_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Seconds; None means the call is bounded only by the caller's cancellation
TOOL_TIMEOUTS: Dict[str, Optional[float]] = {
    "chat": 30.0,
    "code": 30.0,
    "list-models": 10.0,
    "model-info": 10.0,
    "pull-model": None,
}


@dataclass(frozen=True)
class ToolSpec:
    """Static description of a tool: its schemas, handler and MCP description."""

    name: str
    method: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    description: str

    def describe(self, config: Optional[Config]) -> str:
        if config is None:
            return self.description.format(code_model="code model", chat_model="chat model")
        return self.description.format(
            code_model=config.code_model, chat_model=config.chat_model
        )


TOOL_SPECS: Dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec("code", "code", CodeInput, CodeOutput, "code with {code_model}"),
        ToolSpec("chat", "chat", ChatInput, ChatOutput, "chat with {chat_model}"),
        ToolSpec(
            "list-models",
            "list_models",
            ListModelsInput,
            ListModelsOutput,
            "list available Ollama models",
        ),
        ToolSpec(
            "model-info",
            "model_info",
            ModelInfoInput,
            ModelInfoOutput,
            "get information about a specific Ollama model",
        ),
        ToolSpec(
            "pull-model",
            "pull_model",
            PullModelInput,
            PullModelOutput,
            "pull a model from the Ollama library",
        ),
    )
}


def _describe_error(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ToolDispatcher:
    """Stateless, reentrant dispatcher bound to one configuration snapshot.

    The configuration is injected; the dispatcher never looks up process-wide
    state. ``timeouts`` overrides entries of ``TOOL_TIMEOUTS``.
    """

    def __init__(
        self,
        config: Optional[Config],
        timeouts: Optional[Mapping[str, Optional[float]]] = None,
    ):
        self.config = config
        self.timeouts: Dict[str, Optional[float]] = dict(TOOL_TIMEOUTS)
        if timeouts:
            self.timeouts.update(timeouts)

    async def handle(self, tool_name: str, input: Any) -> BaseModel:
        """Run a tool by name.

        ``input`` is either the tool's input model or a mapping decoded from
        the wire.

        Raises:
            InvalidInputError: unknown tool or rejected input
            ConfigurationUnavailableError: no configuration or backend client
            BackendError: the backend failed or the deadline expired
        """
        spec = TOOL_SPECS.get(tool_name)
        if spec is None:
            raise InvalidInputError(f"unknown tool: {tool_name}", tool_name=tool_name)

        handler = getattr(self, spec.method)
        try:
            return await handler(self._coerce(spec, input))
        except ToolCallError as e:
            if e.tool_name is None:
                e.tool_name = tool_name
            raise

    def _coerce(self, spec: ToolSpec, input: Any) -> BaseModel:
        if isinstance(input, spec.input_model):
            return input
        if isinstance(input, BaseModel):
            input = input.model_dump()
        if input is None:
            input = {}
        try:
            return spec.input_model.model_validate(input)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidInputError(f"invalid input: {details}", tool_name=spec.name) from e

    def _client(self, tool_name: str) -> OllamaClient:
        if self.config is None:
            raise ConfigurationUnavailableError(
                "server configuration not found", tool_name=tool_name
            )
        if self.config.client is None:
            raise ConfigurationUnavailableError(
                "ollama client not initialized", tool_name=tool_name
            )
        return self.config.client

    async def _call_backend(
        self,
        tool_name: str,
        operation_id: str,
        call: Awaitable[T],
        failure: str,
    ) -> T:
        """Await a backend call under the tool's deadline and wrap its failures."""
        timeout = self.timeouts.get(tool_name)
        start = time.monotonic()
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(
                f"[{operation_id}] {tool_name} timed out after {timeout}s"
            )
            raise BackendError(
                tool_name,
                f"{failure}: timed out after {timeout} seconds",
                timed_out=True,
                cancelled=True,
            ) from None
        except asyncio.CancelledError:
            logger.warning(
                f"[{operation_id}] {tool_name} cancelled after "
                f"{time.monotonic() - start:.2f}s"
            )
            raise
        except (httpx.HTTPError, BackendResponseError) as e:
            logger.error(f"[{operation_id}] {tool_name} backend call failed: {e!r}")
            raise BackendError(tool_name, f"{failure}: {_describe_error(e)}") from e

    @staticmethod
    def _operation_id(tool_name: str) -> str:
        return f"{tool_name}_{uuid.uuid4().hex[:8]}"

    async def _run_chat(self, tool_name: str, input: ChatInput) -> str:
        validate_chat_input(input)
        client = self._client(tool_name)
        request = build_chat_request(input, self.config)

        operation_id = self._operation_id(tool_name)
        logger.info(f"[{operation_id}] Starting {tool_name} with model {request.model}")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"[{operation_id}] options={request.options} keep_alive={request.keep_alive}"
            )

        collector = ChatCollector()
        start = time.monotonic()
        await self._call_backend(
            tool_name,
            operation_id,
            client.chat(request, collector),
            "failed to chat with Ollama",
        )
        logger.info(
            f"[{operation_id}] Completed {tool_name} in {time.monotonic() - start:.2f}s "
            f"({len(collector.response)} chars)"
        )
        return collector.response

    async def chat(self, input: ChatInput) -> ChatOutput:
        return ChatOutput(response=await self._run_chat("chat", input))

    async def code(self, input: CodeInput) -> CodeOutput:
        return CodeOutput(response=await self._run_chat("code", code_to_chat_input(input)))

    async def list_models(self, input: Optional[ListModelsInput] = None) -> ListModelsOutput:
        tool_name = "list-models"
        client = self._client(tool_name)

        operation_id = self._operation_id(tool_name)
        logger.info(f"[{operation_id}] Starting {tool_name}")
        response = await self._call_backend(
            tool_name, operation_id, client.list(), "failed to list models"
        )
        models = normalize_models(response)
        logger.info(f"[{operation_id}] Completed {tool_name}: {len(models)} models")
        return ListModelsOutput(models=models)

    async def model_info(self, input: ModelInfoInput) -> ModelInfoOutput:
        tool_name = "model-info"
        validate_model_name(input.name)
        client = self._client(tool_name)

        operation_id = self._operation_id(tool_name)
        logger.info(f"[{operation_id}] Starting {tool_name} for {input.name}")
        response = await self._call_backend(
            tool_name, operation_id, client.show(input.name), "failed to get model info"
        )
        return normalize_model_info(input.name, response)

    async def pull_model(self, input: PullModelInput) -> PullModelOutput:
        tool_name = "pull-model"
        validate_model_name(input.name)
        client = self._client(tool_name)

        operation_id = self._operation_id(tool_name)
        logger.info(f"[{operation_id}] Starting {tool_name} for {input.name}")

        def on_progress(progress: ProgressResponse) -> None:
            if input.no_progress:
                return
            if progress.total:
                logger.debug(
                    f"[{operation_id}] {progress.status} "
                    f"{progress.completed}/{progress.total}"
                )
            elif progress.status:
                logger.debug(f"[{operation_id}] {progress.status}")

        await self._call_backend(
            tool_name,
            operation_id,
            client.pull(PullRequest(model=input.name, insecure=input.insecure), on_progress),
            f"failed to pull model {input.name}",
        )
        logger.info(f"[{operation_id}] Completed {tool_name} for {input.name}")
        return pull_success(input.name)
