"""Translate validated tool inputs into backend chat requests."""

from typing import Any, Dict, List, Optional

from ..backend.types import ChatRequest, Message
from ..config import Config
from .schemas import ChatInput, CodeInput
from .validators import validate_model_name

CHAT_FAMILY = "chat"
CODE_FAMILY = "code"

DEFAULT_CODE_SYSTEM_PROMPT = (
    "You are a helpful coding assistant. Provide clear, concise, "
    "and well-commented code solutions."
)


def resolve_tool_family(hint: Optional[str]) -> str:
    """Map a tool-name hint onto a model family.

    Anything other than ``"code"`` (case-insensitive) is the chat family,
    including ``None`` and the empty string.
    """
    if (hint or "").lower() == CODE_FAMILY:
        return CODE_FAMILY
    return CHAT_FAMILY


def resolve_model(input: ChatInput, config: Config) -> str:
    """Pick the explicit model when given, else the family default, and validate it."""
    model = input.model or config.get_model(resolve_tool_family(input.tool_name))
    validate_model_name(model)
    return model


def build_messages(message: str, system_prompt: Optional[str] = None) -> List[Message]:
    messages = []
    if system_prompt:
        messages.append(Message(role="system", content=system_prompt))
    messages.append(Message(role="user", content=message))
    return messages


def build_options(input: ChatInput, config: Config) -> Dict[str, Any]:
    """Merge backend options: config defaults, typed overrides, then free-form options."""
    options: Dict[str, Any] = {"num_ctx": config.context_size}

    if input.context_size is not None:
        options["num_ctx"] = input.context_size
    if input.temperature is not None:
        options["temperature"] = input.temperature
    if input.top_p is not None:
        options["top_p"] = input.top_p
    if input.top_k is not None:
        options["top_k"] = input.top_k

    # Caller-supplied keys win on collision
    if input.options:
        options.update(input.options)

    return options


def build_chat_request(input: ChatInput, config: Config) -> ChatRequest:
    return ChatRequest(
        model=resolve_model(input, config),
        messages=build_messages(input.message, input.system_prompt),
        stream=False,
        options=build_options(input, config),
        keep_alive=input.keep_alive or config.keep_alive,
    )


def code_to_chat_input(input: CodeInput) -> ChatInput:
    """Express a code call as a chat call pinned to the code family.

    The model is never taken from the caller, so the code tool always runs
    on the configured code model.
    """
    return ChatInput(
        message=input.message,
        model=None,
        context_size=input.context_size,
        system_prompt=input.system_prompt or DEFAULT_CODE_SYSTEM_PROMPT,
        options=input.options,
        tool_name=CODE_FAMILY,
        keep_alive=input.keep_alive,
    )
