"""Input validation for tool calls.

Pure functions: they raise ``InvalidInputError`` with the reason and have
no other effect. They run before any backend call is attempted.
"""

from typing import Optional

from ..errors import InvalidInputError
from .schemas import ChatInput

# Model identifiers are interpolated into backend requests and must never
# read as a path or a shell token
_PATH_SEQUENCES = ("..", "/", "\\")
_SHELL_CHARACTERS = frozenset("<>|&;`$")


def validate_message(message: Optional[str]) -> None:
    if not message:
        raise InvalidInputError("message cannot be empty")


def validate_chat_input(input: ChatInput) -> None:
    """Validate the message and the optional numeric overrides of a chat call."""
    validate_message(input.message)

    if input.context_size is not None and input.context_size <= 0:
        raise InvalidInputError("context size must be positive")

    if input.temperature is not None and not 0.0 <= input.temperature <= 2.0:
        raise InvalidInputError("temperature must be between 0 and 2.0")

    if input.top_p is not None and not 0.0 <= input.top_p <= 1.0:
        raise InvalidInputError("top_p must be between 0 and 1.0")

    if input.top_k is not None and input.top_k < 0:
        raise InvalidInputError("top_k must be non-negative")


def validate_model_name(model: Optional[str]) -> None:
    """Reject empty model names, path-like names, and shell metacharacters."""
    if not model:
        raise InvalidInputError("model name cannot be empty")

    if any(seq in model for seq in _PATH_SEQUENCES):
        raise InvalidInputError(f"invalid model name: {model}")

    if _SHELL_CHARACTERS.intersection(model):
        raise InvalidInputError(f"model name contains invalid characters: {model}")
