"""Input and output schemas of the five tools.

Field descriptions end up in the JSON schema MCP clients see. Range checks
live in ``validators``.
"""

from typing import Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
)

# Free-form backend options: known scalar kinds only, keys are passed through
OptionValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class _ToolModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ChatInput(_ToolModel):
    message: str = Field(description="the message to send to the model")
    model: Optional[str] = Field(
        None, description="the Ollama model to use for chat (optional)"
    )
    context_size: Optional[int] = Field(
        None, description="maximum context size in tokens (optional)"
    )
    temperature: Optional[float] = Field(
        None, description="controls randomness (0.0 to 2.0, optional)"
    )
    top_p: Optional[float] = Field(
        None,
        description="controls diversity via nucleus sampling (0.0 to 1.0, optional)",
    )
    top_k: Optional[int] = Field(
        None, description="controls diversity via top-k sampling (optional)"
    )
    system_prompt: Optional[str] = Field(
        None, description="system prompt to use (optional)"
    )
    options: Optional[Dict[str, OptionValue]] = Field(
        None, description="additional model options (optional)"
    )
    tool_name: Optional[str] = Field(
        None, description="name of the tool being used (optional)"
    )
    keep_alive: Optional[str] = Field(
        None, description="duration to keep the model loaded in memory (optional)"
    )


class CodeInput(_ToolModel):
    message: str = Field(description="the message to send to the model")
    context_size: Optional[int] = Field(
        None, description="maximum context size in tokens (optional)"
    )
    system_prompt: Optional[str] = Field(
        None, description="system prompt to use (optional)"
    )
    options: Optional[Dict[str, OptionValue]] = Field(
        None, description="additional model options (optional)"
    )
    keep_alive: Optional[str] = Field(
        None, description="duration to keep the model loaded in memory (optional)"
    )


class ChatOutput(BaseModel):
    response: str = Field(description="the response from the model")


class CodeOutput(BaseModel):
    response: str = Field(description="the response from the model")


class ListModelsInput(_ToolModel):
    pass


class ModelDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="name of the model")
    size: int = Field(description="size of the model in bytes")
    modified_at: str = Field(description="timestamp when the model was last modified")
    digest: str = Field(description="digest of the model")


class ListModelsOutput(BaseModel):
    models: List[ModelDescriptor] = Field(description="list of available models")


class ModelInfoInput(_ToolModel):
    name: str = Field(description="name of the model to get information about")


class ModelInfoOutput(BaseModel):
    name: str = Field(description="name of the model")
    license: str = Field(description="license of the model")
    modelfile: str = Field(description="modelfile content")
    parameters: str = Field(description="model parameters")
    template: str = Field(description="model template")
    system: str = Field(description="system prompt")
    modified_at: str = Field(description="timestamp when the model was last modified")


class PullModelInput(_ToolModel):
    name: str = Field(description="name of the model to pull")
    insecure: bool = Field(
        False, description="allow insecure connections to the Ollama library"
    )
    no_progress: bool = Field(False, description="do not log pull progress")


class PullModelOutput(BaseModel):
    status: str = Field(description="status of the pull operation")
    message: str = Field(description="message from the pull operation")
