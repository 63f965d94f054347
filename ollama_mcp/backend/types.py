"""Request and response shapes of the Ollama HTTP API.

Only the fields the tools consume are modelled; anything else the backend
sends is ignored.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _BackendModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Message(_BackendModel):
    role: str
    content: str = ""


class ChatRequest(_BackendModel):
    model: str
    messages: List[Message]
    stream: bool = False
    options: Dict[str, Any] = Field(default_factory=dict)
    keep_alive: Optional[str] = None


class ChatResponse(_BackendModel):
    model: str = ""
    created_at: Optional[str] = None
    message: Message = Field(default_factory=lambda: Message(role="assistant"))
    done: bool = False
    done_reason: Optional[str] = None


class ModelDetails(_BackendModel):
    format: str = ""
    family: str = ""
    parameter_size: str = ""
    quantization_level: str = ""


class ListModelResponse(_BackendModel):
    name: str = ""
    model: str = ""
    # Timestamps stay strings: the backend emits nanosecond fractions
    modified_at: Optional[str] = None
    size: int = 0
    digest: str = ""
    details: ModelDetails = Field(default_factory=ModelDetails)


class ListResponse(_BackendModel):
    models: List[ListModelResponse] = Field(default_factory=list)


class ShowResponse(_BackendModel):
    license: str = ""
    modelfile: str = ""
    parameters: str = ""
    template: str = ""
    system: str = ""
    modified_at: Optional[str] = None
    details: ModelDetails = Field(default_factory=ModelDetails)


class PullRequest(_BackendModel):
    model: str
    insecure: bool = False
    stream: bool = True


class ProgressResponse(_BackendModel):
    status: str = ""
    digest: str = ""
    total: int = 0
    completed: int = 0
