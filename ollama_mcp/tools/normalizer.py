"""Project backend responses onto the tool output schemas."""

import re
from datetime import datetime, timedelta
from typing import List, Optional

from ..backend.types import ChatResponse, ListResponse, ShowResponse
from .schemas import ModelDescriptor, ModelInfoOutput, PullModelOutput

# Fractional seconds of any precision, captured so they can be dropped
_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.\d+")


class ChatCollector:
    """Chat callback that keeps the last non-empty content fragment."""

    def __init__(self) -> None:
        self.response = ""

    def __call__(self, chunk: ChatResponse) -> None:
        if chunk.message.content:
            self.response = chunk.message.content


def format_rfc3339(value: Optional[str]) -> str:
    """Render a backend timestamp as RFC 3339 with seconds precision.

    UTC is written as ``Z``; other offsets are kept. Values that do not
    parse are returned unchanged.
    """
    if not value:
        return ""

    text = _FRACTION.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return value

    offset = parsed.utcoffset()
    if offset is None or offset == timedelta(0):
        return parsed.replace(tzinfo=None).isoformat(timespec="seconds") + "Z"
    return parsed.isoformat(timespec="seconds")


def normalize_models(response: ListResponse) -> List[ModelDescriptor]:
    return [
        ModelDescriptor(
            name=model.name,
            size=model.size,
            modified_at=format_rfc3339(model.modified_at),
            digest=model.digest,
        )
        for model in response.models
    ]


def normalize_model_info(name: str, response: ShowResponse) -> ModelInfoOutput:
    return ModelInfoOutput(
        name=name,
        license=response.license,
        modelfile=response.modelfile,
        parameters=response.parameters,
        template=response.template,
        system=response.system,
        modified_at=format_rfc3339(response.modified_at),
    )


def pull_success(name: str) -> PullModelOutput:
    return PullModelOutput(
        status="success", message=f"Successfully pulled model {name}"
    )
