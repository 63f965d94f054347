"""Integration layer between the tool dispatcher and FastMCP."""

import logging
from inspect import Parameter, Signature
from typing import Annotated, Any, Dict, List

import fastmcp.exceptions
from fastmcp import FastMCP
from pydantic import BaseModel, Field

from ..errors import ToolCallError
from ..logging.setup import get_instance_id
from .dispatcher import TOOL_SPECS, ToolDispatcher, ToolSpec

logger = logging.getLogger(__name__)


def create_tool_function(spec: ToolSpec, dispatcher: ToolDispatcher):
    """Create a function with proper signature for FastMCP registration.

    The parameters mirror the fields of the tool's input model, descriptions
    included, so FastMCP derives the same JSON schema the model declares.
    """
    sig_params: List[Parameter] = []
    annotations: Dict[str, Any] = {"return": spec.output_model}

    for name, field in spec.input_model.model_fields.items():
        if field.description:
            annotated_type: Any = Annotated[
                field.annotation, Field(description=field.description)
            ]
        else:
            annotated_type = field.annotation

        default = Parameter.empty if field.is_required() else field.default
        sig_params.append(
            Parameter(
                name=name,
                kind=Parameter.KEYWORD_ONLY,
                default=default,
                annotation=annotated_type,
            )
        )
        annotations[name] = annotated_type

    signature = Signature(sig_params, return_annotation=spec.output_model)

    async def tool_function(**kwargs: Any) -> BaseModel:
        """Dynamic tool function."""
        try:
            bound = signature.bind(**kwargs)
        except TypeError as e:
            raise fastmcp.exceptions.ToolError(f"Invalid arguments: {e}")
        bound.apply_defaults()

        logger.debug(f"[INTEGRATION] Tool {spec.name} called (instance {get_instance_id()})")
        try:
            return await dispatcher.handle(spec.name, dict(bound.arguments))
        except ToolCallError as e:
            logger.warning(
                f"[INTEGRATION] Tool {spec.name} failed ({e.category.name}): {e.message}"
            )
            raise fastmcp.exceptions.ToolError(e.message) from e

    tool_function.__name__ = spec.name.replace("-", "_")
    tool_function.__doc__ = spec.describe(dispatcher.config)
    setattr(tool_function, "__signature__", signature)
    tool_function.__annotations__ = annotations

    return tool_function


def register_all_tools(mcp: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register all tools with the FastMCP server."""
    for spec in TOOL_SPECS.values():
        tool_func = create_tool_function(spec, dispatcher)
        mcp.tool(name=spec.name, description=spec.describe(dispatcher.config))(tool_func)
        logger.debug(f"Registered tool with FastMCP: {spec.name}")
