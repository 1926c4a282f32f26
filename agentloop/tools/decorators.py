"""
Tool Decorator System

Implements the @tool decorator that turns a plain Python function into a
``ToolHandler``. The decorator:

1. Extracts the function signature and type information
2. Builds the ToolDefinition advertised to the model
3. Runs sync functions in a worker thread and awaits async ones
4. Renders the return value as observation text

The resulting handler still has to be registered explicitly.
"""

import asyncio
import inspect
import json
import logging
from collections.abc import Callable
from functools import partial
from typing import Any, get_args, get_origin, get_type_hints

from ..exceptions import ToolParameterError
from ..memory import MemoryService
from .base import ToolHandler
from .models import ParameterSchema, ToolDefinition
from .parameters import ToolParameters

logger = logging.getLogger("agentloop.tools")

MEMORY_PARAMETER = "memory"

_TYPE_TAGS: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    tuple: "array",
    dict: "object",
}


class FunctionToolHandler(ToolHandler):
    """ToolHandler backed by a decorated function."""

    def __init__(self, func: Callable[..., Any], definition: ToolDefinition):
        self.func = func
        self.definition = definition
        self.is_async = inspect.iscoroutinefunction(func)
        self.wants_memory = MEMORY_PARAMETER in inspect.signature(func).parameters
        self._types = {p.name: p.type for p in definition.parameters}

    def describe(self) -> ToolDefinition:
        return self.definition

    async def execute(self, parameters: ToolParameters, memory: MemoryService) -> str:
        kwargs = self._bind(parameters)
        if self.wants_memory:
            kwargs[MEMORY_PARAMETER] = memory

        if self.is_async:
            raw_result = await self.func(**kwargs)
        else:
            loop = asyncio.get_running_loop()
            raw_result = await loop.run_in_executor(None, partial(self.func, **kwargs))

        return render_observation(raw_result)

    def _bind(self, parameters: ToolParameters) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        for schema in self.definition.parameters:
            if not parameters.has(schema.name):
                if schema.required:
                    raise ToolParameterError(
                        f"Missing required parameter: {schema.name}",
                        tool_name=self.definition.name,
                    )
                continue
            kwargs[schema.name] = _coerce(
                parameters.get(schema.name), schema.type, schema.name
            )
        return kwargs

    def __call__(self, *args, **kwargs):
        """Call the underlying function directly."""
        return self.func(*args, **kwargs)


def tool(
    name: str | None = None,
    description: str | None = None,
) -> Callable[[Callable[..., Any]], FunctionToolHandler]:
    """
    Decorator to convert a function into a tool handler.

    Args:
        name: Tool name (defaults to function name)
        description: Tool description (defaults to the docstring summary)

    Returns:
        Decorator producing a FunctionToolHandler

    Example:
        @tool("calculator", "Perform arithmetic operations")
        def add(a: float, b: float) -> float:
            return a + b

        registry.register(add)
    """

    def decorator(func: Callable[..., Any]) -> FunctionToolHandler:
        func_name = name or func.__name__
        func_description = description or _docstring_summary(func) or f"Execute {func_name}"

        signature = inspect.signature(func)
        type_hints = get_type_hints(func)

        parameters = []
        for param_name, param in signature.parameters.items():
            if param_name == MEMORY_PARAMETER:
                continue
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            parameters.append(
                ParameterSchema(
                    name=param_name,
                    type=_type_tag(type_hints.get(param_name, str)),
                    description=_extract_param_description(func, param_name),
                    required=param.default is inspect.Parameter.empty,
                )
            )

        definition = ToolDefinition(
            name=func_name, description=func_description, parameters=parameters
        )
        logger.debug(f"Created tool '{func_name}' from {func.__module__}.{func.__qualname__}")
        return FunctionToolHandler(func, definition)

    return decorator


def render_observation(value: Any) -> str:
    """Render a tool return value as observation text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _coerce(value: Any, type_tag: str, param_name: str) -> Any:
    try:
        if type_tag == "integer" and not isinstance(value, int):
            return int(str(value).strip())
        if type_tag == "number" and not isinstance(value, (int, float)):
            return float(str(value).strip())
        if type_tag == "boolean" and not isinstance(value, bool):
            lowered = str(value).strip().lower()
            if lowered not in ("true", "false", "1", "0", "yes", "no"):
                raise ValueError(value)
            return lowered in ("true", "1", "yes")
        if type_tag in ("array", "object") and isinstance(value, str):
            return json.loads(value)
    except (TypeError, ValueError) as e:
        raise ToolParameterError(
            f"Parameter '{param_name}' expects {type_tag}, got {value!r}"
        ) from e
    return value


def _type_tag(type_hint: Any) -> str:
    """Map a type hint to its JSON schema type tag."""
    origin = get_origin(type_hint)
    if origin is not None:
        if origin in _TYPE_TAGS:
            return _TYPE_TAGS[origin]
        # Optional[X] and X | None
        args = [arg for arg in get_args(type_hint) if arg is not type(None)]
        if len(args) == 1:
            return _type_tag(args[0])
        return "string"
    return _TYPE_TAGS.get(type_hint, "string")


def _docstring_summary(func: Callable) -> str:
    if not func.__doc__:
        return ""
    return inspect.cleandoc(func.__doc__).split("\n\n", 1)[0].replace("\n", " ").strip()


def _extract_param_description(func: Callable, param_name: str) -> str:
    """
    Extract a parameter description from a Google-style ``Args:`` section.

    Returns an empty string when the docstring does not describe it.
    """
    if not func.__doc__:
        return ""

    in_args = False
    for line in inspect.cleandoc(func.__doc__).split("\n"):
        stripped = line.strip()
        if stripped in ("Args:", "Arguments:", "Parameters:"):
            in_args = True
            continue
        if not in_args:
            continue
        if stripped.endswith(":") and not line.startswith(" "):
            # Next section (Returns:, Raises:...)
            break
        if stripped.startswith(f"{param_name}:") or stripped.startswith(f"{param_name} ("):
            return stripped.split(":", 1)[1].strip()

    return ""
