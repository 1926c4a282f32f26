"""
Agent Tools System

Core Components:
- ToolHandler: the contract every capability implements
- ToolDefinition: model-facing description of a tool
- ToolParameters: typed accessors over a call's arguments
- ToolRegistry: explicit name -> handler registration
- ToolDispatcher: executes one call with error isolation
- @tool: turns a plain function into a ToolHandler

Usage Example:
    from agentloop.tools import ToolRegistry, tool

    @tool("echo", "Repeat the given text back")
    def echo(text: str) -> str:
        return text

    registry = ToolRegistry([echo])
"""

from .base import ERROR_MARKER, ToolHandler, error_observation
from .decorators import FunctionToolHandler, tool
from .dispatcher import NO_SUCH_TOOL, ToolDispatcher
from .models import ParameterSchema, ToolDefinition
from .parameters import ToolParameters
from .registry import ToolExecutionStats, ToolRegistry

__all__ = [
    "ERROR_MARKER",
    "NO_SUCH_TOOL",
    "ToolHandler",
    "error_observation",
    "FunctionToolHandler",
    "tool",
    "ToolDispatcher",
    "ParameterSchema",
    "ToolDefinition",
    "ToolParameters",
    "ToolExecutionStats",
    "ToolRegistry",
]
