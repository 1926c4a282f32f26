"""
agentloop - ReAct tool-calling agent

Alternates between a language model and pluggable tools until the model
produces a final answer, with loop detection, iteration limits and an
observable execution trace.
"""

from .config import AgentConfig, AppConfig, ConfigLoader
from .container import AgentContainer, ContainerFactory, configure_logging
from .exceptions import (
    AgentException,
    ConfigurationError,
    ModelClientError,
    ToolExecutionException,
    ToolParameterError,
    ToolRegistrationError,
)
from .memory import MemoryService
from .models import (
    AssistantMessage,
    Message,
    ModelResponse,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from .react import AgentExecutionResult, ReActEngine, ReActStep

__version__ = "0.1.0"

__all__ = [
    "AgentConfig",
    "AppConfig",
    "ConfigLoader",
    "AgentContainer",
    "ContainerFactory",
    "configure_logging",
    "AgentException",
    "ConfigurationError",
    "ModelClientError",
    "ToolExecutionException",
    "ToolParameterError",
    "ToolRegistrationError",
    "MemoryService",
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
    "ToolCall",
    "ModelResponse",
    "ReActEngine",
    "AgentExecutionResult",
    "ReActStep",
]
