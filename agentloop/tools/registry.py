"""
Tool Registry System

Maps tool names to their handlers. Handlers are registered explicitly at
startup; the resulting catalog is advertised to the model client and used
by the dispatcher to resolve calls.

Key Features:
- Thread-safe registration and lookup, shareable across chat sessions
- Conflict detection for duplicate tool names
- Execution statistics per tool
"""

import logging
import threading
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from ..exceptions import ToolRegistrationError
from .base import ToolHandler
from .models import ToolDefinition

logger = logging.getLogger("agentloop.tools.registry")


class ToolExecutionStats:
    """Statistics tracking for tool execution performance"""

    def __init__(self):
        self.call_count = 0
        self.total_execution_time_ms = 0.0
        self.success_count = 0
        self.failure_count = 0
        self.average_execution_time_ms = 0.0
        self.last_execution_time_ms: float | None = None
        self.error_types: dict[str, int] = defaultdict(int)

    def record_execution(
        self, execution_time_ms: float, success: bool, error_type: str | None = None
    ) -> None:
        """Record a tool execution for statistics"""
        self.call_count += 1
        self.total_execution_time_ms += execution_time_ms

        if success:
            self.success_count += 1
        else:
            self.failure_count += 1
            if error_type:
                self.error_types[error_type] += 1

        self.average_execution_time_ms = self.total_execution_time_ms / self.call_count
        self.last_execution_time_ms = execution_time_ms

    @property
    def success_rate(self) -> float:
        """Success rate as percentage"""
        if self.call_count == 0:
            return 0.0
        return (self.success_count / self.call_count) * 100.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "call_count": self.call_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "success_rate": self.success_rate,
            "average_execution_time_ms": self.average_execution_time_ms,
            "total_execution_time_ms": self.total_execution_time_ms,
            "error_types": dict(self.error_types),
        }


class ToolRegistry:
    """
    Registry of tool handlers keyed by tool name.

    Instances are independent; build one at startup, register every
    capability, then hand it to both the model client and the dispatcher.
    """

    def __init__(self, handlers: Iterable[ToolHandler] | None = None):
        self._handlers: dict[str, ToolHandler] = {}
        self._definitions: dict[str, ToolDefinition] = {}
        self._execution_stats: dict[str, ToolExecutionStats] = {}
        self._registry_lock = threading.RLock()

        if handlers:
            self.register_all(handlers)

    def register(self, handler: ToolHandler) -> None:
        """
        Register a handler under the name its definition declares.

        Raises:
            ToolRegistrationError: If a different handler already owns the name
        """
        definition = handler.describe()
        tool_name = definition.name

        with self._registry_lock:
            existing = self._handlers.get(tool_name)
            if existing is not None:
                if existing is handler:
                    logger.warning(f"Tool '{tool_name}' is already registered")
                    return
                raise ToolRegistrationError(
                    f"Tool '{tool_name}' already registered by {type(existing).__name__}, "
                    f"cannot register {type(handler).__name__}",
                    tool_name=tool_name,
                )

            self._handlers[tool_name] = handler
            self._definitions[tool_name] = definition
            self._execution_stats.setdefault(tool_name, ToolExecutionStats())

        logger.debug(f"Registered tool '{tool_name}' ({type(handler).__name__})")

    def register_all(self, handlers: Iterable[ToolHandler]) -> None:
        for handler in handlers:
            self.register(handler)

    def unregister(self, tool_name: str) -> bool:
        """Remove a tool. Returns True if it was registered."""
        with self._registry_lock:
            removed = self._handlers.pop(tool_name, None)
            self._definitions.pop(tool_name, None)
            self._execution_stats.pop(tool_name, None)
        if removed is not None:
            logger.debug(f"Unregistered tool '{tool_name}'")
        return removed is not None

    def get(self, tool_name: str) -> ToolHandler | None:
        with self._registry_lock:
            return self._handlers.get(tool_name)

    def has(self, tool_name: str) -> bool:
        with self._registry_lock:
            return tool_name in self._handlers

    def names(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._handlers)

    def definitions(self) -> list[ToolDefinition]:
        """Model-facing catalog, sorted by name for a stable ordering."""
        with self._registry_lock:
            return [self._definitions[name] for name in sorted(self._definitions)]

    def record_execution_stats(
        self,
        tool_name: str,
        execution_time_ms: float,
        success: bool,
        error_type: str | None = None,
    ) -> None:
        with self._registry_lock:
            stats = self._execution_stats.setdefault(tool_name, ToolExecutionStats())
            stats.record_execution(execution_time_ms, success, error_type)

    def get_execution_stats(
        self, tool_name: str | None = None
    ) -> dict[str, Any]:
        """
        Get execution statistics for one tool or for all tools.

        Args:
            tool_name: Specific tool, or None for every tool

        Returns:
            Statistics dictionary (empty if the tool is unknown)
        """
        with self._registry_lock:
            if tool_name is not None:
                stats = self._execution_stats.get(tool_name)
                return stats.to_dict() if stats else {}
            return {
                name: stats.to_dict() for name, stats in self._execution_stats.items()
            }

    def clear(self) -> None:
        with self._registry_lock:
            self._handlers.clear()
            self._definitions.clear()
            self._execution_stats.clear()
        logger.info("Cleared tool registry")

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._handlers)

    def __contains__(self, tool_name: object) -> bool:
        return isinstance(tool_name, str) and self.has(tool_name)
