"""
Tool Dispatcher

Resolves a requested tool name to its handler and executes it inside a
failure boundary. Whatever happens inside the handler (unknown tool,
malformed arguments, timeout, network error) comes back as an observation
string; no exception ever escapes ``dispatch``.
"""

import asyncio
import logging
import time

from ..memory import MemoryService
from ..models import ToolCall
from .base import ERROR_MARKER, error_observation
from .parameters import ToolParameters
from .registry import ToolRegistry

logger = logging.getLogger("agentloop.tools.dispatcher")

MEMORY_MODULE = "react"
MEMORY_SOURCE_ROLE = "tool"
NO_SUCH_TOOL = "no such tool"


class ToolDispatcher:
    """Executes single tool calls against a registry with error isolation."""

    def __init__(
        self,
        registry: ToolRegistry,
        memory: MemoryService,
        timeout_seconds: float | None = 30.0,
    ):
        """
        Args:
            registry: Registry used to resolve tool names
            memory: Shared memory sink receiving a record of every dispatch
            timeout_seconds: Per-call deadline; None disables the deadline
        """
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.registry = registry
        self.memory = memory
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, tool_call: ToolCall) -> str:
        """
        Execute one tool call.

        Args:
            tool_call: The model's invocation request

        Returns:
            Observation text; failures carry the error marker
        """
        observation = await self._execute(tool_call)
        self.memory.add_to_module(
            MEMORY_MODULE, MEMORY_SOURCE_ROLE, f"{tool_call.name}: {observation}"
        )
        return observation

    async def _execute(self, tool_call: ToolCall) -> str:
        handler = self.registry.get(tool_call.name)
        if handler is None:
            available = ", ".join(self.registry.names()) or "none"
            logger.warning(f"Model requested unknown tool '{tool_call.name}'")
            return error_observation(
                f"{NO_SUCH_TOOL}: '{tool_call.name}'. Available tools: {available}"
            )

        start_time = time.perf_counter()
        try:
            parameters = ToolParameters(tool_call.arguments)
            if self.timeout_seconds is None:
                observation = await handler.execute(parameters, self.memory)
            else:
                observation = await asyncio.wait_for(
                    handler.execute(parameters, self.memory),
                    timeout=self.timeout_seconds,
                )
        except asyncio.TimeoutError:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self.registry.record_execution_stats(
                tool_call.name, elapsed_ms, False, "TimeoutError"
            )
            logger.error(
                f"Tool '{tool_call.name}' timed out after {self.timeout_seconds}s"
            )
            return error_observation(
                f"executing {tool_call.name}: timed out after {self.timeout_seconds}s"
            )
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self.registry.record_execution_stats(
                tool_call.name, elapsed_ms, False, type(e).__name__
            )
            logger.error(f"Error executing tool '{tool_call.name}': {e}")
            return error_observation(f"executing {tool_call.name}: {e}")

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if observation is None:
            observation = ""
        elif not isinstance(observation, str):
            observation = str(observation)

        # Handlers report their own failures through the marker
        reported_failure = observation.startswith(ERROR_MARKER)
        self.registry.record_execution_stats(
            tool_call.name,
            elapsed_ms,
            not reported_failure,
            "ReportedError" if reported_failure else None,
        )
        logger.debug(f"Tool '{tool_call.name}' completed in {elapsed_ms:.1f}ms")
        return observation
