"""
Tool Handler Contract

Every capability the agent can invoke implements ``ToolHandler``. New tools
are added by implementing this contract and registering the handler, never
by modifying the ReAct engine.
"""

from abc import ABC, abstractmethod

from ..memory import MemoryService
from .models import ToolDefinition
from .parameters import ToolParameters

ERROR_MARKER = "[ERROR]"


def error_observation(message: str) -> str:
    """Format a failure as an observation the model can react to."""
    return f"{ERROR_MARKER} {message}"


class ToolHandler(ABC):
    """
    Uniform description and execution of one capability.

    Handlers receive only the parsed parameters and the shared memory sink
    for the duration of a call and must not retain references to either.
    """

    @property
    def name(self) -> str:
        return self.describe().name

    @abstractmethod
    def describe(self) -> ToolDefinition:
        """Return the tool's name, description and parameter schema.

        Must be side-effect free; called at startup to build the catalog.
        """

    @abstractmethod
    async def execute(self, parameters: ToolParameters, memory: MemoryService) -> str:
        """Perform the work and return a human-readable observation.

        Internal failures should be reported as an observation prefixed with
        ``ERROR_MARKER`` rather than raised.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
