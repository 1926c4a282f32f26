"""
Shared Memory Sink

Module-keyed, append-only activity log written by tool handlers and the tool
dispatcher. A single instance may be shared by concurrent chat sessions, so
all access is serialized with a re-entrant lock.
"""

import logging
import threading
from collections import defaultdict, deque
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger("agentloop.memory")


class MemoryEntry(BaseModel):
    """A single record in a memory module."""

    module: str = Field(..., description="Module key the entry belongs to")
    source_role: str = Field(..., description="Role that produced the entry")
    text: str = Field(..., description="Recorded text")
    timestamp: datetime = Field(default_factory=datetime.now)


class MemoryService:
    """Thread-safe module-keyed memory sink."""

    def __init__(self, max_entries_per_module: int | None = None):
        """
        Args:
            max_entries_per_module: Keep at most this many entries per module,
                dropping the oldest first. ``None`` keeps everything.
        """
        if max_entries_per_module is not None and max_entries_per_module < 1:
            raise ValueError("max_entries_per_module must be positive")
        self.max_entries_per_module = max_entries_per_module
        self._modules: dict[str, deque[MemoryEntry]] = defaultdict(
            lambda: deque(maxlen=self.max_entries_per_module)
        )
        self._lock = threading.RLock()

    def add_to_module(self, module_name: str, source_role: str, text: str) -> None:
        """Append ``text`` under ``module_name``."""
        entry = MemoryEntry(module=module_name, source_role=source_role, text=text)
        with self._lock:
            self._modules[module_name].append(entry)
        logger.debug(f"Memory[{module_name}] <- {source_role}: {text[:80]}")

    def get_module(self, module_name: str) -> list[MemoryEntry]:
        """Snapshot of the entries recorded under ``module_name``."""
        with self._lock:
            if module_name not in self._modules:
                return []
            return list(self._modules[module_name])

    def modules(self) -> list[str]:
        with self._lock:
            return sorted(self._modules.keys())

    def clear(self, module_name: str | None = None) -> None:
        """Clear one module, or every module when ``module_name`` is None."""
        with self._lock:
            if module_name is None:
                self._modules.clear()
            else:
                self._modules.pop(module_name, None)

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                name: [entry.dict() for entry in entries]
                for name, entries in self._modules.items()
            }
