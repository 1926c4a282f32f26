"""
Tests for Tool Registry System

Validates registration, conflict detection, catalog ordering and statistics
tracking of the ToolRegistry.
"""

import threading

import pytest

from agentloop.exceptions import ToolRegistrationError
from agentloop.tools.registry import ToolExecutionStats, ToolRegistry
from tests.shared import EchoHandler, FailingHandler


class TestToolRegistry:
    """Test the ToolRegistry functionality"""

    def setup_method(self):
        self.registry = ToolRegistry()

    def test_register_and_lookup(self):
        handler = EchoHandler()
        self.registry.register(handler)

        assert self.registry.get("echo") is handler
        assert self.registry.has("echo")
        assert "echo" in self.registry
        assert len(self.registry) == 1
        assert self.registry.get("missing") is None

    def test_instances_are_independent(self):
        self.registry.register(EchoHandler())

        assert len(ToolRegistry()) == 0

    def test_register_same_handler_twice_is_noop(self, caplog):
        handler = EchoHandler()
        self.registry.register(handler)
        self.registry.register(handler)

        assert len(self.registry) == 1
        assert "already registered" in caplog.text

    def test_conflicting_name_rejected(self):
        self.registry.register(EchoHandler())

        with pytest.raises(ToolRegistrationError) as exc_info:
            self.registry.register(EchoHandler())

        assert exc_info.value.tool_name == "echo"

    def test_constructor_registers_handlers(self):
        registry = ToolRegistry([EchoHandler("b_tool"), EchoHandler("a_tool")])

        assert registry.names() == ["a_tool", "b_tool"]
        assert [d.name for d in registry.definitions()] == ["a_tool", "b_tool"]

    def test_unregister(self):
        self.registry.register(EchoHandler())

        assert self.registry.unregister("echo") is True
        assert self.registry.unregister("echo") is False
        assert "echo" not in self.registry
        assert self.registry.get_execution_stats("echo") == {}

    def test_clear(self):
        self.registry.register_all([EchoHandler(), FailingHandler()])
        self.registry.clear()

        assert len(self.registry) == 0
        assert self.registry.names() == []

    def test_contains_rejects_non_strings(self):
        assert 42 not in self.registry

    def test_execution_stats(self):
        self.registry.register(EchoHandler())
        self.registry.record_execution_stats("echo", 10.0, True)
        self.registry.record_execution_stats("echo", 30.0, False, "TimeoutError")

        stats = self.registry.get_execution_stats("echo")
        assert stats["call_count"] == 2
        assert stats["success_count"] == 1
        assert stats["failure_count"] == 1
        assert stats["success_rate"] == 50.0
        assert stats["average_execution_time_ms"] == 20.0
        assert stats["error_types"] == {"TimeoutError": 1}

        all_stats = self.registry.get_execution_stats()
        assert set(all_stats) == {"echo"}

    def test_concurrent_registration(self):
        handlers = [EchoHandler(f"tool_{i}") for i in range(50)]
        threads = [
            threading.Thread(target=self.registry.register, args=(h,)) for h in handlers
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(self.registry) == 50


class TestToolExecutionStats:
    def test_empty_stats(self):
        stats = ToolExecutionStats()

        assert stats.success_rate == 0.0
        assert stats.last_execution_time_ms is None
