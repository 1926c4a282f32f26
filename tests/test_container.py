"""
Tests for Agent Container System

Tests dependency wiring, factory methods and logging configuration.
"""

import logging

import pytest
from dependency_injector import providers

from agentloop.config import AppConfig, LoggingConfig
from agentloop.container import (
    AgentContainer,
    ContainerFactory,
    build_tool_registry,
    configure_logging,
)
from agentloop.exceptions import ConfigurationError
from agentloop.llm.client import OpenAIToolCallingClient
from agentloop.react.engine import ReActEngine
from agentloop.react.events import LoggingEventSink
from agentloop.tools.builtin import DocumentSearchHandler
from tests.shared import ScriptedModelClient, answer, call, tool_response


class TestAgentContainer:
    """Test AgentContainer wiring."""

    def setup_method(self):
        self.container = ContainerFactory.create_test_container()

    def test_providers_exist(self):
        for name in (
            "config",
            "memory",
            "tool_registry",
            "tool_dispatcher",
            "openai_config",
            "llm_client",
            "agent_config",
            "event_sink",
            "react_engine",
        ):
            assert hasattr(self.container, name)

    def test_shared_singletons(self):
        dispatcher = self.container.tool_dispatcher()

        assert dispatcher.registry is self.container.tool_registry()
        assert dispatcher.memory is self.container.memory()
        assert dispatcher.timeout_seconds == 5.0

    def test_test_container_catalog(self):
        registry = self.container.tool_registry()

        assert registry.names() == ["calculator"]

    def test_llm_client_built_from_config(self):
        client = self.container.llm_client()

        assert isinstance(client, OpenAIToolCallingClient)
        assert client.config.api_key == "sk-test-key-for-testing"
        assert client.config.system_prompt
        assert client.registry is self.container.tool_registry()

    def test_engine_factory(self):
        first = self.container.react_engine()
        second = self.container.react_engine()

        assert isinstance(first, ReActEngine)
        assert first is not second
        assert first.dispatcher is second.dispatcher
        assert isinstance(first.event_sink, LoggingEventSink)
        assert first.config.max_iterations == 5

    def test_flat_overrides(self):
        container = ContainerFactory.create_test_container(
            agent_max_iterations=2, tools_enable_calculator=False
        )

        assert container.agent_config().max_iterations == 2
        assert container.tool_registry().names() == []

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError):
            ContainerFactory.create_test_container(agent_max_iterations=0)

    @pytest.mark.asyncio
    async def test_end_to_end_with_calculator(self):
        script = ScriptedModelClient(
            [
                tool_response(call("calculator", {"operation": "multiply", "a": 6, "b": 7})),
                answer("The result is 42."),
            ]
        )
        self.container.llm_client.override(providers.Object(script))
        try:
            engine = self.container.react_engine()
            result = await engine.execute("What is 6 times 7?")
        finally:
            self.container.llm_client.reset_override()

        assert result.success is True
        assert result.final_answer == "The result is 42."
        assert result.steps[0].observation == "6 multiply 7 = 42"
        memory_entries = self.container.memory().get_module("react")
        assert memory_entries[0].text == "calculator: 6 multiply 7 = 42"
        stats = self.container.tool_registry().get_execution_stats("calculator")
        assert stats["success_count"] == 1


class TestContainerFactory:
    def test_create_container_from_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("AGENTLOOP_AGENT_MAX_ITERATIONS", raising=False)
        path = tmp_path / "agentloop.yaml"
        path.write_text(
            "agent:\n"
            "  max_iterations: 4\n"
            "llm:\n"
            "  api_key: sk-file-key\n"
            "rag:\n"
            "  collection_name: Manuals\n"
        )

        container = ContainerFactory.create_container(config_file=path)

        assert container.agent_config().max_iterations == 4
        assert container.openai_config().api_key == "sk-file-key"
        handler = container.tool_registry().get("search_documents")
        assert isinstance(handler, DocumentSearchHandler)
        assert handler.collection_name == "Manuals"

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ContainerFactory.create_container(config_file=tmp_path / "absent.yaml")

    def test_convert_flat_config(self):
        nested = ContainerFactory._convert_flat_config(
            {"agent_max_iterations": 3, "rag_chroma_url": "http://c", "llm": {"model": "m"}}
        )

        assert nested == {
            "agent": {"max_iterations": 3},
            "rag": {"chroma_url": "http://c"},
            "llm": {"model": "m"},
        }

    def test_build_tool_registry_respects_toggles(self):
        config = AppConfig(tools={"enable_calculator": False})

        registry = build_tool_registry(config.tools.model_dump(), config.rag.model_dump())

        assert registry.names() == ["search_documents"]


class TestConfigureLogging:
    def test_console_and_file_handlers(self, tmp_path):
        log_file = tmp_path / "agent.log"

        logger = configure_logging(
            LoggingConfig(level="WARNING", handlers=["console", "file"], file_path=log_file)
        )
        try:
            assert logger.name == "agentloop"
            assert logger.level == logging.WARNING
            assert len(logger.handlers) == 2

            logging.getLogger("agentloop.react").warning("written to file")
            for handler in logger.handlers:
                handler.flush()
            assert "written to file" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()


def test_declarative_container_providers():
    container = AgentContainer()

    assert isinstance(container.memory, providers.Singleton)
    assert isinstance(container.tool_registry, providers.Singleton)
    assert isinstance(container.event_sink, providers.Singleton)
    assert isinstance(container.react_engine, providers.Factory)
