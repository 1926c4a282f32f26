"""
Agent Dependency Injection Container

Wires the ReAct engine and its collaborators (memory sink, tool registry,
dispatcher, model client, event sink) from an ``AppConfig`` using
dependency-injector providers.
"""

import logging
from pathlib import Path
from typing import Any

from dependency_injector import containers, providers

from .config import AgentConfig, AppConfig, ConfigLoader, LoggingConfig
from .exceptions import ConfigurationError
from .llm.client import OpenAIToolCallingClient
from .llm.config import DEFAULT_SYSTEM_PROMPT, OpenAIConfig
from .memory import MemoryService
from .react.engine import ReActEngine
from .react.events import LoggingEventSink
from .tools.builtin import DocumentSearchHandler, calculator
from .tools.dispatcher import ToolDispatcher
from .tools.registry import ToolRegistry

logger = logging.getLogger("agentloop.container")

DEFAULT_CONFIG_FILES = (
    "agentloop.yaml",
    "agentloop.yml",
    "agentloop.json",
    ".agentloop/config.yaml",
    ".agentloop/config.json",
)


def build_tool_registry(
    tools_config: dict[str, Any], rag_config: dict[str, Any]
) -> ToolRegistry:
    """Create a registry holding the built-in tools enabled by configuration."""
    registry = ToolRegistry()
    if tools_config.get("enable_calculator", True):
        registry.register(calculator)
    if tools_config.get("enable_document_search", True):
        registry.register(
            DocumentSearchHandler(
                embeddings_url=rag_config["embeddings_url"],
                chroma_url=rag_config["chroma_url"],
                collection_name=rag_config["collection_name"],
                max_results=rag_config["max_results"],
                timeout_seconds=rag_config["timeout"],
                embedding_model=rag_config.get("embedding_model"),
            )
        )
    logger.info(f"Tool catalog: {', '.join(registry.names()) or 'empty'}")
    return registry


def _create_openai_config(llm_config: dict[str, Any]) -> OpenAIConfig:
    return OpenAIConfig(
        api_key=llm_config["api_key"],
        model=llm_config["model"],
        base_url=llm_config.get("base_url"),
        timeout=llm_config["timeout"],
        max_retries=llm_config["max_retries"],
        temperature=llm_config["temperature"],
        max_tokens=llm_config.get("max_tokens"),
        system_prompt=llm_config.get("system_prompt") or DEFAULT_SYSTEM_PROMPT,
    )


def _create_agent_config(agent_config: dict[str, Any]) -> AgentConfig:
    return AgentConfig(**agent_config)


class AgentContainer(containers.DeclarativeContainer):
    """
    ReAct agent dependency injection container.

    Memory, registry, dispatcher and model client are singletons shared by
    every engine; ``react_engine`` is a factory so each caller gets its own
    engine instance over the shared collaborators.
    """

    config = providers.Configuration()

    # === Shared state ===

    memory = providers.Singleton(
        MemoryService,
        max_entries_per_module=config.memory.max_entries_per_module,
    )

    # === Tool System Services ===

    tool_registry = providers.Singleton(
        build_tool_registry,
        tools_config=config.tools,
        rag_config=config.rag,
    )

    tool_dispatcher = providers.Singleton(
        ToolDispatcher,
        registry=tool_registry,
        memory=memory,
        timeout_seconds=config.tools.timeout,
    )

    # === LLM Services ===

    openai_config = providers.Singleton(_create_openai_config, llm_config=config.llm)

    llm_client = providers.Singleton(
        OpenAIToolCallingClient,
        config=openai_config,
        registry=tool_registry,
    )

    # === ReAct Engine Services ===

    agent_config = providers.Singleton(_create_agent_config, agent_config=config.agent)

    event_sink = providers.Singleton(
        LoggingEventSink,
        verbose=config.agent.verbose_mode,
    )

    react_engine = providers.Factory(
        ReActEngine,
        model_client=llm_client,
        dispatcher=tool_dispatcher,
        config=agent_config,
        event_sink=event_sink,
    )


def configure_logging(logging_config: LoggingConfig) -> logging.Logger:
    """Apply logging configuration to the ``agentloop`` logger hierarchy."""
    root_logger = logging.getLogger("agentloop")
    root_logger.setLevel(getattr(logging, logging_config.level))
    root_logger.handlers.clear()

    formatter = logging.Formatter(logging_config.format)
    if "console" in logging_config.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if "file" in logging_config.handlers and logging_config.file_path:
        file_handler = logging.FileHandler(logging_config.file_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


class ContainerFactory:
    """
    Factory for creating AgentContainer instances.

    Provides convenient methods for creating containers from files,
    environment variables and programmatic overrides, plus a test preset.
    """

    @classmethod
    def create_container(
        cls,
        config: AppConfig | None = None,
        config_file: str | Path | None = None,
        **kwargs,
    ) -> AgentContainer:
        """
        Create a new AgentContainer instance with the specified configuration.

        Args:
            config: Pre-built AppConfig instance
            config_file: Path to configuration file
            **kwargs: Flat overrides such as ``agent_max_iterations=3``

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        if config is None:
            config = cls._load_config(config_file, **kwargs)

        container = AgentContainer()
        container.config.from_dict(config.dict_for_container())
        configure_logging(config.logging)

        logger.info("Successfully created AgentContainer")
        return container

    @classmethod
    def create_test_container(cls, **config_overrides) -> AgentContainer:
        """
        Create a container configured for testing.

        Document search is disabled and a placeholder API key is set so the
        model client can be constructed without touching the environment.
        """
        test_defaults = {
            "llm": {
                "api_key": "sk-test-key-for-testing",
                "model": "gpt-4o-mini",
                "temperature": 0.0,
                "timeout": 10.0,
                "base_url": None,
            },
            "tools": {"timeout": 5.0, "enable_document_search": False},
            "logging": {"level": "DEBUG"},
        }

        nested_overrides = cls._convert_flat_config(config_overrides)
        merged_config = cls._deep_merge(test_defaults, nested_overrides)

        try:
            config = AppConfig(**merged_config)
        except ValueError as e:
            raise ConfigurationError(f"Invalid test configuration: {e}") from e
        return cls.create_container(config=config)

    @classmethod
    def _load_config(
        cls, config_file: str | Path | None = None, **kwargs
    ) -> AppConfig:
        """Load configuration from multiple sources with proper priority."""
        loader = ConfigLoader()

        if kwargs:
            loader.add_dict_source(cls._convert_flat_config(kwargs))

        if config_file:
            loader.add_file_source(config_file, required=True)
        else:
            for file_path in DEFAULT_CONFIG_FILES:
                if Path(file_path).exists():
                    loader.add_file_source(file_path)
                    break

        loader.add_env_source()
        return loader.load()

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = ContainerFactory._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _convert_flat_config(flat_config: dict[str, Any]) -> dict[str, Any]:
        """Convert flat keys (agent_max_iterations) to nested (agent.max_iterations)."""
        nested: dict[str, Any] = {}
        for key, value in flat_config.items():
            if isinstance(value, dict):
                nested[key] = value
                continue
            parts = key.split("_", 1)
            if len(parts) == 2:
                section, field_name = parts
                nested.setdefault(section, {})[field_name] = value
            else:
                nested[key] = value
        return nested
