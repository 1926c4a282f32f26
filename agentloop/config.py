"""
Agent Configuration System

Configuration management for the ReAct agent, supporting multiple sources
(environment variables, YAML/JSON files, programmatic dictionaries) with
type-safe pydantic validation and hierarchical merging.

Priority: env vars > config files > programmatic dict > defaults.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, validator

from .exceptions import ConfigurationError

logger = logging.getLogger("agentloop.config")

ENV_PREFIX = "AGENTLOOP_"


class AgentConfig(BaseModel):
    """Immutable run parameters of the ReAct loop."""

    max_iterations: int = Field(5, ge=1, le=100, description="Maximum iterations")
    enable_multi_tool_loop: bool = Field(
        True, description="Keep iterating after the first tool observation"
    )
    prevent_duplicate_tool_calls: bool = Field(
        True, description="Stop when the model repeats the same tool call"
    )
    max_consecutive_duplicates: int = Field(
        3, ge=1, le=50, description="Consecutive duplicate threshold"
    )
    show_intermediate_steps: bool = Field(
        True, description="Emit step events to the configured sink"
    )
    verbose_mode: bool = Field(False, description="Echo tool arguments at debug level")

    class Config:
        frozen = True


class LLMConfig(BaseModel):
    """Large Language Model configuration."""

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""),
        description="OpenAI API key",
    )
    model: str = Field("gpt-4o-mini", description="Model name")
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL"),
        description="Base URL for API requests",
    )
    temperature: float = Field(0.2, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int | None = Field(None, ge=1, description="Maximum tokens per response")
    timeout: float = Field(60.0, gt=0, le=600, description="Request timeout in seconds")
    max_retries: int = Field(2, ge=0, le=10, description="Retries for rate-limit and timeout errors")
    system_prompt: str | None = Field(None, description="Override the system prompt")


class ToolsConfig(BaseModel):
    """Tools system configuration."""

    timeout: float | None = Field(
        30.0, description="Tool execution timeout in seconds, None disables it"
    )
    enable_calculator: bool = Field(True, description="Register the calculator tool")
    enable_document_search: bool = Field(
        True, description="Register the search_documents tool"
    )

    @validator("timeout")
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v


class RAGConfig(BaseModel):
    """Document search (Chroma + embeddings endpoint) configuration."""

    embeddings_url: str = Field(
        "http://localhost:1234/v1/embeddings", description="Embeddings endpoint"
    )
    embedding_model: str | None = Field(None, description="Embedding model name")
    chroma_url: str = Field(
        "http://localhost:8000/api/v1", description="Chroma HTTP API base URL"
    )
    collection_name: str = Field("Documents", description="Chroma collection")
    max_results: int = Field(5, ge=1, le=10, description="Default result count")
    timeout: float = Field(300.0, gt=0, description="HTTP timeout in seconds")


class MemoryConfig(BaseModel):
    """Shared memory sink configuration."""

    max_entries_per_module: int | None = Field(
        None, ge=1, description="Per-module cap, oldest entries dropped"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        "INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    handlers: list[str] = Field(
        default_factory=lambda: ["console"], description="Log handlers"
    )
    file_path: Path | None = Field(
        None, description="Log file path (if file handler enabled)"
    )

    @validator("level", pre=True)
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @validator("handlers")
    def validate_handlers(cls, v):
        valid_handlers = {"console", "file"}
        for handler in v:
            if handler not in valid_handlers:
                raise ValueError(
                    f"Invalid handler: {handler}. Must be one of {valid_handlers}"
                )
        return v


class AppConfig(BaseModel):
    """Complete application configuration with all subsystems."""

    agent: AgentConfig = Field(default_factory=AgentConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    rag: RAGConfig = Field(default_factory=RAGConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        extra = "forbid"

    def dict_for_container(self) -> dict[str, Any]:
        """Convert to dictionary format suitable for the DI container."""
        return self.model_dump()

    def validate_complete(self) -> None:
        """Perform cross-section validation."""
        if "file" in self.logging.handlers and self.logging.file_path is None:
            raise ConfigurationError("file_path is required for the file log handler")

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls(**EnvConfigSource(prefix).load())


# Configuration source system
class ConfigSource(ABC):
    """Abstract base class for configuration sources."""

    def __init__(self, required: bool = False):
        self.required = required

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load configuration from this source."""
        pass


class EnvConfigSource(ConfigSource):
    """Environment variable configuration source."""

    def __init__(self, prefix: str = ENV_PREFIX, required: bool = False):
        super().__init__(required)
        self.prefix = prefix

    def load(self) -> dict[str, Any]:
        """Load configuration from environment variables."""
        config: dict[str, Any] = {}
        for key, value in os.environ.items():
            if not key.startswith(self.prefix):
                continue
            # AGENTLOOP_AGENT_MAX_ITERATIONS -> agent.max_iterations
            config_key = key[len(self.prefix) :].lower()
            nested_keys = config_key.split("_", 1)

            if len(nested_keys) == 2:
                section, field_key = nested_keys
                config.setdefault(section, {})[field_key] = _parse_env_value(value)
            else:
                config[nested_keys[0]] = _parse_env_value(value)

        return config


class FileConfigSource(ConfigSource):
    """File-based configuration source supporting YAML and JSON."""

    def __init__(self, file_path: str | Path, required: bool = False):
        super().__init__(required)
        self.file_path = Path(file_path)

    def load(self) -> dict[str, Any]:
        """Load configuration from file."""
        if not self.file_path.exists():
            if self.required:
                raise ConfigurationError(
                    f"Required configuration file not found: {self.file_path}"
                )
            return {}

        suffix = self.file_path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ConfigurationError(
                f"Unsupported configuration file format: {self.file_path.suffix}"
            )

        try:
            with open(self.file_path, encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load configuration file {self.file_path}: {e}"
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {self.file_path} must contain a mapping"
            )
        return data


class DictConfigSource(ConfigSource):
    """Dictionary-based configuration source for programmatic configuration."""

    def __init__(self, config_dict: dict[str, Any], required: bool = False):
        super().__init__(required)
        self.config_dict = config_dict or {}

    def load(self) -> dict[str, Any]:
        return self.config_dict.copy()


class ConfigLoader:
    """Multi-source configuration loader with priority support."""

    def __init__(self):
        self.config_sources: list[ConfigSource] = []

    def add_env_source(self, prefix: str = ENV_PREFIX) -> "ConfigLoader":
        """Add environment variable configuration source (highest priority)."""
        self.config_sources.append(EnvConfigSource(prefix))
        return self

    def add_file_source(
        self, file_path: str | Path, required: bool = False
    ) -> "ConfigLoader":
        """Add file configuration source."""
        self.config_sources.append(FileConfigSource(file_path, required))
        return self

    def add_dict_source(self, config_dict: dict[str, Any]) -> "ConfigLoader":
        """Add dictionary configuration source (lowest priority)."""
        self.config_sources.append(DictConfigSource(config_dict))
        return self

    def load(self) -> AppConfig:
        """Load and merge configuration from all sources."""
        merged_config: dict[str, Any] = {}

        # Sources are applied in order, later ones win
        for source in self.config_sources:
            try:
                source_config = source.load()
            except ConfigurationError:
                if source.required:
                    raise
                logger.warning(
                    "Failed to load optional configuration source, skipping",
                    exc_info=True,
                )
                continue
            merged_config = _deep_merge_dict(merged_config, source_config)

        try:
            config = AppConfig(**merged_config)
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e
        config.validate_complete()
        return config


# Utility functions
def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate Python type."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            return value


def _deep_merge_dict(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dict(result[key], value)
        else:
            result[key] = value

    return result
