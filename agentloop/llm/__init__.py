"""模型集成模块。

主要组件：
- ToolCallingClient: ReAct引擎使用的模型客户端接口
- OpenAIToolCallingClient: OpenAI兼容服务的function calling实现
- OpenAIConfig: 客户端配置，支持环境变量
- retry_on_failure: 可重试异常的指数退避重试
"""

from .base import ToolCallingClient
from .client import OpenAIToolCallingClient
from .config import DEFAULT_SYSTEM_PROMPT, OpenAIConfig, create_config_from_env
from .retry import (
    DEFAULT_RETRY_CONFIG,
    NO_RETRY_CONFIG,
    RetryConfig,
    RetryHandler,
    retry_on_failure,
)

__all__ = [
    "ToolCallingClient",
    "OpenAIToolCallingClient",
    "OpenAIConfig",
    "DEFAULT_SYSTEM_PROMPT",
    "create_config_from_env",
    "RetryConfig",
    "RetryHandler",
    "retry_on_failure",
    "DEFAULT_RETRY_CONFIG",
    "NO_RETRY_CONFIG",
]
