"""OpenAI兼容服务配置。"""

import os
from dataclasses import dataclass, field

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant with access to tools. "
    "Call a tool only when you need information you do not already have; "
    "once the tool results answer the question, reply to the user directly."
)


@dataclass
class OpenAIConfig:
    """OpenAI兼容API配置类，支持环境变量。

    ``base_url`` 指向任意OpenAI兼容服务（如LM Studio、vLLM）。
    """

    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    """API密钥，默认从环境变量OPENAI_API_KEY获取"""

    model: str = "gpt-4o-mini"
    """默认使用的模型"""

    base_url: str | None = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL"))
    """API基础URL，支持自定义OpenAI兼容服务"""

    timeout: float = 60.0
    """请求超时时间（秒）"""

    max_retries: int = 2
    """速率限制与超时的最大重试次数，SDK自身不再重试"""

    temperature: float = 0.2
    """默认温度参数"""

    max_tokens: int | None = None
    """最大token数量限制"""

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    """每次请求前置的系统提示"""

    def __post_init__(self) -> None:
        """初始化后验证配置。"""
        if not self.api_key:
            raise ValueError(
                "API key is required. "
                "Set OPENAI_API_KEY environment variable or provide api_key parameter."
            )

        if self.temperature < 0 or self.temperature > 2:
            raise ValueError("Temperature must be between 0 and 2")

        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")

        if self.max_retries < 0:
            raise ValueError("Max retries must be non-negative")


def create_config_from_env() -> OpenAIConfig:
    """从环境变量创建配置。

    Raises:
        ValueError: 如果必需的环境变量未设置
    """
    max_tokens = os.getenv("OPENAI_MAX_TOKENS")
    return OpenAIConfig(
        api_key=os.getenv("OPENAI_API_KEY", ""),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        timeout=float(os.getenv("OPENAI_TIMEOUT", "60")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2")),
        temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.2")),
        max_tokens=int(max_tokens) if max_tokens else None,
    )
