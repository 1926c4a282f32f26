"""OpenAI兼容的工具调用客户端。"""

import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

import openai
from openai import AsyncOpenAI

from ..exceptions import (
    ModelAuthenticationError,
    ModelClientError,
    ModelRateLimitError,
    ModelTimeoutError,
)
from ..models import (
    AssistantMessage,
    Message,
    ModelResponse,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from ..tools.registry import ToolRegistry
from .base import ToolCallingClient
from .config import OpenAIConfig
from .retry import DEFAULT_RETRY_CONFIG, retry_on_failure

logger = logging.getLogger("agentloop.llm")


class OpenAIToolCallingClient(ToolCallingClient):
    """基于OpenAI Chat Completions function calling的模型客户端。

    该客户端负责：
    - 将会话上下文转换为OpenAI消息格式
    - 将工具注册表中的工具目录声明给模型
    - 解析模型返回的最终答案或工具调用
    - 异常分类与可重试异常的指数退避重试
    """

    def __init__(self, config: OpenAIConfig, registry: ToolRegistry):
        """初始化客户端。

        Args:
            config: OpenAI配置实例
            registry: 工具注册表，用于生成工具目录
        """
        self.config = config
        self.registry = registry
        self._async_client: AsyncOpenAI | None = None
        # 重试由装饰器统一处理，SDK内部不再重试
        self.retry_config = replace(
            DEFAULT_RETRY_CONFIG, max_attempts=config.max_retries + 1
        )
        self._send_with_retry = retry_on_failure(
            config=self.retry_config, logger_name="agentloop.llm.retry"
        )(self._send_once)

        logger.info(
            f"模型客户端初始化完成，模型: {config.model}, "
            f"超时: {config.timeout}s, 重试: {config.max_retries}次"
        )

    @property
    def async_client(self) -> AsyncOpenAI:
        """获取异步客户端实例。"""
        if self._async_client is None:
            client_kwargs = {
                "api_key": self.config.api_key,
                "timeout": self.config.timeout,
                "max_retries": 0,
            }
            if self.config.base_url:
                client_kwargs["base_url"] = self.config.base_url

            self._async_client = AsyncOpenAI(**client_kwargs)
        return self._async_client

    async def send_message_with_tools(
        self, query: str, context: Sequence[Message]
    ) -> ModelResponse:
        """发送上下文与工具目录，返回模型的下一步。

        速率限制与超时按 ``config.max_retries`` 指数退避重试。

        Raises:
            ModelClientError: 模型服务调用异常
        """
        return await self._send_with_retry(query, context)

    async def _send_once(
        self, query: str, context: Sequence[Message]
    ) -> ModelResponse:
        messages = self.build_messages(query, context)
        tools = [definition.to_openai_schema() for definition in self.registry.definitions()]

        request: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens:
            request["max_tokens"] = self.config.max_tokens
        if tools:
            request["tools"] = tools
            request["tool_choice"] = "auto"

        try:
            start_time = time.time()
            response = await self.async_client.chat.completions.create(**request)
            elapsed_time = time.time() - start_time
        except Exception as e:
            logger.error(f"模型调用失败: {e}")
            raise self._handle_exception(e) from e

        if not response.choices:
            raise ModelClientError("模型响应中没有choices")

        result = self.parse_message(response.choices[0].message)
        logger.info(
            f"模型调用完成，耗时: {elapsed_time:.2f}s, 工具调用: {len(result.tool_calls)}, "
            f"tokens: {response.usage.total_tokens if response.usage else 'N/A'}"
        )
        return result

    def build_messages(
        self, query: str, context: Sequence[Message]
    ) -> list[dict[str, Any]]:
        """将会话上下文转换为OpenAI消息列表。

        上下文中若没有本轮查询对应的用户消息，则追加在末尾。
        """
        messages: list[dict[str, Any]] = []
        if self.config.system_prompt:
            messages.append({"role": "system", "content": self.config.system_prompt})

        has_query = False
        for message in context:
            if isinstance(message, AssistantMessage):
                wire: dict[str, Any] = {
                    "role": "assistant",
                    "content": message.content or None,
                }
                if message.tool_calls:
                    wire["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": call.arguments_as_string(),
                            },
                        }
                        for call in message.tool_calls
                    ]
                messages.append(wire)
            elif isinstance(message, ToolMessage):
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": message.tool_call_id,
                        "content": message.content,
                    }
                )
            else:
                if isinstance(message, UserMessage) and message.content == query:
                    has_query = True
                messages.append({"role": message.role, "content": message.content})

        if query and not has_query:
            messages.append({"role": "user", "content": query})
        return messages

    @staticmethod
    def parse_message(message: Any) -> ModelResponse:
        """解析OpenAI响应消息。"""
        tool_calls = []
        for raw_call in message.tool_calls or []:
            tool_calls.append(
                ToolCall(
                    id=raw_call.id or f"call_{uuid.uuid4().hex[:12]}",
                    name=raw_call.function.name,
                    arguments=raw_call.function.arguments or "{}",
                )
            )
        return ModelResponse(content=message.content, tool_calls=tool_calls)

    def _handle_exception(self, error: Exception) -> ModelClientError:
        """将SDK异常转换为模型客户端异常。"""
        if isinstance(error, ModelClientError):
            return error
        if isinstance(error, openai.AuthenticationError):
            return ModelAuthenticationError(f"认证失败: {error}")
        if isinstance(error, openai.RateLimitError):
            retry_after = None
            headers = getattr(getattr(error, "response", None), "headers", None) or {}
            if headers.get("retry-after", "").isdigit():
                retry_after = int(headers["retry-after"])
            return ModelRateLimitError(f"速率限制: {error}", retry_after=retry_after)
        if isinstance(error, openai.APITimeoutError):
            return ModelTimeoutError(
                f"请求超时: {error}", timeout_duration=self.config.timeout
            )
        if isinstance(error, openai.APIConnectionError):
            return ModelClientError(f"连接失败: {error}", error_code="connection_error")
        return ModelClientError(f"模型API错误: {error}")

    async def close(self) -> None:
        """关闭异步客户端连接。"""
        if self._async_client:
            await self._async_client.close()
            self._async_client = None
            logger.info("模型客户端连接已关闭")

    async def __aenter__(self) -> "OpenAIToolCallingClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
