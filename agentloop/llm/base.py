"""工具调用模型客户端接口。"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models import Message, ModelResponse


class ToolCallingClient(ABC):
    """ReAct引擎向模型请求下一步的唯一入口。

    实现必须能够在上下文不断增长的情况下被反复调用，并且清楚地区分
    “没有工具调用”（最终答案）与“存在工具调用”两种响应。
    """

    @abstractmethod
    async def send_message_with_tools(
        self, query: str, context: Sequence[Message]
    ) -> ModelResponse:
        """发送当前上下文并返回模型的下一步。

        Args:
            query: 本轮执行的原始用户查询
            context: 完整的会话上下文（历史、用户查询及累积的工具消息）

        Returns:
            ModelResponse: 最终答案或一组工具调用
        """
