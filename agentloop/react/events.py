"""ReAct事件流

引擎在开启 ``show_intermediate_steps`` 时向注入的事件接收器发送步骤转换事件，
引擎本身不依赖任何具体的日志输出。
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .models import ReActState


class ReActEventType(str, Enum):
    """事件类型枚举"""

    ITERATION_STARTED = "iteration_started"
    MODEL_RESPONDED = "model_responded"
    TOOL_DISPATCHED = "tool_dispatched"
    OBSERVATION_RECEIVED = "observation_received"
    LOOP_DETECTED = "loop_detected"
    TERMINATED = "terminated"


class ReActEvent(BaseModel):
    """一次步骤转换事件"""

    type: ReActEventType = Field(..., description="事件类型")
    iteration: int = Field(default=0, ge=0, description="所属迭代序号")
    state: ReActState | None = Field(None, description="事件发生时的循环状态")
    tool_name: str | None = Field(None, description="相关工具名称")
    arguments: str | None = Field(None, description="工具参数字符串")
    observation: str | None = Field(None, description="观察结果")
    message: str | None = Field(None, description="附加说明")
    timestamp: datetime = Field(default_factory=datetime.now, description="事件时间")

    class Config:
        frozen = True


class ReActEventSink(ABC):
    """事件接收器接口"""

    @abstractmethod
    def emit(self, event: ReActEvent) -> None:
        """接收一个事件"""
        pass


class NullEventSink(ReActEventSink):
    """丢弃所有事件"""

    def emit(self, event: ReActEvent) -> None:
        return None


class RecordingEventSink(ReActEventSink):
    """在内存中记录事件，便于测试和调用方检查"""

    def __init__(self):
        self.events: list[ReActEvent] = []

    def emit(self, event: ReActEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: ReActEventType) -> list[ReActEvent]:
        return [event for event in self.events if event.type == event_type]

    @property
    def types(self) -> list[ReActEventType]:
        return [event.type for event in self.events]

    def clear(self) -> None:
        self.events.clear()


class LoggingEventSink(ReActEventSink):
    """将事件写入标准库日志"""

    def __init__(
        self,
        logger_name: str = "agentloop.react.events",
        max_observation_chars: int = 500,
        verbose: bool = False,
    ):
        self.logger = logging.getLogger(logger_name)
        self.max_observation_chars = max_observation_chars
        self.verbose = verbose

    def emit(self, event: ReActEvent) -> None:
        if event.type == ReActEventType.ITERATION_STARTED:
            self.logger.info(f"迭代 {event.iteration} 开始")
        elif event.type == ReActEventType.MODEL_RESPONDED:
            self.logger.info(f"迭代 {event.iteration} 模型响应: {event.message}")
        elif event.type == ReActEventType.TOOL_DISPATCHED:
            self.logger.info(f"迭代 {event.iteration} 调用工具: {event.tool_name}")
            if self.verbose:
                self.logger.debug(f"参数: {event.arguments}")
        elif event.type == ReActEventType.OBSERVATION_RECEIVED:
            self.logger.info(
                f"迭代 {event.iteration} 观察结果: "
                f"{self._truncate(event.observation or '')}"
            )
        elif event.type == ReActEventType.LOOP_DETECTED:
            self.logger.warning(f"迭代 {event.iteration} {event.message}")
        elif event.type == ReActEventType.TERMINATED:
            self.logger.info(f"执行终止: {event.message}")

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_observation_chars:
            return text
        return text[: self.max_observation_chars] + "..."
