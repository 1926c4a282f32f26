"""ReAct Agent Implementation

Reasoning-Acting-Observing 循环的核心实现。

主要组件：
- ReActEngine: 循环引擎，负责迭代控制、终止策略与执行轨迹
- DuplicateCallDetector: 连续重复工具调用检测
- ReActEventSink: 中间步骤事件接收器接口及其实现
- AgentExecutionResult / ReActStep: 执行结果与单步轨迹
"""

from .detector import DuplicateCallDetector
from .engine import (
    FIRST_ITERATION_NUDGE,
    LIMIT_FALLBACK_ANSWER,
    LOOP_FALLBACK_ANSWER,
    ReActEngine,
)
from .events import (
    LoggingEventSink,
    NullEventSink,
    ReActEvent,
    ReActEventSink,
    ReActEventType,
    RecordingEventSink,
)
from .models import AgentExecutionResult, ReActState, ReActStep, TerminationCategory

__all__ = [
    # Core ReAct Engine
    "ReActEngine",
    "DuplicateCallDetector",
    "FIRST_ITERATION_NUDGE",
    "LOOP_FALLBACK_ANSWER",
    "LIMIT_FALLBACK_ANSWER",
    # Events
    "ReActEvent",
    "ReActEventType",
    "ReActEventSink",
    "LoggingEventSink",
    "RecordingEventSink",
    "NullEventSink",
    # Data Models
    "AgentExecutionResult",
    "ReActStep",
    "ReActState",
    "TerminationCategory",
]
