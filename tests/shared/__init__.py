"""
测试共享模块

提供脚本化模型客户端和确定性工具处理器。
"""

from .fakes import (
    EchoHandler,
    FailingHandler,
    ReportingHandler,
    ScriptedModelClient,
    SilentHandler,
    SlowHandler,
    answer,
    call,
    tool_response,
)

__all__ = [
    "ScriptedModelClient",
    "EchoHandler",
    "FailingHandler",
    "ReportingHandler",
    "SilentHandler",
    "SlowHandler",
    "answer",
    "call",
    "tool_response",
]
