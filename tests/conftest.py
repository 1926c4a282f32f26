"""
pytest全局配置文件

提供跨测试模块共享的fixtures。
"""

import pytest

from agentloop.memory import MemoryService
from agentloop.tools.dispatcher import ToolDispatcher
from agentloop.tools.registry import ToolRegistry
from tests.shared import EchoHandler, FailingHandler, ReportingHandler


@pytest.fixture
def memory() -> MemoryService:
    """函数级别的共享内存"""
    return MemoryService()


@pytest.fixture
def echo_handler() -> EchoHandler:
    return EchoHandler()


@pytest.fixture
def registry(echo_handler) -> ToolRegistry:
    """预注册echo、explode和report工具的注册表"""
    return ToolRegistry([echo_handler, FailingHandler(), ReportingHandler()])


@pytest.fixture
def dispatcher(registry, memory) -> ToolDispatcher:
    return ToolDispatcher(registry, memory, timeout_seconds=5.0)
