"""模型调用重试机制，支持指数退避和异常分类。"""

import asyncio
import inspect
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps

from ..exceptions import (
    ModelAuthenticationError,
    ModelRateLimitError,
    ModelTimeoutError,
)

logger = logging.getLogger("agentloop.llm.retry")


@dataclass
class RetryConfig:
    """重试配置。"""

    max_attempts: int = 3
    """最大尝试次数（含首次调用）"""

    base_delay: float = 1.0
    """基础延迟时间（秒）"""

    max_delay: float = 60.0
    """最大延迟时间（秒）"""

    backoff_factor: float = 2.0
    """退避因子"""

    jitter: bool = True
    """是否添加随机抖动"""

    retry_on_exceptions: tuple = (
        ModelRateLimitError,
        ModelTimeoutError,
    )
    """可重试的异常类型"""

    permanent_exceptions: tuple = (ModelAuthenticationError,)
    """永久性异常，不应重试"""


class RetryHandler:
    """重试决策与延迟计算。"""

    def __init__(self, config: RetryConfig | None = None):
        self.config = config or RetryConfig()

    def calculate_delay(self, attempt: int, base_delay: float | None = None) -> float:
        """计算第 ``attempt`` 次重试（从0开始）的延迟时间。"""
        base = base_delay or self.config.base_delay

        delay = base * (self.config.backoff_factor**attempt)
        delay = min(delay, self.config.max_delay)

        if self.config.jitter:
            jitter_range = delay * 0.1  # 10%的抖动
            delay += random.uniform(-jitter_range, jitter_range)

        return max(0, delay)

    def should_retry(self, exception: Exception, attempt: int) -> bool:
        """判断是否应该重试。

        Args:
            exception: 捕获的异常
            attempt: 已完成的尝试序号（从0开始）

        Returns:
            是否应该重试
        """
        if attempt + 1 >= self.config.max_attempts:
            return False

        if isinstance(exception, self.config.permanent_exceptions):
            logger.info(f"永久性异常，不重试: {exception}")
            return False

        if isinstance(exception, self.config.retry_on_exceptions):
            logger.info(f"检测到可重试异常，准备重试: {exception}")
            return True

        if getattr(exception, "retryable", False):
            logger.info(f"异常标记为可重试: {exception}")
            return True

        return False

    def get_retry_delay(self, exception: Exception, attempt: int) -> float:
        """获取重试延迟时间，速率限制异常优先使用服务端给出的等待时间。"""
        base_delay = self.config.base_delay

        if isinstance(exception, ModelRateLimitError) and exception.retry_after:
            base_delay = max(base_delay, exception.retry_after)

        return self.calculate_delay(attempt, base_delay)


def retry_on_failure(
    config: RetryConfig | None = None,
    logger_name: str | None = None,
) -> Callable:
    """异步函数重试装饰器工厂。

    Args:
        config: 重试配置
        logger_name: 日志记录器名称

    Returns:
        重试装饰器
    """
    retry_config = config or RetryConfig()
    retry_handler = RetryHandler(retry_config)
    retry_logger = logging.getLogger(logger_name or "agentloop.llm.retry")

    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError("retry_on_failure only decorates async functions")

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not retry_handler.should_retry(e, attempt):
                        retry_logger.error(
                            f"函数 {func.__name__} 执行失败 "
                            f"(尝试 {attempt + 1}/{retry_config.max_attempts})，不再重试: {e}"
                        )
                        raise

                    delay = retry_handler.get_retry_delay(e, attempt)
                    retry_logger.warning(
                        f"函数 {func.__name__} 执行失败 (尝试 {attempt + 1}/{retry_config.max_attempts})，"
                        f"{delay:.2f}秒后重试: {e}"
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return async_wrapper

    return decorator


# 预定义的重试配置
DEFAULT_RETRY_CONFIG = RetryConfig()

NO_RETRY_CONFIG = RetryConfig(max_attempts=1)
