"""测试重试机制。"""

from unittest.mock import AsyncMock, patch

import pytest

from agentloop.exceptions import (
    ModelAuthenticationError,
    ModelClientError,
    ModelRateLimitError,
    ModelTimeoutError,
)
from agentloop.llm.retry import (
    DEFAULT_RETRY_CONFIG,
    NO_RETRY_CONFIG,
    RetryConfig,
    RetryHandler,
    retry_on_failure,
)


class TestRetryConfig:
    """测试重试配置类。"""

    def test_default_config(self):
        """测试默认配置。"""
        config = RetryConfig()

        assert config.max_attempts == 3
        assert config.base_delay == 1.0
        assert config.max_delay == 60.0
        assert config.backoff_factor == 2.0
        assert config.jitter is True
        assert ModelRateLimitError in config.retry_on_exceptions
        assert ModelTimeoutError in config.retry_on_exceptions
        assert ModelAuthenticationError in config.permanent_exceptions

    def test_predefined_configs(self):
        """测试预定义配置。"""
        assert DEFAULT_RETRY_CONFIG.max_attempts == 3
        assert NO_RETRY_CONFIG.max_attempts == 1


class TestRetryHandler:
    """测试重试处理器。"""

    def test_calculate_delay_without_jitter(self):
        """测试指数退避延迟计算。"""
        handler = RetryHandler(RetryConfig(base_delay=1.0, jitter=False, max_delay=5.0))

        assert handler.calculate_delay(0) == 1.0
        assert handler.calculate_delay(1) == 2.0
        assert handler.calculate_delay(2) == 4.0
        assert handler.calculate_delay(3) == 5.0  # 受max_delay限制

    def test_calculate_delay_with_jitter(self):
        """测试抖动范围。"""
        handler = RetryHandler(RetryConfig(base_delay=10.0, jitter=True))

        for _ in range(20):
            assert 9.0 <= handler.calculate_delay(0) <= 11.0

    def test_should_retry(self):
        """测试重试决策。"""
        handler = RetryHandler(RetryConfig(max_attempts=3))

        assert handler.should_retry(ModelRateLimitError("rate"), 0) is True
        assert handler.should_retry(ModelTimeoutError("timeout"), 1) is True
        assert handler.should_retry(ModelTimeoutError("timeout"), 2) is False
        assert handler.should_retry(ModelAuthenticationError("auth"), 0) is False
        assert handler.should_retry(ModelClientError("generic"), 0) is False
        assert handler.should_retry(ValueError("other"), 0) is False

    def test_retry_after_respected(self):
        """测试速率限制的retry_after。"""
        handler = RetryHandler(RetryConfig(base_delay=1.0, jitter=False))

        delay = handler.get_retry_delay(ModelRateLimitError("rate", retry_after=30), 0)

        assert delay == 30.0


class TestRetryDecorator:
    """测试重试装饰器。"""

    @patch("agentloop.llm.retry.asyncio.sleep", new_callable=AsyncMock)
    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self, mock_sleep):
        """测试可重试异常后成功。"""
        calls = []

        @retry_on_failure(RetryConfig(max_attempts=3, jitter=False))
        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ModelTimeoutError("timeout")
            return "success"

        assert await flaky() == "success"
        assert len(calls) == 3
        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]

    @patch("agentloop.llm.retry.asyncio.sleep", new_callable=AsyncMock)
    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, mock_sleep):
        """测试达到最大尝试次数后抛出。"""
        calls = []

        @retry_on_failure(RetryConfig(max_attempts=2))
        async def always_limited():
            calls.append(1)
            raise ModelRateLimitError("rate")

        with pytest.raises(ModelRateLimitError):
            await always_limited()
        assert len(calls) == 2
        mock_sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self):
        """测试永久性异常立即抛出。"""
        calls = []

        @retry_on_failure(RetryConfig(max_attempts=5))
        async def unauthorized():
            calls.append(1)
            raise ModelAuthenticationError("bad key")

        with pytest.raises(ModelAuthenticationError):
            await unauthorized()
        assert len(calls) == 1

    def test_sync_function_rejected(self):
        """测试同步函数不能被装饰。"""
        with pytest.raises(TypeError):

            @retry_on_failure()
            def sync_func():
                return 1
