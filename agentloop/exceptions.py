"""智能代理相关异常类定义。"""

from typing import Any


class AgentException(Exception):
    """智能代理基础异常类。"""

    def __init__(
        self, message: str, component: str | None = None, **kwargs: Any
    ) -> None:
        self.component = component
        self.context = kwargs
        super().__init__(message)


class ConfigurationError(AgentException):
    """配置加载或校验失败。"""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, component="config", **kwargs)


class ModelClientError(AgentException):
    """模型客户端相关异常基类。"""

    retryable = False  # 默认不重试

    def __init__(
        self, message: str, error_code: str | None = None, **kwargs: Any
    ) -> None:
        self.error_code = error_code
        super().__init__(message, component="llm", **kwargs)


class ModelAuthenticationError(ModelClientError):
    """模型服务认证异常。"""

    retryable = False

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, error_code="authentication_failed", **kwargs)


class ModelRateLimitError(ModelClientError):
    """模型服务速率限制异常。"""

    retryable = True

    def __init__(
        self, message: str, retry_after: int | None = None, **kwargs: Any
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, error_code="rate_limit_exceeded", **kwargs)


class ModelTimeoutError(ModelClientError):
    """模型请求超时异常。"""

    retryable = True

    def __init__(
        self, message: str, timeout_duration: float | None = None, **kwargs: Any
    ) -> None:
        self.timeout_duration = timeout_duration
        super().__init__(message, error_code="request_timeout", **kwargs)


class ToolExecutionException(AgentException):
    """工具执行异常。"""

    def __init__(
        self, message: str, tool_name: str | None = None, **kwargs: Any
    ) -> None:
        self.tool_name = tool_name
        super().__init__(message, component="tool", **kwargs)


class ToolParameterError(ToolExecutionException):
    """工具参数无法解析或缺少必填参数。"""

    pass


class ToolRegistrationError(AgentException):
    """工具注册冲突。"""

    def __init__(
        self, message: str, tool_name: str | None = None, **kwargs: Any
    ) -> None:
        self.tool_name = tool_name
        super().__init__(message, component="registry", **kwargs)
