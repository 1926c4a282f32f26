"""重复工具调用检测

跟踪连续相同的(工具名, 参数字符串)组合，在达到阈值时提示引擎终止循环。
参数比较采用字面字符串相等，语义相同但序列化不同的参数不视为重复。
"""

import logging

logger = logging.getLogger("agentloop.react.detector")


class DuplicateCallDetector:
    """连续重复调用检测器

    每次工具调用分发前调用一次 ``observe``：
    - 与上一次组合相同则计数加一
    - 不同则计数归零并以当前组合为新基准
    - 计数达到阈值时返回True
    """

    def __init__(self, enabled: bool = True, threshold: int = 3):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.enabled = enabled
        self.threshold = threshold
        self.last_tool_name: str | None = None
        self.last_arguments: str | None = None
        self.consecutive_count = 0

    def observe(self, tool_name: str, arguments: str) -> bool:
        """记录一次调用，返回是否检测到循环"""
        if not self.enabled:
            return False

        if tool_name == self.last_tool_name and arguments == self.last_arguments:
            self.consecutive_count += 1
        else:
            self.consecutive_count = 0
            self.last_tool_name = tool_name
            self.last_arguments = arguments

        if self.consecutive_count >= self.threshold:
            logger.warning(
                f"检测到重复调用: {tool_name} 连续重复 {self.consecutive_count} 次"
            )
            return True
        return False

    def reset(self) -> None:
        """清空检测状态"""
        self.last_tool_name = None
        self.last_arguments = None
        self.consecutive_count = 0
