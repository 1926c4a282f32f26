"""ReAct执行轨迹数据模型

定义ReAct循环的状态、单步轨迹和整体执行结果，使用Pydantic进行类型安全和验证。
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, validator


class ReActState(str, Enum):
    """ReAct循环状态枚举"""

    THINKING = "thinking"  # 等待模型响应
    ACTING = "acting"  # 分发工具调用
    OBSERVING = "observing"  # 将结果写回上下文
    TERMINATED = "terminated"  # 已终止


class TerminationCategory(str, Enum):
    """终止原因分类"""

    DIRECT_ANSWER = "direct_answer"
    LOOP_DETECTED = "loop_detected"
    SINGLE_TOOL = "single_tool"
    ITERATION_LIMIT = "iteration_limit"
    ERROR = "error"


class ReActStep(BaseModel):
    """单次工具调用或最终回答的执行轨迹"""

    iteration: int = Field(..., ge=1, description="所属迭代序号")
    tool_name: str | None = Field(None, description="调用的工具名称")
    arguments: str | None = Field(None, description="工具参数原始字符串")
    observation: str | None = Field(None, description="工具返回的观察结果")
    is_final: bool = Field(default=False, description="该步骤是否产生最终答案")
    final_answer: str | None = Field(None, description="最终答案（如果适用）")
    duration_ms: float = Field(default=0.0, ge=0.0, description="步骤耗时(毫秒)")
    timestamp: datetime = Field(default_factory=datetime.now, description="记录时间")

    @property
    def is_tool_step(self) -> bool:
        """是否为实际分发过的工具调用步骤"""
        return self.tool_name is not None and self.observation is not None


class AgentExecutionResult(BaseModel):
    """ReAct执行完整结果

    记录整个ReAct循环的执行轨迹、最终答案和终止原因。
    """

    steps: list[ReActStep] = Field(default_factory=list, description="步骤执行历史")
    final_answer: str = Field(default="", description="最终答案或错误描述")
    success: bool = Field(default=False, description="整体执行是否成功")
    termination_reason: str = Field(default="", description="终止原因")
    termination_category: TerminationCategory | None = Field(
        None, description="终止原因分类"
    )
    start_time: datetime = Field(default_factory=datetime.now, description="开始时间")
    end_time: datetime | None = Field(None, description="结束时间")
    total_duration_ms: float = Field(default=0.0, ge=0.0, description="总耗时(毫秒)")

    @validator("steps")
    def validate_step_order(cls, v: list[ReActStep]) -> list[ReActStep]:
        """验证步骤按迭代序号非递减排列"""
        for previous, current in zip(v, v[1:]):
            if current.iteration < previous.iteration:
                raise ValueError("Steps must be ordered by iteration")
        return v

    @property
    def total_iterations(self) -> int:
        """实际运行的迭代次数"""
        return len({step.iteration for step in self.steps})

    @property
    def tool_calls_count(self) -> int:
        """实际分发的工具调用次数"""
        return sum(1 for step in self.steps if step.is_tool_step)

    @property
    def last_observation(self) -> str | None:
        """最近一次工具观察结果"""
        for step in reversed(self.steps):
            if step.observation:
                return step.observation
        return None
