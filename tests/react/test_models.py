"""执行轨迹模型测试"""

import pytest
from pydantic import ValidationError

from agentloop.react.models import AgentExecutionResult, ReActStep, TerminationCategory


class TestReActStep:
    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            ReActStep(iteration=1, duration_ms=-1.0)

    def test_iteration_starts_at_one(self):
        with pytest.raises(ValidationError):
            ReActStep(iteration=0)

    def test_tool_step(self):
        step = ReActStep(iteration=1, tool_name="echo", arguments="{}", observation="ok")

        assert step.is_tool_step is True
        assert ReActStep(iteration=1, tool_name="echo").is_tool_step is False


class TestAgentExecutionResult:
    def test_derived_counts(self):
        result = AgentExecutionResult(
            steps=[
                ReActStep(iteration=1, tool_name="a", observation="1"),
                ReActStep(iteration=1, tool_name="b", observation="2"),
                ReActStep(iteration=2, is_final=True, final_answer="done"),
            ],
            final_answer="done",
            success=True,
            termination_reason="direct model response",
            termination_category=TerminationCategory.DIRECT_ANSWER,
        )

        assert result.total_iterations == 2
        assert result.tool_calls_count == 2
        assert result.last_observation == "2"

    def test_empty_result(self):
        result = AgentExecutionResult()

        assert result.total_iterations == 0
        assert result.tool_calls_count == 0
        assert result.last_observation is None

    def test_steps_must_be_ordered(self):
        with pytest.raises(ValidationError):
            AgentExecutionResult(
                steps=[ReActStep(iteration=2), ReActStep(iteration=1)]
            )
