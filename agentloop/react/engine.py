"""ReAct Agent Engine

实现 Thought → Action → Observation → Repeat 循环的核心引擎：
- 每轮向模型客户端发送完整上下文
- 按顺序分发模型请求的工具调用并把观察结果写回上下文
- 检测连续重复调用，执行迭代上限与单工具模式的终止策略
- 任何异常都不会越过 ``execute`` 边界，调用方总能拿到完整的执行结果
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from ..config import AgentConfig
from ..llm.base import ToolCallingClient
from ..models import Message, ToolCall, system_message, tool_message, user_message
from ..tools.dispatcher import ToolDispatcher
from .detector import DuplicateCallDetector
from .events import NullEventSink, ReActEvent, ReActEventSink, ReActEventType
from .models import AgentExecutionResult, ReActState, ReActStep, TerminationCategory

logger = logging.getLogger("agentloop.react")

FIRST_ITERATION_NUDGE = (
    "You now have the information returned by the tool. Answer the user with "
    "the data obtained. Do NOT invoke more tools unless you genuinely need "
    "different additional information."
)
LOOP_FALLBACK_ANSWER = (
    "Stopped because the same tool call was repeated without producing a result."
)
LIMIT_FALLBACK_ANSWER = "Reached the iteration limit without completing the task."
EMPTY_RESPONSE_ANSWER = "The model returned no answer."

DIRECT_RESPONSE_REASON = "direct model response"
SINGLE_TOOL_REASON = "single-tool mode"


@dataclass
class _RunState:
    """单次执行的可变状态，仅在 ``execute`` 内部使用"""

    query: str
    context: list[Message]
    detector: DuplicateCallDetector
    result: AgentExecutionResult
    iteration: int = 0
    state: ReActState = ReActState.THINKING
    step_started: float = field(default_factory=time.perf_counter)

    def elapsed_step_ms(self) -> float:
        elapsed = (time.perf_counter() - self.step_started) * 1000
        self.step_started = time.perf_counter()
        return max(elapsed, 0.0)


class ReActEngine:
    """ReAct循环引擎

    Example:
        ```python
        engine = ReActEngine(model_client, dispatcher, AgentConfig(max_iterations=5))
        result = await engine.execute("今天的文档里提到了什么？", history=[])
        print(result.final_answer, result.termination_reason)
        ```
    """

    def __init__(
        self,
        model_client: ToolCallingClient,
        dispatcher: ToolDispatcher,
        config: AgentConfig | None = None,
        event_sink: ReActEventSink | None = None,
    ):
        """初始化引擎

        Args:
            model_client: 模型客户端，返回最终答案或工具调用
            dispatcher: 工具分发器，负责执行单次工具调用
            config: 运行参数，默认使用AgentConfig默认值
            event_sink: 中间步骤事件接收器，默认丢弃
        """
        self.model_client = model_client
        self.dispatcher = dispatcher
        self.config = config or AgentConfig()
        self.event_sink = event_sink or NullEventSink()

    async def execute(
        self, query: str, history: Sequence[Message] | None = None
    ) -> AgentExecutionResult:
        """执行完整的ReAct循环

        Args:
            query: 用户查询
            history: 之前的会话上下文，不会被修改

        Returns:
            执行结果；该方法从不抛出异常
        """
        start = time.perf_counter()
        run = _RunState(
            query=query,
            context=[*(history or []), user_message(query)],
            detector=DuplicateCallDetector(
                enabled=self.config.prevent_duplicate_tool_calls,
                threshold=self.config.max_consecutive_duplicates,
            ),
            result=AgentExecutionResult(start_time=datetime.now()),
        )

        logger.info(
            f"开始执行ReAct循环，最大迭代: {self.config.max_iterations}, "
            f"查询: {query[:100]}"
        )

        try:
            await self._run(run)
        except Exception as e:
            logger.error(f"ReAct执行失败: {type(e).__name__}: {e}")
            self._fail(run, e)
        finally:
            result = run.result
            result.end_time = datetime.now()
            result.total_duration_ms = max((time.perf_counter() - start) * 1000, 0.0)
            run.state = ReActState.TERMINATED
            self._emit(
                run,
                ReActEventType.TERMINATED,
                message=result.termination_reason,
            )
            logger.info(
                f"ReAct执行结束: 成功={result.success}, 迭代={result.total_iterations}, "
                f"工具调用={result.tool_calls_count}, "
                f"耗时={result.total_duration_ms:.1f}ms, "
                f"终止原因={result.termination_reason}"
            )

        return run.result

    async def _run(self, run: _RunState) -> None:
        for iteration in range(1, self.config.max_iterations + 1):
            run.iteration = iteration
            run.state = ReActState.THINKING
            run.step_started = time.perf_counter()
            self._emit(run, ReActEventType.ITERATION_STARTED)

            response = await self.model_client.send_message_with_tools(
                run.query, run.context
            )

            if not response.has_tool_calls:
                answer = response.content or EMPTY_RESPONSE_ANSWER
                self._emit(
                    run, ReActEventType.MODEL_RESPONDED, message="final answer"
                )
                run.result.steps.append(
                    ReActStep(
                        iteration=iteration,
                        is_final=True,
                        final_answer=answer,
                        duration_ms=run.elapsed_step_ms(),
                    )
                )
                self._terminate(
                    run, answer, DIRECT_RESPONSE_REASON, TerminationCategory.DIRECT_ANSWER
                )
                return

            self._emit(
                run,
                ReActEventType.MODEL_RESPONDED,
                message=f"{len(response.tool_calls)} tool call(s)",
            )
            run.context.append(response.to_assistant_message())

            for tool_call in response.tool_calls:
                if await self._act(run, tool_call):
                    return

            # 工具消息必须紧跟在assistant消息之后，提示放在整批观察结果之后
            if iteration == 1:
                run.context.append(system_message(FIRST_ITERATION_NUDGE))

        self._apply_iteration_limit(run)

    async def _act(self, run: _RunState, tool_call: ToolCall) -> bool:
        """执行单个工具调用，返回是否已终止"""
        run.state = ReActState.ACTING
        arguments = tool_call.arguments_as_string()

        if run.detector.observe(tool_call.name, arguments):
            last_observation = run.result.last_observation
            answer = last_observation or LOOP_FALLBACK_ANSWER
            reason = (
                f"loop detected - {run.detector.consecutive_count} duplicate invocations"
            )
            self._emit(
                run,
                ReActEventType.LOOP_DETECTED,
                tool_name=tool_call.name,
                arguments=arguments,
                message=reason,
            )
            run.result.steps.append(
                ReActStep(
                    iteration=run.iteration,
                    tool_name=tool_call.name,
                    arguments=arguments,
                    is_final=True,
                    final_answer=answer,
                    duration_ms=run.elapsed_step_ms(),
                )
            )
            self._terminate(run, answer, reason, TerminationCategory.LOOP_DETECTED)
            return True

        self._emit(
            run,
            ReActEventType.TOOL_DISPATCHED,
            tool_name=tool_call.name,
            arguments=arguments,
        )
        if self.config.verbose_mode:
            logger.debug(f"工具 {tool_call.name} 参数: {arguments}")

        observation = await self.dispatcher.dispatch(tool_call)

        run.state = ReActState.OBSERVING
        self._emit(
            run,
            ReActEventType.OBSERVATION_RECEIVED,
            tool_name=tool_call.name,
            observation=observation,
        )
        run.context.append(tool_message(observation, tool_call.id))

        step = ReActStep(
            iteration=run.iteration,
            tool_name=tool_call.name,
            arguments=arguments,
            observation=observation,
            duration_ms=run.elapsed_step_ms(),
        )
        run.result.steps.append(step)

        if not self.config.enable_multi_tool_loop:
            step.is_final = True
            step.final_answer = observation
            self._terminate(
                run, observation, SINGLE_TOOL_REASON, TerminationCategory.SINGLE_TOOL
            )
            return True
        return False

    def _apply_iteration_limit(self, run: _RunState) -> None:
        limit = self.config.max_iterations
        for step in reversed(run.result.steps):
            if step.observation:
                step.is_final = True
                step.final_answer = step.observation
                self._terminate(
                    run,
                    step.observation,
                    f"iteration limit ({limit}) - used last observation",
                    TerminationCategory.ITERATION_LIMIT,
                )
                break
        else:
            self._terminate(
                run,
                LIMIT_FALLBACK_ANSWER,
                f"iteration limit ({limit}) reached",
                TerminationCategory.ITERATION_LIMIT,
            )
        logger.warning(run.result.termination_reason)

    def _terminate(
        self,
        run: _RunState,
        answer: str,
        reason: str,
        category: TerminationCategory,
    ) -> None:
        run.state = ReActState.TERMINATED
        run.result.final_answer = answer
        run.result.success = True
        run.result.termination_reason = reason
        run.result.termination_category = category

    def _fail(self, run: _RunState, error: Exception) -> None:
        message = f"Error during execution: {error}"
        if run.iteration >= 1:
            run.result.steps.append(
                ReActStep(
                    iteration=run.iteration,
                    is_final=True,
                    final_answer=message,
                    duration_ms=run.elapsed_step_ms(),
                )
            )
        run.state = ReActState.TERMINATED
        run.result.final_answer = message
        run.result.success = False
        run.result.termination_reason = f"exception: {type(error).__name__}"
        run.result.termination_category = TerminationCategory.ERROR

    def _emit(self, run: _RunState, event_type: ReActEventType, **fields) -> None:
        if not self.config.show_intermediate_steps:
            return
        event = ReActEvent(
            type=event_type, iteration=run.iteration, state=run.state, **fields
        )
        try:
            self.event_sink.emit(event)
        except Exception:
            logger.exception(f"事件接收器处理 {event_type.value} 事件失败")
