"""
Conversation data models.

Defines the message shapes exchanged between the ReAct engine and the model
client, the tool invocation requests issued by the model, and the model's
per-turn response. Messages form a tagged union discriminated on ``role`` so
that a tool-role message without a call id cannot be constructed.
"""

import json
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, validator


class ToolCall(BaseModel):
    """A single tool invocation requested by the model."""

    id: str = Field(..., min_length=1, description="Correlates the call to its tool response")
    name: str = Field(..., min_length=1, description="Name of the tool to invoke")
    arguments: dict[str, Any] | str = Field(
        default_factory=dict, description="Raw arguments, structured or serialized"
    )

    class Config:
        frozen = True

    def arguments_as_string(self) -> str:
        """Literal argument string, as used for duplicate-call comparison."""
        if isinstance(self.arguments, str):
            return self.arguments
        return json.dumps(self.arguments, ensure_ascii=False)


def _ensure_unique_call_ids(tool_calls: list[ToolCall] | None) -> list[ToolCall] | None:
    if tool_calls:
        ids = [call.id for call in tool_calls]
        if len(ids) != len(set(ids)):
            raise ValueError("Tool call ids must be unique within one response")
    return tool_calls


class _BaseMessage(BaseModel):
    content: str = Field("", description="Message text")
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        frozen = True


class UserMessage(_BaseMessage):
    role: Literal["user"] = "user"


class SystemMessage(_BaseMessage):
    role: Literal["system"] = "system"


class AssistantMessage(_BaseMessage):
    role: Literal["assistant"] = "assistant"
    tool_calls: list[ToolCall] | None = Field(
        None, description="Present only when the assistant invokes tools"
    )

    @validator("tool_calls")
    def validate_unique_ids(cls, v: list[ToolCall] | None) -> list[ToolCall] | None:
        return _ensure_unique_call_ids(v)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class ToolMessage(_BaseMessage):
    role: Literal["tool"] = "tool"
    tool_call_id: str = Field(..., description="Id of the call this message answers")

    @validator("tool_call_id")
    def validate_tool_call_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Tool messages require a non-empty tool_call_id")
        return v


Message = Annotated[
    Union[UserMessage, SystemMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]

MessageAdapter: TypeAdapter = TypeAdapter(Message)


def user_message(content: str) -> UserMessage:
    return UserMessage(content=content)


def system_message(content: str) -> SystemMessage:
    return SystemMessage(content=content)


def assistant_message(
    content: str | None = None, tool_calls: list[ToolCall] | None = None
) -> AssistantMessage:
    return AssistantMessage(content=content or "", tool_calls=tool_calls or None)


def tool_message(content: str, tool_call_id: str) -> ToolMessage:
    return ToolMessage(content=content, tool_call_id=tool_call_id)


class ModelResponse(BaseModel):
    """One model turn: either a plain answer or a batch of tool calls."""

    content: str | None = Field(None, description="Answer text or partial content")
    tool_calls: list[ToolCall] = Field(
        default_factory=list, description="Requested tool invocations"
    )

    @validator("tool_calls")
    def validate_unique_ids(cls, v: list[ToolCall]) -> list[ToolCall]:
        return _ensure_unique_call_ids(v)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

    def to_assistant_message(self) -> AssistantMessage:
        return assistant_message(self.content, self.tool_calls)
