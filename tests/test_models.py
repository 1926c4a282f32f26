"""Tests for conversation data models"""

import pytest
from pydantic import ValidationError

from agentloop.models import (
    AssistantMessage,
    MessageAdapter,
    ModelResponse,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
    assistant_message,
    tool_message,
)


class TestToolCall:
    def test_arguments_as_string_keeps_raw_text(self):
        raw = '{"b": 1,   "a": 2}'

        assert ToolCall(id="c1", name="t", arguments=raw).arguments_as_string() == raw

    def test_arguments_as_string_from_dict(self):
        call = ToolCall(id="c1", name="t", arguments={"b": 1, "a": "ñ"})

        assert call.arguments_as_string() == '{"b": 1, "a": "ñ"}'

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            ToolCall(id="", name="t")


class TestMessages:
    def test_tool_message_requires_call_id(self):
        with pytest.raises(ValidationError):
            ToolMessage(content="x", tool_call_id="  ")
        with pytest.raises(ValidationError):
            ToolMessage(content="x")

    def test_assistant_with_tool_calls_may_be_empty(self):
        message = assistant_message(None, [ToolCall(id="c1", name="t")])

        assert message.content == ""
        assert message.has_tool_calls is True
        assert assistant_message("hi").has_tool_calls is False

    def test_duplicate_call_ids_rejected(self):
        calls = [ToolCall(id="same", name="a"), ToolCall(id="same", name="b")]

        with pytest.raises(ValidationError):
            AssistantMessage(tool_calls=calls)
        with pytest.raises(ValidationError):
            ModelResponse(tool_calls=calls)

    def test_messages_are_immutable(self):
        message = tool_message("obs", "c1")

        with pytest.raises(ValidationError):
            message.content = "changed"

    @pytest.mark.parametrize(
        "raw,expected_type",
        [
            ({"role": "user", "content": "hi"}, UserMessage),
            ({"role": "system", "content": "rules"}, SystemMessage),
            ({"role": "assistant", "tool_calls": [{"id": "c", "name": "t"}]}, AssistantMessage),
            ({"role": "tool", "content": "obs", "tool_call_id": "c"}, ToolMessage),
        ],
    )
    def test_adapter_picks_variant(self, raw, expected_type):
        assert isinstance(MessageAdapter.validate_python(raw), expected_type)

    def test_adapter_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            MessageAdapter.validate_python({"role": "narrator", "content": "x"})


class TestModelResponse:
    def test_to_assistant_message(self):
        call = ToolCall(id="c1", name="t", arguments="{}")
        response = ModelResponse(content=None, tool_calls=[call])

        message = response.to_assistant_message()

        assert response.has_tool_calls is True
        assert message.tool_calls == [call]
        assert message.content == ""

    def test_plain_answer(self):
        response = ModelResponse(content="done")

        assert response.has_tool_calls is False
        assert response.to_assistant_message().tool_calls is None
