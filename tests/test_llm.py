"""Tests for the LiteLLM model adapter and the system prompt."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from repo_agent.core.llm import LiteLLMModel, ModelTurn, ToolCall
from repo_agent.core.system_prompt import SYSTEM_PROMPT, get_system_prompt
from tests.test_data.fakes import REPO_URL


def completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def function_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


class TestLiteLLMModel:
    @pytest.mark.asyncio
    async def test_parses_text_and_tool_calls(self):
        response = completion(
            content="Let me look.",
            tool_calls=[function_call("c1", "read_file", '{"path": "README.md"}')],
        )

        with patch("repo_agent.core.llm.litellm.acompletion", AsyncMock(return_value=response)):
            turn = await LiteLLMModel(model="openai/gpt-4o", num_retries=0, fallbacks=[]).complete([], [])

        assert turn.text == "Let me look."
        assert turn.tool_calls == [ToolCall(id="c1", name="read_file", arguments='{"path": "README.md"}')]

    @pytest.mark.asyncio
    async def test_passes_retries_and_fallbacks(self):
        messages = [{"role": "user", "content": "hi"}]
        tools = [{"type": "function", "function": {"name": "list_files"}}]

        with patch("repo_agent.core.llm.litellm.acompletion", AsyncMock(return_value=completion("ok"))) as mock_call:
            model = LiteLLMModel(model="anthropic/claude", num_retries=3, fallbacks=["openai/gpt-4o"])
            await model.complete(messages, tools)

        kwargs = mock_call.call_args.kwargs
        assert kwargs["model"] == "anthropic/claude"
        assert kwargs["messages"] == messages
        assert kwargs["tools"] == tools
        assert kwargs["num_retries"] == 3
        assert kwargs["fallbacks"] == ["openai/gpt-4o"]

    @pytest.mark.asyncio
    async def test_empty_arguments_become_empty_object(self):
        response = completion(tool_calls=[function_call("c1", "list_files", "")])

        with patch("repo_agent.core.llm.litellm.acompletion", AsyncMock(return_value=response)):
            turn = await LiteLLMModel(fallbacks=[]).complete([], [])

        assert turn.text == ""
        assert turn.tool_calls[0].arguments == "{}"

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        with patch("repo_agent.core.llm.litellm.acompletion", AsyncMock(side_effect=TimeoutError("slow"))):
            with pytest.raises(TimeoutError):
                await LiteLLMModel(fallbacks=[]).complete([], [])


def test_text_only_turn_has_no_tool_calls_in_message():
    assert ModelTurn(text="Done").to_message() == {"role": "assistant", "content": "Done"}


def test_system_prompt_names_repository():
    prompt = get_system_prompt(REPO_URL)
    assert prompt.startswith(SYSTEM_PROMPT)
    assert prompt.endswith(f"REPOSITORY: {REPO_URL}")


def test_system_prompt_without_repository():
    assert "No repository" in get_system_prompt(None)
