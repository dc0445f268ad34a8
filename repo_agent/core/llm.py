"""Language model access for the agent loop.

The loop speaks the OpenAI chat format (which LiteLLM normalizes across
providers): a list of role/content messages plus function tool definitions.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import litellm

from ..config import settings

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """One tool invocation requested by the model."""

    id: str
    name: str
    arguments: str  # JSON object as produced by the model


@dataclass
class ModelTurn:
    """The model's reply for one step: text, tool calls, or both."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)

    def to_message(self) -> dict[str, Any]:
        """Assistant message to append to the conversation."""
        message: dict[str, Any] = {"role": "assistant", "content": self.text or None}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        return message


class LanguageModel(ABC):
    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> ModelTurn:
        """Run one model round-trip over the full conversation."""


class LiteLLMModel(LanguageModel):
    """LanguageModel backed by litellm.acompletion.

    Transient provider failures are retried by LiteLLM itself
    (num_retries, fallbacks); anything left over propagates.
    """

    def __init__(
        self,
        model: str | None = None,
        num_retries: int | None = None,
        fallbacks: list[str] | None = None,
    ):
        self.model = model or settings.model
        self.num_retries = settings.model_num_retries if num_retries is None else num_retries
        self.fallbacks = settings.model_fallbacks if fallbacks is None else fallbacks

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> ModelTurn:
        kwargs: dict[str, Any] = {}
        if self.fallbacks:
            kwargs["fallbacks"] = self.fallbacks

        response = await litellm.acompletion(
            model=self.model,
            messages=messages,
            tools=tools or None,
            num_retries=self.num_retries,
            **kwargs,
        )
        message = response.choices[0].message

        tool_calls = [
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "{}",
            )
            for call in (message.tool_calls or [])
        ]
        return ModelTurn(text=message.content or "", tool_calls=tool_calls)
