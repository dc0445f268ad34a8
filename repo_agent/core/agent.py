"""Agent loop: drives the model through tool calls until it answers.

One call to coding_agent() is one run. The run owns at most one sandbox,
created on the first repository tool call and released when the run exits,
however it exits.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from ..config import settings
from ..services.modal_sandbox import ModalSandboxProvider
from ..services.sandbox_provider import SandboxProvider
from .lifecycle import SandboxLifecycle
from .llm import LanguageModel, LiteLLMModel
from .system_prompt import get_system_prompt
from .tools import ToolRegistry, build_registry

logger = logging.getLogger(__name__)


@dataclass
class AgentOutcome:
    """Result of one run."""

    response: str
    pr_url: str | None = None
    steps: int = 0


class AgentLoop:
    """Bounded model/tool loop over a single conversation."""

    def __init__(self, model: LanguageModel, registry: ToolRegistry, max_steps: int):
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.model = model
        self.registry = registry
        self.max_steps = max_steps

    async def run(self, system: str, prompt: str) -> AgentOutcome:
        """
        Run the loop until the model answers without tool calls or the
        step budget is spent.

        Returns:
            AgentOutcome with the final text. On budget exhaustion the last
            text the model produced is returned instead.

        Raises:
            Exception: Whatever the model client raises; tool failures never raise.
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        tools = self.registry.schemas()
        last_text = ""
        pr_url = None

        for step in range(1, self.max_steps + 1):
            turn = await self.model.complete(messages, tools)
            if turn.text:
                last_text = turn.text

            if not turn.tool_calls:
                logger.info(f"Agent finished after {step} step(s)")
                return AgentOutcome(response=turn.text or last_text, pr_url=pr_url, steps=step)

            logger.info(f"Step {step}: {[call.name for call in turn.tool_calls]}")
            messages.append(turn.to_message())

            # Sequential, in the order the model asked for them
            for call in turn.tool_calls:
                result = await self.registry.execute(call)
                if call.name == "create_pr" and "error" not in result and result.get("url"):
                    pr_url = result["url"]
                messages.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": json.dumps(result, default=str),
                })

        logger.warning(f"Agent stopped at step budget ({self.max_steps}) without a final answer")
        return AgentOutcome(response=last_text, pr_url=pr_url, steps=self.max_steps)


async def coding_agent(
    prompt: str,
    repo_url: str | None = None,
    *,
    model: LanguageModel | None = None,
    provider: SandboxProvider | None = None,
    max_steps: int | None = None,
) -> AgentOutcome:
    """
    Ask the model to work on a repository and return its final answer.

    Args:
        prompt: What the caller wants done
        repo_url: Repository to work on; without it no repository tool works
        model: Language model client (LiteLLM by default)
        provider: Sandbox provider (Modal by default)
        max_steps: Maximum number of model round-trips

    Returns:
        AgentOutcome with the response text and the pull request URL, if any
    """
    logger.info(f"Starting agent run (repo_url={repo_url})")
    model = model or LiteLLMModel()
    provider = provider or ModalSandboxProvider()

    async with SandboxLifecycle(provider, repo_url) as sandboxes:
        steps = settings.max_steps if max_steps is None else max_steps
        loop = AgentLoop(model, build_registry(sandboxes), steps)
        return await loop.run(get_system_prompt(repo_url), prompt)
