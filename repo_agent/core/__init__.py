"""Core agent logic: the model/tool loop, the tools, and sandbox ownership."""

from .agent import AgentLoop, AgentOutcome, coding_agent
from .lifecycle import SandboxLifecycle
from .llm import LanguageModel, LiteLLMModel, ModelTurn, ToolCall
from .system_prompt import SYSTEM_PROMPT, get_system_prompt
from .tools import (
    MissingRepoError,
    Tool,
    ToolError,
    ToolRegistry,
    ToolValidationError,
    build_registry,
)

__all__ = [
    # Agent loop
    "AgentLoop",
    "AgentOutcome",
    "coding_agent",
    # Sandbox ownership
    "SandboxLifecycle",
    # Model
    "LanguageModel",
    "LiteLLMModel",
    "ModelTurn",
    "ToolCall",
    # Tools
    "Tool",
    "ToolRegistry",
    "ToolError",
    "MissingRepoError",
    "ToolValidationError",
    "build_registry",
    # Prompts
    "SYSTEM_PROMPT",
    "get_system_prompt",
]
