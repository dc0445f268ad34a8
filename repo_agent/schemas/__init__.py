"""Pydantic models for tool inputs and API request/response payloads."""

from .requests import AgentRequest
from .responses import AgentResponse, AgentResult, ErrorResponse
from .tools import (
    EditFileInput,
    ListFilesInput,
    PullRequestSpec,
    ReadFileInput,
)

__all__ = [
    "AgentRequest",
    "AgentResponse",
    "AgentResult",
    "ErrorResponse",
    "ReadFileInput",
    "ListFilesInput",
    "EditFileInput",
    "PullRequestSpec",
]
