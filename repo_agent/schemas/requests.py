"""Inbound request payloads."""

from pydantic import BaseModel, Field


class AgentRequest(BaseModel):
    """Request payload for POST /api/agent.

    Both fields are optional at the schema level so the endpoint can answer
    with the same error body for a missing and a malformed field.
    """

    prompt: str | None = Field(
        default=None,
        description="Natural language description of the change to make",
        examples=["Add a CONTRIBUTING section to the README"],
    )
    repo_url: str | None = Field(
        default=None,
        description="URL of the GitHub repository to change",
        examples=["https://github.com/acme/widgets"],
    )
