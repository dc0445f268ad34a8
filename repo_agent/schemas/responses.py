from pydantic import BaseModel, Field


class AgentResult(BaseModel):
    response: str = Field(..., description="The model's final answer")
    pr_url: str | None = Field(
        default=None,
        description="URL of the pull request opened during the run, if any",
    )


class AgentResponse(BaseModel):
    """Response payload for POST /api/agent."""

    result: AgentResult


class ErrorResponse(BaseModel):
    error: str
