"""FastAPI application for Repo Agent.

Run locally:  uvicorn repo_agent.main:app --reload
Run on Modal: modal serve modal_app.py (or modal deploy modal_app.py)
"""

import asyncio
import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .core.agent import AgentOutcome, coding_agent
from .routes import discord_router, slack_router
from .schemas import AgentRequest, AgentResponse, AgentResult, ErrorResponse

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Repo Agent",
    description="Language model agent that edits GitHub repositories and opens pull requests",
    version=__version__,
)
app.include_router(slack_router)
app.include_router(discord_router)

# Runs in flight, held so they are not garbage collected if the caller goes away
_active_runs: set[asyncio.Task] = set()


def _forget_run(task: asyncio.Task) -> None:
    _active_runs.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Agent run ended with {type(task.exception()).__name__}")


async def run_detached(prompt: str, repo_url: str | None) -> AgentOutcome:
    """
    Run the agent in its own task and wait for it.

    If the HTTP request is cancelled (client disconnect, proxy timeout) the
    run keeps going and still releases its sandbox.
    """
    task = asyncio.create_task(coding_agent(prompt, repo_url))
    _active_runs.add(task)
    task.add_done_callback(_forget_run)
    return await asyncio.shield(task)


@app.post(
    "/api/agent",
    response_model=AgentResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def agent(request: AgentRequest):
    """Run the coding agent against a repository and return its answer."""
    if not request.prompt or not request.prompt.strip():
        return JSONResponse({"error": "prompt is required"}, status_code=400)
    if not request.repo_url or not request.repo_url.strip():
        return JSONResponse({"error": "repo_url is required"}, status_code=400)

    try:
        outcome = await run_detached(request.prompt, request.repo_url.strip())
    except Exception:
        logger.exception("Error running coding agent")
        return JSONResponse({"error": "An error occurred"}, status_code=500)

    return AgentResponse(result=AgentResult(response=outcome.response, pr_url=outcome.pr_url))


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
