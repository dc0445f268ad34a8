"""Discord interactions integration (slash command with prompt and repo options).

    /code prompt:add a readme repo:https://github.com/owner/repo
"""

import json
import logging

import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..config import settings
from ..core.agent import coding_agent
from .messages import GENERIC_ERROR_MESSAGE, extract_repo_url, format_outcome, working_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["discord"])

DISCORD_API_BASE = "https://discord.com/api/v10"

# Interaction types
PING = 1
APPLICATION_COMMAND = 2

# Interaction callback types
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


def verify_discord_request(body: bytes, signature: str, timestamp: str) -> bool:
    """Check the Ed25519 signature Discord puts on every interaction."""
    public_key = settings.discord_public_key
    if not public_key or not signature or not timestamp:
        return False

    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        key.verify(bytes.fromhex(signature), timestamp.encode() + body)
    except (InvalidSignature, ValueError):
        return False
    return True


async def send_followup(token: str, content: str) -> None:
    """Send a follow-up message for a deferred interaction."""
    url = f"{DISCORD_API_BASE}/webhooks/{settings.discord_application_id}/{token}"
    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.post(url, json={"content": content})
        if response.status_code >= 400:
            logger.warning(f"Discord follow-up failed: HTTP {response.status_code} - {response.text[:200]}")


async def run_agent_and_follow_up(prompt: str, repo_url: str, token: str) -> None:
    """Background task: run the agent and send the outcome as a follow-up."""
    try:
        outcome = await coding_agent(prompt, repo_url)
        content = format_outcome(outcome)
    except Exception:
        logger.exception("Error running coding agent for Discord interaction")
        content = GENERIC_ERROR_MESSAGE
    await send_followup(token, content)


def _reply(content: str) -> JSONResponse:
    return JSONResponse({"type": CHANNEL_MESSAGE_WITH_SOURCE, "data": {"content": content}})


@router.post("/discord")
async def discord_interactions(request: Request, background_tasks: BackgroundTasks):
    body = await request.body()
    signature = request.headers.get("x-signature-ed25519", "")
    timestamp = request.headers.get("x-signature-timestamp", "")

    if not verify_discord_request(body, signature, timestamp):
        return PlainTextResponse("Invalid signature", status_code=401)

    payload = json.loads(body)

    if payload.get("type") != APPLICATION_COMMAND:
        return JSONResponse({"type": PONG})

    options = (payload.get("data") or {}).get("options") or []
    values = {option.get("name"): option.get("value") for option in options}
    prompt = (values.get("prompt") or "").strip()
    repo_url = extract_repo_url(values.get("repo") or "")

    if not repo_url:
        return _reply(
            "Please provide a valid GitHub repo URL. "
            "Example: `/code prompt:add a readme repo:https://github.com/owner/repo`"
        )

    if not prompt:
        return _reply(
            "Please tell me what you'd like me to do. "
            "Example: `/code prompt:add a contributing section repo:https://github.com/owner/repo`"
        )

    background_tasks.add_task(run_agent_and_follow_up, prompt, repo_url, payload.get("token"))
    return JSONResponse({
        "type": DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {"content": working_message(repo_url)},
    })
