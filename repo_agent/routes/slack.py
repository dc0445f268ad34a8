"""Slack Events API integration.

Mention the bot with a request and a GitHub URL:
    @bot add a contributing section to the readme https://github.com/owner/repo
The bot answers in the thread once the pull request is open.
"""

import hashlib
import hmac
import json
import logging
import time

import httpx
from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..config import settings
from ..core.agent import coding_agent
from .messages import (
    GENERIC_ERROR_MESSAGE,
    extract_prompt,
    extract_repo_url,
    format_outcome,
    working_message,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["slack"])

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"
# Slack's recommended replay window for signed requests
MAX_REQUEST_AGE_SECONDS = 60 * 5


def verify_slack_request(body: bytes, timestamp: str, signature: str) -> bool:
    """Check the v0 HMAC-SHA256 signature Slack puts on every request."""
    signing_secret = settings.slack_signing_secret
    if not signing_secret or not timestamp or not signature:
        return False

    try:
        if abs(time.time() - int(timestamp)) > MAX_REQUEST_AGE_SECONDS:
            return False
    except ValueError:
        return False

    base_string = f"v0:{timestamp}:".encode() + body
    digest = hmac.new(signing_secret.encode(), base_string, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"v0={digest}", signature)


async def post_message(channel: str, thread_ts: str, text: str) -> None:
    """Post a threaded message with chat.postMessage. Failures are logged, not raised."""
    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                SLACK_POST_MESSAGE_URL,
                headers={"Authorization": f"Bearer {settings.slack_bot_token}"},
                json={"channel": channel, "thread_ts": thread_ts, "text": text},
            )
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as e:
        logger.warning(f"Slack chat.postMessage failed: {type(e).__name__}: {e}")
        return

    if not data.get("ok"):
        logger.warning(f"Slack chat.postMessage failed: {data.get('error')}")


async def run_agent_and_reply(prompt: str, repo_url: str, channel: str, thread_ts: str) -> None:
    """Background task: run the agent and post the outcome in the thread."""
    try:
        outcome = await coding_agent(prompt, repo_url)
        text = format_outcome(outcome)
    except Exception:
        logger.exception("Error running coding agent for Slack request")
        text = GENERIC_ERROR_MESSAGE
    await post_message(channel, thread_ts, text)


@router.post("/slack")
async def slack_events(request: Request, background_tasks: BackgroundTasks):
    body = await request.body()
    timestamp = request.headers.get("x-slack-request-timestamp", "")
    signature = request.headers.get("x-slack-signature", "")

    if not verify_slack_request(body, timestamp, signature):
        return PlainTextResponse("Invalid signature", status_code=401)

    payload = json.loads(body)

    if payload.get("type") == "url_verification":
        return JSONResponse({"challenge": payload.get("challenge")})

    event = payload.get("event") or {}
    if payload.get("type") != "event_callback" or event.get("type") != "app_mention":
        return PlainTextResponse("OK")

    text = event.get("text", "")
    channel = event.get("channel")
    thread_ts = event.get("thread_ts") or event.get("ts")

    repo_url = extract_repo_url(text)
    prompt = extract_prompt(text)

    if not repo_url:
        await post_message(
            channel,
            thread_ts,
            "Please include a GitHub repo URL in your message. "
            "Example: `@bot add a readme to https://github.com/owner/repo`",
        )
        return PlainTextResponse("OK")

    if not prompt:
        await post_message(
            channel,
            thread_ts,
            "Please tell me what you'd like me to do. "
            "Example: `@bot add a contributing section to the readme https://github.com/owner/repo`",
        )
        return PlainTextResponse("OK")

    await post_message(channel, thread_ts, working_message(repo_url))
    background_tasks.add_task(run_agent_and_reply, prompt, repo_url, channel, thread_ts)
    return PlainTextResponse("OK")
