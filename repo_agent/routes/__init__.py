"""Chat platform webhooks."""

from .discord import router as discord_router
from .slack import router as slack_router

__all__ = ["discord_router", "slack_router"]
