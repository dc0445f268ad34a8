"""Application configuration using pydantic-settings."""

import base64
import binascii
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Language model (LiteLLM model identifiers)
    model: str = "anthropic/claude-sonnet-4-20250514"
    model_fallbacks: list[str] = []
    model_num_retries: int = 2
    max_steps: int = 10

    # Modal sandbox settings
    modal_app_name: str = "repo-agent"
    sandbox_timeout: int = 600  # 10 minutes
    sandbox_cpu: int = 1
    sandbox_memory: int = 2048  # MB
    workspace_path: str = "/workspace"

    # Git identity and branch naming inside the sandbox
    branch_prefix: str = "repo-agent"
    git_author_name: str = "Repo Agent"
    git_author_email: str = "repo-agent@users.noreply.github.com"

    # GitHub: a token is used directly, otherwise the GitHub App credentials
    github_api_base: str = "https://api.github.com"
    github_token: Optional[str] = None
    github_app_id: Optional[str] = None
    github_app_private_key: Optional[str] = None  # PEM format, can be base64 encoded or raw

    # Chat integrations
    slack_bot_token: Optional[str] = None
    slack_signing_secret: Optional[str] = None
    discord_public_key: Optional[str] = None
    discord_application_id: Optional[str] = None

    log_level: str = "INFO"

    model_config = {"env_prefix": "REPO_AGENT_", "protected_namespaces": ()}

    @field_validator("github_app_private_key")
    @classmethod
    def decode_private_key_if_base64(cls, v: Optional[str]) -> Optional[str]:
        """Decode base64 encoded private key if needed."""
        if not v:
            return v

        if "BEGIN" in v and "PRIVATE KEY" in v:
            return v

        # Environment variables often carry the PEM base64 encoded
        try:
            decoded = base64.b64decode(v).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return v

        if "BEGIN" in decoded and "PRIVATE KEY" in decoded:
            return decoded
        return v


settings = Settings()
