"""Per-run ownership of the sandbox.

A run creates its sandbox lazily, on the first tool call that needs the
repository, and tears it down exactly once when the run exits.

Usage:
    async with SandboxLifecycle(provider, repo_url) as sandboxes:
        handle = await sandboxes.ensure()
"""

import asyncio
import logging

from ..services.sandbox_provider import SandboxHandle, SandboxProvider

logger = logging.getLogger(__name__)


class SandboxLifecycle:
    """Memoized sandbox factory scoped to one run."""

    def __init__(self, provider: SandboxProvider, repo_url: str | None):
        self.provider = provider
        self.repo_url = repo_url
        self.handle: SandboxHandle | None = None
        self.created = 0
        self._released = False

    async def ensure(self) -> SandboxHandle:
        """
        Return the run's sandbox, creating it on first use.

        Raises:
            RuntimeError: If the run has no repository or was already released
            Exception: Whatever the provider raises while creating the sandbox
        """
        if self.handle is not None:
            return self.handle
        if self._released:
            raise RuntimeError("Sandbox lifecycle already released")
        if not self.repo_url:
            raise RuntimeError("Cannot create a sandbox without a repository URL")

        logger.info(f"Creating sandbox for {self.repo_url}")
        self.handle = await self.provider.create_sandbox(self.repo_url)
        self.created += 1
        return self.handle

    async def release(self) -> None:
        """Stop the sandbox if one was created. Safe to call more than once."""
        if self._released:
            return
        self._released = True

        handle, self.handle = self.handle, None
        if handle is None:
            return

        try:
            # Teardown must finish even if the surrounding task is cancelled
            await asyncio.shield(self.provider.stop(handle))
            logger.info(f"Released sandbox {handle.sandbox_id}")
        except Exception as e:
            logger.warning(f"Failed to release sandbox {handle.sandbox_id}: {e}")

    async def __aenter__(self) -> "SandboxLifecycle":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()
